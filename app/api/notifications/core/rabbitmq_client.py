import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

import aio_pika
from aio_pika import Message, DeliveryMode, ExchangeType

from app.config.settings import (
    RABBITMQ_HOST,
    RABBITMQ_PORT,
    RABBITMQ_USERNAME,
    RABBITMQ_PASSWORD,
    RABBITMQ_VHOST,
)

logger = logging.getLogger(__name__)

EXCHANGE_NOTIFICACOES = "notifications"
FILA_EMAIL = "notifications.email"
ROUTING_KEY_EMAIL = "notification.email"


class RabbitMQClient:
    """Publicador RabbitMQ da fila de e-mails (o consumo fica no worker de e-mail)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5672,
        username: str = "guest",
        password: str = "guest",
        virtual_host: str = "/"
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.virtual_host = virtual_host

        self.connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.exchanges: Dict[str, aio_pika.abc.AbstractExchange] = {}
        self.queues: Dict[str, aio_pika.abc.AbstractQueue] = {}

    async def connect(self):
        try:
            # Na URL AMQP o vhost "/" vira string vazia
            vhost = self.virtual_host.lstrip('/') if self.virtual_host != '/' else ''
            connection_url = f"amqp://{self.username}:{self.password}@{self.host}:{self.port}/{vhost}"
            self.connection = await aio_pika.connect_robust(connection_url)
            self.channel = await self.connection.channel()
            logger.info(f"Conectado ao RabbitMQ em {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Erro ao conectar ao RabbitMQ: {e}")
            raise

    async def disconnect(self):
        try:
            if self.connection and not self.connection.is_closed:
                await self.connection.close()
            logger.info("Desconectado do RabbitMQ")
        except Exception as e:
            logger.error(f"Erro ao desconectar do RabbitMQ: {e}")

    async def setup_notification_system(self):
        """Declara exchange e fila de e-mails e faz o binding."""
        exchange = await self.channel.declare_exchange(
            name=EXCHANGE_NOTIFICACOES,
            type=ExchangeType.TOPIC,
            durable=True,
        )
        self.exchanges[EXCHANGE_NOTIFICACOES] = exchange

        queue = await self.channel.declare_queue(name=FILA_EMAIL, durable=True)
        self.queues[FILA_EMAIL] = queue
        await queue.bind(exchange, ROUTING_KEY_EMAIL)
        logger.info(
            f"Queue '{FILA_EMAIL}' vinculada ao exchange '{EXCHANGE_NOTIFICACOES}' "
            f"com routing key '{ROUTING_KEY_EMAIL}'"
        )

    async def publish_message(
        self,
        exchange_name: str,
        routing_key: str,
        message: Dict[str, Any],
        priority: int = 0,
        delivery_mode: DeliveryMode = DeliveryMode.PERSISTENT
    ) -> bool:
        try:
            exchange = self.exchanges.get(exchange_name)
            if not exchange:
                raise ValueError(f"Exchange '{exchange_name}' não encontrado")

            agora = datetime.now(timezone.utc)
            message["timestamp"] = agora.isoformat()
            message["message_id"] = f"{routing_key}_{agora.timestamp()}"

            rabbit_message = Message(
                json.dumps(message, ensure_ascii=False, default=str).encode(),
                delivery_mode=delivery_mode,
                priority=priority,
                content_type="application/json"
            )
            await exchange.publish(rabbit_message, routing_key=routing_key)

            logger.info(f"Mensagem publicada no exchange '{exchange_name}' com routing key '{routing_key}'")
            return True

        except Exception as e:
            logger.error(f"Erro ao publicar mensagem: {e}")
            return False

    async def publish_notification(self, channel: str, notification_data: Dict[str, Any]) -> bool:
        return await self.publish_message(EXCHANGE_NOTIFICACOES, f"notification.{channel}", notification_data)

    def is_connected(self) -> bool:
        return self.connection is not None and not self.connection.is_closed


# Instância global do cliente RabbitMQ
rabbitmq_client: Optional[RabbitMQClient] = None


async def get_rabbitmq_client() -> RabbitMQClient:
    """Retorna a instância global, conectando na primeira chamada."""
    global rabbitmq_client

    if rabbitmq_client is None:
        client = RabbitMQClient(
            host=RABBITMQ_HOST,
            port=RABBITMQ_PORT,
            username=RABBITMQ_USERNAME,
            password=RABBITMQ_PASSWORD,
            virtual_host=RABBITMQ_VHOST,
        )
        await client.connect()
        await client.setup_notification_system()
        rabbitmq_client = client

    return rabbitmq_client


async def close_rabbitmq_client():
    global rabbitmq_client

    if rabbitmq_client:
        await rabbitmq_client.disconnect()
        rabbitmq_client = None

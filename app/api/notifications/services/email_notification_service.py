"""
Fila de e-mails transacionais.

A entrega (SMTP/provedor) é feita pelo worker que consome `notifications.email`;
aqui só publicamos a mensagem.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from app.config.settings import ADMIN_NOTIFICATION_EMAIL, RABBITMQ_ENABLED
from ..core.rabbitmq_client import RabbitMQClient, get_rabbitmq_client

logger = logging.getLogger(__name__)


class EmailNotificationService:

    def __init__(
        self,
        *,
        enabled: bool = RABBITMQ_ENABLED,
        admin_email: Optional[str] = ADMIN_NOTIFICATION_EMAIL,
        client_factory: Callable[[], Awaitable[RabbitMQClient]] = get_rabbitmq_client,
    ) -> None:
        self.enabled = enabled
        self.admin_email = admin_email
        self._client_factory = client_factory

    async def _publicar(self, template: str, destinatario: str, assunto: str, dados: Dict[str, Any]) -> bool:
        if not self.enabled:
            logger.info(f"[Email] Fila desabilitada; '{template}' para {destinatario} não enviado")
            return False

        client = await self._client_factory()
        enviado = await client.publish_notification(
            "email",
            {
                "channel": "email",
                "template": template,
                "recipient": destinatario,
                "subject": assunto,
                "data": dados,
            },
        )
        if enviado:
            logger.info(f"[Email] '{template}' enfileirado para {destinatario}")
        else:
            logger.error(f"[Email] Falha ao enfileirar '{template}' para {destinatario}")
        return enviado

    async def enviar_confirmacao_pedido(self, email: str, nome: str, pedido: Dict[str, Any]) -> bool:
        return await self._publicar(
            "pedido_confirmado",
            email,
            f"Pedido {pedido.get('order_number')} confirmado",
            {"nome": nome, "pedido": pedido},
        )

    async def notificar_novo_pedido(self, numero_pedido: str, nome_cliente: str, total: float) -> bool:
        if not self.admin_email:
            logger.info(f"[Email] ADMIN_NOTIFICATION_EMAIL não configurado; aviso do pedido {numero_pedido} ignorado")
            return False
        return await self._publicar(
            "novo_pedido_admin",
            self.admin_email,
            f"Novo pedido {numero_pedido}",
            {"numero_pedido": numero_pedido, "cliente": nome_cliente, "total": total},
        )

    async def enviar_comprovante(self, email: str, nome: str, comprovante: Dict[str, Any]) -> bool:
        return await self._publicar(
            "comprovante",
            email,
            f"Comprovante {comprovante.get('numero_comprovante')}",
            {"nome": nome, "comprovante": comprovante},
        )


email_notification_service = EmailNotificationService()

from fastapi import WebSocket
from typing import Dict, Set, Any
import json
import logging

from app.utils.prometheus_metrics import websocket_connections

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Gerenciador de conexões WebSocket para notificações em tempo real.

    Toda conexão aceita entra em `all_connections`. Depois do handshake o cliente
    se registra com o próprio `customer_id` (`register`) ou como back-office
    (`register_admin`). Não há fila: sem conexão registrada, o evento é descartado.
    """

    def __init__(self):
        self.all_connections: Set[WebSocket] = set()
        # Conexões por customer_id
        self.customer_connections: Dict[str, Set[WebSocket]] = {}
        self.admin_connections: Set[WebSocket] = set()
        self.websocket_to_customer: Dict[WebSocket, str] = {}

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.all_connections.add(websocket)
        websocket_connections.inc()
        logger.info(f"[WS] Conexão aceita. Total: {len(self.all_connections)}")

    def register_customer(self, websocket: WebSocket, customer_id: str):
        customer_id = str(customer_id)

        # Reregistro com outro id troca o vínculo
        anterior = self.websocket_to_customer.get(websocket)
        if anterior and anterior != customer_id:
            self._remove_customer_link(websocket, anterior)

        self.customer_connections.setdefault(customer_id, set()).add(websocket)
        self.websocket_to_customer[websocket] = customer_id
        logger.info(f"[WS] Cliente {customer_id} registrado")

    def register_admin(self, websocket: WebSocket):
        self.admin_connections.add(websocket)
        logger.info(f"[WS] Conexão de back-office registrada. Admins: {len(self.admin_connections)}")

    def is_admin(self, websocket: WebSocket) -> bool:
        return websocket in self.admin_connections

    def _remove_customer_link(self, websocket: WebSocket, customer_id: str):
        conexoes = self.customer_connections.get(customer_id)
        if conexoes is not None:
            conexoes.discard(websocket)
            if not conexoes:
                del self.customer_connections[customer_id]
        self.websocket_to_customer.pop(websocket, None)

    def disconnect(self, websocket: WebSocket):
        if websocket not in self.all_connections:
            return
        self.all_connections.discard(websocket)
        websocket_connections.dec()

        customer_id = self.websocket_to_customer.get(websocket)
        if customer_id:
            self._remove_customer_link(websocket, customer_id)
        self.admin_connections.discard(websocket)

        logger.info(f"[WS] WebSocket desconectado: cliente {customer_id}")

    async def _send_many(self, connections: Set[WebSocket], message: Dict[str, Any], alvo: str) -> int:
        success_count = 0
        texto = json.dumps(message, default=str)
        for websocket in connections:
            try:
                await websocket.send_text(texto)
                success_count += 1
            except Exception as e:
                logger.error(f"[WS] Erro ao enviar mensagem para {alvo}: {e}")
                # Remove conexão inválida
                self.disconnect(websocket)
        return success_count

    async def send_to_customer(self, customer_id: str, message: Dict[str, Any]) -> bool:
        customer_id = str(customer_id)
        connections = self.customer_connections.get(customer_id, set()).copy()
        if not connections:
            logger.info(f"[WS] Cliente {customer_id} não está conectado; evento descartado")
            return False

        success_count = await self._send_many(connections, message, f"cliente {customer_id}")
        logger.info(f"[WS] Mensagem enviada para {success_count}/{len(connections)} conexões do cliente {customer_id}")
        return success_count > 0

    async def send_to_admins(self, message: Dict[str, Any]) -> int:
        connections = self.admin_connections.copy()
        if not connections:
            logger.info("[WS] Nenhum back-office conectado; evento descartado")
            return 0
        return await self._send_many(connections, message, "back-office")

    async def broadcast(self, message: Dict[str, Any]) -> int:
        """Envia mensagem para todas as conexões abertas"""
        connections = self.all_connections.copy()
        if not connections:
            return 0

        success_count = await self._send_many(connections, message, "broadcast")
        logger.info(f"[WS] Broadcast enviado para {success_count}/{len(connections)} conexões")
        return success_count

    def get_connection_stats(self) -> Dict[str, Any]:
        return {
            "total_connections": len(self.all_connections),
            "total_customers_connected": len(self.customer_connections),
            "total_admin_connections": len(self.admin_connections),
            "customers_with_connections": list(self.customer_connections.keys()),
        }

    def is_customer_connected(self, customer_id: str) -> bool:
        return bool(self.customer_connections.get(str(customer_id)))


# Instância global do gerenciador de conexões
websocket_manager = ConnectionManager()

from typing import Any, Dict, Optional
import logging
from datetime import datetime, timezone

from ..core.websocket_manager import ConnectionManager, websocket_manager
from ..core.ws_events import WSEvents

logger = logging.getLogger(__name__)

# Evento emitido ao entrar em cada status (confirmed sai pelo paymentApproved)
EVENTO_POR_STATUS: Dict[str, str] = {
    "preparing": WSEvents.ORDER_PREPARING,
    "on_delivery": WSEvents.ORDER_ON_DELIVERY,
    "delivered": WSEvents.ORDER_DELIVERED,
    "cancelled": WSEvents.ORDER_CANCELLED,
}


class RealtimeNotifier:
    """Publica mudanças de pedido/pagamento nas conexões WebSocket abertas.

    Entrega best-effort: sem assinante conectado o evento se perde e o cliente
    recupera o estado pelo endpoint de consulta.
    """

    def __init__(self, manager: Optional[ConnectionManager] = None):
        self.manager = manager or websocket_manager

    @staticmethod
    def montar_evento(evento: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "type": "event",
            "event": evento,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def notificar_pagamento_aprovado(self, cliente_id: int, pedido: Dict[str, Any]) -> bool:
        logger.info(f"[WS] {WSEvents.PAYMENT_APPROVED} pedido_id={pedido.get('order_id')} cliente_id={cliente_id}")
        return await self.manager.send_to_customer(
            str(cliente_id),
            self.montar_evento(WSEvents.PAYMENT_APPROVED, pedido),
        )

    async def notificar_novo_pedido_admin(self, pedido: Dict[str, Any]) -> int:
        logger.info(f"[WS] {WSEvents.NEW_ORDER_FOR_ADMIN} pedido_id={pedido.get('order_id')}")
        return await self.manager.send_to_admins(
            self.montar_evento(WSEvents.NEW_ORDER_FOR_ADMIN, pedido),
        )

    async def broadcast(self, evento: str, payload: Dict[str, Any]) -> int:
        return await self.manager.broadcast(self.montar_evento(evento, payload))

    async def notificar_mudanca_status(self, pedido: Dict[str, Any]) -> int:
        evento = EVENTO_POR_STATUS.get(pedido.get("status"))
        if not evento:
            return 0
        logger.info(f"[WS] {evento} pedido_id={pedido.get('order_id')}")
        return await self.broadcast(evento, pedido)


realtime_notifier = RealtimeNotifier()

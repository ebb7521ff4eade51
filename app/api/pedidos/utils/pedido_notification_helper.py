"""
Payload padrão de pedido usado nos eventos WebSocket e nos e-mails.
"""
from typing import Any, Dict

from app.api.pedidos.models.model_pedido import PedidoModel
from app.utils.database_utils import iso_or_none


def montar_payload_pedido(pedido: PedidoModel) -> Dict[str, Any]:
    """Extrai um dict serializável do pedido.

    Deve ser chamado enquanto o pedido está ligado à sessão; o resultado pode ser
    usado depois de commits/rollbacks sem disparar lazy loads.
    """
    cliente = pedido.cliente
    return {
        "order_id": pedido.id,
        "order_number": pedido.numero_pedido,
        "status": pedido.status,
        "status_descricao": pedido.status_descricao,
        "customer_id": pedido.cliente_id,
        "customer_name": cliente.nome if cliente else None,
        "total": float(pedido.valor_total or 0),
        "payment_method": pedido.meio_pagamento,
        "estimated_time": pedido.tempo_estimado,
        "items_count": sum(item.quantidade for item in pedido.itens),
        "created_at": iso_or_none(pedido.created_at),
        "confirmed_at": iso_or_none(pedido.confirmed_at),
        "started_preparing_at": iso_or_none(pedido.started_preparing_at),
        "out_for_delivery_at": iso_or_none(pedido.out_for_delivery_at),
        "delivered_at": iso_or_none(pedido.delivered_at),
    }

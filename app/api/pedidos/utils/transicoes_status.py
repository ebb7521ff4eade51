"""
Máquina de estados do pedido.

    pending -> confirmed -> preparing -> on_delivery -> delivered
    qualquer status não terminal -> cancelled
"""
from typing import Dict, FrozenSet, Optional

from app.api.pedidos.models.model_pedido import StatusPedido

TRANSICOES_PERMITIDAS: Dict[StatusPedido, FrozenSet[StatusPedido]] = {
    StatusPedido.PENDENTE: frozenset({StatusPedido.CONFIRMADO, StatusPedido.CANCELADO}),
    StatusPedido.CONFIRMADO: frozenset({StatusPedido.PREPARANDO, StatusPedido.CANCELADO}),
    StatusPedido.PREPARANDO: frozenset({StatusPedido.SAIU_PARA_ENTREGA, StatusPedido.CANCELADO}),
    StatusPedido.SAIU_PARA_ENTREGA: frozenset({StatusPedido.ENTREGUE, StatusPedido.CANCELADO}),
    StatusPedido.ENTREGUE: frozenset(),
    StatusPedido.CANCELADO: frozenset(),
}

STATUS_TERMINAIS = frozenset(s for s, destinos in TRANSICOES_PERMITIDAS.items() if not destinos)

# Marco temporal gravado na primeira entrada em cada status
CAMPO_TIMESTAMP_POR_STATUS: Dict[StatusPedido, str] = {
    StatusPedido.CONFIRMADO: "confirmed_at",
    StatusPedido.PREPARANDO: "started_preparing_at",
    StatusPedido.SAIU_PARA_ENTREGA: "out_for_delivery_at",
    StatusPedido.ENTREGUE: "delivered_at",
}


def pode_transicionar(atual: StatusPedido, novo: StatusPedido) -> bool:
    return novo in TRANSICOES_PERMITIDAS.get(atual, frozenset())


def campo_timestamp(status: StatusPedido) -> Optional[str]:
    return CAMPO_TIMESTAMP_POR_STATUS.get(status)

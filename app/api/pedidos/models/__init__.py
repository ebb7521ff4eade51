"""
Models do bounded context de Pedidos.
"""
from .model_pedido import (
    PedidoModel,
    PedidoItemModel,
    StatusPedido,
    MeioPagamento,
    StatusPedidoEnum,
    MeioPagamentoEnum,
    STATUS_PEDIDO_DESCRICAO,
)
from .model_pedido_historico import PedidoHistoricoModel
from .model_comprovante import ComprovanteModel

__all__ = [
    "PedidoModel",
    "PedidoItemModel",
    "PedidoHistoricoModel",
    "ComprovanteModel",
    "StatusPedido",
    "MeioPagamento",
    "StatusPedidoEnum",
    "MeioPagamentoEnum",
    "STATUS_PEDIDO_DESCRICAO",
]

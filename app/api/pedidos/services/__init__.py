"""
Services do bounded context de Pedidos.
"""

from .service_pedido import PedidoService
from .service_precificacao import PrecificacaoService
from .service_comprovante import ComprovanteService

__all__ = [
    "PedidoService",
    "PrecificacaoService",
    "ComprovanteService",
]

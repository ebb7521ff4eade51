from .model_pagamento import (
    PagamentoModel,
    StatusPagamento,
    StatusPagamentoEnum,
    STATUS_PAGAMENTO_DESCRICAO,
)

__all__ = [
    "PagamentoModel",
    "StatusPagamento",
    "StatusPagamentoEnum",
    "STATUS_PAGAMENTO_DESCRICAO",
]

from .service_pagamento_pix import PagamentoPixService
from .service_webhook import WebhookPagamentoService

__all__ = ["PagamentoPixService", "WebhookPagamentoService"]

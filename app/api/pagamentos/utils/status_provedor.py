from typing import Optional

from app.api.pagamentos.models.model_pagamento import StatusPagamento

# Vocabulário do provedor -> vocabulário interno
MAPA_STATUS_PROVEDOR = {
    "approved": StatusPagamento.APROVADO,
    "pending": StatusPagamento.PENDENTE,
    "in_process": StatusPagamento.PENDENTE,
    "rejected": StatusPagamento.RECUSADO,
    "cancelled": StatusPagamento.CANCELADO,
    "refunded": StatusPagamento.ESTORNADO,
    "charged_back": StatusPagamento.ESTORNADO,
}


def mapear_status_provedor(status_provedor: Optional[str]) -> StatusPagamento:
    """Status desconhecido ou ausente cai em pending."""
    if not status_provedor:
        return StatusPagamento.PENDENTE
    return MAPA_STATUS_PROVEDOR.get(str(status_provedor).strip().lower(), StatusPagamento.PENDENTE)

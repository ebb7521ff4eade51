from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.api.pagamentos.models.model_pagamento import StatusPagamento


# ======================================================================
# ============================ REQUESTS ================================
# ======================================================================
class PixRequest(BaseModel):
    order_id: int
    amount_in_cents: int = Field(..., gt=0, description="Valor em centavos")
    payer_email: EmailStr


# ======================================================================
# ============================ RESPONSES ===============================
# ======================================================================
class PixResponse(BaseModel):
    pix_code: str
    pix_qr_base64: str
    payment_id: str
    ticket_url: Optional[str] = None
    expires_at: Optional[datetime] = None
    message: str = "QR Code PIX gerado com sucesso"


class PagamentoResponse(BaseModel):
    id: str
    pedido_id: Optional[int] = None
    cliente_id: int
    valor: float
    status: StatusPagamento
    status_descricao: str
    gateway_id: Optional[str] = None
    pix_codigo: Optional[str] = None
    ticket_url: Optional[str] = None
    expira_em: Optional[datetime] = None
    pago_em: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PagamentosPaginadosResponse(BaseModel):
    itens: List[PagamentoResponse]
    total: int
    page: int
    per_page: int


class WebhookResponse(BaseModel):
    ok: bool
    message: Optional[str] = None
    error: Optional[str] = None
    payment_status: Optional[str] = None
    order_id: Optional[int] = None
    order_number: Optional[str] = None

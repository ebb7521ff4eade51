from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.pedidos.models.model_pedido import MeioPagamento, StatusPedido


# ======================================================================
# ============================ REQUESTS ================================
# ======================================================================
class ItemPedidoRequest(BaseModel):
    produto_id: int
    variacao_id: int
    borda_id: Optional[int] = None
    recheio_borda_id: Optional[int] = None
    quantidade: int = Field(..., ge=1)
    observacao: Optional[constr(max_length=255)] = None


class CriarPedidoRequest(BaseModel):
    endereco_id: int
    itens: List[ItemPedidoRequest] = Field(..., min_length=1)
    meio_pagamento: MeioPagamento
    observacoes: Optional[constr(max_length=500)] = None


class AlterarStatusPedidoBody(BaseModel):
    status: StatusPedido
    observacoes: Optional[constr(max_length=500)] = None


class CancelarPedidoBody(BaseModel):
    motivo: Optional[constr(max_length=500)] = None


class ValidarTokenEntregaBody(BaseModel):
    token: constr(min_length=1, max_length=6)


# ======================================================================
# ============================ RESPONSES ===============================
# ======================================================================
class ItemPedidoResponse(BaseModel):
    id: int
    produto_id: int
    variacao_id: int
    borda_id: Optional[int] = None
    recheio_borda_id: Optional[int] = None
    quantidade: int
    preco_unitario: float
    preco_borda: float
    preco_recheio_borda: float
    subtotal: float
    observacao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EnderecoPedidoOut(BaseModel):
    id: int
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ClientePedidoOut(BaseModel):
    id: int
    nome: str
    email: Optional[str] = None
    telefone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PedidoAdminResponse(BaseModel):
    """Visão do back-office (sem o token de entrega)."""
    id: int
    numero_pedido: Optional[str] = None
    status: StatusPedido
    status_descricao: str
    cliente_id: int
    endereco_id: int
    meio_pagamento: MeioPagamento
    subtotal: float
    taxa_entrega: float
    desconto: float
    valor_total: float
    observacoes: Optional[str] = None
    tempo_estimado: Optional[int] = None
    referencia_pagamento: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    started_preparing_at: Optional[datetime] = None
    out_for_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    itens: List[ItemPedidoResponse] = Field(default_factory=list)
    endereco: Optional[EnderecoPedidoOut] = None
    cliente: Optional[ClientePedidoOut] = None

    model_config = ConfigDict(from_attributes=True)


class PedidoResponse(PedidoAdminResponse):
    """Visão do cliente dono do pedido."""
    token_entrega: Optional[str] = None


class ValidarTokenEntregaResponse(BaseModel):
    valido: bool
    pedido_id: int
    status: StatusPedido
    message: str

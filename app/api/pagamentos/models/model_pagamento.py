import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Enum as SAEnum, Index, Text, text
from sqlalchemy.orm import relationship
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class StatusPagamento(enum.Enum):
    PENDENTE = "pending"
    APROVADO = "approved"
    RECUSADO = "rejected"
    CANCELADO = "cancelled"
    ESTORNADO = "refunded"


STATUS_PAGAMENTO_DESCRICAO = {
    StatusPagamento.PENDENTE.value: "Aguardando pagamento",
    StatusPagamento.APROVADO.value: "Aprovado",
    StatusPagamento.RECUSADO.value: "Recusado",
    StatusPagamento.CANCELADO.value: "Cancelado",
    StatusPagamento.ESTORNADO.value: "Estornado",
}

StatusPagamentoEnum = SAEnum(
    *[s.value for s in StatusPagamento],
    name="pagamento_status_enum",
    native_enum=False,
    length=20,
)


def _novo_id() -> str:
    return str(uuid.uuid4())


class PagamentoModel(Base):
    """Tentativa de pagamento de um pedido (hoje: cobrança PIX)."""
    __tablename__ = "pagamentos"
    __table_args__ = (
        Index("idx_pagamentos_pedido", "pedido_id"),
        Index("idx_pagamentos_gateway_id", "gateway_id"),
        # No máximo um pagamento aprovado por pedido
        Index(
            "uq_pagamentos_pedido_aprovado",
            "pedido_id",
            unique=True,
            postgresql_where=text("status = 'approved'"),
            sqlite_where=text("status = 'approved'"),
        ),
        {"schema": "pagamentos"},
    )

    # Não é autoincremento: o identificador pode nascer do lado do gateway
    id = Column(String(36), primary_key=True, default=_novo_id)

    cliente_id = Column(Integer, ForeignKey("cadastros.clientes.id", ondelete="RESTRICT"), nullable=False)
    pedido_id = Column(Integer, ForeignKey("pedidos.pedidos.id", ondelete="SET NULL"), nullable=True)

    valor = Column(Numeric(10, 2), nullable=False)
    status = Column(StatusPagamentoEnum, nullable=False, default=StatusPagamento.PENDENTE.value)

    gateway_id = Column(String(120), nullable=True)
    pix_codigo = Column(Text, nullable=True)
    pix_qr_code_base64 = Column(Text, nullable=True)
    ticket_url = Column(String(500), nullable=True)

    expira_em = Column(DateTime(timezone=True), nullable=True)
    pago_em = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    pedido = relationship("PedidoModel", lazy="select")
    cliente = relationship("ClienteModel", lazy="select")

    @property
    def status_descricao(self) -> str:
        return STATUS_PAGAMENTO_DESCRICAO.get(self.status, self.status)

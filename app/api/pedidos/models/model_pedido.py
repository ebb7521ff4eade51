# app/api/pedidos/models/model_pedido.py
import enum

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Numeric, Enum as SAEnum, Index, Text
)
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class StatusPedido(enum.Enum):
    """Status possíveis de um pedido.

    Fluxo: pending -> confirmed -> preparing -> on_delivery -> delivered.
    `cancelled` pode ser alcançado de qualquer status não terminal.
    """
    PENDENTE = "pending"
    CONFIRMADO = "confirmed"
    PREPARANDO = "preparing"
    SAIU_PARA_ENTREGA = "on_delivery"
    ENTREGUE = "delivered"
    CANCELADO = "cancelled"


class MeioPagamento(enum.Enum):
    PIX = "pix"
    DINHEIRO = "cash"
    CARTAO_DEBITO = "debit_card"
    CARTAO_CREDITO = "credit_card"


STATUS_PEDIDO_DESCRICAO = {
    StatusPedido.PENDENTE.value: "Pendente",
    StatusPedido.CONFIRMADO.value: "Confirmado",
    StatusPedido.PREPARANDO.value: "Em preparo",
    StatusPedido.SAIU_PARA_ENTREGA.value: "Saiu para entrega",
    StatusPedido.ENTREGUE.value: "Entregue",
    StatusPedido.CANCELADO.value: "Cancelado",
}

StatusPedidoEnum = SAEnum(
    *[s.value for s in StatusPedido],
    name="pedido_status_enum",
    native_enum=False,
    length=20,
)

MeioPagamentoEnum = SAEnum(
    *[m.value for m in MeioPagamento],
    name="pedido_meio_pagamento_enum",
    native_enum=False,
    length=20,
)


class PedidoModel(Base):
    __tablename__ = "pedidos"
    __table_args__ = (
        Index("idx_pedidos_cliente", "cliente_id"),
        Index("idx_pedidos_status", "status"),
        {"schema": "pedidos"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Preenchido logo após o INSERT, pois depende do id: ORD-YYYYMMDD-NNNNNN
    numero_pedido = Column(String(50), unique=True, nullable=True)

    cliente_id = Column(Integer, ForeignKey("cadastros.clientes.id", ondelete="RESTRICT"), nullable=False)
    cliente = relationship("ClienteModel", back_populates="pedidos", lazy="select")

    endereco_id = Column(Integer, ForeignKey("cadastros.enderecos.id", ondelete="RESTRICT"), nullable=False)
    endereco = relationship("EnderecoModel", lazy="select")

    status = Column(StatusPedidoEnum, nullable=False, default=StatusPedido.PENDENTE.value)
    meio_pagamento = Column(MeioPagamentoEnum, nullable=False)

    # Valores
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    taxa_entrega = Column(Numeric(18, 2), nullable=False, default=0)
    desconto = Column(Numeric(18, 2), nullable=False, default=0)
    valor_total = Column(Numeric(18, 2), nullable=False, default=0)

    observacoes = Column(String(500), nullable=True)
    token_entrega = Column(String(6), nullable=True)
    tempo_estimado = Column(Integer, nullable=True)  # minutos
    referencia_pagamento = Column(String(100), nullable=True)

    # Marcos do ciclo de vida: gravados uma única vez
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    started_preparing_at = Column(DateTime(timezone=True), nullable=True)
    out_for_delivery_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    itens = relationship(
        "PedidoItemModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoItemModel.id",
    )
    historicos = relationship(
        "PedidoHistoricoModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoHistoricoModel.id",
    )

    @property
    def status_descricao(self) -> str:
        return STATUS_PEDIDO_DESCRICAO.get(self.status, self.status)


class PedidoItemModel(Base):
    """Linha precificada do pedido. Os preços são capturados no momento da compra."""
    __tablename__ = "pedidos_itens"
    __table_args__ = (
        Index("idx_pedidos_itens_pedido", "pedido_id"),
        {"schema": "pedidos"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.pedidos.id", ondelete="CASCADE"), nullable=False)

    produto_id = Column(Integer, ForeignKey("catalogo.produtos.id", ondelete="RESTRICT"), nullable=False)
    variacao_id = Column(Integer, ForeignKey("catalogo.produtos_variacoes.id", ondelete="RESTRICT"), nullable=False)
    borda_id = Column(Integer, ForeignKey("catalogo.bordas_pizza.id", ondelete="SET NULL"), nullable=True)
    recheio_borda_id = Column(Integer, ForeignKey("catalogo.recheios_borda.id", ondelete="SET NULL"), nullable=True)

    quantidade = Column(Integer, nullable=False)
    preco_unitario = Column(Numeric(18, 2), nullable=False)
    preco_borda = Column(Numeric(18, 2), nullable=False, default=0)
    preco_recheio_borda = Column(Numeric(18, 2), nullable=False, default=0)
    subtotal = Column(Numeric(18, 2), nullable=False)
    observacao = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)

    pedido = relationship("PedidoModel", back_populates="itens")
    produto = relationship("ProdutoModel", lazy="select")
    variacao = relationship("ProdutoVariacaoModel", lazy="select")
    borda = relationship("BordaPizzaModel", lazy="select")
    recheio_borda = relationship("RecheioBordaModel", lazy="select")

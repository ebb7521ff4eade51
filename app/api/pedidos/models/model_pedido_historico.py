# app/api/pedidos/models/model_pedido_historico.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed
from .model_pedido import StatusPedidoEnum


class PedidoHistoricoModel(Base):
    """
    Trilha de auditoria dos status do pedido.

    Somente inserção: uma linha por transição, nunca atualizada nem removida.
    """
    __tablename__ = "pedidos_historico"
    __table_args__ = (
        Index("idx_pedidos_historico_pedido", "pedido_id"),
        {"schema": "pedidos"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.pedidos.id", ondelete="CASCADE"), nullable=False)
    status = Column(StatusPedidoEnum, nullable=False)
    observacoes = Column(Text, nullable=True)
    # Funcionário que executou a ação (None para cliente/webhook)
    usuario_id = Column(Integer, ForeignKey("cadastros.usuarios.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)

    pedido = relationship("PedidoModel", back_populates="historicos")
    usuario = relationship("UserModel", lazy="select")

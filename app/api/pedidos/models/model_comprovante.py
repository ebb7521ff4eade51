from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class ComprovanteModel(Base):
    """Comprovante de compra. No máximo um por pedido."""
    __tablename__ = "comprovantes"
    __table_args__ = {"schema": "pedidos"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.pedidos.id", ondelete="CASCADE"), nullable=False, unique=True)
    numero_comprovante = Column(String(50), nullable=False, unique=True)
    valor_total = Column(Numeric(18, 2), nullable=False)
    enviado_email = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)

    pedido = relationship("PedidoModel", lazy="select")

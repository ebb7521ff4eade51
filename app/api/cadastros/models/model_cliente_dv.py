import base64
import hashlib
import secrets

from sqlalchemy import Column, String, Boolean, DateTime, Index, Integer
from sqlalchemy.orm import relationship
from app.database.db_connection import Base

from app.utils.database_utils import now_trimmed


def default_super_token():
    raw = secrets.token_bytes(32)
    hashed = hashlib.sha256(raw).digest()
    return base64.urlsafe_b64encode(hashed).rstrip(b'=').decode('ascii')


class ClienteModel(Base):
    __tablename__ = "clientes"
    __table_args__ = (
        Index("idx_clientes_email", "email"),
        {"schema": "cadastros"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False)
    telefone = Column(String(20), nullable=True, unique=True)
    email = Column(String(100), nullable=True)
    ativo = Column(Boolean, default=True, nullable=False)
    # Token opaco enviado pelo app no header X-Super-Token
    super_token = Column(String, unique=True, nullable=False, default=default_super_token)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    pedidos = relationship("PedidoModel", back_populates="cliente")
    enderecos = relationship(
        "EnderecoModel",
        back_populates="cliente",
        cascade="all, delete-orphan"
    )

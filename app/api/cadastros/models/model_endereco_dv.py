from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class EnderecoModel(Base):
    __tablename__ = "enderecos"
    __table_args__ = {"schema": "cadastros"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    cliente_id = Column(Integer, ForeignKey("cadastros.clientes.id", ondelete="CASCADE"), nullable=False)

    cep         = Column(String(10),  nullable=True)
    logradouro  = Column(String(100), nullable=True)
    numero      = Column(String(10),  nullable=True)
    complemento = Column(String(50),  nullable=True)
    bairro      = Column(String(50),  nullable=True)
    cidade      = Column(String(50),  nullable=True)
    estado      = Column(String(2),   nullable=True)
    ponto_referencia = Column(String(120), nullable=True)
    is_principal = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    cliente = relationship("ClienteModel", back_populates="enderecos")

    def resumo(self) -> str:
        partes = [self.logradouro, self.numero, self.bairro, self.cidade]
        return ", ".join(p for p in partes if p)

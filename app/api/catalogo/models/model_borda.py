from sqlalchemy import Column, Integer, String, Boolean, Numeric
from app.database.db_connection import Base


class BordaPizzaModel(Base):
    __tablename__ = "bordas_pizza"
    __table_args__ = {"schema": "catalogo"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    descricao = Column(String(100), nullable=False)
    preco_adicional = Column(Numeric(18, 2), nullable=False, default=0)
    ativo = Column(Boolean, nullable=False, default=True)


class RecheioBordaModel(Base):
    __tablename__ = "recheios_borda"
    __table_args__ = {"schema": "catalogo"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    descricao = Column(String(100), nullable=False)
    preco = Column(Numeric(18, 2), nullable=False, default=0)
    ativo = Column(Boolean, nullable=False, default=True)

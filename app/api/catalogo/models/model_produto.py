from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Numeric, func
from sqlalchemy.orm import relationship
from app.database.db_connection import Base


class ProdutoModel(Base):
    __tablename__ = "produtos"
    __table_args__ = {"schema": "catalogo"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    descricao = Column(String(255), nullable=False)
    imagem = Column(String(255), nullable=True)
    # Pizzas aceitam borda e recheio de borda
    is_pizza = Column(Boolean, nullable=False, default=False)
    ativo = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    variacoes = relationship("ProdutoVariacaoModel", back_populates="produto", cascade="all, delete-orphan")


class ProdutoVariacaoModel(Base):
    """Tamanho/versão vendável de um produto (ex.: pizza média, pizza grande)."""
    __tablename__ = "produtos_variacoes"
    __table_args__ = {"schema": "catalogo"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    produto_id = Column(Integer, ForeignKey("catalogo.produtos.id", ondelete="CASCADE"), nullable=False)
    descricao = Column(String(100), nullable=False)
    preco = Column(Numeric(18, 2), nullable=False)
    ativo = Column(Boolean, nullable=False, default=True)

    produto = relationship("ProdutoModel", back_populates="variacoes")

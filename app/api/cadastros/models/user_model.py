# app/api/cadastros/models/user_model.py
from sqlalchemy import Boolean, Column, Integer, String

from app.database.db_connection import Base


class UserModel(Base):
    """Funcionário do back-office (atendente, cozinha, motoboy, admin)."""
    __tablename__ = "usuarios"
    __table_args__ = {"schema": "cadastros"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(80), unique=True, nullable=False)
    nome = Column(String(100), nullable=True)
    type_user = Column(String(30), nullable=False, default="funcionario")
    ativo = Column(Boolean, nullable=False, default=True)

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.orm import Session
from app.api.cadastros.models.model_cliente_dv import ClienteModel
from app.api.cadastros.models.user_model import UserModel
from app.core.admin_dependencies import STAFF_TYPES, forbidden_exception, get_current_user_optional
from app.database.db_connection import get_db


def get_cliente_by_super_token(
    x_super_token: str = Header(...),
    db: Session = Depends(get_db)
) -> ClienteModel:
    cliente = db.query(ClienteModel).filter_by(super_token=x_super_token, ativo=True).first()
    if not cliente:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido")
    return cliente


def get_cliente_by_super_token_optional(
    x_super_token: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Optional[ClienteModel]:
    """
    Retorna None se não houver token ou se o token for inválido.
    Usado em endpoints que aceitam tanto funcionário quanto cliente.
    """
    if not x_super_token:
        return None
    return db.query(ClienteModel).filter_by(super_token=x_super_token, ativo=True).first()


@dataclass
class Solicitante:
    """Quem está chamando: cliente (X-Super-Token) ou funcionário (Bearer)."""
    cliente: Optional[ClienteModel] = None
    funcionario: Optional[UserModel] = None

    @property
    def is_staff(self) -> bool:
        return self.funcionario is not None

    @property
    def usuario_id(self) -> Optional[int]:
        return self.funcionario.id if self.funcionario else None


def get_solicitante(
    cliente: Optional[ClienteModel] = Depends(get_cliente_by_super_token_optional),
    funcionario: Optional[UserModel] = Depends(get_current_user_optional),
) -> Solicitante:
    if funcionario is not None and funcionario.type_user not in STAFF_TYPES:
        raise forbidden_exception
    if cliente is None and funcionario is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido")
    return Solicitante(cliente=cliente, funcionario=funcionario)

# app/core/admin_dependencies.py

from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from jose import JWTError
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.core.security import decode_access_token
from app.database.db_connection import get_db
from app.utils.logger import logger

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Não autenticado Access",
    headers={"WWW-Authenticate": "Bearer"},
)

forbidden_exception = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Você não tem permissão para acessar este recurso",
)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Recupera o funcionário autenticado a partir do header Authorization (Bearer <token>).
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.warning("[AUTH] Cabeçalho Authorization ausente ou malformado.")
        raise credentials_exception

    access_token = auth_header.replace("Bearer ", "")

    try:
        payload = decode_access_token(access_token)
        raw_sub = payload.get("sub")
        if raw_sub is None:
            raise credentials_exception
        user_id = int(raw_sub)
    except (JWTError, ValueError) as e:
        logger.error(f"[AUTH] Erro ao decodificar JWT: {e}")
        raise credentials_exception

    user = db.get(UserModel, user_id)
    if not user or not user.ativo:
        raise credentials_exception

    return user


def require_type_user(allowed_types: list[str]):
    """
    Dependency factory para restringir acesso por tipo de usuário.

        @router.get(..., dependencies=[Depends(require_type_user(['admin']))])
    """

    def dependency(current_user: UserModel = Depends(get_current_user)) -> UserModel:
        if current_user.type_user not in allowed_types:
            logger.warning(
                "[AUTH] Acesso negado. type_user=%s, permitido=%s",
                current_user.type_user,
                allowed_types,
            )
            raise forbidden_exception
        return current_user

    return dependency


STAFF_TYPES = ["admin", "funcionario", "entregador"]

get_current_staff = require_type_user(STAFF_TYPES)
get_current_admin = require_type_user(["admin"])


def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[UserModel]:
    """Como `get_current_user`, mas retorna None quando não há header Authorization."""
    if not request.headers.get("Authorization"):
        return None
    return get_current_user(request, db)

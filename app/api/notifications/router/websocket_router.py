from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from typing import Dict, Any, Optional
import json
import logging
from datetime import datetime, timezone

from jose import JWTError

from ..core.websocket_manager import websocket_manager
from ....api.cadastros.models.user_model import UserModel
from ....core.admin_dependencies import STAFF_TYPES, get_current_staff
from ....core.security import decode_access_token
from ....database.db_connection import SessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websocket"])


def _agora() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _enviar(websocket: WebSocket, mensagem: Dict[str, Any]):
    mensagem.setdefault("timestamp", _agora())
    await websocket.send_text(json.dumps(mensagem, default=str))


def _staff_do_token(token: Optional[str]) -> Optional[UserModel]:
    """Valida o JWT enviado em `register_admin`."""
    if not token:
        return None
    try:
        user_id = int(decode_access_token(token).get("sub"))
    except (JWTError, TypeError, ValueError) as e:
        logger.warning(f"[WS] Token de back-office inválido: {e}")
        return None

    db = SessionLocal()
    try:
        user = db.get(UserModel, user_id)
        if not user or not user.ativo or user.type_user not in STAFF_TYPES:
            return None
        return user
    finally:
        db.close()


@router.websocket("/notifications")
async def websocket_notifications(websocket: WebSocket):
    """
    WebSocket de notificações em tempo real.

    Logo após conectar o cliente envia `{"type": "register", "customer_id": ...}`;
    o back-office envia `{"type": "register_admin", "token": <JWT>}`.
    """
    await websocket_manager.connect(websocket)
    try:
        await _enviar(websocket, {"type": "connection", "message": "Conectado com sucesso"})

        while True:
            try:
                data = await websocket.receive_text()
                message = json.loads(data)
                if not isinstance(message, dict):
                    raise ValueError("mensagem deve ser um objeto JSON")
            except WebSocketDisconnect:
                logger.info(f"[WS] WebSocket desconectado pelo cliente - websocket_id={id(websocket)}")
                break
            except ValueError:
                logger.warning("[WS] Mensagem inválida recebida")
                await _enviar(websocket, {"type": "error", "message": "Formato de mensagem inválido"})
                continue

            await _handle_client_message(websocket, message)

    except WebSocketDisconnect:
        logger.info(f"[WS] WebSocket desconectado - websocket_id={id(websocket)}")
    except Exception as e:
        logger.error(f"[WS] Erro no WebSocket - websocket_id={id(websocket)}: {e}", exc_info=True)
    finally:
        websocket_manager.disconnect(websocket)


async def _handle_client_message(websocket: WebSocket, message: Dict[str, Any]):
    """Processa mensagens recebidas do cliente"""
    message_type = message.get("type")

    if message_type == "register":
        customer_id = message.get("customer_id")
        if customer_id in (None, ""):
            await _enviar(websocket, {"type": "error", "message": "customer_id é obrigatório"})
            return
        websocket_manager.register_customer(websocket, str(customer_id))
        await _enviar(websocket, {"type": "registered", "customer_id": str(customer_id)})

    elif message_type == "register_admin":
        user = _staff_do_token(message.get("token"))
        if not user:
            await _enviar(websocket, {"type": "error", "message": "Token de back-office inválido"})
            return
        websocket_manager.register_admin(websocket)
        await _enviar(websocket, {"type": "registered", "role": "admin", "user_id": user.id})

    elif message_type == "ping":
        await _enviar(websocket, {"type": "pong"})

    elif message_type == "get_stats":
        if not websocket_manager.is_admin(websocket):
            await _enviar(websocket, {"type": "error", "message": "Estatísticas restritas ao back-office"})
            return
        await _enviar(websocket, {"type": "stats", "data": websocket_manager.get_connection_stats()})

    else:
        await _enviar(
            websocket,
            {"type": "error", "message": f"Tipo de mensagem '{message_type}' não reconhecido"},
        )


@router.get("/connections/stats")
async def get_connection_stats(current_user: UserModel = Depends(get_current_staff)):
    """Retorna estatísticas das conexões WebSocket"""
    return {
        **websocket_manager.get_connection_stats(),
        "message": "Conecte-se em /ws/notifications e envie 'register' para receber eventos",
    }

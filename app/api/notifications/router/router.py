from fastapi import APIRouter
from .websocket_router import router as websocket_router

# Router principal de notificações em tempo real
router = APIRouter(
    tags=["API - Notifications"]
)

router.include_router(websocket_router)

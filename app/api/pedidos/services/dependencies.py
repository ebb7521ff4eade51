from fastapi import Depends
from sqlalchemy.orm import Session

from app.database.db_connection import get_db
from app.api.notifications.services.email_notification_service import (
    EmailNotificationService,
    email_notification_service,
)
from app.api.notifications.services.realtime_notifier import RealtimeNotifier, realtime_notifier
from app.api.pedidos.services.service_comprovante import ComprovanteService
from app.api.pedidos.services.service_pedido import PedidoService


def get_email_service() -> EmailNotificationService:
    return email_notification_service


def get_realtime_notifier() -> RealtimeNotifier:
    return realtime_notifier


def get_comprovante_service(
    db: Session = Depends(get_db),
    email_service: EmailNotificationService = Depends(get_email_service),
) -> ComprovanteService:
    return ComprovanteService(db, email_service=email_service)


def get_pedido_service(
    db: Session = Depends(get_db),
    comprovante_service: ComprovanteService = Depends(get_comprovante_service),
    notifier: RealtimeNotifier = Depends(get_realtime_notifier),
) -> PedidoService:
    return PedidoService(
        db,
        comprovante_service=comprovante_service,
        notifier=notifier,
    )

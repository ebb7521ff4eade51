from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.notifications.services.email_notification_service import EmailNotificationService
from app.api.notifications.services.realtime_notifier import RealtimeNotifier
from app.api.pagamentos.services.service_pagamento_pix import PagamentoPixService
from app.api.pagamentos.services.service_pix_gateway import PixGatewayClient, get_pix_gateway
from app.api.pagamentos.services.service_webhook import WebhookPagamentoService
from app.api.pedidos.services.dependencies import (
    get_comprovante_service,
    get_email_service,
    get_pedido_service,
    get_realtime_notifier,
)
from app.api.pedidos.services.service_comprovante import ComprovanteService
from app.api.pedidos.services.service_pedido import PedidoService
from app.database.db_connection import get_db


def get_pagamento_pix_service(
    db: Session = Depends(get_db),
    gateway: PixGatewayClient = Depends(get_pix_gateway),
) -> PagamentoPixService:
    return PagamentoPixService(db, gateway=gateway)


def get_webhook_service(
    db: Session = Depends(get_db),
    pedido_service: PedidoService = Depends(get_pedido_service),
    comprovante_service: ComprovanteService = Depends(get_comprovante_service),
    email_service: EmailNotificationService = Depends(get_email_service),
    notifier: RealtimeNotifier = Depends(get_realtime_notifier),
    gateway: PixGatewayClient = Depends(get_pix_gateway),
) -> WebhookPagamentoService:
    return WebhookPagamentoService(
        db,
        pedido_service=pedido_service,
        comprovante_service=comprovante_service,
        email_service=email_service,
        notifier=notifier,
        gateway=gateway,
    )

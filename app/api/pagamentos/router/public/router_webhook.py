from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Query, Request

from app.api.pagamentos.schemas.schema_pagamento import WebhookResponse
from app.api.pagamentos.services.dependencies import get_webhook_service
from app.api.pagamentos.services.service_webhook import WebhookPagamentoService
from app.utils.logger import logger

router = APIRouter(prefix="/webhook", tags=["Public - Webhooks"])


async def _ler_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        logger.warning("[Webhook] Corpo da requisição não é JSON válido")
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/payment-provider", response_model=WebhookResponse, response_model_exclude_none=True)
async def webhook_pagamento(
    request: Request,
    x_signature: Optional[str] = Header(None, alias="x-signature"),
    x_request_id: Optional[str] = Header(None, alias="x-request-id"),
    data_id: Optional[str] = Query(None, alias="data.id"),
    svc: WebhookPagamentoService = Depends(get_webhook_service),
):
    """
    Notificação do provedor de pagamento.

    Sempre responde 200: erros internos voltam como `{"ok": false}` para não
    provocar reenvios inúteis do provedor.
    """
    body = await _ler_body(request)
    return await svc.processar_webhook(
        body,
        x_signature=x_signature,
        x_request_id=x_request_id,
        data_id_query=data_id,
    )

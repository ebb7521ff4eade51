from fastapi import APIRouter, Body, Depends, Path

from app.api.cadastros.models.model_cliente_dv import ClienteModel
from app.api.pagamentos.schemas.schema_pagamento import PagamentoResponse, PixRequest, PixResponse
from app.api.pagamentos.services.dependencies import get_pagamento_pix_service
from app.api.pagamentos.services.service_pagamento_pix import PagamentoPixService
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.core.client_dependencies import Solicitante, get_cliente_by_super_token, get_solicitante
from app.utils.logger import logger

router = APIRouter(prefix="/payments", tags=["Client - Pagamentos"])


@router.post("/pix", response_model=PixResponse)
async def gerar_pix(
    payload: PixRequest = Body(...),
    cliente: ClienteModel = Depends(get_cliente_by_super_token),
    svc: PagamentoPixService = Depends(get_pagamento_pix_service),
):
    """
    Gera a cobrança PIX do pedido e devolve o copia-e-cola e o QR Code em base64.
    """
    logger.info(f"[Pagamentos] Gerar PIX - pedido_id={payload.order_id} cliente_id={cliente.id}")
    return await svc.gerar_pix(cliente.id, payload)


@router.get("/order/{pedido_id}", response_model=PagamentoResponse)
def buscar_pagamento_do_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    solicitante: Solicitante = Depends(get_solicitante),
    pedidos: PedidoService = Depends(get_pedido_service),
    svc: PagamentoPixService = Depends(get_pagamento_pix_service),
):
    if solicitante.is_staff:
        pedidos.get_pedido(pedido_id)
    else:
        pedidos.get_pedido_do_cliente(pedido_id, solicitante.cliente.id)
    return svc.get_ultimo_do_pedido(pedido_id)


@router.get("/{pagamento_id}", response_model=PagamentoResponse)
def buscar_pagamento(
    pagamento_id: str = Path(..., description="ID do pagamento"),
    solicitante: Solicitante = Depends(get_solicitante),
    svc: PagamentoPixService = Depends(get_pagamento_pix_service),
):
    """Polling do status do pagamento, usado quando o WebSocket não está disponível."""
    if solicitante.is_staff:
        return svc.get_pagamento(pagamento_id)
    return svc.get_pagamento_do_cliente(pagamento_id, solicitante.cliente.id)

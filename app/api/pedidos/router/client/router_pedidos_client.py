from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, status

from app.api.cadastros.models.model_cliente_dv import ClienteModel
from app.api.pedidos.schemas.schema_pedido import (
    CancelarPedidoBody,
    CriarPedidoRequest,
    PedidoResponse,
)
from app.api.pedidos.schemas.schema_pedido_status_historico import PedidoStatusHistoricoOut
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.core.client_dependencies import Solicitante, get_cliente_by_super_token, get_solicitante
from app.utils.logger import logger

router = APIRouter(prefix="/orders", tags=["Client - Pedidos"])


def _pedido_visivel(svc: PedidoService, pedido_id: int, solicitante: Solicitante):
    if solicitante.is_staff:
        return svc.get_pedido(pedido_id)
    return svc.get_pedido_do_cliente(pedido_id, solicitante.cliente.id)


def _to_response(pedido, solicitante: Solicitante) -> PedidoResponse:
    resposta = PedidoResponse.model_validate(pedido)
    if solicitante.is_staff:
        # O token de entrega só é exibido ao cliente
        resposta = resposta.model_copy(update={"token_entrega": None})
    return resposta


@router.post("", response_model=PedidoResponse, status_code=status.HTTP_201_CREATED)
def criar_pedido(
    payload: CriarPedidoRequest = Body(...),
    cliente: ClienteModel = Depends(get_cliente_by_super_token),
    svc: PedidoService = Depends(get_pedido_service),
):
    """
    Finaliza o checkout: precifica o carrinho e cria o pedido em `pending`.
    """
    logger.info(f"[Pedidos] Checkout - cliente_id={cliente.id} itens={len(payload.itens)}")
    pedido = svc.criar_pedido(cliente.id, payload)
    return PedidoResponse.model_validate(pedido)


@router.get("/mine", response_model=List[PedidoResponse])
def listar_meus_pedidos(
    cliente: ClienteModel = Depends(get_cliente_by_super_token),
    svc: PedidoService = Depends(get_pedido_service),
):
    return [PedidoResponse.model_validate(p) for p in svc.listar_por_cliente(cliente.id)]


@router.get("/{pedido_id}", response_model=PedidoResponse)
def buscar_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    solicitante: Solicitante = Depends(get_solicitante),
    svc: PedidoService = Depends(get_pedido_service),
):
    """Consulta do pedido; também é o fallback de polling quando o WebSocket cai."""
    pedido = _pedido_visivel(svc, pedido_id, solicitante)
    return _to_response(pedido, solicitante)


@router.get("/{pedido_id}/history", response_model=List[PedidoStatusHistoricoOut])
def historico_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    solicitante: Solicitante = Depends(get_solicitante),
    svc: PedidoService = Depends(get_pedido_service),
):
    _pedido_visivel(svc, pedido_id, solicitante)
    return svc.listar_historico(pedido_id)


@router.post("/{pedido_id}/cancel", response_model=PedidoResponse)
async def cancelar_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    payload: Optional[CancelarPedidoBody] = Body(None),
    solicitante: Solicitante = Depends(get_solicitante),
    svc: PedidoService = Depends(get_pedido_service),
):
    _pedido_visivel(svc, pedido_id, solicitante)
    pedido = await svc.cancelar(pedido_id, payload.motivo if payload else None, usuario_id=solicitante.usuario_id)
    return _to_response(pedido, solicitante)

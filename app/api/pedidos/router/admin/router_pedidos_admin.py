from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from app.api.cadastros.models.user_model import UserModel
from app.api.pedidos.models.model_pedido import StatusPedido
from app.api.pedidos.schemas.schema_pedido import (
    AlterarStatusPedidoBody,
    PedidoAdminResponse,
    ValidarTokenEntregaBody,
    ValidarTokenEntregaResponse,
)
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.core.admin_dependencies import get_current_admin, get_current_staff
from app.utils.logger import logger

router = APIRouter(prefix="/orders", tags=["Admin - Pedidos"])


@router.get("", response_model=List[PedidoAdminResponse])
def listar_pedidos(
    status_filtro: Optional[StatusPedido] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: UserModel = Depends(get_current_staff),
    svc: PedidoService = Depends(get_pedido_service),
):
    return svc.listar_todos(status_filtro=status_filtro, skip=skip, limit=limit)


@router.patch("/{pedido_id}/status", response_model=PedidoAdminResponse)
async def atualizar_status_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    payload: AlterarStatusPedidoBody = Body(...),
    current_user: UserModel = Depends(get_current_staff),
    svc: PedidoService = Depends(get_pedido_service),
):
    logger.info(f"[Pedidos] Alterar status - pedido_id={pedido_id} status={payload.status.value} usuario_id={current_user.id}")
    return await svc.atualizar_status(
        pedido_id,
        payload.status,
        observacoes=payload.observacoes,
        usuario_id=current_user.id,
    )


@router.post("/{pedido_id}/delivery-token/validate", response_model=ValidarTokenEntregaResponse)
async def validar_token_entrega(
    pedido_id: int = Path(..., description="ID do pedido"),
    payload: ValidarTokenEntregaBody = Body(...),
    current_user: UserModel = Depends(get_current_staff),
    svc: PedidoService = Depends(get_pedido_service),
):
    valido = await svc.validar_token_entrega(pedido_id, payload.token, usuario_id=current_user.id)
    pedido = svc.get_pedido(pedido_id)
    return ValidarTokenEntregaResponse(
        valido=valido,
        pedido_id=pedido_id,
        status=pedido.status,
        message="Entrega confirmada" if valido else "Token inválido",
    )


@router.delete("/{pedido_id}", status_code=status.HTTP_204_NO_CONTENT)
def remover_pedido(
    pedido_id: int = Path(..., description="ID do pedido"),
    current_user: UserModel = Depends(get_current_admin),
    svc: PedidoService = Depends(get_pedido_service),
):
    svc.remover(pedido_id)

from fastapi import APIRouter, Depends, Query

from app.api.cadastros.models.user_model import UserModel
from app.api.pagamentos.schemas.schema_pagamento import PagamentoResponse, PagamentosPaginadosResponse
from app.api.pagamentos.services.dependencies import get_pagamento_pix_service
from app.api.pagamentos.services.service_pagamento_pix import PagamentoPixService
from app.core.admin_dependencies import get_current_staff

router = APIRouter(prefix="/payments", tags=["Admin - Pagamentos"])


@router.get("", response_model=PagamentosPaginadosResponse)
def listar_pagamentos(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    current_user: UserModel = Depends(get_current_staff),
    svc: PagamentoPixService = Depends(get_pagamento_pix_service),
):
    itens, total = svc.listar(page=page, per_page=per_page)
    return PagamentosPaginadosResponse(
        itens=[PagamentoResponse.model_validate(p) for p in itens],
        total=total,
        page=page,
        per_page=per_page,
    )

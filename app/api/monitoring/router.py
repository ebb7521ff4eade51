"""
Router de monitoramento: métricas Prometheus e leitura dos logs.
"""
from collections import deque
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, HTTPException, status
from fastapi.responses import StreamingResponse

from app.api.cadastros.models.user_model import UserModel
from app.config.settings import LOG_DIR
from app.core.admin_dependencies import get_current_admin
from app.utils.prometheus_metrics import get_metrics, CONTENT_TYPE_LATEST

router = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring - Monitoramento"]
)

# Router público para métricas (sem autenticação)
router_public = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring - Monitoramento"]
)

LOG_FILE = Path(LOG_DIR) / "app.log"


@router_public.get("/metrics")
async def metrics():
    """
    Endpoint de métricas Prometheus (público, sem autenticação).
    Acesse em: /api/monitoring/metrics
    """
    return StreamingResponse(
        iter([get_metrics()]),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/logs")
def tail_logs(
    lines: int = Query(100, ge=1, le=1000, description="Número de linhas para exibir"),
    level: Optional[str] = Query(None, description="Filtrar por nível (INFO, ERROR, WARNING, DEBUG)"),
    search: Optional[str] = Query(None, description="Buscar texto nas linhas"),
    current_user: UserModel = Depends(get_current_admin),
):
    """Últimas linhas do log da aplicação, com filtros opcionais."""
    if not LOG_FILE.exists():
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Arquivo de log não encontrado")

    marcador = f"[{level.upper()}]" if level else None
    with open(LOG_FILE, "r", encoding="utf-8", errors="replace") as f:
        filtradas = (
            linha.rstrip("\n")
            for linha in f
            if (not marcador or marcador in linha) and (not search or search.lower() in linha.lower())
        )
        ultimas = list(deque(filtradas, maxlen=lines))

    return {"total": len(ultimas), "lines": ultimas}

import inspect
import logging
from typing import Any, Callable

from app.utils.prometheus_metrics import side_effect_failures_total

logger = logging.getLogger(__name__)


async def run_side_effect(nome: str, acao: Callable[[], Any], *, contexto: str = "") -> bool:
    """
    Executa um efeito colateral isolado (e-mail, WebSocket, comprovante...).

    A falha é logada e contabilizada, nunca propagada: quem chama segue para o
    próximo passo. Retorna True quando o passo terminou sem exceção.
    """
    try:
        resultado = acao()
        if inspect.isawaitable(resultado):
            await resultado
        return True
    except Exception as e:
        logger.error(f"[SideEffect] Falha em '{nome}' {contexto}: {e}", exc_info=True)
        side_effect_failures_total.labels(step=nome).inc()
        return False

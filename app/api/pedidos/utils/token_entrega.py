from __future__ import annotations

import logging
import secrets
import threading
import time
from collections import deque
from typing import Deque, Dict

from app.config.settings import DELIVERY_TOKEN_MAX_ATTEMPTS, DELIVERY_TOKEN_WINDOW_SECONDS

logger = logging.getLogger(__name__)

TAMANHO_TOKEN = 6


def gerar_token_entrega() -> str:
    """Token numérico de 6 dígitos usado pelo motoboy para confirmar a entrega."""
    return f"{secrets.randbelow(10 ** TAMANHO_TOKEN):0{TAMANHO_TOKEN}d}"


class LimitadorTentativasToken:
    """
    Limita tentativas erradas de token por pedido dentro de uma janela deslizante.

    Estado em memória do processo, protegido por lock (as rotas síncronas rodam em threads).
    """

    def __init__(
        self,
        max_tentativas: int = DELIVERY_TOKEN_MAX_ATTEMPTS,
        janela_segundos: int = DELIVERY_TOKEN_WINDOW_SECONDS,
    ) -> None:
        self.max_tentativas = max_tentativas
        self.janela_segundos = janela_segundos
        self._lock = threading.Lock()
        self._falhas: Dict[int, Deque[float]] = {}

    def _limpar(self, pedido_id: int, agora: float) -> int:
        falhas = self._falhas.get(pedido_id)
        if falhas is None:
            return 0
        while falhas and agora - falhas[0] > self.janela_segundos:
            falhas.popleft()
        if not falhas:
            # Janela vazia sai do mapa
            del self._falhas[pedido_id]
        return len(falhas)

    def bloqueado(self, pedido_id: int) -> bool:
        with self._lock:
            return self._limpar(pedido_id, time.monotonic()) >= self.max_tentativas

    def registrar_falha(self, pedido_id: int) -> int:
        with self._lock:
            agora = time.monotonic()
            self._limpar(pedido_id, agora)
            falhas = self._falhas.setdefault(pedido_id, deque())
            falhas.append(agora)
            total = len(falhas)
        if total >= self.max_tentativas:
            logger.warning(
                "[TokenEntrega] Pedido %s bloqueado após %s tentativas inválidas",
                pedido_id,
                total,
            )
        return total

    def limpar(self, pedido_id: int) -> None:
        with self._lock:
            self._falhas.pop(pedido_id, None)


limitador_token_entrega = LimitadorTentativasToken()

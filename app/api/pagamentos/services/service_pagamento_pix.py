from __future__ import annotations

import time
from decimal import Decimal
from typing import Optional, Tuple, List

import httpx
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.pagamentos.models.model_pagamento import PagamentoModel
from app.api.pagamentos.repositories.repo_pagamentos import PagamentoRepository
from app.api.pagamentos.schemas.schema_pagamento import PixRequest, PixResponse
from app.api.pagamentos.services.service_pix_gateway import PixGatewayClient, pix_gateway
from app.api.pagamentos.services.service_qrcode import qrcode_ou_placeholder
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.config.settings import PIX_EXPIRATION_MINUTES
from app.utils.database_utils import minutos_a_partir_de_agora
from app.utils.logger import logger
from app.utils.prometheus_metrics import pix_generation_duration_seconds

CENTAVOS = Decimal("0.01")


class PagamentoPixService:
    """Geração de cobranças PIX e consultas de pagamento."""

    def __init__(self, db: Session, *, gateway: Optional[PixGatewayClient] = None):
        self.db = db
        self.repo = PagamentoRepository(db)
        self.pedidos = PedidoRepository(db)
        self.gateway = gateway or pix_gateway

    async def gerar_pix(self, cliente_id: int, payload: PixRequest) -> PixResponse:
        pedido = self.pedidos.get_pedido(payload.order_id)
        if not pedido:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Pedido não encontrado")
        if pedido.cliente_id != cliente_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Pedido não pertence a este cliente")

        valor = (Decimal(payload.amount_in_cents) / 100).quantize(CENTAVOS)
        if valor != Decimal(pedido.valor_total).quantize(CENTAVOS):
            logger.warning(
                f"[Pagamentos] Valor do PIX difere do total do pedido - pedido_id={pedido.id} "
                f"valor={valor} total={pedido.valor_total}"
            )

        expira_em = minutos_a_partir_de_agora(PIX_EXPIRATION_MINUTES)
        inicio = time.perf_counter()
        try:
            cobranca = await self.gateway.gerar_cobranca(
                pedido_id=pedido.id,
                valor=valor,
                payer_email=payload.payer_email,
                descricao=f"Pedido {pedido.numero_pedido}",
                expira_em=expira_em,
            )
        except httpx.TimeoutException as e:
            logger.error(f"[Pagamentos] Timeout no gateway PIX - pedido_id={pedido.id}: {e}")
            raise HTTPException(status.HTTP_504_GATEWAY_TIMEOUT, "Tempo esgotado ao gerar o PIX. Tente novamente.")
        except Exception as e:
            logger.error(f"[Pagamentos] Erro no gateway PIX - pedido_id={pedido.id}: {e}", exc_info=True)
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, "Não foi possível gerar o PIX. Tente novamente.")
        finally:
            pix_generation_duration_seconds.observe(time.perf_counter() - inicio)

        # Prefere a imagem do provedor; sem ela, renderiza localmente
        qr_base64 = cobranca.qr_code_base64 or qrcode_ou_placeholder(cobranca.pix_codigo)

        try:
            pagamento = self.repo.criar(
                cliente_id=cliente_id,
                pedido_id=pedido.id,
                valor=valor,
                gateway_id=cobranca.gateway_id,
                pix_codigo=cobranca.pix_codigo,
                pix_qr_code_base64=qr_base64,
                ticket_url=cobranca.ticket_url,
                expira_em=expira_em,
            )
            pagamento_id = pagamento.id
            pedido.referencia_pagamento = cobranca.gateway_id
            self.repo.commit()
        except Exception as e:
            self.repo.rollback()
            logger.error(f"[Pagamentos] Erro ao salvar pagamento - pedido_id={pedido.id}: {e}", exc_info=True)
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Erro ao registrar pagamento")

        logger.info(
            f"[Pagamentos] PIX gerado - payment_id={pagamento_id} gateway_id={cobranca.gateway_id} "
            f"pedido_id={pedido.id} valor={valor}"
        )
        return PixResponse(
            pix_code=cobranca.pix_codigo,
            pix_qr_base64=qr_base64,
            payment_id=pagamento_id,
            ticket_url=cobranca.ticket_url,
            expires_at=expira_em,
        )

    # ---------------- Consultas ----------------
    def get_pagamento(self, pagamento_id: str) -> PagamentoModel:
        pagamento = self.repo.get_by_id(pagamento_id)
        if not pagamento:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Pagamento não encontrado")
        return pagamento

    def get_pagamento_do_cliente(self, pagamento_id: str, cliente_id: int) -> PagamentoModel:
        pagamento = self.get_pagamento(pagamento_id)
        if pagamento.cliente_id != cliente_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Pagamento não pertence a este cliente")
        return pagamento

    def get_ultimo_do_pedido(self, pedido_id: int) -> PagamentoModel:
        pagamento = self.repo.get_ultimo_por_pedido(pedido_id)
        if not pagamento:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Nenhum pagamento para este pedido")
        return pagamento

    def listar(self, *, page: int = 1, per_page: int = 20) -> Tuple[List[PagamentoModel], int]:
        return self.repo.listar(page=page, per_page=per_page)

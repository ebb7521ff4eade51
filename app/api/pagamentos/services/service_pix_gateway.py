from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from app.api.pagamentos.models.model_pagamento import StatusPagamento
from app.api.pagamentos.utils.status_provedor import mapear_status_provedor
from app.config import settings
from app.integrations.mercadopago.client import MercadoPagoClient, MercadoPagoPayment
from app.utils.logger import logger

# Payload PIX fictício usado quando não há gateway configurado
PIX_CODIGO_OFFLINE = (
    "00020126580014br.gov.bcb.brcode0136123e4567-e12b-12d1-a456-426655440000"
    "520400005303986540510.005802BR5913Fulano de Tal6009BRASILIA62410503***63047B6D"
)


@dataclass
class CobrancaPix:
    gateway_id: str
    pix_codigo: str
    status: StatusPagamento
    qr_code_base64: Optional[str] = None
    ticket_url: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None


class PixGatewayClient:
    """
    Adapta o Mercado Pago para cobranças PIX.

    Sem `MERCADOPAGO_ACCESS_TOKEN` o cliente opera offline: gera um código
    fictício e um id local, para que o checkout continue funcionando.
    """

    def __init__(self, mercadopago_client: MercadoPagoClient | None = None, *, offline: bool | None = None):
        self._mercadopago_client = mercadopago_client
        if offline is None:
            offline = mercadopago_client is None and not settings.MERCADOPAGO_ACCESS_TOKEN
        self.offline = offline

    @property
    def mercadopago(self) -> MercadoPagoClient:
        if not self._mercadopago_client:
            if not settings.MERCADOPAGO_ACCESS_TOKEN:
                raise RuntimeError("MERCADOPAGO_ACCESS_TOKEN não configurado")
            self._mercadopago_client = MercadoPagoClient(
                access_token=settings.MERCADOPAGO_ACCESS_TOKEN,
                base_url=settings.MERCADOPAGO_BASE_URL,
                timeout=settings.MERCADOPAGO_TIMEOUT_SECONDS,
            )
        return self._mercadopago_client

    async def gerar_cobranca(
        self,
        *,
        pedido_id: int,
        valor: Decimal,
        payer_email: str,
        descricao: str | None = None,
        expira_em: datetime | None = None,
    ) -> CobrancaPix:
        if self.offline:
            gateway_id = f"pix_{pedido_id}_{int(time.time() * 1000)}"
            logger.info(f"[Pagamentos] Gateway offline - cobrança fictícia {gateway_id} pedido_id={pedido_id}")
            return CobrancaPix(
                gateway_id=gateway_id,
                pix_codigo=PIX_CODIGO_OFFLINE,
                status=StatusPagamento.PENDENTE,
                payload={"offline": True, "pedido_id": pedido_id, "valor": str(valor)},
            )

        payment = await self.mercadopago.create_pix_payment(
            external_reference=str(pedido_id),
            amount=valor,
            payer_email=payer_email,
            descricao=descricao,
            expira_em=expira_em.isoformat(timespec="milliseconds") if expira_em else None,
        )
        if not payment.qr_code:
            raise RuntimeError(f"Mercado Pago não retornou o código PIX (payment_id={payment.id})")
        return self._payment_to_cobranca(payment)

    async def consultar_status(self, gateway_id: str) -> Optional[StatusPagamento]:
        """Consulta o status no provedor. Offline não há a quem perguntar."""
        if self.offline:
            return None
        payment = await self.mercadopago.get_payment(gateway_id)
        return mapear_status_provedor(payment.status)

    async def close(self) -> None:
        if self._mercadopago_client:
            await self._mercadopago_client.close()

    def _payment_to_cobranca(self, payment: MercadoPagoPayment) -> CobrancaPix:
        return CobrancaPix(
            gateway_id=payment.id,
            pix_codigo=payment.qr_code,
            status=mapear_status_provedor(payment.status),
            qr_code_base64=payment.qr_code_base64,
            ticket_url=payment.ticket_url,
            payload=payment.raw,
        )


pix_gateway = PixGatewayClient()


def get_pix_gateway() -> PixGatewayClient:
    return pix_gateway

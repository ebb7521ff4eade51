from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx


@dataclass(slots=True)
class MercadoPagoPayment:
    """Representa uma resposta simplificada de pagamento PIX do Mercado Pago."""

    id: str
    status: str
    status_detail: str | None
    qr_code: str | None
    qr_code_base64: str | None
    ticket_url: str | None
    raw: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MercadoPagoPayment":
        point_of_interaction = data.get("point_of_interaction", {}) or {}
        transaction_data = point_of_interaction.get("transaction_data", {}) or {}

        qr_code_base64 = transaction_data.get("qr_code_base64")

        # Algumas respostas trazem o QR como imagem binária base64.
        if isinstance(qr_code_base64, dict) and "data" in qr_code_base64:
            qr_code_base64 = qr_code_base64.get("data")

        return cls(
            id=str(data.get("id")),
            status=data.get("status", "pending"),
            status_detail=data.get("status_detail"),
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=qr_code_base64,
            ticket_url=transaction_data.get("ticket_url"),
            raw=data,
        )


class MercadoPagoClient:
    """Cliente HTTP para a API de pagamentos do Mercado Pago. Sem retry."""

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: float = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token é obrigatório para o Mercado Pago")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def create_pix_payment(
        self,
        *,
        external_reference: str,
        amount: Decimal,
        payer_email: str,
        descricao: str | None = None,
        expira_em: str | None = None,
    ) -> MercadoPagoPayment:
        """
        Cria um pagamento PIX via `/v1/payments`.

        `external_reference` deve identificar o pedido; o header de idempotência
        evita cobranças duplicadas caso o mesmo pedido seja reenviado.
        """
        payload: Dict[str, Any] = {
            "transaction_amount": float(amount),
            "description": descricao or f"Pedido {external_reference}",
            "payment_method_id": "pix",
            "external_reference": external_reference,
            "payer": {"email": payer_email},
        }
        if expira_em:
            payload["date_of_expiration"] = expira_em

        resp = await self._client.post(
            "/v1/payments",
            json=payload,
            headers={"X-Idempotency-Key": f"pix-{external_reference}-{amount}"},
        )
        resp.raise_for_status()
        return MercadoPagoPayment.from_dict(resp.json())

    async def get_payment(self, payment_id: str) -> MercadoPagoPayment:
        resp = await self._client.get(f"/v1/payments/{payment_id}")
        resp.raise_for_status()
        return MercadoPagoPayment.from_dict(resp.json())

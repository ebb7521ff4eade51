import hashlib
import hmac
from typing import Optional


def _extrair_partes(x_signature: str) -> tuple[str, str]:
    ts = v1 = ""
    for parte in x_signature.split(","):
        chave, _, valor = parte.strip().partition("=")
        if chave == "ts":
            ts = valor
        elif chave == "v1":
            v1 = valor
    return ts, v1


def validar_assinatura_webhook(
    x_signature: Optional[str],
    x_request_id: Optional[str],
    data_id: Optional[str],
    secret: Optional[str],
) -> bool:
    """
    Confere o header `x-signature` (`ts=...,v1=...`) do Mercado Pago.

    O manifesto assinado é `id:<data.id>;request-id:<x-request-id>;ts:<ts>;`
    com HMAC-SHA256 sobre o segredo do webhook.
    """
    if not secret or not x_signature or not x_request_id or not data_id:
        return False

    ts, v1 = _extrair_partes(x_signature)
    if not ts or not v1:
        return False

    manifesto = f"id:{data_id};request-id:{x_request_id};ts:{ts};"
    esperado = hmac.new(secret.encode("utf-8"), manifesto.encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(esperado, v1)

import asyncio
import base64
import io
import json
from decimal import Decimal

import httpx
import pytest
from PIL import Image

from app.api.pagamentos.models.model_pagamento import PagamentoModel, StatusPagamento
from app.api.pagamentos.services import service_qrcode
from app.api.pagamentos.services.service_pix_gateway import PIX_CODIGO_OFFLINE, PixGatewayClient
from app.api.pedidos.models import PedidoModel
from app.integrations.mercadopago.client import MercadoPagoClient


def _gerar_pix(client, seed, pedido, centavos=5500, headers=None):
    return client.post(
        "/payments/pix",
        json={"order_id": pedido["id"], "amount_in_cents": centavos, "payer_email": "maria@example.com"},
        headers=headers or seed.headers_cliente,
    )


def test_gera_pix_e_registra_pagamento_pendente(client, seed, criar_pedido, gateway, sessao):
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido)
    assert resp.status_code == 200, resp.text
    corpo = resp.json()
    assert corpo["pix_code"] == PIX_CODIGO_OFFLINE
    assert corpo["pix_qr_base64"] == "cXJkb2dhdGV3YXk="
    assert corpo["ticket_url"] == "https://pix.example/ticket"
    assert corpo["expires_at"] is not None
    assert corpo["message"] == "QR Code PIX gerado com sucesso"

    assert gateway.cobrancas == [(pedido["id"], Decimal("55.00"), "maria@example.com")]

    with sessao() as db:
        pagamento = db.get(PagamentoModel, corpo["payment_id"])
        assert pagamento.status == StatusPagamento.PENDENTE.value
        assert pagamento.valor == Decimal("55.00")
        assert pagamento.pedido_id == pedido["id"]
        assert pagamento.cliente_id == seed.cliente_id
        assert pagamento.gateway_id == f"mp-{pedido['id']}-1"
        assert pagamento.expira_em is not None
        assert pagamento.pago_em is None
        assert db.get(PedidoModel, pedido["id"]).referencia_pagamento == pagamento.gateway_id


def test_sem_imagem_do_gateway_renderiza_qrcode(client, seed, criar_pedido, gateway):
    gateway.qr_code_base64 = None
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido)
    assert resp.status_code == 200
    png = base64.b64decode(resp.json()["pix_qr_base64"])
    assert png.startswith(b"\x89PNG")


def test_falha_na_renderizacao_usa_placeholder(client, seed, criar_pedido, gateway, sessao, monkeypatch):
    def quebrar(conteudo):
        raise ValueError("sem imagem")

    monkeypatch.setattr(service_qrcode, "renderizar_qrcode_base64", quebrar)
    gateway.qr_code_base64 = None
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido)
    assert resp.status_code == 200
    assert resp.json()["pix_qr_base64"] == service_qrcode.QR_CODE_PLACEHOLDER
    imagem = Image.open(io.BytesIO(base64.b64decode(resp.json()["pix_qr_base64"])))
    imagem.load()
    assert imagem.format == "PNG"
    assert imagem.size == (64, 64)
    with sessao() as db:
        assert db.get(PagamentoModel, resp.json()["payment_id"]) is not None


def test_valor_diferente_do_total_nao_bloqueia(client, seed, criar_pedido, sessao):
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido, centavos=1000)
    assert resp.status_code == 200
    with sessao() as db:
        assert db.get(PagamentoModel, resp.json()["payment_id"]).valor == Decimal("10.00")


def test_timeout_do_gateway_devolve_504_sem_gravar(client, seed, criar_pedido, gateway, sessao):
    gateway.erro = httpx.TimeoutException("demorou")
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido)
    assert resp.status_code == 504
    with sessao() as db:
        assert db.query(PagamentoModel).count() == 0


def test_erro_do_gateway_devolve_502(client, seed, criar_pedido, gateway, sessao):
    gateway.erro = RuntimeError("provedor fora do ar")
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido)
    assert resp.status_code == 502
    with sessao() as db:
        assert db.query(PagamentoModel).count() == 0


def test_pix_de_pedido_de_outro_cliente(client, seed, criar_pedido, gateway):
    pedido = criar_pedido()

    resp = _gerar_pix(client, seed, pedido, headers=seed.headers_outro)
    assert resp.status_code == 403
    assert gateway.cobrancas == []


def test_pix_de_pedido_inexistente(client, seed):
    resp = _gerar_pix(client, seed, {"id": 4242})
    assert resp.status_code == 404


def test_valor_precisa_ser_positivo(client, seed, criar_pedido):
    pedido = criar_pedido()
    assert _gerar_pix(client, seed, pedido, centavos=0).status_code == 422


def test_consulta_do_pagamento_respeita_o_dono(client, seed, criar_pedido):
    pedido = criar_pedido()
    payment_id = _gerar_pix(client, seed, pedido).json()["payment_id"]

    resp = client.get(f"/payments/{payment_id}", headers=seed.headers_cliente)
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"
    assert resp.json()["status_descricao"] == "Aguardando pagamento"
    assert resp.json()["valor"] == 55.0

    assert client.get(f"/payments/{payment_id}", headers=seed.headers_outro).status_code == 403
    assert client.get(f"/payments/{payment_id}", headers=seed.headers_admin).status_code == 200
    assert client.get("/payments/nao-existe", headers=seed.headers_cliente).status_code == 404


def test_ultimo_pagamento_do_pedido(client, seed, criar_pedido):
    pedido = criar_pedido()

    resp = client.get(f"/payments/order/{pedido['id']}", headers=seed.headers_cliente)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Nenhum pagamento para este pedido"

    payment_id = _gerar_pix(client, seed, pedido).json()["payment_id"]
    resp = client.get(f"/payments/order/{pedido['id']}", headers=seed.headers_cliente)
    assert resp.status_code == 200
    assert resp.json()["id"] == payment_id

    assert client.get(f"/payments/order/{pedido['id']}", headers=seed.headers_outro).status_code == 403


def test_listagem_paginada_para_funcionarios(client, seed, criar_pedido):
    pedido = criar_pedido()
    _gerar_pix(client, seed, pedido)
    _gerar_pix(client, seed, pedido)

    assert client.get("/payments", headers=seed.headers_cliente).status_code == 401

    resp = client.get("/payments", params={"page": 1, "per_page": 1}, headers=seed.headers_admin)
    assert resp.status_code == 200
    corpo = resp.json()
    assert corpo["total"] == 2
    assert corpo["page"] == 1
    assert corpo["per_page"] == 1
    assert len(corpo["itens"]) == 1


def test_gateway_offline_gera_codigo_ficticio():
    gateway = PixGatewayClient(offline=True)

    cobranca = asyncio.run(
        gateway.gerar_cobranca(pedido_id=7, valor=Decimal("55.00"), payer_email="maria@example.com")
    )
    assert cobranca.pix_codigo == PIX_CODIGO_OFFLINE
    assert cobranca.gateway_id.startswith("pix_7_")
    assert cobranca.status == StatusPagamento.PENDENTE
    assert cobranca.qr_code_base64 is None

    assert asyncio.run(gateway.consultar_status(cobranca.gateway_id)) is None


def test_gateway_online_usa_mercadopago():
    requisicoes = []

    def responder(request: httpx.Request) -> httpx.Response:
        requisicoes.append(request)
        if request.method == "POST":
            return httpx.Response(
                201,
                json={
                    "id": 987654,
                    "status": "pending",
                    "point_of_interaction": {
                        "transaction_data": {
                            "qr_code": "00020126pixreal",
                            "qr_code_base64": "aW1hZ2Vt",
                            "ticket_url": "https://mp.example/ticket",
                        }
                    },
                },
            )
        return httpx.Response(200, json={"id": 987654, "status": "approved"})

    mp = MercadoPagoClient(access_token="TEST-token", transport=httpx.MockTransport(responder))
    gateway = PixGatewayClient(mp)
    assert gateway.offline is False

    async def fluxo():
        cobranca = await gateway.gerar_cobranca(
            pedido_id=12, valor=Decimal("55.00"), payer_email="maria@example.com", descricao="Pedido X"
        )
        status = await gateway.consultar_status(cobranca.gateway_id)
        await gateway.close()
        return cobranca, status

    cobranca, status = asyncio.run(fluxo())

    assert cobranca.gateway_id == "987654"
    assert cobranca.pix_codigo == "00020126pixreal"
    assert cobranca.qr_code_base64 == "aW1hZ2Vt"
    assert cobranca.ticket_url == "https://mp.example/ticket"
    assert status == StatusPagamento.APROVADO

    criacao = requisicoes[0]
    assert criacao.url.path == "/v1/payments"
    assert criacao.headers["Authorization"] == "Bearer TEST-token"
    assert criacao.headers["X-Idempotency-Key"] == "pix-12-55.00"
    enviado = json.loads(criacao.content)
    assert enviado["payment_method_id"] == "pix"
    assert enviado["external_reference"] == "12"
    assert enviado["transaction_amount"] == 55.0
    assert requisicoes[1].url.path == "/v1/payments/987654"


def test_gateway_sem_codigo_pix_e_erro():
    def responder(request):
        return httpx.Response(201, json={"id": 1, "status": "pending"})

    mp = MercadoPagoClient(access_token="TEST-token", transport=httpx.MockTransport(responder))
    gateway = PixGatewayClient(mp)

    async def fluxo():
        try:
            await gateway.gerar_cobranca(pedido_id=1, valor=Decimal("1.00"), payer_email="a@example.com")
        finally:
            await gateway.close()

    with pytest.raises(RuntimeError, match="código PIX"):
        asyncio.run(fluxo())

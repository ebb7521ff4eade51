import re

from app.api.pedidos.models import PedidoHistoricoModel, PedidoModel
from app.api.pedidos.utils.token_entrega import LimitadorTentativasToken, gerar_token_entrega


def _pedido_em_rota(client, seed, criar_pedido, sessao, token="483920"):
    pedido = criar_pedido()
    with sessao() as db:
        db.get(PedidoModel, pedido["id"]).token_entrega = token
        db.commit()
    for status in ("confirmed", "preparing", "on_delivery"):
        resp = client.patch(f"/orders/{pedido['id']}/status", json={"status": status}, headers=seed.headers_admin)
        assert resp.status_code == 200, resp.text
    return pedido["id"]


def _validar(client, seed, pedido_id, token):
    return client.post(
        f"/orders/{pedido_id}/delivery-token/validate",
        json={"token": token},
        headers=seed.headers_motoboy,
    )


def test_token_gerado_tem_seis_digitos():
    for _ in range(50):
        assert re.fullmatch(r"\d{6}", gerar_token_entrega())


def test_token_errado_nao_altera_o_pedido(client, seed, criar_pedido, sessao):
    pedido_id = _pedido_em_rota(client, seed, criar_pedido, sessao)

    resp = _validar(client, seed, pedido_id, "000000")
    assert resp.status_code == 200
    assert resp.json()["valido"] is False
    assert resp.json()["status"] == "on_delivery"

    with sessao() as db:
        pedido = db.get(PedidoModel, pedido_id)
        assert pedido.status == "on_delivery"
        assert pedido.delivered_at is None


def test_token_certo_entrega_o_pedido(client, seed, criar_pedido, sessao, notifier):
    pedido_id = _pedido_em_rota(client, seed, criar_pedido, sessao)

    resp = _validar(client, seed, pedido_id, "483920")
    assert resp.status_code == 200
    assert resp.json() == {
        "valido": True,
        "pedido_id": pedido_id,
        "status": "delivered",
        "message": "Entrega confirmada",
    }

    with sessao() as db:
        pedido = db.get(PedidoModel, pedido_id)
        assert pedido.status == "delivered"
        assert pedido.delivered_at is not None
        ultimo = (
            db.query(PedidoHistoricoModel)
            .filter_by(pedido_id=pedido_id)
            .order_by(PedidoHistoricoModel.id.desc())
            .first()
        )
        assert ultimo.status == "delivered"
        assert ultimo.usuario_id == seed.motoboy_id

    assert notifier.mudancas_status[-1]["status"] == "delivered"

    # Entregue é terminal: o mesmo token não entrega de novo
    assert _validar(client, seed, pedido_id, "483920").status_code == 400


def test_comparacao_e_exata(client, seed, criar_pedido, sessao):
    pedido_id = _pedido_em_rota(client, seed, criar_pedido, sessao, token="012345")

    assert _validar(client, seed, pedido_id, "12345").json()["valido"] is False
    assert _validar(client, seed, pedido_id, " 12345").json()["valido"] is False


def test_token_certo_fora_de_rota_e_rejeitado(client, seed, criar_pedido, sessao):
    pedido = criar_pedido()
    with sessao() as db:
        db.get(PedidoModel, pedido["id"]).token_entrega = "483920"
        db.commit()

    resp = _validar(client, seed, pedido["id"], "483920")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Pedido não está em rota de entrega"


def test_tentativas_em_excesso_bloqueiam_validacao(client, seed, criar_pedido, sessao):
    pedido_id = _pedido_em_rota(client, seed, criar_pedido, sessao)

    for _ in range(5):
        assert _validar(client, seed, pedido_id, "111111").json()["valido"] is False

    resp = _validar(client, seed, pedido_id, "483920")
    assert resp.status_code == 429

    with sessao() as db:
        assert db.get(PedidoModel, pedido_id).status == "on_delivery"


def test_validacao_exige_funcionario(client, seed, criar_pedido):
    pedido = criar_pedido()

    resp = client.post(
        f"/orders/{pedido['id']}/delivery-token/validate",
        json={"token": pedido["token_entrega"]},
        headers=seed.headers_cliente,
    )
    assert resp.status_code == 401


def test_limitador_por_pedido():
    limitador = LimitadorTentativasToken(max_tentativas=2, janela_segundos=60)

    limitador.registrar_falha(1)
    assert not limitador.bloqueado(1)
    limitador.registrar_falha(1)
    assert limitador.bloqueado(1)
    assert not limitador.bloqueado(2)

    limitador.limpar(1)
    assert not limitador.bloqueado(1)


def test_limitador_descarta_janelas_vazias():
    # Janela negativa: toda falha registrada já está expirada na próxima consulta
    limitador = LimitadorTentativasToken(max_tentativas=2, janela_segundos=-1)

    assert not limitador.bloqueado(9)
    assert limitador._falhas == {}

    assert limitador.registrar_falha(9) == 1
    assert 9 in limitador._falhas

    assert not limitador.bloqueado(9)
    assert limitador._falhas == {}

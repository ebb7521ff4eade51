import asyncio
import json

from app.api.notifications.core.websocket_manager import ConnectionManager
from app.api.notifications.core.ws_events import WSEvents
from app.api.notifications.services.realtime_notifier import RealtimeNotifier


class FakeWebSocket:
    def __init__(self, falhar=False):
        self.enviadas = []
        self.aceito = False
        self.falhar = falhar

    async def accept(self):
        self.aceito = True

    async def send_text(self, texto):
        if self.falhar:
            raise RuntimeError("conexão fechada")
        self.enviadas.append(json.loads(texto))


def _conectar(manager, *sockets):
    async def _todos():
        for ws in sockets:
            await manager.connect(ws)

    asyncio.run(_todos())


def test_envio_para_cliente_registrado():
    manager = ConnectionManager()
    maria, joao = FakeWebSocket(), FakeWebSocket()
    _conectar(manager, maria, joao)
    manager.register_customer(maria, "1")
    manager.register_customer(joao, "2")

    assert asyncio.run(manager.send_to_customer("1", {"oi": "maria"})) is True
    assert maria.enviadas == [{"oi": "maria"}]
    assert joao.enviadas == []
    assert asyncio.run(manager.send_to_customer("99", {"oi": "ninguém"})) is False


def test_reregistro_troca_o_cliente():
    manager = ConnectionManager()
    ws = FakeWebSocket()
    _conectar(manager, ws)
    manager.register_customer(ws, "1")
    manager.register_customer(ws, "2")

    assert not manager.is_customer_connected("1")
    assert manager.is_customer_connected("2")


def test_conexao_quebrada_e_removida():
    manager = ConnectionManager()
    quebrada = FakeWebSocket(falhar=True)
    _conectar(manager, quebrada)
    manager.register_customer(quebrada, "1")
    manager.register_admin(quebrada)

    assert asyncio.run(manager.send_to_admins({"x": 1})) == 0
    assert manager.get_connection_stats()["total_connections"] == 0
    assert not manager.is_customer_connected("1")
    assert not manager.is_admin(quebrada)

    # Desconectar de novo não quebra
    manager.disconnect(quebrada)


def test_notifier_mapeia_status_para_evento():
    manager = ConnectionManager()
    ws = FakeWebSocket()
    _conectar(manager, ws)
    notifier = RealtimeNotifier(manager)

    assert asyncio.run(notifier.notificar_mudanca_status({"order_id": 1, "status": "preparing"})) == 1
    assert asyncio.run(notifier.notificar_mudanca_status({"order_id": 1, "status": "confirmed"})) == 0

    assert len(ws.enviadas) == 1
    evento = ws.enviadas[0]
    assert evento["type"] == "event"
    assert evento["event"] == WSEvents.ORDER_PREPARING
    assert evento["data"]["order_id"] == 1
    assert "timestamp" in evento


def test_notifier_pagamento_aprovado_vai_so_para_o_dono():
    manager = ConnectionManager()
    dono, admin = FakeWebSocket(), FakeWebSocket()
    _conectar(manager, dono, admin)
    manager.register_customer(dono, "7")
    manager.register_admin(admin)
    notifier = RealtimeNotifier(manager)

    assert asyncio.run(notifier.notificar_pagamento_aprovado(7, {"order_id": 3})) is True
    assert asyncio.run(notifier.notificar_novo_pedido_admin({"order_id": 3})) == 1

    assert [e["event"] for e in dono.enviadas] == [WSEvents.PAYMENT_APPROVED]
    assert [e["event"] for e in admin.enviadas] == [WSEvents.NEW_ORDER_FOR_ADMIN]


def test_endpoint_registro_de_cliente(client):
    with client.websocket_connect("/ws/notifications") as ws:
        assert ws.receive_json()["type"] == "connection"

        ws.send_json({"type": "register", "customer_id": 5})
        registrado = ws.receive_json()
        assert registrado["type"] == "registered"
        assert registrado["customer_id"] == "5"

        ws.send_json({"type": "ping"})
        assert ws.receive_json()["type"] == "pong"

        # Cliente não enxerga quem mais está conectado
        ws.send_json({"type": "get_stats"})
        negado = ws.receive_json()
        assert negado == {"type": "error", "message": "Estatísticas restritas ao back-office"}

        ws.send_text("nao e json")
        assert ws.receive_json()["message"] == "Formato de mensagem inválido"

        ws.send_json({"type": "register"})
        assert ws.receive_json()["message"] == "customer_id é obrigatório"

        ws.send_json({"type": "desconhecido"})
        assert ws.receive_json()["type"] == "error"


def test_endpoint_registro_de_back_office(client, seed):
    token = seed.headers_admin["Authorization"].removeprefix("Bearer ")

    with client.websocket_connect("/ws/notifications") as ws:
        ws.receive_json()

        ws.send_json({"type": "register_admin", "token": "invalido"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "get_stats"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "register_admin", "token": token})
        registrado = ws.receive_json()
        assert registrado["type"] == "registered"
        assert registrado["role"] == "admin"
        assert registrado["user_id"] == seed.admin_id

        ws.send_json({"type": "get_stats"})
        stats = ws.receive_json()
        assert stats["type"] == "stats"
        assert stats["data"]["total_admin_connections"] >= 1


def test_estatisticas_exigem_funcionario(client, seed):
    assert client.get("/ws/connections/stats").status_code == 401

    resp = client.get("/ws/connections/stats", headers=seed.headers_admin)
    assert resp.status_code == 200
    assert "total_connections" in resp.json()

import os
import tempfile

# Configuração precisa existir antes de importar a aplicação
os.environ["RUNNING_IN_DOCKER"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "segredo-de-teste"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="pizzaria-logs-")
os.environ["RABBITMQ_ENABLED"] = "false"
os.environ.pop("MERCADOPAGO_ACCESS_TOKEN", None)

from contextlib import contextmanager
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.cadastros.models import ClienteModel, EnderecoModel, UserModel
from app.api.catalogo.models import BordaPizzaModel, ProdutoModel, ProdutoVariacaoModel, RecheioBordaModel
from app.api.pagamentos.models.model_pagamento import StatusPagamento
from app.api.pagamentos.services.service_pix_gateway import CobrancaPix, PIX_CODIGO_OFFLINE, get_pix_gateway
from app.api.pedidos.services.dependencies import get_email_service, get_realtime_notifier
from app.api.pedidos.utils.token_entrega import limitador_token_entrega
from app.core.security import create_access_token
from app.database.db_connection import Base, SessionLocal, engine


class FakeNotifier:
    """Registra os eventos em vez de publicá-los no WebSocket."""

    def __init__(self):
        self.pagamentos_aprovados = []
        self.novos_pedidos_admin = []
        self.mudancas_status = []
        self.falhar = set()

    def _talvez_falhar(self, nome):
        if nome in self.falhar:
            raise RuntimeError(f"falha simulada em {nome}")

    async def notificar_pagamento_aprovado(self, cliente_id, pedido):
        self._talvez_falhar("pagamento_aprovado")
        self.pagamentos_aprovados.append((cliente_id, pedido))
        return True

    async def notificar_novo_pedido_admin(self, pedido):
        self._talvez_falhar("novo_pedido_admin")
        self.novos_pedidos_admin.append(pedido)
        return 1

    async def notificar_mudanca_status(self, pedido):
        self._talvez_falhar("mudanca_status")
        self.mudancas_status.append(pedido)
        return 1


class FakeEmailService:
    def __init__(self):
        self.confirmacoes = []
        self.avisos_admin = []
        self.comprovantes = []
        self.falhar = set()

    def _talvez_falhar(self, nome):
        if nome in self.falhar:
            raise RuntimeError(f"falha simulada em {nome}")

    async def enviar_confirmacao_pedido(self, email, nome, pedido):
        self._talvez_falhar("confirmacao")
        self.confirmacoes.append((email, pedido["order_number"]))
        return True

    async def notificar_novo_pedido(self, numero_pedido, nome_cliente, total):
        self._talvez_falhar("aviso_admin")
        self.avisos_admin.append(numero_pedido)
        return True

    async def enviar_comprovante(self, email, nome, comprovante):
        self._talvez_falhar("comprovante")
        self.comprovantes.append((email, comprovante["numero_comprovante"]))
        return True


class FakeGateway:
    """Gateway PIX em memória."""

    def __init__(self, *, offline=False, erro=None, qr_code_base64="cXJkb2dhdGV3YXk=", status_consulta=None):
        self.offline = offline
        self.erro = erro
        self.qr_code_base64 = qr_code_base64
        self.status_consulta = status_consulta
        self.cobrancas = []
        self.consultas = []

    async def gerar_cobranca(self, *, pedido_id, valor, payer_email, descricao=None, expira_em=None):
        if self.erro:
            raise self.erro
        self.cobrancas.append((pedido_id, valor, payer_email))
        return CobrancaPix(
            gateway_id=f"mp-{pedido_id}-{len(self.cobrancas)}",
            pix_codigo=PIX_CODIGO_OFFLINE,
            status=StatusPagamento.PENDENTE,
            qr_code_base64=self.qr_code_base64,
            ticket_url="https://pix.example/ticket",
        )

    async def consultar_status(self, gateway_id):
        self.consultas.append(gateway_id)
        return self.status_consulta

    async def close(self):
        pass


@pytest.fixture(autouse=True)
def banco_limpo():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limitador_token_entrega._falhas.clear()
    yield
    app.dependency_overrides.clear()


@contextmanager
def _abrir_sessao():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sessao():
    """Abre uma sessão nova para conferir o que foi gravado pelas requisições."""
    return _abrir_sessao


@pytest.fixture
def db_session():
    with _abrir_sessao() as db:
        yield db


@pytest.fixture
def seed():
    """Catálogo mínimo, dois clientes, um endereço e funcionários."""
    with _abrir_sessao() as db:
        cliente = ClienteModel(nome="Maria", email="maria@example.com", telefone="11999990000", super_token="tok-maria")
        outro = ClienteModel(nome="João", email=None, telefone="11999990001", super_token="tok-joao")
        db.add_all([cliente, outro])
        db.flush()

        endereco = EnderecoModel(cliente_id=cliente.id, logradouro="Rua A", numero="10", cidade="São Paulo", estado="SP")
        endereco_outro = EnderecoModel(cliente_id=outro.id, logradouro="Rua B", numero="20", cidade="São Paulo", estado="SP")

        pizza = ProdutoModel(descricao="Pizza Calabresa", is_pizza=True)
        db.add_all([endereco, endereco_outro, pizza])
        db.flush()

        grande = ProdutoVariacaoModel(produto_id=pizza.id, descricao="Grande", preco=Decimal("25.00"))
        media = ProdutoVariacaoModel(produto_id=pizza.id, descricao="Média", preco=Decimal("19.90"))
        borda = BordaPizzaModel(descricao="Borda recheada", preco_adicional=Decimal("5.00"))
        recheio = RecheioBordaModel(descricao="Catupiry", preco=Decimal("3.50"))
        admin = UserModel(username="admin", nome="Admin", type_user="admin")
        motoboy = UserModel(username="motoboy", nome="Motoboy", type_user="entregador")
        db.add_all([grande, media, borda, recheio, admin, motoboy])
        db.commit()

        return SimpleNamespace(
            cliente_id=cliente.id,
            outro_cliente_id=outro.id,
            endereco_id=endereco.id,
            endereco_outro_id=endereco_outro.id,
            produto_id=pizza.id,
            variacao_grande_id=grande.id,
            variacao_media_id=media.id,
            borda_id=borda.id,
            recheio_id=recheio.id,
            admin_id=admin.id,
            motoboy_id=motoboy.id,
            headers_cliente={"X-Super-Token": "tok-maria"},
            headers_outro={"X-Super-Token": "tok-joao"},
            headers_admin={"Authorization": f"Bearer {create_access_token({'sub': admin.id})}"},
            headers_motoboy={"Authorization": f"Bearer {create_access_token({'sub': motoboy.id})}"},
        )


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(notifier, email_service, gateway):
    app.dependency_overrides[get_realtime_notifier] = lambda: notifier
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_pix_gateway] = lambda: gateway
    return TestClient(app)


@pytest.fixture
def criar_pedido(client, seed):
    """Cria um pedido via API e devolve o JSON da resposta."""

    def _criar(quantidade=2, headers=None, **extras):
        item = {
            "produto_id": seed.produto_id,
            "variacao_id": seed.variacao_grande_id,
            "quantidade": quantidade,
        }
        item.update(extras)
        resp = client.post(
            "/orders",
            json={"endereco_id": seed.endereco_id, "itens": [item], "meio_pagamento": "pix"},
            headers=headers or seed.headers_cliente,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _criar

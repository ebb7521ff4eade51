import asyncio

from app.api.notifications.services.email_notification_service import EmailNotificationService


class FakeRabbitMQ:
    """Guarda as mensagens em vez de publicá-las na fila."""

    def __init__(self, resultado=True):
        self.resultado = resultado
        self.publicadas = []

    async def publish_notification(self, channel, dados):
        self.publicadas.append((channel, dados))
        return self.resultado


def _servico(fila, **kwargs):
    async def fabrica():
        return fila

    kwargs.setdefault("admin_email", "cozinha@pizzaria.example")
    return EmailNotificationService(enabled=True, client_factory=fabrica, **kwargs)


def test_confirmacao_de_pedido_vai_para_a_fila():
    fila = FakeRabbitMQ()
    pedido = {"order_number": "PZ-0001", "total": 55.0}

    enviado = asyncio.run(_servico(fila).enviar_confirmacao_pedido("maria@example.com", "Maria", pedido))

    assert enviado is True
    assert fila.publicadas == [
        (
            "email",
            {
                "channel": "email",
                "template": "pedido_confirmado",
                "recipient": "maria@example.com",
                "subject": "Pedido PZ-0001 confirmado",
                "data": {"nome": "Maria", "pedido": pedido},
            },
        )
    ]


def test_aviso_de_novo_pedido_vai_para_o_admin():
    fila = FakeRabbitMQ()

    enviado = asyncio.run(_servico(fila).notificar_novo_pedido("PZ-0002", "João", 72.5))

    assert enviado is True
    canal, mensagem = fila.publicadas[0]
    assert canal == "email"
    assert mensagem["template"] == "novo_pedido_admin"
    assert mensagem["recipient"] == "cozinha@pizzaria.example"
    assert mensagem["subject"] == "Novo pedido PZ-0002"
    assert mensagem["data"] == {"numero_pedido": "PZ-0002", "cliente": "João", "total": 72.5}


def test_comprovante_vai_para_o_cliente():
    fila = FakeRabbitMQ()
    comprovante = {"numero_comprovante": "CMP-77", "valor": 55.0}

    enviado = asyncio.run(_servico(fila).enviar_comprovante("maria@example.com", "Maria", comprovante))

    assert enviado is True
    mensagem = fila.publicadas[0][1]
    assert mensagem["template"] == "comprovante"
    assert mensagem["recipient"] == "maria@example.com"
    assert mensagem["subject"] == "Comprovante CMP-77"
    assert mensagem["data"] == {"nome": "Maria", "comprovante": comprovante}


def test_falha_ao_publicar_devolve_false():
    fila = FakeRabbitMQ(resultado=False)

    enviado = asyncio.run(_servico(fila).enviar_confirmacao_pedido("maria@example.com", "Maria", {}))

    assert enviado is False
    assert len(fila.publicadas) == 1


def test_sem_email_do_admin_nao_publica():
    fila = FakeRabbitMQ()

    enviado = asyncio.run(_servico(fila, admin_email=None).notificar_novo_pedido("PZ-0003", "Ana", 40.0))

    assert enviado is False
    assert fila.publicadas == []


def test_fila_desabilitada_nao_publica():
    fila = FakeRabbitMQ()
    chamadas = []

    async def fabrica():
        chamadas.append(1)
        return fila

    servico = EmailNotificationService(enabled=False, admin_email="cozinha@pizzaria.example", client_factory=fabrica)

    assert asyncio.run(servico.enviar_comprovante("maria@example.com", "Maria", {})) is False
    assert asyncio.run(servico.notificar_novo_pedido("PZ-0004", "Ana", 40.0)) is False
    assert chamadas == []
    assert fila.publicadas == []

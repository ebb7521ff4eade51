import logging
from sqlalchemy import text, quoted_name
from .db_connection import engine, Base, IS_SQLITE, SCHEMAS

logger = logging.getLogger(__name__)


def importar_models():
    # ─── Cadastros ────────────────────────────────────────────
    from app.api.cadastros.models import ClienteModel, EnderecoModel, UserModel  # noqa: F401
    # ─── Catálogo ─────────────────────────────────────────────
    from app.api.catalogo.models import (  # noqa: F401
        ProdutoModel,
        ProdutoVariacaoModel,
        BordaPizzaModel,
        RecheioBordaModel,
    )
    # ─── Pedidos / Pagamentos ─────────────────────────────────
    from app.api.pedidos.models import (  # noqa: F401
        PedidoModel,
        PedidoItemModel,
        PedidoHistoricoModel,
        ComprovanteModel,
    )
    from app.api.pagamentos.models import PagamentoModel  # noqa: F401


def configurar_timezone():
    """Configura o timezone do banco de dados para America/Sao_Paulo"""
    try:
        with engine.begin() as conn:
            conn.execute(text("SET timezone = 'America/Sao_Paulo'"))
            timezone_atual = conn.execute(text("SHOW timezone")).scalar()
            logger.info(f"Timezone do banco configurado: {timezone_atual}")
    except Exception as e:
        logger.warning(f"Erro ao configurar timezone do banco: {e}")


def criar_schemas():
    with engine.begin() as conn:
        for schema in SCHEMAS:
            logger.info(f"Criando/verificando schema: {schema}")
            conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS {quoted_name(schema, quote=True)}'))
    logger.info("Todos os schemas verificados/criados.")


def criar_tabelas():
    importar_models()
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info(f"create_all concluído ({len(Base.metadata.tables)} tabelas garantidas).")


def inicializar_banco():
    logger.info("Iniciando processo de inicialização do banco de dados...")

    if not IS_SQLITE:
        configurar_timezone()
        criar_schemas()

    criar_tabelas()
    logger.info("Banco de dados pronto.")

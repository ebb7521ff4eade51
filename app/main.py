import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from app.core.exception_handlers import (
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from app.utils.logger import logger
from app.config.settings import CORS_ORIGINS, CORS_ALLOW_ALL, BASE_URL as SETTINGS_BASE_URL, ENABLE_DOCS

# ───────────────────────────
# Importar modelos antes das rotas
# Garante que todos os modelos estejam registrados no SQLAlchemy
# antes de qualquer query ser executada
# ───────────────────────────
from app.database.init_db import importar_models
importar_models()

from app.api.pedidos.router.router import api_pedidos
from app.api.pagamentos.router.router import api_pagamentos
from app.api.notifications.router.router import router as notifications_router
from app.api.monitoring.router import router as monitoring_router, router_public as monitoring_router_public

BASE_URL = SETTINGS_BASE_URL or os.getenv("BASE_URL", "http://localhost:8000")
# ──────────────────────────
# Instância FastAPI
# ──────────────────────────
app = FastAPI(
    title="API de Pedidos - Pizzaria",
    version="1.0.0",
    description="Checkout, pagamento PIX, reconciliação de webhooks e acompanhamento de pedidos",
    docs_url=("/swagger" if ENABLE_DOCS else None),
    redoc_url=("/redoc" if ENABLE_DOCS else None),
    openapi_url=("/openapi.json" if ENABLE_DOCS else None),
    servers=[{"url": BASE_URL, "description": "Base URL do ambiente"}],
    redirect_slashes=False  # Evita redirecionamento 307 quando URL não termina com /
)

# ───────────────────────────
# Exception Handlers Globais
# ───────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# ───────────────────────────
# Middlewares
# ───────────────────────────
# Middlewares são executados na ORDEM REVERSA da adição (último adicionado = primeiro executado)
from app.utils.prometheus_metrics import PrometheusMiddleware
app.add_middleware(PrometheusMiddleware)

# - Se CORS_ALLOW_ALL=true => allow_origins=["*"], allow_credentials=False
# - Caso contrário => allow_origins=CORS_ORIGINS (se vazio cai para ["*"]), allow_credentials=True somente quando houver origens explícitas
if CORS_ALLOW_ALL:
    allowed_origins = ["*"]
    allow_credentials = False
else:
    allowed_origins = CORS_ORIGINS or ["*"]
    allow_credentials = bool(CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────────────────
# Startup
# ───────────────────────────
@app.on_event("startup")
async def startup():
    from app.database.init_db import inicializar_banco
    from app.api.notifications.core.rabbitmq_client import get_rabbitmq_client
    from app.config.settings import RABBITMQ_ENABLED

    logger.info("Iniciando API e banco de dados...")
    inicializar_banco()

    if RABBITMQ_ENABLED:
        try:
            await get_rabbitmq_client()
            logger.info("Fila de e-mails (RabbitMQ) conectada.")
        except Exception as e:
            logger.error(f"Erro ao conectar ao RabbitMQ; e-mails não serão enfileirados: {e}")

    logger.info("API iniciada com sucesso.")

# ───────────────────────────
# Shutdown
# ───────────────────────────
@app.on_event("shutdown")
async def shutdown():
    from app.api.notifications.core.rabbitmq_client import close_rabbitmq_client
    from app.api.pagamentos.services.service_pix_gateway import pix_gateway

    logger.info("Encerrando API...")

    try:
        await close_rabbitmq_client()
    except Exception as e:
        logger.error(f"Erro ao encerrar conexão com RabbitMQ: {e}")

    try:
        await pix_gateway.close()
    except Exception as e:
        logger.error(f"Erro ao encerrar cliente do Mercado Pago: {e}")

    logger.info("API encerrada.")

# ───────────────────────────
# Rotas
# ───────────────────────────

@app.get("/")
async def root():
    return {"status": "ok", "message": "API is running"}

@app.get("/health")
async def health():
    return {"status": "healthy"}

# ───────────────────────────
# Monitoring - Monitoramento e Métricas
# ───────────────────────────
app.include_router(monitoring_router_public)  # Métricas públicas (sem auth)
app.include_router(monitoring_router)  # Logs com autenticação

# ───────────────────────────
# Routers
# ───────────────────────────
app.include_router(api_pedidos)
app.include_router(api_pagamentos)
app.include_router(notifications_router)

# ───────────────────────────
# OpenAPI: Segurança Bearer/JWT no Swagger
# ───────────────────────────
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        servers=app.servers,
    )

    components = openapi_schema.get("components", {})
    security_schemes = components.get("securitySchemes", {})
    security_schemes.update({
        "bearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        },
        "superToken": {
            "type": "apiKey",
            "in": "header",
            "name": "X-Super-Token",
        },
    })
    components["securitySchemes"] = security_schemes
    openapi_schema["components"] = components

    openapi_schema["security"] = [{"bearerAuth": []}, {"superToken": []}]

    # Remover exigência de token de endpoints públicos
    public_paths = {"/", "/health", "/api/monitoring/metrics", "/webhook/payment-provider"}
    paths = openapi_schema.get("paths", {})
    for path, methods in paths.items():
        if path in public_paths:
            for method_obj in methods.values():
                method_obj["security"] = []

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi

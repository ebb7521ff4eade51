import os
from decimal import Decimal
from dotenv import load_dotenv
from pathlib import Path

# Carrega o .env manualmente se estiver fora do Docker
if not os.getenv("RUNNING_IN_DOCKER"):
    dotenv_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(dotenv_path=dotenv_path)

# Configuração de conexão
DATABASE_URL = os.getenv("DATABASE_URL")
DB_CONFIG = {
    'database': os.getenv('DB_NAME'),
    'user': os.getenv('DB_USER'),
    'password': os.getenv('DB_PASSWORD'),
    'host': os.getenv('DB_HOST'),
    'port': int(os.getenv('DB_PORT', 5432)),
}

# SSL do banco (opcional)
DB_SSL_MODE = os.getenv('DB_SSL_MODE')  # ex.: require, verify-ca, verify-full

# JWT / Segurança
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 90))

# CORS
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
CORS_ALLOW_ALL = os.getenv("CORS_ALLOW_ALL", "false").lower() in ("1", "true", "yes")

# FastAPI / App
BASE_URL = os.getenv("BASE_URL", "")
ENABLE_DOCS = os.getenv("ENABLE_DOCS", "true").lower() in ("1", "true", "yes")

# Logs
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", str(Path(__file__).resolve().parents[1] / "logs"))

# Mercado Pago
MERCADOPAGO_ACCESS_TOKEN = os.getenv("MERCADOPAGO_ACCESS_TOKEN")
MERCADOPAGO_BASE_URL = os.getenv("MERCADOPAGO_BASE_URL", "https://api.mercadopago.com")
MERCADOPAGO_TIMEOUT_SECONDS = int(os.getenv("MERCADOPAGO_TIMEOUT_SECONDS", 5))
MERCADOPAGO_WEBHOOK_SECRET = os.getenv("MERCADOPAGO_WEBHOOK_SECRET")
PIX_EXPIRATION_MINUTES = int(os.getenv("PIX_EXPIRATION_MINUTES", 30))

# Pedidos
DELIVERY_FEE = Decimal(os.getenv("DELIVERY_FEE", "5.00"))
DEFAULT_ESTIMATED_TIME_MINUTES = int(os.getenv("DEFAULT_ESTIMATED_TIME_MINUTES", 45))
DELIVERY_TOKEN_MAX_ATTEMPTS = int(os.getenv("DELIVERY_TOKEN_MAX_ATTEMPTS", 5))
DELIVERY_TOKEN_WINDOW_SECONDS = int(os.getenv("DELIVERY_TOKEN_WINDOW_SECONDS", 900))

# RabbitMQ (fila de e-mails)
RABBITMQ_ENABLED = os.getenv("RABBITMQ_ENABLED", "false").lower() in ("1", "true", "yes")
RABBITMQ_HOST = os.getenv("RABBITMQ_HOST", "localhost")
RABBITMQ_PORT = int(os.getenv("RABBITMQ_PORT", 5672))
RABBITMQ_USERNAME = os.getenv("RABBITMQ_USERNAME", "guest")
RABBITMQ_PASSWORD = os.getenv("RABBITMQ_PASSWORD", "guest")
RABBITMQ_VHOST = os.getenv("RABBITMQ_VHOST", "/")

# E-mail de operações (aviso de novos pedidos)
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")

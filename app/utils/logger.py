"""
Logger central da aplicação.

Uso: `from app.utils.logger import logger`.
Escreve no console e em `logs/app.log` (arquivo rotativo lido por /api/monitoring/logs)
e contabiliza cada mensagem no contador Prometheus `log_messages_total`.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config.settings import LOG_DIR, LOG_LEVEL
from app.utils.prometheus_metrics import record_log

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class PrometheusLogHandler(logging.Handler):
    """Conta mensagens de log por nível."""

    def emit(self, record: logging.LogRecord) -> None:
        record_log(record.levelname)


def _build_logger() -> logging.Logger:
    app_logger = logging.getLogger("app")
    if app_logger.handlers:
        return app_logger

    app_logger.setLevel(LOG_LEVEL)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    app_logger.addHandler(console)

    try:
        log_dir = Path(LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "app.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)
    except OSError as e:
        app_logger.warning(f"Não foi possível criar o arquivo de log em {LOG_DIR}: {e}")

    app_logger.addHandler(PrometheusLogHandler())
    return app_logger


logger = _build_logger()

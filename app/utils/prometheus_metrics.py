"""
Módulo de métricas Prometheus para monitoramento da aplicação.
"""
import re
from time import time
from typing import Callable

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Métricas de requisições HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total de requisições HTTP',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'Duração das requisições HTTP em segundos',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)

http_errors_total = Counter(
    'http_errors_total',
    'Total de erros HTTP',
    ['method', 'endpoint', 'status_code']
)

active_connections = Gauge(
    'active_connections',
    'Número de requisições HTTP em andamento'
)

websocket_connections = Gauge(
    'websocket_connections',
    'Conexões WebSocket abertas'
)

# Métricas de logs
log_messages_total = Counter(
    'log_messages_total',
    'Total de mensagens de log',
    ['level']
)

# Métricas de pagamento
webhook_events_total = Counter(
    'webhook_events_total',
    'Webhooks de pagamento recebidos, por resultado',
    ['result']
)

payment_approvals_total = Counter(
    'payment_approvals_total',
    'Pagamentos aprovados (transição efetiva para approved)'
)

side_effect_failures_total = Counter(
    'side_effect_failures_total',
    'Falhas em efeitos colaterais isolados (e-mail, WebSocket, comprovante...)',
    ['step']
)

pix_generation_duration_seconds = Histogram(
    'pix_generation_duration_seconds',
    'Duração da geração de cobrança PIX no gateway',
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware para coletar métricas Prometheus das requisições HTTP."""

    async def dispatch(self, request: Request, call_next: Callable):
        # Ignora o endpoint de métricas para evitar loop
        if request.url.path.endswith("/metrics"):
            return await call_next(request)

        method = request.method
        normalized_endpoint = self._normalize_endpoint(request.url.path)

        start_time = time()
        active_connections.inc()

        try:
            response = await call_next(request)
            status_code = response.status_code

            http_requests_total.labels(
                method=method,
                endpoint=normalized_endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=normalized_endpoint
            ).observe(time() - start_time)

            # Registra erros (4xx e 5xx)
            if status_code >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=normalized_endpoint,
                    status_code=status_code
                ).inc()

            return response

        except Exception:
            http_requests_total.labels(
                method=method,
                endpoint=normalized_endpoint,
                status_code=500
            ).inc()
            http_errors_total.labels(
                method=method,
                endpoint=normalized_endpoint,
                status_code=500
            ).inc()
            raise
        finally:
            active_connections.dec()

    def _normalize_endpoint(self, endpoint: str) -> str:
        """
        Normaliza endpoints removendo IDs para evitar alta cardinalidade.
        Ex: /orders/123 -> /orders/{id}
        """
        endpoint = re.sub(r'/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '/{uuid}', endpoint)
        endpoint = re.sub(r'/\d+', '/{id}', endpoint)
        return endpoint


def get_metrics():
    """Retorna as métricas no formato Prometheus."""
    return generate_latest()


def record_log(level: str):
    """Registra uma mensagem de log nas métricas."""
    log_messages_total.labels(level=level).inc()

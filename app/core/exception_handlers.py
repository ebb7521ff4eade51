"""
Exception handlers globais para capturar e logar erros da API.
"""
import json
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.utils.logger import logger


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Erros de validação (422) do FastAPI/Pydantic, com os campos inválidos nos logs.
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "type": error.get("type", "unknown"),
            "message": error.get("msg", "Erro de validação"),
        })

    logger.error(
        f"[VALIDATION ERROR 422] {request.method} {request.url.path} - "
        f"{json.dumps(error_details, ensure_ascii=False)}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": error_details,
            "path": request.url.path,
        }
    )


async def http_exception_handler(request: Request, exc):
    status_code = exc.status_code
    log_message = (
        f"[HTTP ERROR {status_code}] {request.method} {request.url.path} - "
        f"Detalhes: {exc.detail}"
    )
    if status_code >= 500:
        logger.error(log_message)
    else:
        logger.warning(log_message)

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.detail,
            "path": request.url.path,
        },
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Exceções não tratadas: loga o traceback completo e devolve 500 genérico.
    """
    logger.error(
        f"[UNHANDLED EXCEPTION] {request.method} {request.url.path} - "
        f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Erro interno do servidor",
            "path": request.url.path,
        }
    )

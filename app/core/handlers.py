import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.errors import ProxyError, error_payload

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /health",
    "POST /sftp/test-connection",
    "POST /sftp/list-folders",
    "POST /sftp/list",
    "POST /sftp/download",
]


async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    if loc and first.get("type") != "json_invalid":
        msg = f"Cuerpo inválido: {loc} {first.get('msg', '')}".strip()
    else:
        msg = "Cuerpo JSON inválido"
    logger.warning("Request inválido | path=%s errors=%s", request.url.path, errors)
    return JSONResponse(status_code=400, content={"success": False, "error": msg})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Ruta inexistente (o método no soportado) -> 404 con la lista de rutas
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "Endpoint no encontrado",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def unhandled_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Error interno del servidor", "message": str(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    # Último recurso: errores fuera de RequestContextMiddleware
    logger.exception("Error no controlado | path=%s", request.url.path)
    return unhandled_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

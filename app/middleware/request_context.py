import logging
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from app.core.handlers import unhandled_error_response

logger = logging.getLogger(__name__)

class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        operation_id = request.headers.get("x-operation-id") or str(uuid.uuid4())
        request.state.operation_id = operation_id
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # El 500 se arma acá para que pase por CORS y lleve el operation id
            logger.exception(
                "Error no controlado | path=%s operation_id=%s", request.url.path, operation_id
            )
            response = unhandled_error_response(exc)
        response.headers["x-operation-id"] = operation_id
        logger.info(
            "%s %s -> %s | operation_id=%s",
            request.method, request.url.path, response.status_code, operation_id,
        )
        return response

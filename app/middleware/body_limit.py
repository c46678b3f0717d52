import logging
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

class BodyLimitMiddleware:
    """
    Rechaza con 413 los cuerpos que superan el límite. Se cuenta lo que
    realmente llega (sirve también para Transfer-Encoding: chunked); el
    cuerpo se lee hasta el límite y luego se reentrega a la app.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_bytes:
            await self._reject(scope, receive, send, length)
            return

        messages: list[Message] = []
        total = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            total += len(message.get("body", b""))
            if total > self.max_bytes:
                await self._reject(scope, receive, send, f">{total}")
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: str):
        logger.warning("Cuerpo demasiado grande | path=%s bytes=%s", scope.get("path"), size)
        response = JSONResponse(
            status_code=413,
            content={"success": False, "error": "Cuerpo de la petición demasiado grande"},
        )
        await response(scope, receive, send)

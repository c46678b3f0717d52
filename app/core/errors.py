"""
Errores del proxy y su traducción a cuerpo JSON.

- MissingParameterError: falta un campo obligatorio (400, nunca toca el SFTP)
- UpstreamError: falla de conexión / listado / descarga SFTP (500)
- ArchiveError: ZIP corrupto o no soportado (500)
"""
from typing import Optional


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class MissingParameterError(ProxyError):
    status_code = 400


class UpstreamError(ProxyError):
    status_code = 500


class ArchiveError(ProxyError):
    status_code = 500


def error_payload(exc: ProxyError) -> dict:
    """
    Único punto donde un error se convierte en respuesta.
    El texto del servidor remoto se reenvía tal cual.
    """
    body = {"success": False, "error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return body

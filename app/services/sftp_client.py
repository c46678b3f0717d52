import logging
import socket
import stat
import time
from dataclasses import dataclass
from typing import List, Optional

import paramiko
from app.core.errors import UpstreamError
from app.core.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionParams:
    host: str
    username: str
    password: str
    port: int = 22


@dataclass(frozen=True)
class RemoteEntry:
    name: str
    size: int
    modify_time: int  # ms desde epoch
    kind: str  # directory | file | symlink | other


def _kind_from_mode(mode: Optional[int]) -> str:
    if mode is None:
        return "other"
    if stat.S_ISDIR(mode):
        return "directory"
    if stat.S_ISREG(mode):
        return "file"
    if stat.S_ISLNK(mode):
        return "symlink"
    return "other"


class SFTPSession:
    """
    Sesión SFTP de un solo request. Expone solo list/get/close para que
    el resto de la app no dependa de tipos de paramiko.

    Uso:
        with open_session(params) as session:
            entries = session.list("/upload")
    """

    def __init__(self, transport: paramiko.Transport, sftp: paramiko.SFTPClient):
        self._transport = transport
        self._sftp = sftp

    def __enter__(self) -> "SFTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @classmethod
    def connect(cls, params: ConnectionParams, timeout: float) -> "SFTPSession":
        sock = None
        transport = None
        try:
            sock = socket.create_connection((params.host, params.port), timeout=timeout)
            transport = paramiko.Transport(sock)
            transport.banner_timeout = timeout
            transport.handshake_timeout = timeout
            transport.auth_timeout = timeout
            transport.connect(username=params.username, password=params.password)
            sftp = paramiko.SFTPClient.from_transport(transport)
        except Exception as e:
            if transport is not None:
                transport.close()
            elif sock is not None:
                sock.close()
            raise UpstreamError(str(e)) from e
        logger.debug("Sesión SFTP abierta | host=%s port=%s", params.host, params.port)
        return cls(transport, sftp)

    def list(self, path: str) -> List[RemoteEntry]:
        try:
            attrs = self._sftp.listdir_attr(path)
        except Exception as e:
            raise UpstreamError(str(e)) from e
        return [
            RemoteEntry(
                name=a.filename,
                size=a.st_size or 0,
                modify_time=int(a.st_mtime or 0) * 1000,
                kind=_kind_from_mode(a.st_mode),
            )
            for a in attrs
        ]

    def get(self, path: str) -> bytes:
        try:
            with self._sftp.open(path, 'rb') as f:
                return f.read()
        except Exception as e:
            raise UpstreamError(str(e)) from e

    def close(self) -> None:
        # Errores al cerrar no deben tapar el error original
        try:
            self._sftp.close()
        except Exception as e:
            logger.warning("Error cerrando cliente SFTP: %s", e)
        try:
            self._transport.close()
        except Exception as e:
            logger.warning("Error cerrando transporte: %s", e)


def open_session(params: ConnectionParams, retries: int = 0) -> SFTPSession:
    """
    Abre una sesión nueva con timeout de conexión acotado.
    `retries` es la cantidad de reintentos extra (0 = un solo intento).
    """
    timeout = settings.SFTP_CONNECT_TIMEOUT_SECONDS
    attempt = 0
    while True:
        try:
            return SFTPSession.connect(params, timeout)
        except UpstreamError as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.info(
                "Reintentando conexión SFTP | host=%s intento=%d error=%s",
                params.host, attempt + 1, e.message,
            )
            time.sleep(settings.SFTP_RETRY_DELAY_SECONDS)

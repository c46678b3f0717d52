import io
import zipfile
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.errors import UpstreamError
from app.main import app
from app.services import sftp_proxy
from app.services.sftp_client import RemoteEntry


def ms_ago(**delta) -> int:
    return int((datetime.now(timezone.utc) - timedelta(**delta)).timestamp() * 1000)


def entry(name: str, kind: str = "file", size: int = 10, modify_time: int | None = None) -> RemoteEntry:
    return RemoteEntry(
        name=name,
        size=size,
        modify_time=modify_time if modify_time is not None else ms_ago(hours=1),
        kind=kind,
    )


def make_zip(*members) -> bytes:
    """members: pares (nombre, bytes) en el orden en que se escriben."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in members:
            zf.writestr(name, data)
    return buf.getvalue()


def mark_encrypted(data: bytes) -> bytes:
    """Activa el bit de cifrado (0x1) en la cabecera local y central de la primera entrada."""
    buf = bytearray(data)
    for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
        pos = buf.find(signature)
        buf[pos + flag_offset] |= 0x01
    return bytes(buf)


class FakeSession:
    def __init__(self, server: "FakeSFTPServer"):
        self.server = server
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def list(self, path):
        self.server.listed.append(path)
        if self.server.list_error:
            raise self.server.list_error
        return list(self.server.entries.get(path, []))

    def get(self, path):
        if self.server.get_error:
            raise self.server.get_error
        if path not in self.server.files:
            raise UpstreamError(f"_get: No such file: {path}")
        return self.server.files[path]

    def close(self):
        self.closed = True


class FakeSFTPServer:
    """Reemplaza open_session: registra conexiones y sesiones abiertas."""

    def __init__(self):
        self.entries = {}
        self.files = {}
        self.connect_error = None
        self.list_error = None
        self.get_error = None
        self.connects = []
        self.sessions = []
        self.listed = []

    def open_session(self, params, retries=0):
        self.connects.append((params, retries))
        if self.connect_error:
            raise self.connect_error
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    @property
    def all_closed(self) -> bool:
        return all(s.closed for s in self.sessions)


@pytest.fixture
def fake_sftp(monkeypatch):
    server = FakeSFTPServer()
    monkeypatch.setattr(sftp_proxy, "open_session", server.open_session)
    return server


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def creds():
    return {"host": "sftp.example.com", "username": "demo", "password": "secret"}

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from app.core.settings import get_settings
from app.services.archive_service import ArchiveService
from app.services.sftp_client import ConnectionParams, RemoteEntry, open_session

settings = get_settings()
logger = logging.getLogger(__name__)

PSEUDO_ENTRIES = (".", "..")


@dataclass(frozen=True)
class DownloadedFile:
    data: bytes
    filename: str
    original_path: str
    was_unzipped: bool


def extension_of(name: str) -> str:
    # Sin "." se usa el nombre entero como extensión
    return name.rsplit(".", 1)[-1].lower()


def select_folders(entries: List[RemoteEntry]) -> List[RemoteEntry]:
    return [e for e in entries if e.kind == "directory" and e.name not in PSEUDO_ENTRIES]


def select_files(
    entries: List[RemoteEntry],
    max_age_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[RemoteEntry]:
    """
    Archivos regulares (sin . ni ..). Con max_age_days se descartan los
    modificados antes de now - max_age_days; el corte es inclusivo.
    """
    files = [e for e in entries if e.kind == "file" and e.name not in PSEUDO_ENTRIES]
    if max_age_days:
        now = now or datetime.now(timezone.utc)
        cutoff_ms = int((now - timedelta(days=max_age_days)).timestamp() * 1000)
        files = [e for e in files if e.modify_time >= cutoff_ms]
    return files


class SFTPProxyService:
    @staticmethod
    def test_connection(params: ConnectionParams) -> None:
        with open_session(params, retries=settings.SFTP_TEST_RETRIES):
            logger.info("Conexión SFTP OK | host=%s port=%s", params.host, params.port)

    @staticmethod
    def list_folders(params: ConnectionParams, path: str) -> List[RemoteEntry]:
        with open_session(params) as session:
            folders = select_folders(session.list(path))
        logger.info("Carpetas encontradas | host=%s path=%s count=%d", params.host, path, len(folders))
        return folders

    @staticmethod
    def list_files(
        params: ConnectionParams,
        remote_path: str,
        max_age_days: Optional[int] = None,
        assureur: Optional[str] = None,
    ) -> List[RemoteEntry]:
        with open_session(params) as session:
            files = select_files(session.list(remote_path), max_age_days)
        logger.info(
            "Archivos encontrados | assureur=%s path=%s count=%d",
            assureur or "Unknown", remote_path, len(files),
        )
        return files

    @staticmethod
    def download(
        params: ConnectionParams,
        remote_path: str,
        needs_unzip: bool = False,
        zip_password: Optional[str] = None,
    ) -> DownloadedFile:
        with open_session(params) as session:
            raw = session.get(remote_path)
        logger.info("Archivo descargado | path=%s bytes=%d", remote_path, len(raw))

        data = raw
        filename = remote_path.split("/")[-1]
        was_unzipped = False

        if needs_unzip and ArchiveService.is_zip_name(filename):
            logger.info(
                "Descomprimiendo | file=%s password=%s",
                filename, "sí (ignorado)" if zip_password else "no",
            )
            extracted = ArchiveService.extract_first_entry(raw)
            if extracted is not None:
                data, filename = extracted
                was_unzipped = True
                logger.info("Entrada extraída | file=%s bytes=%d", filename, len(data))

        return DownloadedFile(
            data=data,
            filename=filename,
            original_path=remote_path,
            was_unzipped=was_unzipped,
        )

import base64
import logging
from fastapi import APIRouter
from opentelemetry.trace import get_current_span
from app.core.errors import UpstreamError
from app.core.settings import get_settings
from app.schemas.sftp import (
    ConnectionTestRequest, ConnectionTestResponse,
    ListFoldersRequest, FolderListResponse, Folder,
    ListFilesRequest, FileListResponse, RemoteFile,
    DownloadRequest, DownloadResponse,
)
from app.services.sftp_proxy import SFTPProxyService, extension_of

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sftp", tags=["SFTP"])
settings = get_settings()

CONNECTION_HINT = "Verificá las credenciales y que el servidor SFTP sea accesible"


@router.post("/test-connection", response_model=ConnectionTestResponse)
def test_connection(payload: ConnectionTestRequest):
    payload.require("host", "username", "password")
    params = payload.connection_params(settings.SFTP_DEFAULT_PORT)
    logger.info("Test de conexión | host=%s port=%s", params.host, params.port)

    try:
        SFTPProxyService.test_connection(params)
    except UpstreamError as e:
        logger.error("Test de conexión falló | host=%s error=%s", params.host, e.message)
        raise UpstreamError(e.message, details=CONNECTION_HINT) from e

    return ConnectionTestResponse(
        message="Conexión SFTP establecida correctamente",
        host=params.host,
        port=params.port,
    )


@router.post("/list-folders", response_model=FolderListResponse)
def list_folders(payload: ListFoldersRequest):
    payload.require("host", "username", "password")
    params = payload.connection_params(settings.SFTP_DEFAULT_PORT)
    path = payload.base_path or "/"
    logger.info("Listado de carpetas | host=%s path=%s", params.host, path)

    try:
        entries = SFTPProxyService.list_folders(params, path)
    except UpstreamError as e:
        logger.error("Listado de carpetas falló | host=%s error=%s", params.host, e.message)
        raise

    folders = [Folder(name=e.name, modify_time=e.modify_time, size=e.size) for e in entries]
    return FolderListResponse(folders=folders, count=len(folders), path=path)


@router.post("/list", response_model=FileListResponse)
def list_files(payload: ListFilesRequest):
    payload.require("host", "username", "password", "remote_path")
    params = payload.connection_params(settings.SFTP_DEFAULT_PORT)
    logger.info(
        "Listado de archivos | assureur=%s path=%s host=%s",
        payload.assureur or "Unknown", payload.remote_path, params.host,
    )

    try:
        entries = SFTPProxyService.list_files(
            params, payload.remote_path, payload.max_age_in_days, payload.assureur
        )
    except UpstreamError as e:
        logger.error("Listado de archivos falló | path=%s error=%s", payload.remote_path, e.message)
        raise

    # fullPath se concatena tal cual, sin normalizar barras dobles
    files = [
        RemoteFile(
            name=e.name,
            size=e.size,
            modify_time=e.modify_time,
            type=extension_of(e.name),
            full_path=f"{payload.remote_path}/{e.name}",
        )
        for e in entries
    ]
    return FileListResponse(
        files=files,
        count=len(files),
        remote_path=payload.remote_path,
        assureur=payload.assureur,
    )


@router.post("/download", response_model=DownloadResponse)
def download(payload: DownloadRequest):
    payload.require("host", "username", "password", "remote_path")
    params = payload.connection_params(settings.SFTP_DEFAULT_PORT)
    span = get_current_span()
    logger.info("Descarga | host=%s path=%s", params.host, payload.remote_path)

    try:
        result = SFTPProxyService.download(
            params,
            payload.remote_path,
            needs_unzip=bool(payload.needs_unzip),
            zip_password=payload.zip_password,
        )
    except UpstreamError as e:
        logger.error("Descarga falló | path=%s error=%s", payload.remote_path, e.message)
        raise

    logger.info(
        "Descarga lista | file=%s size=%sB unzipped=%s trace_id=%s",
        result.filename, len(result.data), result.was_unzipped,
        (format(span.get_span_context().trace_id, '032x') if span.get_span_context().trace_id else None),
    )
    return DownloadResponse(
        data=base64.b64encode(result.data).decode("ascii"),
        filename=result.filename,
        size=len(result.data),
        original_path=result.original_path,
        was_unzipped=result.was_unzipped,
    )

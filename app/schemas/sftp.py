from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

from app.core.errors import MissingParameterError
from app.services.sftp_client import ConnectionParams


class SFTPRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    host: Optional[str] = Field(None, description="Host del servidor SFTP")
    port: Optional[int] = Field(None, description="Puerto SSH (por defecto 22)")
    username: Optional[str] = None
    password: Optional[str] = None

    def require(self, *fields: str) -> None:
        """
        Valida presencia de campos obligatorios (vacío cuenta como ausente).
        El mensaje lista todos los obligatorios, con su nombre en el JSON.
        """
        if all(getattr(self, f) for f in fields):
            return
        labels = [type(self).model_fields[f].alias or f for f in fields]
        required = ", ".join(labels[:-1]) + " y " + labels[-1] if len(labels) > 1 else labels[0]
        raise MissingParameterError(f"Parámetros faltantes: {required} son obligatorios")

    def connection_params(self, default_port: int = 22) -> ConnectionParams:
        return ConnectionParams(
            host=self.host,
            port=self.port or default_port,
            username=self.username,
            password=self.password,
        )


class ConnectionTestRequest(SFTPRequest):
    pass


class ListFoldersRequest(SFTPRequest):
    base_path: Optional[str] = Field(None, alias="basePath", description="Carpeta base, por defecto /")


class ListFilesRequest(SFTPRequest):
    remote_path: Optional[str] = Field(None, alias="remotePath")
    assureur: Optional[str] = Field(None, description="Etiqueta opaca del llamador, solo log/eco")
    max_age_in_days: Optional[int] = Field(None, alias="maxAgeInDays")


class DownloadRequest(SFTPRequest):
    remote_path: Optional[str] = Field(None, alias="remotePath")
    needs_unzip: Optional[bool] = Field(None, alias="needsUnzip")
    # Aceptado pero sin uso: ZIPs cifrados no soportados
    zip_password: Optional[str] = Field(None, alias="zipPassword")


class Folder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    modify_time: int = Field(..., alias="modifyTime")
    size: int


class RemoteFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int
    modify_time: int = Field(..., alias="modifyTime")
    type: str
    full_path: str = Field(..., alias="fullPath")


class ConnectionTestResponse(BaseModel):
    success: bool = True
    message: str
    host: str
    port: int


class FolderListResponse(BaseModel):
    success: bool = True
    folders: List[Folder]
    count: int
    path: str


class FileListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    files: List[RemoteFile]
    count: int
    remote_path: str = Field(..., alias="remotePath")
    assureur: Optional[str] = None


class DownloadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: str = Field(..., description="Contenido en base64")
    filename: str
    size: int
    original_path: str = Field(..., alias="originalPath")
    was_unzipped: bool = Field(..., alias="wasUnzipped")

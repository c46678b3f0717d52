import io
import logging
import zipfile
from typing import Optional, Tuple

from app.core.errors import ArchiveError

logger = logging.getLogger(__name__)

UNZIP_ERROR_MESSAGE = "Error al descomprimir el archivo"


class ArchiveService:
    @staticmethod
    def is_zip_name(filename: str) -> bool:
        return filename.lower().endswith(".zip")

    @staticmethod
    def extract_first_entry(data: bytes) -> Optional[Tuple[bytes, str]]:
        """
        Devuelve (contenido, ruta interna) de la PRIMERA entrada del ZIP,
        en el orden propio del archivo (sin ordenar). Las demás entradas
        se ignoran. ZIP vacío -> None.

        ZIPs cifrados no están soportados: zipfile falla y se reporta
        como ArchiveError.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                entries = zf.infolist()
                if not entries:
                    logger.warning("ZIP vacío, se devuelve el archivo original")
                    return None
                first = entries[0]
                if len(entries) > 1:
                    logger.debug("ZIP con %d entradas, solo se extrae %s", len(entries), first.filename)
                return zf.read(first), first.filename
        except Exception as e:
            logger.error("Error descomprimiendo ZIP: %s", e)
            raise ArchiveError(UNZIP_ERROR_MESSAGE, details=str(e)) from e

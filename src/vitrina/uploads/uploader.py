"""
AssetUploader: sube un archivo al blob store.

No reintenta: si la subida falla, el error sube tal cual y el reintento
queda en manos de quien llama.
"""

from typing import Optional

import structlog

from vitrina.errors import UnsupportedFileError
from vitrina.models import ImageFile
from vitrina.storage import BlobStore, ProgressCallback

logger = structlog.get_logger()


class AssetUploader:
    """Sube una imagen al store configurado."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def upload(
        self,
        file: ImageFile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Sube un archivo.

        Args:
            file: Imagen a subir
            on_progress: Recibe la fracción transferida (0.0-1.0)

        Returns:
            URL pública del archivo

        Raises:
            UnsupportedFileError: Si el archivo no es una imagen
            TransportError: Si falla la transferencia
        """
        if not file.is_image:
            raise UnsupportedFileError(f"{file.name} is not a supported image")

        logger.debug(
            "Subiendo imagen",
            store=self.store.store_name,
            file=file.name,
            size=file.size,
        )
        return await self.store.put(file, on_progress=on_progress)

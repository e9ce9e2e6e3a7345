"""
Blob store sobre Supabase Storage.

Sube las imágenes de los listings a un bucket público y resuelve su URL.
"""

import time
from typing import Optional

import structlog
from supabase import AsyncClient, acreate_client

from vitrina.config import get_settings
from vitrina.errors import TransportError
from vitrina.models import ImageFile
from vitrina.storage.base import BlobStore, ProgressCallback

logger = structlog.get_logger()


class SupabaseBlobStore(BlobStore):
    """Wrapper del storage de Supabase con la interfaz de BlobStore."""

    store_name = "supabase"

    def __init__(
        self,
        client: Optional[AsyncClient] = None,
        bucket: Optional[str] = None,
    ):
        self._client = client
        self.bucket = bucket or get_settings().storage_bucket

    async def _get_client(self) -> AsyncClient:
        """
        Crea el cliente de Supabase la primera vez que se usa.

        Raises:
            ValueError: Si las credenciales no están configuradas
        """
        if self._client is not None:
            return self._client

        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError(
                "SUPABASE_URL y SUPABASE_KEY son requeridos. "
                "Configura las variables de entorno."
            )

        # Usar service key si está disponible para operaciones admin
        key = settings.supabase_service_key or settings.supabase_key

        self._client = await acreate_client(settings.supabase_url, key)
        logger.info("Cliente de Supabase inicializado", url=settings.supabase_url)
        return self._client

    @staticmethod
    def object_key(file: ImageFile) -> str:
        """Nombre del objeto en el bucket: timestamp en ms + nombre original."""
        return f"{int(time.time() * 1000)}{file.name}"

    async def put(
        self,
        file: ImageFile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        client = await self._get_client()
        bucket = client.storage.from_(self.bucket)
        key = self.object_key(file)

        if on_progress:
            on_progress(0.0)

        try:
            await bucket.upload(
                path=key,
                file=file.data,
                file_options={"content-type": file.content_type},
            )
            url = await bucket.get_public_url(key)
        except Exception as e:
            logger.error(
                "Error subiendo imagen",
                bucket=self.bucket,
                file=file.name,
                error=str(e),
            )
            raise TransportError(f"Could not upload {file.name}: {e}") from e

        # Supabase no expone progreso parcial: sólo inicio y fin
        if on_progress:
            on_progress(1.0)

        logger.debug("Imagen subida", bucket=self.bucket, key=key)
        return url

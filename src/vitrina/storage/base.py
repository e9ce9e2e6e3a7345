"""
Abstracción del blob store.

Permite cambiar el backend de almacenamiento (Supabase, fakes en tests)
sin tocar el uploader.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from vitrina.models import ImageFile

ProgressCallback = Callable[[float], None]


class BlobStore(ABC):
    """Clase base para stores de imágenes."""

    store_name: str = "base"

    @abstractmethod
    async def put(
        self,
        file: ImageFile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Sube un archivo y resuelve su URL pública.

        Args:
            file: Archivo a subir
            on_progress: Callback con la fracción transferida (0.0-1.0)

        Returns:
            URL pública del archivo subido

        Raises:
            TransportError: Si falla la transferencia o el store la rechaza
        """
        pass

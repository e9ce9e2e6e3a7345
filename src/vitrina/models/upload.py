"""
Modelos de subida de imágenes.

Un UploadTask vive sólo mientras dura un batch de GalleryAssembler.
"""

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class ImageFile:
    """Archivo seleccionado por el usuario, ya leído en memoria."""

    name: str
    content_type: str
    data: bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


class UploadStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class UploadTask:
    """Estado de la subida de un archivo dentro de un batch."""

    file: ImageFile
    progress_fraction: float = 0.0
    status: UploadStatus = UploadStatus.PENDING
    url: Optional[str] = None
    reason: Optional[str] = None

    @property
    def settled(self) -> bool:
        return self.status is not UploadStatus.PENDING

    def report_progress(self, fraction: float) -> float:
        """
        Registra progreso. Nunca retrocede y queda acotado a [0, 1].

        Returns:
            El progreso efectivo luego de aplicar el reporte
        """
        fraction = min(max(float(fraction), 0.0), 1.0)
        if fraction > self.progress_fraction:
            self.progress_fraction = fraction
        return self.progress_fraction

    def succeed(self, url: str) -> None:
        self.status = UploadStatus.SUCCEEDED
        self.url = url
        self.progress_fraction = 1.0

    def fail(self, reason: str) -> None:
        self.status = UploadStatus.FAILED
        self.reason = reason

"""
GalleryAssembler: coordina la subida concurrente de un batch de imágenes.

Un batch se aplica entero o no se aplica: si falla cualquier archivo no se
agrega ninguna URL a la galería.
"""

import asyncio
from typing import Callable, Iterable, Optional

import structlog

from vitrina.config import MAX_GALLERY_SIZE
from vitrina.errors import BusyError, CapacityError, OutOfRangeError, UploadError
from vitrina.models import ImageFile, ListingDraft, UploadStatus, UploadTask
from vitrina.uploads.uploader import AssetUploader

logger = structlog.get_logger()

# (índice del archivo en el batch, progreso de ese archivo)
BatchProgressCallback = Callable[[int, float], None]

CAPACITY_MESSAGE = "You can only upload {limit} images per listing"
UPLOAD_FAILED_MESSAGE = "Image upload failed (2 mb max per image)"
BUSY_MESSAGE = "Images are still uploading"


class GalleryAssembler:
    """Sube batches de imágenes y los agrega a la galería del draft."""

    def __init__(
        self,
        draft: ListingDraft,
        uploader: AssetUploader,
        max_images: int = MAX_GALLERY_SIZE,
        on_progress: Optional[BatchProgressCallback] = None,
    ):
        self.draft = draft
        self.uploader = uploader
        self.max_images = max_images
        self.on_progress = on_progress
        self.uploading = False

    @property
    def size(self) -> int:
        return len(self.draft.image_urls)

    async def submit_batch(self, files: Iterable[ImageFile]) -> list[UploadTask]:
        """
        Sube todos los archivos en paralelo y agrega sus URLs a la galería.

        La capacidad se controla antes de arrancar cualquier subida. Las URLs
        se agregan en el orden de selección, no en el de finalización.

        Returns:
            Los tasks del batch, en el orden de los archivos

        Raises:
            BusyError: Si ya hay un batch en curso
            CapacityError: Si el batch está vacío o supera el máximo
            UploadError: Si falló al menos un archivo (no se agrega ninguno)
        """
        files = list(files)
        if self.uploading:
            raise BusyError(BUSY_MESSAGE)

        current = self.size
        if not files or current + len(files) > self.max_images:
            logger.info(
                "Batch rechazado por capacidad",
                current=current,
                requested=len(files),
                limit=self.max_images,
            )
            raise CapacityError(
                CAPACITY_MESSAGE.format(limit=self.max_images),
                current=current,
                requested=len(files),
                limit=self.max_images,
            )

        tasks = [UploadTask(file=file) for file in files]
        self.uploading = True
        logger.info("Subiendo batch de imágenes", files=len(tasks), current=current)
        try:
            await asyncio.gather(
                *(self._run(index, task) for index, task in enumerate(tasks))
            )
        finally:
            self.uploading = False

        failed = [task for task in tasks if task.status is UploadStatus.FAILED]
        if failed:
            logger.warning(
                "Batch descartado",
                files=len(tasks),
                failed=len(failed),
                reasons=[task.reason for task in failed],
            )
            raise UploadError(UPLOAD_FAILED_MESSAGE, failed=failed)

        self.draft.image_urls.extend(task.url for task in tasks)
        logger.info("Batch agregado a la galería", added=len(tasks), total=self.size)
        return tasks

    async def _run(self, index: int, task: UploadTask) -> None:
        """Sube un archivo y deja el resultado en el task. Nunca lanza."""

        def report(fraction: float) -> None:
            progress = task.report_progress(fraction)
            if self.on_progress:
                self.on_progress(index, progress)

        try:
            url = await self.uploader.upload(task.file, on_progress=report)
        except Exception as e:
            logger.warning("Falló la subida", file=task.file.name, error=str(e))
            task.fail(str(e) or e.__class__.__name__)
        else:
            task.succeed(url)

    def remove_at(self, index: int) -> str:
        """
        Quita una imagen de la galería. Operación local, sin red.

        Returns:
            La URL quitada

        Raises:
            OutOfRangeError: Si el índice no existe
        """
        if not 0 <= index < self.size:
            raise OutOfRangeError(
                f"No image at position {index} (gallery has {self.size})"
            )
        url = self.draft.image_urls.pop(index)
        logger.debug("Imagen quitada", index=index, remaining=self.size)
        return url

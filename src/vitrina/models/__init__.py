"""
Modelos de datos del sistema.

- Wire: ListingRecord, ListingPayload (contrato REST)
- Sesión: CurrentUser
- Uploads: ImageFile, UploadTask
- Edición: ListingDraft y los eventos del formulario
"""

from vitrina.models.listing import (
    CurrentUser,
    ListingPayload,
    ListingRecord,
    ListingType,
)
from vitrina.models.upload import ImageFile, UploadStatus, UploadTask
from vitrina.models.draft import (
    FieldError,
    FormEvent,
    ListingDraft,
    apply_form_event,
)

__all__ = [
    # Wire
    "ListingRecord",
    "ListingPayload",
    "ListingType",
    # Sesión
    "CurrentUser",
    # Uploads
    "ImageFile",
    "UploadStatus",
    "UploadTask",
    # Edición
    "ListingDraft",
    "FieldError",
    "FormEvent",
    "apply_form_event",
]

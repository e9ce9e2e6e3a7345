"""
Taxonomía de errores del pipeline de listings.

Cada error lleva un mensaje listo para mostrar al usuario en ``str(error)``.
"""

from typing import Optional


class ListingError(Exception):
    """Error base del pipeline."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ListingError):
    """El draft no pasa la validación local. Nunca llega a la red."""

    def __init__(self, errors: list):
        if not errors:
            raise ValueError("ValidationError requiere al menos un error")
        super().__init__(errors[0].message)
        self.errors = list(errors)


class CapacityError(ListingError):
    """El batch haría que la galería supere el máximo de imágenes."""

    def __init__(self, message: str, current: int, requested: int, limit: int):
        super().__init__(message)
        self.current = current
        self.requested = requested
        self.limit = limit


class UploadError(ListingError):
    """Uno o más archivos del batch no se pudieron subir."""

    def __init__(self, message: str, failed: Optional[list] = None):
        super().__init__(message)
        self.failed = list(failed or [])


class UnsupportedFileError(UploadError):
    """El archivo no es un tipo de imagen soportado."""


class BackendRejection(ListingError):
    """El backend respondió con un payload de error explícito."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(ListingError):
    """Fallo de conectividad con el backend o el blob store."""


class OutOfRangeError(ListingError, IndexError):
    """Índice inválido al quitar una imagen de la galería."""


class BusyError(ListingError):
    """Ya hay una operación en curso que no admite otra en paralelo."""

"""
Módulo de almacenamiento de imágenes.

Provee el contrato BlobStore y su implementación sobre Supabase Storage.
"""

from vitrina.storage.base import BlobStore, ProgressCallback
from vitrina.storage.supabase_client import SupabaseBlobStore

__all__ = [
    "BlobStore",
    "ProgressCallback",
    "SupabaseBlobStore",
]

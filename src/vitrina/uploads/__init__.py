"""
Módulo de uploads.

Provee la subida individual (AssetUploader) y por batches (GalleryAssembler).
"""

from vitrina.uploads.uploader import AssetUploader
from vitrina.uploads.gallery import GalleryAssembler, BatchProgressCallback

__all__ = [
    "AssetUploader",
    "GalleryAssembler",
    "BatchProgressCallback",
]

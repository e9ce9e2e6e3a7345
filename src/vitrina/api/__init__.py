"""
Módulo de acceso al backend.

Provee el cliente HTTP de la API de listings.
"""

from vitrina.api.client import ListingApi

__all__ = ["ListingApi"]

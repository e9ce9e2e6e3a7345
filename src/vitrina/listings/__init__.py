"""
Módulo de listings.

Provee la máquina de estados de alta, edición y borrado.
"""

from vitrina.listings.controller import (
    ControllerState,
    HydrationState,
    ListingMutationController,
    Navigator,
)

__all__ = [
    "ControllerState",
    "HydrationState",
    "ListingMutationController",
    "Navigator",
]

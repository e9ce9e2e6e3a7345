"""
Script para publicar, editar o borrar un listing desde la terminal.

Uso:
    python -m vitrina.scripts.publish_listing --owner-ref u1 --listing-file casa.json --images a.jpg b.jpg
    python -m vitrina.scripts.publish_listing --owner-ref u1 --listing-id abc123 --listing-file cambios.json
    python -m vitrina.scripts.publish_listing --owner-ref u1 --listing-id abc123 --delete
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from vitrina.api import ListingApi
from vitrina.config import get_settings
from vitrina.listings import HydrationState, ListingMutationController
from vitrina.models import CurrentUser, ImageFile
from vitrina.storage import BlobStore, SupabaseBlobStore
from vitrina.uploads import AssetUploader

logger = structlog.get_logger()


def configure_logging(level: Optional[str] = None) -> None:
    """Configura structlog sobre logging estándar con salida de consola."""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _print_progress(index: int, fraction: float) -> None:
    logger.info("Progreso de subida", file=index, progress=f"{fraction:.0%}")


async def run_publish(
    owner_ref: str,
    listing_file: Optional[Path] = None,
    images: Optional[list[Path]] = None,
    listing_id: Optional[str] = None,
    delete: bool = False,
    api: Optional[ListingApi] = None,
    store: Optional[BlobStore] = None,
) -> int:
    """
    Ejecuta el flujo completo contra el backend.

    Args:
        owner_ref: Id del usuario dueño del listing
        listing_file: JSON con los campos del listing (nombres del contrato REST)
        images: Imágenes a subir como un único batch
        listing_id: Listing a editar o borrar (None = alta)
        delete: Borrar el listing en lugar de guardarlo

    Returns:
        Exit code: 0 si la operación terminó bien, 1 si no
    """
    destinations: list[str] = []
    api = api or ListingApi()
    controller = ListingMutationController(
        api=api,
        user=CurrentUser(id=owner_ref),
        uploader=AssetUploader(store or SupabaseBlobStore()),
        navigate=destinations.append,
        listing_id=listing_id,
        on_progress=_print_progress,
    )

    async with api:
        if listing_id:
            await controller.load()
            if controller.hydration is HydrationState.FAILED:
                print(f"Error: {controller.hydration_error}", file=sys.stderr)
                return 1

        if delete:
            ok = await controller.delete()
        else:
            if listing_file:
                fields = json.loads(Path(listing_file).read_text(encoding="utf-8"))
                for name, value in fields.items():
                    controller.set_field(name, value)

            if images:
                files = [ImageFile.from_path(path) for path in images]
                if await controller.upload_images(files) is None:
                    print(f"Error: {controller.error}", file=sys.stderr)
                    return 1

            ok = await controller.submit()

    if not ok:
        print(f"Error: {controller.error}", file=sys.stderr)
        return 1

    for destination in destinations:
        print(destination)
    return 0


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Alta, edición y borrado de listings"
    )
    parser.add_argument(
        "--owner-ref",
        type=str,
        required=True,
        help="Id del usuario autenticado dueño del listing",
    )
    parser.add_argument(
        "--listing-file",
        type=Path,
        default=None,
        help="JSON con los campos del listing",
    )
    parser.add_argument(
        "--images",
        type=Path,
        nargs="*",
        default=None,
        help="Imágenes a subir (máximo 6 por listing)",
    )
    parser.add_argument(
        "--listing-id",
        type=str,
        default=None,
        help="Listing a editar o borrar (omitir para crear uno nuevo)",
    )
    parser.add_argument(
        "--delete",
        action="store_true",
        help="Borrar el listing indicado con --listing-id",
    )

    args = parser.parse_args()
    if args.delete and not args.listing_id:
        parser.error("--delete requiere --listing-id")

    configure_logging()

    try:
        exit_code = asyncio.run(
            run_publish(
                owner_ref=args.owner_ref,
                listing_file=args.listing_file,
                images=args.images,
                listing_id=args.listing_id,
                delete=args.delete,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrumpido por usuario")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

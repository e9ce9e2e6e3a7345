"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> vitrina/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend REST
    backend_base_url: str = Field(
        "http://localhost:3000", description="URL base de la API de listings"
    )
    backend_timeout_seconds: float = Field(
        20.0, gt=0, description="Timeout de cada request al backend (segundos)"
    )
    create_listing_path: str = Field(
        "/api/listing/create", description="Endpoint de creación de listings"
    )
    update_listing_path: str = Field(
        "/api/user/update", description="Endpoint de actualización (?id=)"
    )
    get_listing_path: str = Field(
        "/api/user/listings", description="Endpoint de lectura por id (?id=)"
    )
    delete_listing_path: str = Field(
        "/api/user/delete", description="Endpoint de borrado (?id=)"
    )

    # Supabase Storage
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )
    storage_bucket: str = Field(
        "listing-images", description="Bucket donde se suben las imágenes"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
MAX_GALLERY_SIZE = 6

LISTING_TYPES = ["sale", "rent"]

NAME_MIN_LENGTH = 10
NAME_MAX_LENGTH = 62

ROOMS_RANGE = (1, 10)
REGULAR_PRICE_RANGE = (50, 10_000_000)
DISCOUNT_PRICE_RANGE = (0, 10_000_000)

LISTING_DETAIL_ROUTE = "/listing/{listing_id}"
LISTINGS_ROUTE = "/listings"

"""
Cliente de la API REST de listings.

- Una sola instancia de httpx.AsyncClient (connection pooling).
- No reintenta: cada reintento es una acción nueva del usuario.
- Traduce fallos a la taxonomía de vitrina.errors.
"""

from typing import Any, Mapping, Optional

import httpx
import pydantic
import structlog

from vitrina.config import Settings, get_settings
from vitrina.errors import BackendRejection, TransportError
from vitrina.models import ListingPayload, ListingRecord

logger = structlog.get_logger()

INVALID_RESPONSE_MESSAGE = "The server returned an invalid response"
DELETE_FAILED_MESSAGE = "Failed to delete listing"


def _is_json_response(resp: httpx.Response) -> bool:
    ct = (resp.headers.get("content-type") or "").lower()
    return "application/json" in ct or ct.endswith("+json")


class ListingApi:
    """Operaciones de create/read/update/delete contra el backend."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.backend_base_url,
            timeout=httpx.Timeout(self.settings.backend_timeout_seconds),
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Ejecuta un request y devuelve el JSON de la respuesta.

        Raises:
            TransportError: Timeout, error de conexión o body ilegible
            BackendRejection: ``{"success": false}`` o status no 2xx
        """
        try:
            resp = await self._client.request(
                method,
                path,
                params=dict(params or {}),
                json=json_body,
            )
        except httpx.TimeoutException as e:
            logger.error("Timeout en request", method=method, path=path)
            raise TransportError("The server took too long to respond") from e
        except httpx.RequestError as e:
            # DNS, conexión rechazada, TLS, etc.
            logger.error("Error de conexión", method=method, path=path, error=str(e))
            raise TransportError(str(e) or "Could not reach the server") from e

        data: Any = None
        if _is_json_response(resp):
            try:
                data = resp.json()
            except ValueError:
                data = None

        if isinstance(data, dict) and data.get("success") is False:
            message = data.get("message") or f"Request failed with status {resp.status_code}"
            logger.info(
                "Backend rechazó el request",
                method=method,
                path=path,
                status=resp.status_code,
                message=message,
            )
            raise BackendRejection(message, status_code=resp.status_code)

        if not resp.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("message")
            logger.info("Respuesta HTTP con error", method=method, path=path, status=resp.status_code)
            raise BackendRejection(
                message or f"Request failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        if data is None:
            logger.error("Respuesta no JSON", method=method, path=path, status=resp.status_code)
            raise TransportError(INVALID_RESPONSE_MESSAGE)

        return data

    @staticmethod
    def _parse_record(data: Any) -> ListingRecord:
        try:
            return ListingRecord.model_validate(data)
        except pydantic.ValidationError as e:
            logger.error("Listing con formato inesperado", error=str(e))
            raise TransportError(INVALID_RESPONSE_MESSAGE) from e

    async def create_listing(self, payload: ListingPayload) -> ListingRecord:
        """Crea un listing. Devuelve el registro persistido (con su id)."""
        data = await self._request(
            "POST",
            self.settings.create_listing_path,
            json_body=payload.to_request_body(),
        )
        record = self._parse_record(data)
        logger.info("Listing creado", listing_id=record.id)
        return record

    async def update_listing(self, listing_id: str, payload: ListingPayload) -> ListingRecord:
        """Actualiza un listing existente."""
        data = await self._request(
            "POST",
            self.settings.update_listing_path,
            params={"id": listing_id},
            json_body=payload.to_request_body(),
        )
        record = self._parse_record(data)
        logger.info("Listing actualizado", listing_id=record.id)
        return record

    async def get_listing(self, listing_id: str) -> ListingRecord:
        """Obtiene un listing por id, para hidratar el draft en modo edición."""
        data = await self._request(
            "GET",
            self.settings.get_listing_path,
            params={"id": listing_id},
        )
        return self._parse_record(data)

    async def delete_listing(self, listing_id: str) -> Optional[str]:
        """
        Borra un listing.

        Returns:
            Mensaje del backend, si lo hay

        Raises:
            BackendRejection: Si la respuesta no trae ``success: true``
        """
        data = await self._request(
            "DELETE",
            self.settings.delete_listing_path,
            params={"id": listing_id},
        )
        if not isinstance(data, dict) or data.get("success") is not True:
            message = data.get("message") if isinstance(data, dict) else None
            raise BackendRejection(message or DELETE_FAILED_MESSAGE)
        logger.info("Listing borrado", listing_id=listing_id)
        return data.get("message")

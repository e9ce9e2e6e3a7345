"""
ListingMutationController: máquina de estados de alta, edición y borrado.

Estados:
    Idle -> Validating -> Submitting -> Success | Failed
    Idle -> Deleting -> Success | Failed

Failed se reporta y vuelve a Idle con el draft intacto, para que el usuario
pueda reintentar sin volver a cargar los datos. Submit y delete se excluyen
mutuamente: mientras una mutación está en curso no arranca otra.
"""

from enum import Enum
from typing import Callable, Iterable, Optional

import pydantic
import structlog

from vitrina.api import ListingApi
from vitrina.config import LISTING_DETAIL_ROUTE, LISTINGS_ROUTE
from vitrina.errors import (
    BusyError,
    CapacityError,
    ListingError,
    TransportError,
    UploadError,
    ValidationError,
)
from vitrina.models import (
    CurrentUser,
    FormEvent,
    ImageFile,
    ListingDraft,
    ListingRecord,
    UploadTask,
)
from vitrina.uploads import AssetUploader, BatchProgressCallback, GalleryAssembler

logger = structlog.get_logger()

Navigator = Callable[[str], None]

NOT_SAVED_MESSAGE = "This listing has not been saved yet"
DELETE_FAILED_MESSAGE = "Failed to delete listing"
PAYLOAD_FAILED_MESSAGE = "The listing could not be prepared for submission"


class ControllerState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    DELETING = "deleting"
    SUCCESS = "success"
    FAILED = "failed"


class HydrationState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


BUSY_STATES = (
    ControllerState.VALIDATING,
    ControllerState.SUBMITTING,
    ControllerState.DELETING,
)


class ListingMutationController:
    """
    Orquesta validación, llamadas al backend y navegación de un listing.

    El usuario autenticado y la función de navegación se inyectan
    explícitamente; el controller no lee estado global de sesión.

    Args:
        api: Cliente del backend
        user: Usuario autenticado, dueño del listing
        uploader: Uploader usado por la galería
        navigate: Recibe la ruta a la que hay que navegar
        listing_id: Id del listing a editar (None = alta)
        on_progress: Progreso por archivo de los batches de imágenes
    """

    def __init__(
        self,
        api: ListingApi,
        user: CurrentUser,
        uploader: AssetUploader,
        navigate: Navigator,
        listing_id: Optional[str] = None,
        on_progress: Optional[BatchProgressCallback] = None,
    ):
        self.api = api
        self.user = user
        self.navigate = navigate
        self.draft = ListingDraft(listing_id=listing_id)
        self.gallery = GalleryAssembler(self.draft, uploader, on_progress=on_progress)

        self.state = ControllerState.IDLE
        self.history: list[ControllerState] = [ControllerState.IDLE]
        self.hydration = HydrationState.NOT_LOADED
        self.hydration_error: Optional[str] = None
        # Un único mensaje visible: el del último fallo
        self.error: Optional[str] = None
        self.result: Optional[ListingRecord] = None

    @property
    def busy(self) -> bool:
        return self.state in BUSY_STATES

    @property
    def uploading(self) -> bool:
        return self.gallery.uploading

    @property
    def loading(self) -> bool:
        return self.hydration is HydrationState.LOADING

    @property
    def can_edit(self) -> bool:
        """Idle, sin batch en curso y sin una carga del listing pendiente."""
        return (
            self.state is ControllerState.IDLE
            and not self.uploading
            and not self.loading
        )

    @property
    def can_submit(self) -> bool:
        return self.can_edit

    @property
    def can_delete(self) -> bool:
        return self.can_edit

    def _transition(self, state: ControllerState) -> None:
        logger.debug("Transición", previous=self.state.value, state=state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, error: ListingError, message: Optional[str] = None) -> None:
        """Reporta el fallo y vuelve a Idle."""
        self.error = message or error.message
        self._transition(ControllerState.FAILED)
        logger.info(
            "Mutación fallida",
            listing_id=self.draft.listing_id,
            error_type=type(error).__name__,
            error=self.error,
        )
        self._transition(ControllerState.IDLE)

    def _refuse(self, action: str) -> bool:
        logger.warning(
            "Acción ignorada: hay una operación en curso",
            action=action,
            state=self.state.value,
            uploading=self.uploading,
            loading=self.loading,
        )
        return False

    # Eventos del formulario

    def set_field(self, name: str, value) -> None:
        self.draft.set_field(name, value)

    def dispatch(self, event: FormEvent) -> None:
        self.draft.dispatch(event)

    # Galería

    async def upload_images(self, files: Iterable[ImageFile]) -> Optional[list[UploadTask]]:
        """
        Sube un batch de imágenes a la galería del draft.

        Returns:
            Los tasks del batch, o None si fue rechazado o falló
        """
        if self.state is not ControllerState.IDLE or self.loading:
            self._refuse("upload")
            return None
        try:
            tasks = await self.gallery.submit_batch(files)
        except (BusyError, CapacityError, UploadError) as e:
            self.error = e.message
            return None
        self.error = None
        return tasks

    def remove_image(self, index: int) -> str:
        """Quita una imagen de la galería. Lanza OutOfRangeError si no existe."""
        url = self.gallery.remove_at(index)
        self.error = None
        return url

    # Hidratación

    async def load(self) -> bool:
        """
        Carga el listing a editar y reemplaza el draft.

        Un fallo deja ``hydration`` en FAILED con el mensaje en
        ``hydration_error``; el draft anterior no se toca.
        """
        listing_id = self.draft.listing_id
        if listing_id is None:
            raise ValueError("No hay listing para cargar: el controller está en modo alta")
        if not self.can_edit:
            return self._refuse("load")

        self.hydration = HydrationState.LOADING
        self.hydration_error = None
        try:
            record = await self.api.get_listing(listing_id)
        except ListingError as e:
            self.hydration = HydrationState.FAILED
            self.hydration_error = e.message
            logger.warning("No se pudo cargar el listing", listing_id=listing_id, error=e.message)
            return False

        self.draft = ListingDraft.from_record(record)
        self.gallery.draft = self.draft
        self.hydration = HydrationState.LOADED
        logger.info("Listing cargado", listing_id=record.id, images=len(record.image_urls))
        return True

    # Mutaciones

    async def submit(self) -> bool:
        """
        Valida el draft y lo envía al backend (alta o edición).

        Es la única llamada de red del submit: las imágenes ya están subidas.

        Returns:
            True si el listing se guardó y se navegó a su detalle
        """
        if not self.can_submit:
            return self._refuse("submit")

        self._transition(ControllerState.VALIDATING)
        errors = self.draft.validate()
        if errors:
            self._fail(ValidationError(errors))
            return False

        try:
            payload = self.draft.to_payload(self.user.owner_ref)
        except ValidationError as e:
            self._fail(e)
            return False
        except pydantic.ValidationError as e:
            logger.error("Payload inválido", error=str(e))
            self._fail(ListingError(PAYLOAD_FAILED_MESSAGE))
            return False

        self.error = None
        self._transition(ControllerState.SUBMITTING)
        listing_id = self.draft.listing_id
        try:
            if listing_id is None:
                record = await self.api.create_listing(payload)
            else:
                record = await self.api.update_listing(listing_id, payload)
        except ListingError as e:
            self._fail(e)
            return False

        self.result = record
        self._transition(ControllerState.SUCCESS)
        self.navigate(LISTING_DETAIL_ROUTE.format(listing_id=record.id))
        return True

    async def delete(self) -> bool:
        """
        Borra el listing. Sin paso de confirmación.

        Returns:
            True si se borró y se navegó al listado
        """
        if not self.can_delete:
            return self._refuse("delete")

        listing_id = self.draft.listing_id
        if listing_id is None:
            self.error = NOT_SAVED_MESSAGE
            logger.info("Delete ignorado: listing sin persistir")
            return False

        self._transition(ControllerState.DELETING)
        try:
            await self.api.delete_listing(listing_id)
        except TransportError as e:
            self._fail(e, message=DELETE_FAILED_MESSAGE)
            return False
        except ListingError as e:
            self._fail(e)
            return False

        self.error = None
        self._transition(ControllerState.SUCCESS)
        self.navigate(LISTINGS_ROUTE)
        return True

"""
ListingDraft: listing en edición, todavía no persistido.

Guarda los valores tal como llegan del formulario (los inputs numéricos
llegan como strings) y los coerciona recién al validar o serializar.
No hace I/O.
"""

from dataclasses import dataclass
from typing import Any, Optional

from vitrina.config import (
    DISCOUNT_PRICE_RANGE,
    LISTING_TYPES,
    MAX_GALLERY_SIZE,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    REGULAR_PRICE_RANGE,
    ROOMS_RANGE,
)
from vitrina.errors import ValidationError
from vitrina.models.listing import ListingPayload, ListingRecord

# Valores iniciales del formulario de alta
DEFAULT_FIELDS: dict[str, Any] = {
    "name": "",
    "description": "",
    "address": "",
    "type": "rent",
    "bedrooms": 1,
    "bathrooms": 1,
    "regular_price": 50,
    "discount_price": 0,
    "offer": False,
    "parking": False,
    "furnished": False,
}

# Nombres del contrato REST -> nombres internos
FIELD_ALIASES = {
    "regularPrice": "regular_price",
    "discountPrice": "discount_price",
}

FIELD_LABELS = {
    "name": "Name",
    "description": "Description",
    "address": "Address",
    "type": "Type",
    "bedrooms": "Bedrooms",
    "bathrooms": "Bathrooms",
    "regular_price": "Regular price",
    "discount_price": "Discount price",
    "offer": "Offer",
    "parking": "Parking",
    "furnished": "Furnished",
}

TYPE_CHECKBOXES = ("sale", "rent")
FLAG_FIELDS = ("offer", "parking", "furnished")

MISSING_IMAGES_MESSAGE = "You must upload at least one image"
TOO_MANY_IMAGES_MESSAGE = "You can only upload {limit} images per listing"
DISCOUNT_ABOVE_REGULAR_MESSAGE = "Discount price must be lower than regular price"


@dataclass(frozen=True)
class FieldError:
    """Error de validación de un campo."""

    field: str
    message: str


@dataclass(frozen=True)
class FormEvent:
    """
    Evento de cambio del formulario.

    Args:
        field_id: id del input ('name', 'sale', 'offer', 'regularPrice', ...)
        value: Valor de inputs de texto y numéricos
        checked: Estado de los checkboxes
    """

    field_id: str
    value: Any = None
    checked: Optional[bool] = None


def normalize_field_name(name: str) -> str:
    """Acepta tanto el nombre del contrato REST como el interno."""
    name = FIELD_ALIASES.get(name, name)
    if name not in DEFAULT_FIELDS:
        raise KeyError(f"Campo desconocido: {name}")
    return name


def apply_form_event(fields: dict[str, Any], event: FormEvent) -> dict[str, Any]:
    """
    Calcula los campos resultantes de aplicar un evento del formulario.

    Función pura: no modifica ``fields``.
    """
    updated = dict(fields)
    if event.field_id in TYPE_CHECKBOXES:
        updated["type"] = event.field_id
    elif event.field_id in FLAG_FIELDS:
        updated[event.field_id] = bool(event.checked)
    else:
        updated[normalize_field_name(event.field_id)] = event.value
    return updated


def coerce_int(value: Any) -> Optional[int]:
    """Convierte a entero lo que llega del formulario. None si no es posible."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _check_text(fields: dict, name: str) -> Optional[FieldError]:
    value = fields.get(name)
    if not isinstance(value, str) or not value.strip():
        return FieldError(name, f"{FIELD_LABELS[name]} is required")
    return None


def _check_range(fields: dict, name: str, bounds: tuple[int, int]) -> Optional[FieldError]:
    number = coerce_int(fields.get(name))
    label = FIELD_LABELS[name]
    if number is None:
        return FieldError(name, f"{label} must be a whole number")
    low, high = bounds
    if not low <= number <= high:
        return FieldError(name, f"{label} must be between {low} and {high}")
    return None


class ListingDraft:
    """
    Representación en memoria de un listing en alta o edición.

    La galería (``image_urls``) la modifica GalleryAssembler; el resto de
    los campos se modifican con set_field() o dispatch().
    """

    def __init__(
        self,
        fields: Optional[dict[str, Any]] = None,
        image_urls: Optional[list[str]] = None,
        listing_id: Optional[str] = None,
    ):
        self.fields: dict[str, Any] = dict(DEFAULT_FIELDS)
        for name, value in (fields or {}).items():
            self.set_field(name, value)
        self.image_urls: list[str] = list(image_urls or [])
        self.listing_id = listing_id
        # Se asigna al hacer submit, nunca desde el formulario
        self.owner_ref: Optional[str] = None

    @classmethod
    def from_record(cls, record: ListingRecord) -> "ListingDraft":
        """Hidrata un draft desde un listing ya persistido (modo edición)."""
        fields = record.model_dump(
            include=set(DEFAULT_FIELDS),
        )
        draft = cls(fields=fields, image_urls=record.image_urls, listing_id=record.id)
        draft.owner_ref = record.user_ref
        return draft

    @property
    def is_persisted(self) -> bool:
        return self.listing_id is not None

    def get(self, name: str) -> Any:
        return self.fields[normalize_field_name(name)]

    def set_field(self, name: str, value: Any) -> None:
        """Asigna un campo. No valida: eso es responsabilidad de validate()."""
        self.fields[normalize_field_name(name)] = value

    def dispatch(self, event: FormEvent) -> None:
        """Aplica un evento del formulario sobre el draft."""
        self.fields = apply_form_event(self.fields, event)

    def validate(self) -> list[FieldError]:
        """
        Valida el draft completo.

        El orden es fijo y el primer error es el que se muestra al usuario:
        1. Al menos una imagen
        2. Si hay oferta, descuento <= precio regular
        3. Tope de la galería, campos requeridos y rangos numéricos

        Returns:
            Lista de errores (vacía si el draft es válido)
        """
        errors: list[FieldError] = []
        fields = self.fields
        offer = fields.get("offer") is True

        if len(self.image_urls) < 1:
            errors.append(FieldError("image_urls", MISSING_IMAGES_MESSAGE))

        if offer:
            regular = coerce_int(fields.get("regular_price"))
            discount = coerce_int(fields.get("discount_price"))
            if regular is not None and discount is not None and discount > regular:
                errors.append(FieldError("discount_price", DISCOUNT_ABOVE_REGULAR_MESSAGE))

        if len(self.image_urls) > MAX_GALLERY_SIZE:
            errors.append(
                FieldError("image_urls", TOO_MANY_IMAGES_MESSAGE.format(limit=MAX_GALLERY_SIZE))
            )

        name = fields.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append(FieldError("name", "Name is required"))
        elif not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            errors.append(
                FieldError(
                    "name",
                    f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
                )
            )

        checks = [
            _check_text(fields, "description"),
            _check_text(fields, "address"),
        ]
        if fields.get("type") not in LISTING_TYPES:
            checks.append(FieldError("type", "Type must be either sale or rent"))
        checks.append(_check_range(fields, "bedrooms", ROOMS_RANGE))
        checks.append(_check_range(fields, "bathrooms", ROOMS_RANGE))
        checks.append(_check_range(fields, "regular_price", REGULAR_PRICE_RANGE))
        if offer:
            checks.append(_check_range(fields, "discount_price", DISCOUNT_PRICE_RANGE))
        for flag in FLAG_FIELDS:
            if not isinstance(fields.get(flag), bool):
                checks.append(FieldError(flag, f"{FIELD_LABELS[flag]} must be true or false"))

        errors.extend(error for error in checks if error is not None)
        return errors

    def to_payload(self, owner_ref: str) -> ListingPayload:
        """
        Arma el body de create/update.

        Raises:
            ValidationError: Si el draft no es válido
        """
        errors = self.validate()
        if errors:
            raise ValidationError(errors)

        fields = self.fields
        # Sin oferta el descuento se ignora: se envía sólo si es un valor válido
        discount = coerce_int(fields["discount_price"])
        low, high = DISCOUNT_PRICE_RANGE
        if discount is None or not low <= discount <= high:
            discount = 0

        return ListingPayload(
            name=fields["name"],
            description=fields["description"],
            address=fields["address"],
            type=fields["type"],
            bedrooms=coerce_int(fields["bedrooms"]),
            bathrooms=coerce_int(fields["bathrooms"]),
            regular_price=coerce_int(fields["regular_price"]),
            discount_price=discount,
            offer=fields["offer"],
            parking=fields["parking"],
            furnished=fields["furnished"],
            image_urls=list(self.image_urls),
            user_ref=owner_ref,
        )

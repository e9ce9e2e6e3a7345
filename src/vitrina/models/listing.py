"""
Modelos de listing tal como viajan por la API.

- ListingRecord: listing persistido que devuelve el backend
- ListingPayload: body de create/update, con las restricciones de cada campo
- CurrentUser: identidad del usuario autenticado (dueño del listing)
"""

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from vitrina.config import (
    DISCOUNT_PRICE_RANGE,
    MAX_GALLERY_SIZE,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    REGULAR_PRICE_RANGE,
    ROOMS_RANGE,
)

ListingType = Literal["sale", "rent"]


class ListingRecord(BaseModel):
    """
    Listing persistido en el backend.

    Sólo se usa para hidratar un draft;
    la validación la hace ListingDraft.validate().
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    description: str = ""
    address: str = ""
    type: str = "rent"
    bedrooms: int = 1
    bathrooms: int = 1
    regular_price: int = Field(50, alias="regularPrice")
    discount_price: int = Field(0, alias="discountPrice")
    offer: bool = False
    parking: bool = False
    furnished: bool = False
    image_urls: list[str] = Field(default_factory=list, alias="imageUrls")
    user_ref: Optional[str] = Field(None, alias="userRef")


class ListingPayload(BaseModel):
    """Body de create/update. Los alias son los nombres del contrato REST."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    type: ListingType
    bedrooms: int = Field(..., ge=ROOMS_RANGE[0], le=ROOMS_RANGE[1])
    bathrooms: int = Field(..., ge=ROOMS_RANGE[0], le=ROOMS_RANGE[1])
    regular_price: int = Field(
        ...,
        alias="regularPrice",
        ge=REGULAR_PRICE_RANGE[0],
        le=REGULAR_PRICE_RANGE[1],
    )
    discount_price: int = Field(
        0,
        alias="discountPrice",
        ge=DISCOUNT_PRICE_RANGE[0],
        le=DISCOUNT_PRICE_RANGE[1],
    )
    offer: bool = False
    parking: bool = False
    furnished: bool = False
    image_urls: list[str] = Field(
        ..., alias="imageUrls", min_length=1, max_length=MAX_GALLERY_SIZE
    )
    user_ref: str = Field(..., alias="userRef", min_length=1)

    def to_request_body(self) -> dict:
        """Serializa con los nombres camelCase del backend."""
        return self.model_dump(by_alias=True)


class CurrentUser(BaseModel):
    """Usuario autenticado. Lo provee el flujo de sesión, no este paquete."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("_id", "id"))
    username: Optional[str] = None
    email: Optional[str] = None

    @property
    def owner_ref(self) -> str:
        return self.id

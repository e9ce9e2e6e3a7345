import asyncio
from typing import Optional

import pytest

from vitrina.errors import BackendRejection, TransportError
from vitrina.models import CurrentUser, ImageFile, ListingDraft, ListingRecord
from vitrina.storage import BlobStore


VALID_FIELDS = {
    "name": "Sunny two bedroom flat",
    "description": "Close to the park, recently renovated.",
    "address": "742 Evergreen Terrace",
    "type": "rent",
    "bedrooms": 2,
    "bathrooms": 1,
    "regularPrice": 1200,
    "discountPrice": 0,
    "offer": False,
    "parking": True,
    "furnished": False,
}


def make_image(name: str, content_type: str = "image/jpeg") -> ImageFile:
    return ImageFile(name=name, content_type=content_type, data=name.encode())


class FakeBlobStore(BlobStore):
    """Store en memoria. Permite fallar archivos y demorar cada subida."""

    store_name = "fake"

    def __init__(self, fail: tuple = (), delays: Optional[dict] = None):
        self.fail = set(fail)
        self.delays = delays or {}
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def put(self, file, on_progress=None):
        self.calls.append(file.name)
        if on_progress:
            on_progress(0.5)
        await asyncio.sleep(self.delays.get(file.name, 0))
        if file.name in self.fail:
            raise TransportError(f"storage rejected {file.name}")
        if on_progress:
            on_progress(1.0)
        self.completed.append(file.name)
        return f"https://cdn.example.com/{file.name}"


class FakeListingApi:
    """Backend falso: registra llamadas y permite retener el submit."""

    def __init__(self, listing_id: str = "abc123", error: Optional[Exception] = None):
        self.listing_id = listing_id
        self.error = error
        self.calls: list[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.stored: Optional[dict] = None
        self.image_urls = ["https://cdn.example.com/cover.jpg"]
        self.load_gate: Optional[asyncio.Event] = None

    async def _respond(self, call: tuple, body: Optional[dict] = None) -> ListingRecord:
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return ListingRecord.model_validate({**(body or {}), "_id": self.listing_id})

    async def create_listing(self, payload):
        body = payload.to_request_body()
        self.stored = body
        return await self._respond(("create", body), body)

    async def update_listing(self, listing_id, payload):
        body = payload.to_request_body()
        self.stored = body
        return await self._respond(("update", listing_id, body), body)

    async def get_listing(self, listing_id):
        self.calls.append(("get", listing_id))
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.error is not None:
            raise self.error
        return ListingRecord.model_validate(
            {
                **VALID_FIELDS,
                "_id": listing_id,
                "imageUrls": list(self.image_urls),
                "userRef": "user-1",
            }
        )

    async def delete_listing(self, listing_id):
        self.calls.append(("delete", listing_id))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return "Listing has been deleted"


@pytest.fixture
def user():
    return CurrentUser(id="user-1", username="ana")


@pytest.fixture
def api():
    return FakeListingApi()


@pytest.fixture
def navigation():
    return []


@pytest.fixture
def valid_draft():
    return ListingDraft(
        fields=VALID_FIELDS,
        image_urls=["https://cdn.example.com/cover.jpg"],
    )


@pytest.fixture
def rejection():
    return BackendRejection("Listing not found", status_code=404)

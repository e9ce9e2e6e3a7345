import asyncio

import pytest

from tests.conftest import FakeBlobStore, make_image
from vitrina.errors import BusyError, CapacityError, OutOfRangeError, UploadError
from vitrina.models import ListingDraft, UploadStatus
from vitrina.uploads import AssetUploader, GalleryAssembler


def build(store, urls=None, **kwargs):
    draft = ListingDraft(image_urls=urls)
    return draft, GalleryAssembler(draft, AssetUploader(store), **kwargs)


@pytest.mark.asyncio
async def test_all_succeed_appends_in_selection_order():
    # El primero termina último
    store = FakeBlobStore(delays={"a.jpg": 0.03, "b.jpg": 0.01, "c.jpg": 0})
    draft, gallery = build(store, urls=["https://cdn.example.com/cover.jpg"])

    tasks = await gallery.submit_batch([make_image("a.jpg"), make_image("b.jpg"), make_image("c.jpg")])

    assert store.completed == ["c.jpg", "b.jpg", "a.jpg"]
    assert draft.image_urls == [
        "https://cdn.example.com/cover.jpg",
        "https://cdn.example.com/a.jpg",
        "https://cdn.example.com/b.jpg",
        "https://cdn.example.com/c.jpg",
    ]
    assert all(task.status is UploadStatus.SUCCEEDED for task in tasks)
    assert all(task.progress_fraction == 1.0 for task in tasks)
    assert not gallery.uploading


@pytest.mark.asyncio
async def test_uploads_run_concurrently():
    store = FakeBlobStore(delays={"a.jpg": 0.05, "b.jpg": 0.05})
    _, gallery = build(store)

    batch = asyncio.ensure_future(gallery.submit_batch([make_image("a.jpg"), make_image("b.jpg")]))
    await asyncio.sleep(0.01)

    # Ambas subidas arrancaron antes de que termine la primera
    assert store.calls == ["a.jpg", "b.jpg"]
    assert store.completed == []
    await batch


@pytest.mark.asyncio
async def test_one_failure_discards_whole_batch():
    store = FakeBlobStore(fail=("b.jpg",))
    draft, gallery = build(store, urls=["https://cdn.example.com/cover.jpg"])

    with pytest.raises(UploadError) as exc_info:
        await gallery.submit_batch([make_image("a.jpg"), make_image("b.jpg"), make_image("c.jpg")])

    assert draft.image_urls == ["https://cdn.example.com/cover.jpg"]
    assert [task.file.name for task in exc_info.value.failed] == ["b.jpg"]
    assert "storage rejected b.jpg" in exc_info.value.failed[0].reason
    # Los demás archivos igual terminaron antes de agregar nada
    assert sorted(store.completed) == ["a.jpg", "c.jpg"]
    assert not gallery.uploading


@pytest.mark.asyncio
async def test_non_image_file_fails_the_batch():
    store = FakeBlobStore()
    draft, gallery = build(store)

    with pytest.raises(UploadError):
        await gallery.submit_batch([make_image("a.jpg"), make_image("notes.txt", "text/plain")])

    assert draft.image_urls == []
    assert store.calls == ["a.jpg"]


@pytest.mark.asyncio
async def test_capacity_checked_before_any_upload():
    store = FakeBlobStore()
    draft, gallery = build(store, urls=["https://cdn.example.com/cover.jpg"])

    files = [make_image(f"{i}.jpg") for i in range(7)]
    with pytest.raises(CapacityError) as exc_info:
        await gallery.submit_batch(files)

    assert store.calls == []
    assert draft.image_urls == ["https://cdn.example.com/cover.jpg"]
    assert str(exc_info.value) == "You can only upload 6 images per listing"
    assert exc_info.value.current == 1
    assert exc_info.value.requested == 7


@pytest.mark.asyncio
async def test_batch_filling_gallery_exactly_is_admitted():
    store = FakeBlobStore()
    draft, gallery = build(store, urls=["https://cdn.example.com/cover.jpg"])

    await gallery.submit_batch([make_image(f"{i}.jpg") for i in range(5)])

    assert len(draft.image_urls) == 6


@pytest.mark.asyncio
async def test_empty_batch_is_rejected():
    store = FakeBlobStore()
    _, gallery = build(store)

    with pytest.raises(CapacityError):
        await gallery.submit_batch([])


@pytest.mark.asyncio
async def test_second_batch_while_uploading_is_refused():
    store = FakeBlobStore(delays={"a.jpg": 0.02})
    _, gallery = build(store)

    first = asyncio.ensure_future(gallery.submit_batch([make_image("a.jpg")]))
    await asyncio.sleep(0)

    with pytest.raises(BusyError):
        await gallery.submit_batch([make_image("b.jpg")])
    await first
    assert store.calls == ["a.jpg"]


@pytest.mark.asyncio
async def test_progress_is_reported_per_file():
    store = FakeBlobStore()
    reports = []
    _, gallery = build(store, on_progress=lambda index, fraction: reports.append((index, fraction)))

    await gallery.submit_batch([make_image("a.jpg"), make_image("b.jpg")])

    assert (0, 0.5) in reports and (0, 1.0) in reports
    assert (1, 0.5) in reports and (1, 1.0) in reports


def test_remove_at_preserves_order():
    draft, gallery = build(FakeBlobStore(), urls=["u0", "u1", "u2"])

    removed = gallery.remove_at(1)

    assert removed == "u1"
    assert draft.image_urls == ["u0", "u2"]


@pytest.mark.parametrize("index", [3, -1])
def test_remove_at_out_of_range(index):
    draft, gallery = build(FakeBlobStore(), urls=["u0", "u1", "u2"])

    with pytest.raises(OutOfRangeError):
        gallery.remove_at(index)
    assert draft.image_urls == ["u0", "u1", "u2"]

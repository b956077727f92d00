"""Shared fixtures: in-memory stand-ins for Cosmos DB and the media host."""

import uuid

import pytest

from catalog_api.exceptions import UploadError
from catalog_api.models.media import UploadedImage
from catalog_api.models.product import Product


class FakeContainer:
    """Minimal async ContainerProxy: create_item and read_all_items."""

    def __init__(self, items=None, calls=None):
        self.items = list(items or [])
        self.calls = calls if calls is not None else []
        self.write_error = None
        self.scan_error = None

    async def create_item(self, body, enable_automatic_id_generation=False, **kwargs):
        self.calls.append("write")
        if self.write_error is not None:
            raise self.write_error
        assert enable_automatic_id_generation, "id generation must be left to the store"
        assert "id" not in body
        stored = dict(body)
        stored["id"] = str(uuid.uuid4())
        stored["_etag"] = '"00000000-0000-0000-0000-000000000000"'
        stored["_ts"] = 1700000000
        self.items.append(stored)
        return dict(stored)

    def read_all_items(self, **kwargs):
        return self._iterate()

    async def _iterate(self):
        if self.scan_error is not None:
            raise self.scan_error
        for item in list(self.items):
            yield dict(item)


class FakeStore:
    def __init__(self, container):
        self.container = container
        self.closed = False

    async def get_container(self, container_type=None):
        return self.container

    async def close(self):
        self.closed = True


class FakeUploader:
    """Records uploads and deletes; returns a fixed URL unless told to fail."""

    def __init__(self, calls=None, url="https://host/img123.png"):
        self.calls = calls if calls is not None else []
        self.url = url
        self.upload_error = None
        self.delete_error = None
        self.uploaded = []
        self.deleted = []

    async def upload_image(self, file, filename=None, content_type=None):
        self.calls.append("upload")
        if self.upload_error is not None:
            raise self.upload_error
        self.uploaded.append((file, filename, content_type))
        return UploadedImage(secure_url=self.url, public_id="img123", delete_token="tok")

    async def upload(self, file, filename=None, content_type=None):
        return (await self.upload_image(file, filename, content_type)).secure_url

    async def delete(self, image):
        self.calls.append("delete")
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(image)
        return True


@pytest.fixture
def calls():
    return []


@pytest.fixture
def container(calls):
    return FakeContainer(calls=calls)


@pytest.fixture
def uploader(calls):
    return FakeUploader(calls=calls)


@pytest.fixture
def tee():
    return Product(name="Tee", price=20, sizes=["S", "M"], availableSizes=["S"], image=None)


@pytest.fixture
def upload_error():
    return UploadError("Image upload rejected", payload={"error": {"message": "bad preset"}}, status_code=400)


@pytest.fixture
def media_env():
    return {
        "CLOUDINARY_CLOUD_NAME": "demo",
        "COSMOSDB_ENDPOINT": "https://catalog.documents.azure.com:443/",
        "COSMOSDB_DATABASE": "storefront",
    }

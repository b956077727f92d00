"""Tests for the /products HTTP endpoints."""

import json

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError
from fastapi.testclient import TestClient

from catalog_api.catalog import Catalog
from catalog_api.exceptions import ConfigurationError
from catalog_api import db
from catalog_api.routes.product_route import get_catalog
from function_app import app

from conftest import FakeStore

TEE = {"name": "Tee", "price": 20, "sizes": ["S", "M"], "availableSizes": ["S"], "image": None}


@pytest.fixture
def client(container, uploader):
    app.dependency_overrides[get_catalog] = lambda: Catalog(FakeStore(container), uploader)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_empty_catalog(client):
    response = client.get("/products/")

    assert response.status_code == 200
    assert response.json() == []


def test_create_then_list(client):
    created = client.post("/products/", json=TEE)

    assert created.status_code == 201
    product_id = created.json()["id"]

    listed = client.get("/products/").json()
    assert listed == [{
        "id": product_id,
        "name": "Tee",
        "price": 20.0,
        "image": None,
        "sizes": ["S", "M"],
        "availableSizes": ["S"],
        "category": [],
    }]


def test_create_rejects_unknown_fields(client):
    response = client.post("/products/", json=dict(TEE, id="mine"))

    assert response.status_code == 422


def test_create_with_image(client, container, calls):
    response = client.post(
        "/products/with-image",
        data={"product": json.dumps(TEE)},
        files={"image": ("tee.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 201
    assert calls == ["upload", "write"]
    assert container.items[0]["image"] == "https://host/img123.png"


def test_create_with_image_form_without_file(client, container, calls):
    response = client.post("/products/with-image", data={"product": json.dumps(TEE)})

    assert response.status_code == 201
    assert calls == ["write"]
    assert container.items[0]["image"] is None


def test_create_with_image_invalid_product_json(client):
    response = client.post("/products/with-image", data={"product": json.dumps({"name": "Tee"})})

    assert response.status_code == 422


def test_upload_failure_maps_to_bad_gateway(client, container, uploader, upload_error):
    uploader.upload_error = upload_error

    response = client.post(
        "/products/with-image",
        data={"product": json.dumps(TEE)},
        files={"image": ("tee.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 502
    assert container.items == []


def test_store_failure_maps_to_server_error(client, container):
    container.scan_error = CosmosHttpResponseError(status_code=503, message="Service unavailable")

    response = client.get("/products/")

    assert response.status_code == 500
    assert response.json() == {"detail": "A database error occurred."}


def test_missing_configuration_is_reported():
    def unconfigured():
        raise ConfigurationError("COSMOSDB_ENDPOINT environment variable must be set")

    app.dependency_overrides[get_catalog] = unconfigured
    try:
        response = TestClient(app).get("/products/")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Service is not configured."}


@pytest.fixture
def cosmos_only(monkeypatch, container):
    monkeypatch.delenv("CLOUDINARY_CLOUD_NAME", raising=False)
    monkeypatch.setenv("COSMOSDB_ENDPOINT", "https://catalog.documents.azure.com:443/")
    monkeypatch.setenv("COSMOSDB_DATABASE", "storefront")
    monkeypatch.setattr(db, "_default_store", FakeStore(container))
    get_catalog.cache_clear()
    yield TestClient(app)
    get_catalog.cache_clear()


def test_products_without_media_configuration(cosmos_only):
    created = cosmos_only.post("/products/", json=TEE)
    listed = cosmos_only.get("/products/")

    assert created.status_code == 201
    assert listed.status_code == 200
    assert [p["id"] for p in listed.json()] == [created.json()["id"]]


def test_image_upload_without_media_configuration(cosmos_only, container):
    response = cosmos_only.post(
        "/products/with-image",
        data={"product": json.dumps(TEE)},
        files={"image": ("tee.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 500
    assert response.json() == {"detail": "Service is not configured."}
    assert container.items == []


def test_list_tolerates_malformed_documents(client, container):
    container.items.append({"id": "legacy", "name": "Tee", "price": "cheap", "sizes": "S"})

    response = client.get("/products/")

    assert response.status_code == 200
    [product] = response.json()
    assert product["id"] == "legacy"
    assert product["price"] is None
    assert product["sizes"] == []

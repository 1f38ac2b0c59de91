"""Tests for the FastAPI inventory server."""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from inventory_store.api_server import create_app
from inventory_store.config import StoreConfig


@pytest.fixture
def config(tmp_path):
    return StoreConfig(cache_dir=tmp_path / "cache")


@pytest.fixture
def client(config):
    """Test client with the store opened through the app lifespan."""
    with TestClient(create_app(config)) as client:
        yield client


def register(client, name="Widget", description="A widget", photo=None):
    files = {"photo": ("widget.png", photo, "image/png")} if photo is not None else None
    return client.post("/register", data={"inventory_name": name, "description": description}, files=files)


class TestRegister:
    """Tests for POST /register."""

    def test_register_returns_201(self, client):
        response = register(client)
        assert response.status_code == 201
        assert response.json() == {"id": 1, "name": "Widget", "description": "A widget", "photo": None}

    def test_register_with_photo(self, client):
        response = register(client, photo=b"\x89PNG")
        assert response.status_code == 201
        assert response.json()["photo"].endswith(".png")

    def test_register_without_name(self, client):
        response = client.post("/register", data={"description": "No name"})
        assert response.status_code == 400
        assert "name" in response.json()["detail"]


class TestItems:
    """Tests for the /inventory endpoints."""

    def test_list_in_insertion_order(self, client):
        for name in ("Hammer", "Wrench", "Saw"):
            register(client, name=name)
        response = client.get("/inventory")
        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["Hammer", "Wrench", "Saw"]

    def test_get_item(self, client):
        register(client)
        response = client.get("/inventory/1")
        assert response.status_code == 200
        assert response.json()["name"] == "Widget"

    def test_get_unknown_item(self, client):
        assert client.get("/inventory/99").status_code == 404

    def test_update_item(self, client):
        register(client)
        response = client.put("/inventory/1", json={"inventory_name": "Gizmo", "description": ""})
        assert response.status_code == 200
        assert response.json()["name"] == "Gizmo"
        assert response.json()["description"] == "A widget"

    def test_update_unknown_item(self, client):
        assert client.put("/inventory/5", json={"inventory_name": "Gizmo"}).status_code == 404

    def test_delete_item(self, client):
        register(client, photo=b"image")
        response = client.delete("/inventory/1")
        assert response.status_code == 200
        assert response.json()["item"]["id"] == 1
        assert response.json()["warnings"] == []
        assert client.delete("/inventory/1").status_code == 404
        assert client.get("/inventory").json() == []

    def test_storage_failure_returns_500(self, client):
        with patch("inventory_store.gate.save_json", side_effect=OSError("disk full")):
            response = register(client)
        assert response.status_code == 500
        assert "disk full" in response.json()["detail"]
        assert client.get("/inventory").json() == []


class TestPhotos:
    """Tests for the photo endpoints."""

    def test_upload_and_download(self, client):
        register(client)
        upload = client.put("/inventory/1/photo", files={"photo": ("pic.jpg", b"jpeg data", "image/jpeg")})
        assert upload.status_code == 200
        assert upload.json()["item"]["photo"].endswith(".jpg")

        download = client.get("/inventory/1/photo")
        assert download.status_code == 200
        assert download.content == b"jpeg data"
        assert download.headers["content-type"] == "image/jpeg"

    def test_replace_photo(self, client):
        register(client, photo=b"old")
        client.put("/inventory/1/photo", files={"photo": ("new.png", b"new", "image/png")})
        assert client.get("/inventory/1/photo").content == b"new"

    def test_upload_without_file(self, client):
        register(client)
        assert client.put("/inventory/1/photo").status_code == 400

    def test_upload_to_unknown_item(self, client):
        response = client.put("/inventory/3/photo", files={"photo": ("pic.jpg", b"data", "image/jpeg")})
        assert response.status_code == 404

    def test_download_without_photo(self, client):
        register(client)
        assert client.get("/inventory/1/photo").status_code == 404


class TestSearch:
    """Tests for POST /search and the HTML forms."""

    def test_search_with_photo(self, client):
        register(client, photo=b"image")
        response = client.post("/search", data={"id": "1", "has_photo": "on"})
        assert response.status_code == 200
        assert response.json()["photo_url"] == "/inventory/1/photo"

    def test_search_without_photo_flag(self, client):
        register(client, photo=b"image")
        response = client.post("/search", data={"id": "1"})
        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "Widget", "description": "A widget", "photo_url": None}

    @pytest.mark.parametrize("item_id", ["7", "abc", ""])
    def test_search_unknown_id(self, client, item_id):
        assert client.post("/search", data={"id": item_id}).status_code == 404

    @pytest.mark.parametrize("page,action", [("/RegisterForm.html", "/register"), ("/SearchForm.html", "/search")])
    def test_forms_are_served(self, client, page, action):
        response = client.get(page)
        assert response.status_code == 200
        assert f'action="{action}"' in response.text

    def test_health(self, client, config):
        register(client)
        response = client.get("/health")
        assert response.json() == {"status": "ok", "item_count": 1, "cache_dir": str(config.cache_dir)}

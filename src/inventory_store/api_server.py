#!/usr/bin/env python3
"""
FastAPI server for the inventory store.

Provides item registration, listing, updates, deletion, search and photo
upload/download on top of InventoryStore.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel

from .config import StoreConfig
from .errors import NotFound, StorageError, ValidationError
from .models import Item, ItemResult, ItemUpdate, SearchResult
from .store import InventoryStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / 'templates'

TRUTHY_FORM_VALUES = {'on', 'true', '1', 'yes'}


class ItemUpdateRequest(BaseModel):
    """JSON body of PUT /inventory/{id}. Omitted or empty fields are left unchanged."""
    inventory_name: Optional[str] = None
    description: Optional[str] = None


def get_store(request: Request) -> InventoryStore:
    return request.app.state.store


async def read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    """Read an uploaded file, treating a missing or empty upload as no upload."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return data or None


def create_app(config: Optional[StoreConfig] = None) -> FastAPI:
    """Build the API application for the store described by ``config``."""
    if config is None:
        config = StoreConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store on startup."""
        app.state.store = await InventoryStore(config).open()
        logger.info(f"Inventory store ready at {config.cache_dir}")
        yield

    app = FastAPI(title="Inventory Store", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.post("/register", response_model=Item, status_code=201)
    async def register_item(
        request: Request,
        inventory_name: str = Form(""),
        description: str = Form(""),
        photo: Optional[UploadFile] = File(None),
    ) -> Item:
        """Register a new item, optionally with a photo."""
        data = await read_upload(photo)
        return await get_store(request).register(
            inventory_name, description, photo=data, filename=photo.filename if data else None
        )

    @app.get("/inventory", response_model=List[Item])
    async def list_items(request: Request) -> List[Item]:
        return get_store(request).list()

    @app.get("/inventory/{item_id}", response_model=Item)
    async def get_item(request: Request, item_id: int) -> Item:
        return get_store(request).get(item_id)

    @app.put("/inventory/{item_id}", response_model=Item)
    async def update_item(request: Request, item_id: int, payload: ItemUpdateRequest) -> Item:
        fields = ItemUpdate(name=payload.inventory_name, description=payload.description)
        return await get_store(request).update(item_id, fields)

    @app.delete("/inventory/{item_id}", response_model=ItemResult)
    async def delete_item(request: Request, item_id: int) -> ItemResult:
        return await get_store(request).delete(item_id)

    @app.get("/inventory/{item_id}/photo")
    async def get_photo(request: Request, item_id: int) -> Response:
        content, media_type = await get_store(request).get_photo(item_id)
        return Response(content=content, media_type=media_type)

    @app.put("/inventory/{item_id}/photo", response_model=ItemResult)
    async def set_photo(request: Request, item_id: int, photo: Optional[UploadFile] = File(None)) -> ItemResult:
        data = await read_upload(photo)
        return await get_store(request).set_photo(item_id, data, filename=photo.filename if data else None)

    @app.post("/search", response_model=SearchResult)
    async def search(request: Request, id: str = Form(""), has_photo: str = Form("")) -> SearchResult:
        """Look up an item by id, as submitted by SearchForm.html."""
        try:
            item_id = int(id)
        except ValueError:
            raise NotFound(f"Item {id!r} not found") from None
        include_photo = has_photo.lower() in TRUTHY_FORM_VALUES
        return get_store(request).search(item_id, include_photo=include_photo)

    @app.get("/RegisterForm.html", response_class=HTMLResponse)
    async def register_form() -> HTMLResponse:
        return HTMLResponse((TEMPLATES_DIR / 'RegisterForm.html').read_text(encoding='utf-8'))

    @app.get("/SearchForm.html", response_class=HTMLResponse)
    async def search_form() -> HTMLResponse:
        return HTMLResponse((TEMPLATES_DIR / 'SearchForm.html').read_text(encoding='utf-8'))

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Health check endpoint."""
        store = get_store(request)
        return {
            "status": "ok",
            "item_count": len(store.list()),
            "cache_dir": str(store.config.cache_dir),
        }

    return app

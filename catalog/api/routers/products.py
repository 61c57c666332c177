from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from pydantic import ValidationError

from catalog.api.deps import AppSettings, Gateway, Store
from catalog.config import Settings
from catalog.errors import ClientInputError, PayloadTooLargeError, failure_summary
from catalog.infra.db import QueryGateway
from catalog.infra.storage_s3 import ObjectStore
from catalog.schemas.products import DeleteOut, ProductFields, ProductOut
from catalog.services import products_service

router = APIRouter()


def _clean(value: Optional[str]) -> Optional[str]:
    return (value.strip() or None) if value is not None else None


def _fields(
    title: Optional[str],
    material: Optional[str],
    code: Optional[str],
    reviews: Optional[str],
    badge: Optional[str],
    description: Optional[str],
) -> ProductFields:
    # o front manda "code"; "reviews" e aceito tambem
    try:
        return ProductFields(
            title=_clean(title),
            material=_clean(material),
            reviews=_clean(code if code is not None else reviews),
            badge=_clean(badge),
            description=_clean(description),
        )
    except ValidationError as e:
        raise ClientInputError(f"Invalid product fields: {e.errors(include_url=False)}") from e


async def _read_upload(image: Optional[UploadFile], max_bytes: int) -> Optional[bytes]:
    if image is None:
        return None
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise PayloadTooLargeError(f"Image exceeds {max_bytes} bytes")
    return data or None


@router.get("", response_model=list[ProductOut])
async def list_products(gateway: QueryGateway = Gateway):
    with failure_summary("Failed to load products"):
        return await products_service.list_products(gateway)


@router.post("", response_model=ProductOut)
async def create_product(
    gateway: QueryGateway = Gateway,
    store: ObjectStore = Store,
    settings: Settings = AppSettings,

    title: Optional[str] = Form(default=None),
    material: Optional[str] = Form(default=None),
    code: Optional[str] = Form(default=None),
    reviews: Optional[str] = Form(default=None),
    badge: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),

    image: Optional[UploadFile] = File(default=None),
):
    data = await _read_upload(image, settings.MAX_UPLOAD_BYTES)
    with failure_summary("Failed to create product"):
        return await products_service.create_product(
            gateway,
            store,
            fields=_fields(title, material, code, reviews, badge, description),
            image=data,
            quality=settings.IMAGE_QUALITY,
        )


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    gateway: QueryGateway = Gateway,
    store: ObjectStore = Store,
    settings: Settings = AppSettings,

    title: Optional[str] = Form(default=None),
    material: Optional[str] = Form(default=None),
    code: Optional[str] = Form(default=None),
    reviews: Optional[str] = Form(default=None),
    badge: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),

    image: Optional[UploadFile] = File(default=None),
):
    data = await _read_upload(image, settings.MAX_UPLOAD_BYTES)
    with failure_summary("Server Error"):
        return await products_service.update_product(
            gateway,
            store,
            product_id=product_id,
            fields=_fields(title, material, code, reviews, badge, description),
            image=data,
            quality=settings.IMAGE_QUALITY,
        )


@router.delete("/{product_id}", response_model=DeleteOut)
async def delete_product(
    product_id: int,
    gateway: QueryGateway = Gateway,
    store: ObjectStore = Store,
):
    with failure_summary("Failed to delete product"):
        await products_service.delete_product(gateway, store, product_id=product_id)
    return DeleteOut(ok=True, message="Product and image deleted successfully")

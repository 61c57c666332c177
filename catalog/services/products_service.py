from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from catalog.errors import ClientInputError, NotFoundError, QueryError
from catalog.infra.db import QueryGateway
from catalog.infra.storage_s3 import ObjectStore, key_from_url
from catalog.schemas.products import ProductFields
from catalog.services.id_gen import generate_object_key
from catalog.services.transcode import transcode_image

logger = logging.getLogger(__name__)

KEY_PREFIX = "products"

SQL_LIST = "SELECT * FROM products ORDER BY created_at DESC, id DESC"

SQL_INSERT = """
INSERT INTO products (title, material, reviews, image, badge, description)
VALUES ($1, $2, $3, $4, $5, $6)
RETURNING *
"""

SQL_SELECT_IMAGE = "SELECT id, image FROM products WHERE id = $1"

# campo ausente (NULL) mantem o valor atual
SQL_UPDATE = """
UPDATE products
SET title = COALESCE($1, title),
    material = COALESCE($2, material),
    reviews = COALESCE($3, reviews),
    image = COALESCE($4, image),
    badge = COALESCE($5, badge),
    description = COALESCE($6, description)
WHERE id = $7
RETURNING *
"""

SQL_DELETE = "DELETE FROM products WHERE id = $1"


# helpers
async def _store_image(store: ObjectStore, data: bytes, *, quality: int) -> str:
    image = await run_in_threadpool(transcode_image, data, quality=quality)
    key = generate_object_key(KEY_PREFIX, image.extension)
    return await run_in_threadpool(store.put, key, image.data, image.content_type)


async def _discard_object(store: ObjectStore, url: Optional[str], *, reason: str) -> None:
    key = key_from_url(url)
    if not key:
        if url:
            logger.warning("cannot derive object key from %r (%s); skipping delete", url, reason)
        return

    result = await run_in_threadpool(store.delete, key)
    if result.ok:
        logger.info("deleted object %s (%s)", result.key, reason)
    else:
        logger.warning("failed to delete object %s (%s): %s", result.key, reason, result.error)


async def list_products(gateway: QueryGateway) -> list[dict[str, Any]]:
    result = await run_in_threadpool(gateway.query, SQL_LIST)
    return result.rows


async def create_product(
    gateway: QueryGateway,
    store: ObjectStore,
    *,
    fields: ProductFields,
    image: Optional[bytes],
    quality: int,
) -> dict[str, Any]:
    if not image:
        raise ClientInputError("Image is required")
    if not fields.title:
        raise ClientInputError("Title is required")

    image_url = await _store_image(store, image, quality=quality)

    params = [
        fields.title,
        fields.material,
        fields.reviews,
        image_url,
        fields.badge,
        fields.description,
    ]
    try:
        result = await run_in_threadpool(gateway.query, SQL_INSERT, params)
    except QueryError:
        await _discard_object(store, image_url, reason="insert failed")
        raise

    row = result.first()
    logger.info("product %s created (image=%s)", row["id"] if row else None, image_url)
    return row


async def update_product(
    gateway: QueryGateway,
    store: ObjectStore,
    *,
    product_id: int,
    fields: ProductFields,
    image: Optional[bytes],
    quality: int,
) -> dict[str, Any]:
    current = (await run_in_threadpool(gateway.query, SQL_SELECT_IMAGE, [product_id])).first()
    if current is None:
        raise NotFoundError("Product not found")

    new_url = await _store_image(store, image, quality=quality) if image else None

    params = [
        fields.title,
        fields.material,
        fields.reviews,
        new_url,
        fields.badge,
        fields.description,
        product_id,
    ]
    try:
        result = await run_in_threadpool(gateway.query, SQL_UPDATE, params)
    except QueryError:
        if new_url:
            await _discard_object(store, new_url, reason="update failed")
        raise

    row = result.first()
    if row is None:
        # apagado entre o SELECT e o UPDATE
        if new_url:
            await _discard_object(store, new_url, reason="product vanished")
        raise NotFoundError("Product not found")

    old_url = current.get("image")
    if new_url and old_url and old_url != new_url:
        await _discard_object(store, old_url, reason="image replaced")

    logger.info("product %s updated (new image=%s)", product_id, bool(new_url))
    return row


async def delete_product(gateway: QueryGateway, store: ObjectStore, *, product_id: int) -> None:
    current = (await run_in_threadpool(gateway.query, SQL_SELECT_IMAGE, [product_id])).first()
    if current is not None and current.get("image"):
        # falha no bucket nunca impede apagar o registro
        await _discard_object(store, current["image"], reason="product deleted")

    result = await run_in_threadpool(gateway.query, SQL_DELETE, [product_id])
    logger.info("product %s deleted (rows=%d)", product_id, result.rowcount)

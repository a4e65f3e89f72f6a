"""Item storage in Redis and the HTTP routes that expose it."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI, Response
from pydantic import ValidationError
from redis import exceptions as redis_errors

from .errors import (
    BadRequestError,
    DatabaseError,
    JsonProcessingError,
    NotFoundError,
    PoolError,
    install_error_handler,
)
from .models import USIZE_MAX, CreateItemPayload, Item

NEXT_ID_KEY = "next_item_id"
ITEM_INDEX_KEY = "items_index"

_ID_PATTERN = re.compile(r"\+?[0-9]+")


def item_key(item_id: int) -> str:
    """Return the Redis key under which an item is stored."""
    return f"item:{item_id}"


@contextmanager
def _redis_errors() -> Iterator[None]:
    try:
        yield
    except (redis_errors.ConnectionError, redis_errors.TimeoutError) as exc:
        raise PoolError(str(exc)) from exc
    except redis_errors.RedisError as exc:
        raise DatabaseError(exc) from exc


def _decode(value: Any) -> Any:
    return value.decode() if isinstance(value, bytes) else value


def _build_item(item_id: int, payload: CreateItemPayload) -> Item:
    return Item(id=item_id, **payload.model_dump())


class ItemStore:
    """Items kept as JSON documents in an asynchronous Redis client."""

    def __init__(self, redis: Any) -> None:
        self._redis = redis

    async def create(self, payload: CreateItemPayload) -> Item:
        """Store a new item under a freshly allocated id."""
        with _redis_errors():
            new_id = int(await self._redis.incr(NEXT_ID_KEY, 1))
        item = _build_item(new_id, payload)
        with _redis_errors():
            await self._redis.set(item_key(new_id), item.model_dump_json())
        return item

    async def list_items(self) -> list[Item]:
        """Return every item named in the index; unreadable entries are skipped."""
        with _redis_errors():
            keys = [_decode(key) for key in await self._redis.smembers(ITEM_INDEX_KEY)]
            if not keys:
                return []
            documents = await self._redis.mget(keys)
        items = []
        for document in documents:
            if document is None:
                continue
            try:
                items.append(Item.model_validate_json(document))
            except ValidationError:
                continue
        return items

    async def get(self, item_id: int) -> Item:
        """Return one item or raise NotFoundError."""
        with _redis_errors():
            document = await self._redis.get(item_key(item_id))
        if document is None:
            raise NotFoundError(f"Item ID: {item_id}")
        try:
            return Item.model_validate_json(document)
        except ValidationError as exc:
            raise JsonProcessingError(exc) from exc

    async def update(self, item_id: int, payload: CreateItemPayload) -> Item:
        """Overwrite an existing item, keeping its id."""
        key = item_key(item_id)
        with _redis_errors():
            exists = await self._redis.exists(key)
        if not exists:
            raise NotFoundError(f"Item ID: {item_id}")
        item = _build_item(item_id, payload)
        with _redis_errors():
            await self._redis.set(key, item.model_dump_json())
        return item

    async def delete(self, item_id: int) -> None:
        """Remove an item and its index entry atomically."""
        key = item_key(item_id)
        with _redis_errors():
            pipe = self._redis.pipeline(transaction=True)
            pipe.delete(key)
            pipe.srem(ITEM_INDEX_KEY, key)
            deleted, _ = await pipe.execute()
        if int(deleted) == 0:
            raise NotFoundError(f"Item ID: {item_id}")


def _parse_id(text: str) -> int:
    if _ID_PATTERN.fullmatch(text) is None or int(text) > USIZE_MAX:
        raise BadRequestError(f"Invalid URL: Cannot parse `{text}` to a `u64`")
    return int(text)


def create_app(store: ItemStore) -> FastAPI:
    """Build the items HTTP service around a store."""
    app = FastAPI()
    install_error_handler(app)

    @app.get("/api/items", response_model=list[Item])
    async def get_items() -> list[Item]:
        return await store.list_items()

    @app.post("/api/items", status_code=201, response_model=Item)
    async def create_item(payload: CreateItemPayload) -> Item:
        return await store.create(payload)

    @app.get("/api/items/{item_id}", response_model=Item)
    async def get_item(item_id: str) -> Item:
        return await store.get(_parse_id(item_id))

    @app.put("/api/items/{item_id}", response_model=Item)
    async def update_item(item_id: str, payload: CreateItemPayload) -> Item:
        return await store.update(_parse_id(item_id), payload)

    @app.delete("/api/items/{item_id}", status_code=204)
    async def delete_item(item_id: str) -> Response:
        await store.delete(_parse_id(item_id))
        return Response(status_code=204)

    return app
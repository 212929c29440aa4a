# storeapi/database.py
import re
from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient, ReturnDocument

from .config import Settings

# This file holds the store connection bootstrap and the two collection adapters.
# Services receive the adapters; nothing here keeps module-level state.

log = structlog.get_logger(__name__)

USERS = "users"
PRODUCTS = "products"


def connect(settings: Settings) -> AsyncMongoClient:
    client = AsyncMongoClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
    )
    log.info("store_client_created", db=settings.DB_NAME)
    return client


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return the ObjectId for `value`, or None when it is not a valid identity."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class UsersStore:
    """Credential store adapter over the `users` collection."""

    def __init__(self, collection):
        self._collection = collection

    async def ensure_indexes(self) -> None:
        await self._collection.create_index("username", unique=True)

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one({"username": username})

    async def find_by_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one({"_id": user_id})

    async def insert(self, document: Dict[str, Any]) -> Optional[ObjectId]:
        result = await self._collection.insert_one(document)
        if not result.acknowledged:
            return None
        return result.inserted_id

    async def set_cart_item(
        self, user_id: ObjectId, product_id: str, quantity: int
    ) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one_and_update(
            {"_id": user_id},
            {"$set": {f"cart.{product_id}": quantity}},
            return_document=ReturnDocument.AFTER,
        )

    async def unset_cart_item(self, user_id: ObjectId, product_id: str) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one_and_update(
            {"_id": user_id},
            {"$unset": {f"cart.{product_id}": ""}},
            return_document=ReturnDocument.AFTER,
        )

    async def purge_cart_item(self, product_id: str) -> int:
        """Drop `product_id` from every cart; returns how many users were touched."""
        key = f"cart.{product_id}"
        result = await self._collection.update_many(
            {key: {"$exists": True}}, {"$unset": {key: ""}}
        )
        return result.modified_count


class ProductsStore:
    """Catalog store adapter over the `products` collection."""

    def __init__(self, collection):
        self._collection = collection

    async def ensure_indexes(self) -> None:
        await self._collection.create_index("name", unique=True)

    async def find_by_id(self, product_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one({"_id": product_id})

    async def find_by_name(
        self, name: str, exclude_id: Optional[ObjectId] = None
    ) -> Optional[Dict[str, Any]]:
        query: Dict[str, Any] = {"name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self._collection.find_one(query)

    async def list(self, skip: int, limit: int) -> List[Dict[str, Any]]:
        cursor = self._collection.find({}, skip=skip, limit=limit)
        return await cursor.to_list(length=None)

    async def count(self) -> int:
        return await self._collection.count_documents({})

    async def search(self, text: str) -> List[Dict[str, Any]]:
        pattern = {"$regex": re.escape(text), "$options": "i"}
        cursor = self._collection.find(
            {"$or": [{"name": pattern}, {"description": pattern}, {"category": pattern}]}
        )
        return await cursor.to_list(length=None)

    async def insert(self, document: Dict[str, Any]) -> Optional[ObjectId]:
        result = await self._collection.insert_one(document)
        if not result.acknowledged:
            return None
        return result.inserted_id

    async def replace_fields(self, product_id: ObjectId, fields: Dict[str, Any]) -> int:
        """Overwrite `fields` on the product; returns the matched count."""
        result = await self._collection.update_one({"_id": product_id}, {"$set": fields})
        return result.matched_count

    async def delete(self, product_id: ObjectId) -> int:
        result = await self._collection.delete_one({"_id": product_id})
        return result.deleted_count

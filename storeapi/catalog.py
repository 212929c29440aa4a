# storeapi/catalog.py
from typing import Any, Dict, List

import structlog
from pymongo.errors import DuplicateKeyError

from .core import ProductIn, _make_product_dict
from .database import ProductsStore, UsersStore, parse_object_id
from .errors import DuplicateProduct, ProductNotFound, StorageFailure
from .models import Product

log = structlog.get_logger(__name__)


def _document(payload: ProductIn) -> Dict[str, Any]:
    return Product(**payload.model_dump()).model_dump()


class CatalogService:
    def __init__(self, products: ProductsStore, users: UsersStore):
        self._products = products
        self._users = users

    async def create(self, payload: ProductIn) -> str:
        if await self._products.find_by_name(payload.name):
            raise DuplicateProduct()
        try:
            product_id = await self._products.insert(_document(payload))
        except DuplicateKeyError:
            raise DuplicateProduct()
        if product_id is None:
            log.error("storage_failure", operation="create_product", name=payload.name)
            raise StorageFailure("error creating product")

        log.info("product_created", product_id=str(product_id), name=payload.name)
        return str(product_id)

    async def get(self, product_id: str) -> Dict[str, Any]:
        oid = parse_object_id(product_id)
        doc = await self._products.find_by_id(oid) if oid else None
        if doc is None:
            raise ProductNotFound()
        return _make_product_dict(doc)

    async def list(self, page: int, limit: int) -> Dict[str, Any]:
        # no sort key: store-native order, not stable across writes
        docs = await self._products.list(skip=(page - 1) * limit, limit=limit)
        total = await self._products.count()
        return {
            "items": [_make_product_dict(d) for d in docs],
            "totalCount": total,
            "page": page,
            "limit": limit,
        }

    async def search(self, query: str) -> List[Dict[str, Any]]:
        docs = await self._products.search(query or "")
        return [_make_product_dict(d) for d in docs]

    async def update(self, product_id: str, payload: ProductIn) -> str:
        oid = parse_object_id(product_id)
        if oid is None or await self._products.find_by_id(oid) is None:
            raise ProductNotFound()
        if await self._products.find_by_name(payload.name, exclude_id=oid):
            raise DuplicateProduct()

        try:
            matched = await self._products.replace_fields(oid, _document(payload))
        except DuplicateKeyError:
            raise DuplicateProduct()
        if matched == 0:
            # deleted between the existence check and the write
            log.error("storage_failure", operation="update_product", product_id=product_id)
            raise StorageFailure("error updating product")

        log.info("product_updated", product_id=product_id)
        return product_id

    async def delete(self, product_id: str) -> str:
        oid = parse_object_id(product_id)
        if oid is None or await self._products.delete(oid) == 0:
            raise ProductNotFound()

        purged = await self._users.purge_cart_item(str(oid))
        log.info("product_deleted", product_id=product_id, carts_purged=purged)
        return product_id

# storeapi/cart.py
from typing import Any, Dict, List

import structlog

from .core import _make_cart_list
from .database import ProductsStore, UsersStore, parse_object_id
from .errors import ProductNotFound, StorageFailure, UserNotFound

log = structlog.get_logger(__name__)


class CartService:
    """
    Per-user cart kept on the user document as ``{productId: quantity}``.

    Adding sets the quantity for the product, so repeating an add is a no-op
    and there is at most one line per product. Callers are identified by the
    user id resolved from their bearer token.
    """

    def __init__(self, users: UsersStore, products: ProductsStore):
        self._users = users
        self._products = products

    async def _require_user(self, user_id: str):
        oid = parse_object_id(user_id)
        user = await self._users.find_by_id(oid) if oid else None
        if user is None:
            raise UserNotFound()
        return user

    async def view(self, user_id: str) -> List[Dict[str, Any]]:
        user = await self._require_user(user_id)
        return _make_cart_list(user)

    async def add_item(self, user_id: str, product_id: str, quantity: int = 1) -> List[Dict[str, Any]]:
        user = await self._require_user(user_id)
        product_oid = parse_object_id(product_id)
        if product_oid is None or await self._products.find_by_id(product_oid) is None:
            raise ProductNotFound()

        # keys are always the canonical hex form so "cart.<id>" is a safe path
        updated = await self._users.set_cart_item(user["_id"], str(product_oid), quantity)
        if updated is None:
            log.error("storage_failure", operation="add_cart_item", user_id=user_id)
            raise StorageFailure("error adding item to cart")

        log.info("cart_item_added", user_id=user_id, product_id=str(product_oid), quantity=quantity)
        return _make_cart_list(updated)

    async def remove_item(self, user_id: str, product_id: str) -> List[Dict[str, Any]]:
        user = await self._require_user(user_id)
        product_oid = parse_object_id(product_id)
        if product_oid is None:
            # never a valid cart key, so nothing to remove
            return _make_cart_list(user)

        updated = await self._users.unset_cart_item(user["_id"], str(product_oid))
        if updated is None:
            log.error("storage_failure", operation="remove_cart_item", user_id=user_id)
            raise StorageFailure("error removing item from cart")

        log.info("cart_item_removed", user_id=user_id, product_id=str(product_oid))
        return _make_cart_list(updated)

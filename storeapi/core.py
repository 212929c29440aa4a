# storeapi/core.py
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import CartLine

# ---------------------------
# Request schemas
# ---------------------------
BCRYPT_MAX_BYTES = 72


class Credentials(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)


class AddToCartIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = Field(1, gt=0)


# ---------------------------
# Helpers
# ---------------------------
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def parse_paging(page: Optional[str], limit: Optional[str]) -> tuple:
    """Return (page, limit); absent, non-numeric or non-positive values use the defaults."""
    return _positive_int(page, DEFAULT_PAGE), _positive_int(limit, DEFAULT_LIMIT)


def _make_product_dict(doc: Dict[str, Any]) -> Dict[str, Any]:
    price = doc.get("price")
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name"),
        "description": doc.get("description", ""),
        "category": doc.get("category"),
        "price": None if isinstance(price, float) and math.isnan(price) else price,
    }


def _make_cart_list(user_doc: Dict[str, Any]) -> List[Dict[str, Any]]:
    cart = user_doc.get("cart") or {}
    return [CartLine(productId=pid, quantity=qty).model_dump() for pid, qty in cart.items()]

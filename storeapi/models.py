# storeapi/models.py
from typing import Dict

from pydantic import BaseModel, Field

# Shapes of the documents persisted in the "users" and "products" collections.
# The store assigns "_id" on insert.


class User(BaseModel):
    username: str
    password: str  # bcrypt hash, never the clear text
    cart: Dict[str, int] = Field(default_factory=dict)  # productId -> quantity


class Product(BaseModel):
    name: str
    description: str = ""
    category: str
    price: float


class CartLine(BaseModel):
    productId: str
    quantity: int

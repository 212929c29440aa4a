# tests/test_errors.py
from pymongo.errors import ServerSelectionTimeoutError

from storeapi.database import ProductsStore, UsersStore


def create_product(client, name="Widget"):
    return client.post("/products", json={"name": name, "category": "tools", "price": 1}).json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_unacknowledged_insert_is_500(client, monkeypatch):
    async def unacknowledged(self, document):
        return None

    monkeypatch.setattr(UsersStore, "insert", unacknowledged)
    r = client.post("/users/register", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 500
    assert r.json() == {"message": "error registering user"}


def test_update_of_product_deleted_mid_write_is_500(client, monkeypatch):
    pid = create_product(client)

    async def nothing_matched(self, product_id, fields):
        return 0

    monkeypatch.setattr(ProductsStore, "replace_fields", nothing_matched)
    r = client.put(f"/products/{pid}", json={"name": "Gadget", "category": "toys", "price": 2})
    assert r.status_code == 500
    assert r.json() == {"message": "error updating product"}


def test_remove_without_updated_document_is_500(client, monkeypatch, alice_headers):
    pid = create_product(client)

    async def no_document(self, user_id, product_id):
        return None

    monkeypatch.setattr(UsersStore, "unset_cart_item", no_document)
    r = client.delete(f"/cart/{pid}", headers=alice_headers)
    assert r.status_code == 500
    assert r.json() == {"message": "error removing item from cart"}


def test_driver_error_is_generic_500(client, monkeypatch):
    async def unreachable(self):
        raise ServerSelectionTimeoutError("db-primary:27017: [Errno 111] Connection refused")

    monkeypatch.setattr(ProductsStore, "count", unreachable)
    r = client.get("/products")
    assert r.status_code == 500
    assert r.json() == {"message": "storage failure"}
    assert "27017" not in r.text

# sdk/pystore.py
import requests
import httpx
from typing import Optional


class StoreClient:
    def __init__(self, base_url: str = "http://localhost:8085", token: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self.use_token(token)

    def use_token(self, token: str):
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs):
        r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    # Users
    def register(self, username: str, password: str):
        return self._request("POST", "/users/register", json={"username": username, "password": password})

    def login(self, username: str, password: str) -> str:
        body = self._request("POST", "/users/login", json={"username": username, "password": password})
        self.use_token(body["token"])
        return body["token"]

    # Products
    def create_product(self, name: str, price: float, category: str, description: str = ""):
        return self._request("POST", "/products", json={
            "name": name, "description": description, "category": category, "price": price
        })

    def list_products(self, page: int = 1, limit: int = 10):
        return self._request("GET", "/products", params={"page": page, "limit": limit})

    def search_products(self, q: str = ""):
        return self._request("GET", "/products/search", params={"q": q})["items"]

    def get_product(self, product_id: str):
        return self._request("GET", f"/products/{product_id}")

    def update_product(self, product_id: str, name: str, price: float, category: str, description: str = ""):
        # full replace: every field is overwritten
        return self._request("PUT", f"/products/{product_id}", json={
            "name": name, "description": description, "category": category, "price": price
        })

    def delete_product(self, product_id: str):
        return self._request("DELETE", f"/products/{product_id}")

    # Cart (requires login)
    def add_to_cart(self, product_id: str, quantity: int = 1):
        return self._request("POST", "/cart", json={"productId": product_id, "quantity": quantity})

    def remove_from_cart(self, product_id: str):
        return self._request("DELETE", f"/cart/{product_id}")

    def view_cart(self):
        return self._request("GET", "/cart")["cart"]

    # Async add (example)
    async def add_to_cart_async(self, product_id: str, quantity: int = 1):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(
                f"{self.base_url}/cart",
                json={"productId": product_id, "quantity": quantity},
                headers=headers,
            )
            return r


if __name__ == "__main__":
    import argparse
    from rich import print

    parser = argparse.ArgumentParser(description="PyStore CLI")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085")
    parser.add_argument("--token", help="Bearer token from `login`")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # User commands
    # ---------------------------
    for name in ("register", "login"):
        p = subparsers.add_parser(name, help=f"{name.capitalize()} a user")
        p.add_argument("--username", required=True)
        p.add_argument("--password", required=True)

    # ---------------------------
    # Product commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List products page by page")
    lp.add_argument("--page", type=int, default=1)
    lp.add_argument("--limit", type=int, default=10)

    sp = subparsers.add_parser("search", help="Search name, description and category")
    sp.add_argument("--q", default="", help="Case-insensitive text")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True)

    for name in ("create-product", "update-product"):
        p = subparsers.add_parser(name)
        if name == "update-product":
            p.add_argument("--product-id", required=True)
        p.add_argument("--name", required=True)
        p.add_argument("--price", type=float, required=True)
        p.add_argument("--category", required=True)
        p.add_argument("--description", default="")

    dp = subparsers.add_parser("delete-product")
    dp.add_argument("--product-id", required=True)

    # ---------------------------
    # Cart commands
    # ---------------------------
    add = subparsers.add_parser("add-to-cart", help="Add product to cart")
    add.add_argument("--product-id", required=True)
    add.add_argument("--qty", type=int, default=1)

    rm = subparsers.add_parser("remove-from-cart", help="Remove product from cart")
    rm.add_argument("--product-id", required=True)

    subparsers.add_parser("view-cart", help="View cart contents")

    # ---------------------------
    # Parse and execute
    # ---------------------------
    args = parser.parse_args()
    c = StoreClient(base_url=args.base_url, token=args.token)

    if args.command == "register":
        print(c.register(args.username, args.password))
    elif args.command == "login":
        print(c.login(args.username, args.password))
    elif args.command == "list-products":
        print(c.list_products(args.page, args.limit))
    elif args.command == "search":
        print(c.search_products(args.q))
    elif args.command == "get-product":
        print(c.get_product(args.product_id))
    elif args.command == "create-product":
        print(c.create_product(args.name, args.price, args.category, args.description))
    elif args.command == "update-product":
        print(c.update_product(args.product_id, args.name, args.price, args.category, args.description))
    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))
    elif args.command == "add-to-cart":
        print(c.add_to_cart(args.product_id, args.qty))
    elif args.command == "remove-from-cart":
        print(c.remove_from_cart(args.product_id))
    elif args.command == "view-cart":
        print(c.view_cart())

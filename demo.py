#!/usr/bin/env python
import uuid
from sdk.pystore import StoreClient


def main():
    c = StoreClient(base_url="http://127.0.0.1:8085")
    suffix = uuid.uuid4().hex[:6]
    username = f"alice-{suffix}"

    # -----------------------------
    # Register and log in
    # -----------------------------
    print("Registering user...")
    print(c.register(username, "pw1"))
    print("\nLogging in...")
    print(c.login(username, "pw1"))

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    widget = c.create_product(f"Widget-{suffix}", "9.99", "tools", "a small widget")
    lamp = c.create_product(f"Lamp-{suffix}", 24.5, "lighting", "brass desk lamp")
    print(widget)
    print(lamp)

    # -----------------------------
    # List and search
    # -----------------------------
    print("\nListing first page...")
    print(c.list_products(page=1, limit=5))
    print("\nSearching for 'widget'...")
    print(c.search_products("widget"))

    # -----------------------------
    # Cart
    # -----------------------------
    print("\nAdding widget to cart twice (same quantity)...")
    print(c.add_to_cart(widget["id"], 2))
    print(c.add_to_cart(widget["id"], 2))
    print("\nViewing cart...")
    print(c.view_cart())
    print("\nRemoving widget...")
    print(c.remove_from_cart(widget["id"]))

    # -----------------------------
    # Clean up
    # -----------------------------
    print("\nDeleting demo products...")
    print(c.delete_product(widget["id"]))
    print(c.delete_product(lamp["id"]))


if __name__ == "__main__":
    main()

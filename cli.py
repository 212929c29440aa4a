# cli.py
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.pystore import StoreClient
import requests

console = Console()
c = StoreClient(base_url=os.getenv("STORE_URL", "http://127.0.0.1:8085"))


# Global state for status messages and caching
status_message = "Ready"
current_user: Optional[str] = None
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=24)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=15)
    table.add_column("Description", width=30)

    for p in products:
        price = p.get("price")
        table.add_row(
            p.get("id", "N/A"),
            p.get("name", "N/A"),
            f"${price:.2f}" if isinstance(price, (int, float)) else "N/A",
            p.get("category", "N/A"),
            p.get("description", "")
        )
    console.print(table)


def show_cart(cart: List[Dict[str, Any]]):
    title = Text()
    title.append("🛒 Shopping Cart - ", style="bold")
    title.append(current_user or "Unknown User", style="bold cyan")

    if not cart:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    names = {p.get("id"): p.get("name") for p in product_cache}
    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Product ID", style="dim", width=24)
    table.add_column("Qty", justify="right", width=8)

    for line in cart:
        pid = line.get("productId", "?")
        table.add_row(names.get(pid, f"Product {pid[:8]}"), pid, str(line.get("quantity", 0)))

    console.print(Panel(table, title=title, border_style="blue"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_message(e: Exception) -> str:
    # the API answers every error with {"message": ...}
    if isinstance(e, requests.exceptions.HTTPError) and e.response is not None:
        try:
            return f"HTTP {e.response.status_code}: {e.response.json().get('message')}"
        except ValueError:
            return f"HTTP {e.response.status_code}"
    return str(e)


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Returns the result, or None
    after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except (requests.exceptions.RequestException, KeyError) as e:
        status_message = f"Error: {_error_message(e)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_product_cache(limit: int = 100):
    global product_cache
    page = try_api(c.list_products, 1, limit)
    product_cache = page["items"] if page else []


def get_product_completer():
    if not product_cache:
        refresh_product_cache()
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_category_completer():
    return WordCompleter(sorted({p.get("category", "") for p in product_cache} - {""}), ignore_case=True)


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ PyStore SDK",
        "[bold blue]E-Commerce CLI with Autocomplete[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_product_fields(defaults: Optional[Dict[str, Any]] = None):
    defaults = defaults or {}
    name = prompt_with_autocomplete("Enter product name", default=defaults.get("name", ""))
    price = ask_float("💰 Price", default=defaults.get("price", 10.0))
    category = prompt_with_autocomplete(
        "🏷️ Category", completer=get_category_completer(), default=defaults.get("category", "general")
    )
    description = prompt_with_autocomplete("📝 Description", default=defaults.get("description", ""))
    return name, price, category, description


def require_login() -> bool:
    if c.token:
        return True
    console.print(show_status("Log in first (option 2)", False))
    return False


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, current_user

    console.clear()
    console.print(create_header())
    refresh_product_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "👤 Register", "7", "✏️ Update product"),
            ("2", "🔑 Log in", "8", "🗑️ Delete product"),
            ("3", "📦 List products", "9", "🛒 Add to cart"),
            ("4", "🔍 Search products", "10", "➖ Remove from cart"),
            ("5", "➕ Create product", "11", "👀 View cart"),
            ("6", "ℹ️ Get product by ID", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        who = f" (logged in as {current_user})" if current_user else ""
        console.print(Panel(menu_table, title=f"📋 Menu{who}", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 12)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            username = prompt_with_autocomplete("Choose a username")
            password = Prompt.ask("Choose a password", password=True)
            try_api(c.register, username, password, success_msg=f"User '{username}' registered")

        elif choice == "2":
            username = prompt_with_autocomplete("Username", default=current_user or "")
            password = Prompt.ask("Password", password=True)
            if try_api(c.login, username, password, success_msg=f"Logged in as {username}"):
                current_user = username

        elif choice == "3":
            page = IntPrompt.ask("Page", default=1)
            limit = IntPrompt.ask("Page size", default=10)
            resp = try_api(c.list_products, page, limit, success_msg="Products loaded successfully")
            if resp is not None:
                show_products(resp["items"], title=f"📦 Page {resp['page']} ({resp['totalCount']} products)")

        elif choice == "4":
            term = prompt_with_autocomplete("Enter search term")
            res = try_api(c.search_products, term, success_msg=f"Search for '{term}' completed")
            if res is not None:
                show_products(res)

        elif choice == "5":
            name, price, category, description = ask_product_fields()
            resp = try_api(
                c.create_product, name, price, category, description,
                success_msg=f"Product '{name}' created successfully"
            )
            if resp:
                console.print(Panel(f"Created product: [green]{resp['id']}[/green]"))
                refresh_product_cache()

        elif choice == "6":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            resp = try_api(c.get_product, pid, success_msg=f"Product {pid} details loaded")
            if resp:
                show_products([resp])

        elif choice == "7":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            current = try_api(c.get_product, pid)
            if current:
                name, price, category, description = ask_product_fields(current)
                if try_api(c.update_product, pid, name, price, category, description,
                           success_msg=f"Product {pid} updated"):
                    refresh_product_cache()

        elif choice == "8":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete product {pid}? It is also removed from every cart.[/red]"):
                if try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted"):
                    refresh_product_cache()

        elif choice == "9":
            if require_login():
                pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
                qty = IntPrompt.ask("Enter quantity", default=1)
                resp = try_api(c.add_to_cart, pid, qty, success_msg=f"Cart now holds {qty} of product {pid}")
                if resp is not None:
                    show_cart(resp["cart"])

        elif choice == "10":
            if require_login():
                pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
                resp = try_api(c.remove_from_cart, pid, success_msg=f"Product {pid} removed from cart")
                if resp is not None:
                    show_cart(resp["cart"])

        elif choice == "11":
            if require_login():
                resp = try_api(c.view_cart, success_msg=f"Cart loaded for {current_user}")
                if resp is not None:
                    show_cart(resp)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for using PyStore! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)

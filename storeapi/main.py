# storeapi/main.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from .auth import AuthService, current_user_id
from .cart import CartService
from .catalog import CatalogService
from .config import Settings, settings as default_settings
from .core import AddToCartIn, Credentials, ProductIn, parse_paging
from .database import PRODUCTS, USERS, ProductsStore, UsersStore, connect
from .errors import StoreError, ValidationFailure
from .logging_config import configure_logging

log = structlog.get_logger(__name__)


# ---------------------------
# Lifecycle
# ---------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Opens the store connection once, wires the services onto app.state and
    creates the unique indexes backing username / product-name uniqueness.
    """
    settings: Settings = app.state.settings
    client = None
    database = app.state.database
    if database is None:
        client = connect(settings)
        database = client[settings.DB_NAME]

    users = UsersStore(database[USERS])
    products = ProductsStore(database[PRODUCTS])
    await users.ensure_indexes()
    await products.ensure_indexes()

    app.state.auth_service = AuthService(users, settings)
    app.state.catalog_service = CatalogService(products, users)
    app.state.cart_service = CartService(users, products)
    log.info("app_started", app=settings.APP_NAME, env=settings.APP_ENV.value)

    yield

    log.info("app_stopping")
    if client is not None:
        await client.close()


def create_app(settings: Optional[Settings] = None, database=None) -> FastAPI:
    """
    Build the API. `database` lets callers (tests) inject an already-open
    database handle instead of connecting with MONGODB_URI.
    """
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(title="api-store", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)
    _install_routes(app)
    return app


# ---------------------------
# Error boundary
# ---------------------------
def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=ValidationFailure.status_code,
            content={"message": ValidationFailure.message, "errors": errors},
        )

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(request: Request, exc: PyMongoError):
        log.error("storage_failure", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"message": "storage failure"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content={"message": "internal server error"})


# ---------------------------
# Routes
# ---------------------------
def _install_routes(app: FastAPI) -> None:
    def auth_service(request: Request) -> AuthService:
        return request.app.state.auth_service

    def catalog_service(request: Request) -> CatalogService:
        return request.app.state.catalog_service

    def cart_service(request: Request) -> CartService:
        return request.app.state.cart_service

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # Users
    @app.post("/users/register")
    async def register(payload: Credentials, service: AuthService = Depends(auth_service)):
        await service.register(payload.username, payload.password)
        return {"message": "user registered successfully"}

    @app.post("/users/login")
    async def login(payload: Credentials, service: AuthService = Depends(auth_service)):
        token = await service.login(payload.username, payload.password)
        return {"message": "login successful", "token": token}

    # Products
    @app.post("/products")
    async def create_product(payload: ProductIn, service: CatalogService = Depends(catalog_service)):
        product_id = await service.create(payload)
        return {"message": "product created successfully", "id": product_id}

    @app.get("/products")
    async def list_products(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        service: CatalogService = Depends(catalog_service),
    ):
        page_no, page_size = parse_paging(page, limit)
        return await service.list(page_no, page_size)

    @app.get("/products/search")
    async def search_products(
        q: str = Query(""),
        service: CatalogService = Depends(catalog_service),
    ):
        return {"items": await service.search(q)}

    @app.get("/products/{product_id}")
    async def get_product(product_id: str, service: CatalogService = Depends(catalog_service)):
        return await service.get(product_id)

    @app.put("/products/{product_id}")
    async def update_product(
        product_id: str,
        payload: ProductIn,
        service: CatalogService = Depends(catalog_service),
    ):
        await service.update(product_id, payload)
        return {"message": "product updated successfully", "id": product_id}

    @app.delete("/products/{product_id}")
    async def delete_product(product_id: str, service: CatalogService = Depends(catalog_service)):
        await service.delete(product_id)
        return {"message": "product deleted successfully", "id": product_id}

    # Cart
    @app.get("/cart")
    async def view_cart(
        user_id: str = Depends(current_user_id),
        service: CartService = Depends(cart_service),
    ):
        return {"cart": await service.view(user_id)}

    @app.post("/cart")
    async def add_to_cart(
        payload: AddToCartIn,
        user_id: str = Depends(current_user_id),
        service: CartService = Depends(cart_service),
    ):
        cart = await service.add_item(user_id, payload.product_id, payload.quantity)
        return {"message": "item added to cart", "cart": cart}

    @app.delete("/cart/{product_id}")
    async def remove_from_cart(
        product_id: str,
        user_id: str = Depends(current_user_id),
        service: CartService = Depends(cart_service),
    ):
        cart = await service.remove_item(user_id, product_id)
        return {"message": "item removed from cart", "cart": cart}


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)

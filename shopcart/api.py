from fastapi import FastAPI

from .auth.controller import router as auth_router
from .cart.controller import router as cart_router
from .products.controller import router as products_router
from .users.controller import router as users_router


def register_routes(app: FastAPI):
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(cart_router)
    app.include_router(products_router)

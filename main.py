# main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from shopcart.logging import logger
from shopcart.api import register_routes
from shopcart.core.config import settings
from shopcart.core.error_handlers import add_request_id_middleware, setup_error_handlers
from shopcart.database.core import close_client, ensure_indexes, get_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    try:
        ensure_indexes(get_database())
    except PyMongoError as e:
        # The store may come up after the API; requests will fail until it does
        logger.warning(f"Database initialization warning: {e}")

    logger.info("Application startup completed")

    yield

    # Shutdown
    close_client()
    logger.info("Database client closed")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

# Set up error handlers
setup_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request ID for error tracking
app.middleware("http")(add_request_id_middleware)

register_routes(app)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/", tags=["Root"])
def read_root():
    """A simple health-check endpoint."""
    return {"status": "ok", "message": "ShopCart API is running"}


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting FastAPI application directly...")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)

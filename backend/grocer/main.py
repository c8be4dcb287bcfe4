"""
YourGrocer - Backend API
Online grocery ordering marketplace
"""
import random
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from grocer.api import auth, cart, categories, orders, products, stores, users
from grocer.core.clock import utc_now
from grocer.core.config import Settings, settings as default_settings
from grocer.core.database import InMemoryDatabase
from grocer.core.exceptions import register_exception_handlers
from grocer.core.logging_config import get_logger, setup_logging
from grocer.core.rate_limit import RateLimiter, RateLimitMiddleware
from grocer.services.seed_service import seed_sample_data

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, db: Optional[InMemoryDatabase] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Defaults to the environment settings
        db: Defaults to a fresh in-memory database

    Every call gets its own database (unless one is passed in) and its own
    rate limiter.
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION
    )

    app.state.settings = settings
    app.state.db = db if db is not None else InMemoryDatabase()
    app.state.clock = utc_now
    app.state.rng = random.Random()

    if settings.SEED_SAMPLE_DATA:
        seed_sample_data(app.state.db, settings.DEMO_VENDOR_PASSWORD)

    if settings.RATE_LIMIT_ENABLED:
        app.state.rate_limiter = RateLimiter()
        app.add_middleware(
            RateLimitMiddleware,
            limiter=app.state.rate_limiter,
            max_requests=settings.RATE_LIMIT_PER_MINUTE
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms")
        return response

    # Added last so it wraps everything, including 429 responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routers
    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=prefix, tags=["Authentication"])
    app.include_router(users.router, prefix=prefix, tags=["Users"])
    app.include_router(categories.router, prefix=f"{prefix}/categories", tags=["Categories"])
    app.include_router(stores.router, prefix=f"{prefix}/stores", tags=["Stores"])
    app.include_router(products.router, prefix=f"{prefix}/products", tags=["Products"])
    app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["Orders"])
    app.include_router(cart.router, prefix=f"{prefix}/cart", tags=["Cart"])

    @app.get("/")
    async def root():
        """Root endpoint - API status"""
        return {
            "message": "YourGrocer API",
            "status": "online",
            "version": settings.API_VERSION,
            "description": settings.API_DESCRIPTION
        }

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint for monitoring"""
        db = request.app.state.db
        return {
            "status": "healthy",
            "service": "yourgrocer-api",
            "version": settings.API_VERSION,
            "database": {
                "type": "in-memory",
                "stores": db.count("stores"),
                "products": db.count("products"),
                "orders": db.count("orders"),
            }
        }

    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} ready (prefix {prefix})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "grocer.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=True
    )

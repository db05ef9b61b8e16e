from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peterparts.api.v1.auth_route import auth_router
from peterparts.api.v1.product_route import products_router
from peterparts.api.v1.user_route import users_router
from peterparts.core.config import settings
from peterparts.core.errors import register_exception_handlers
from peterparts.core.logging_config import configure_logging
from peterparts.db.session import dispose_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates database tables on startup and releases the connection pool
    on shutdown.
    """
    await init_db()
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up logging, CORS, JSON error handlers, health checks and the
    auth, product and user routers.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    configure_logging()

    app = FastAPI(
        title="PeterParts API",
        description="Kitchen appliance parts store: passwordless login and product catalog",
        version="1.0.0",
        lifespan=lifespan
    )

    # Cookies are sent cross-origin, so origins must be explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(products_router, prefix="/products", tags=["products"])
    app.include_router(users_router, prefix="/users", tags=["users"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for load balancers and monitoring.

        Returns:
            dict: Health status response.
        """
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        return {"message": "PeterParts API"}

    return app

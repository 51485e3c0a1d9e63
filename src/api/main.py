"""
FastAPI application factory.
Creates the app with CORS, store initialization, and router registration.
Swagger UI available at /docs, ReDoc at /redoc.
"""
import sys
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Ensure src/ is on the path
_src_dir = str(Path(__file__).parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic for the FastAPI app."""
    import config
    from api.dependencies import get_store
    from utils.logger import get_logger

    logger = get_logger()
    store = get_store()
    app.state.store = store

    logger.info(f"Data directory: {store.data_dir}", component="API")
    logger.info(f"Swagger UI: http://localhost:{config.API_PORT}/docs", component="API")

    yield

    logger.info("Shutting down API server", component="API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    import config

    app = FastAPI(
        title="PhotoTools POS API",
        description=(
            "REST API for the photo shop point of sale - product catalog, "
            "order drafts, order history, exports and SMS relay."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.API_CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["Content-Disposition"],
    )

    # Register routers
    from api.routes.product_routes import router as product_router
    from api.routes.order_routes import router as order_router
    from api.routes.draft_routes import router as draft_router
    from api.routes.export_routes import router as export_router
    from api.routes.sms_routes import router as sms_router
    from api.routes.health_routes import router as health_router

    app.include_router(product_router, prefix="/api/products", tags=["Products"])
    app.include_router(order_router, prefix="/api", tags=["Orders"])
    app.include_router(draft_router, prefix="/api/drafts", tags=["Drafts"])
    app.include_router(export_router, prefix="/api", tags=["Exports"])
    app.include_router(sms_router, prefix="/api", tags=["SMS"])
    app.include_router(health_router, prefix="/health", tags=["Health"])

    @app.get("/api", tags=["Root"])
    async def root():
        """API root."""
        return {
            "service": "PhotoTools POS API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
        }

    # Front-end pages, if shipped alongside the API
    static_dir = Path(config.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app

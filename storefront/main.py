"""
Main FastAPI application
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from pathlib import Path
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.core.config import settings
from storefront.core.database import build_sessionmaker, engine as default_engine
from storefront.core.events import lifespan
from storefront.core.middleware import setup_middleware
from storefront.core.websocket import ConnectionManager, manager
from storefront.repositories import FileStore
from storefront.services.notification import ProductBroadcaster
from storefront.api.v1 import api_router
from storefront.api.views import router as views_router
from storefront.api.websocket_routes import router as websocket_router

STATIC_DIR = Path(__file__).parent / "static"

def create_app(
    file_store: Optional[FileStore] = None,
    engine: Optional[AsyncEngine] = None,
    connections: Optional[ConnectionManager] = None,
) -> FastAPI:
    """
    Build the application around one storage backend
    A file store takes precedence; otherwise the SQL engine is used
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Products and shopping carts over REST, HTML views and WebSocket",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    if file_store is None and engine is None and settings.use_file_storage:
        file_store = FileStore(settings.DATA_DIR)

    app.state.file_store = file_store
    app.state.engine = None
    app.state.session_factory = None
    if file_store is None:
        app.state.engine = engine or default_engine
        app.state.session_factory = build_sessionmaker(app.state.engine)
    app.state.connections = connections if connections is not None else manager
    app.state.broadcaster = ProductBroadcaster(app.state.connections)

    # Setup middleware
    setup_middleware(app)

    # Include routes
    app.include_router(api_router, prefix="/api")
    app.include_router(websocket_router)
    app.include_router(views_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Health check
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "storage": "file" if app.state.file_store is not None else "database",
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )

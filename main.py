"""
Asset Store API - uploaded static assets over HTTP

Handles:
- Upload of images, videos and web resources into one flat directory
- Listing and deletion for authenticated callers
- Public serving of stored files with an extension based Content-Type
"""
import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assets import AssetService, AssetStore
from assets import routes as asset_routes
from config import Settings, settings as default_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Asset Store API",
        version="1.0.0",
        description="Upload and host static assets"
    )

    store = AssetStore(settings.ASSET_ROOT, atomic_writes=settings.ATOMIC_WRITES)
    app.state.settings = settings
    app.state.asset_store = store
    app.state.asset_service = AssetService.from_settings(settings, store)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(asset_routes.router, prefix=settings.URL_PREFIX, tags=["Assets"])

    @app.get("/")
    def root():
        return {
            "service": "asset-store-api",
            "version": "1.0.0",
            "description": "Upload and host static assets"
        }

    @app.get("/health")
    def health():
        writable = os.access(store.root, os.R_OK | os.W_OK | os.X_OK)
        return {
            "status": "healthy" if writable else "degraded",
            "service": "asset-store-api",
            "asset_root_writable": writable,
        }

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app(default_settings)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)

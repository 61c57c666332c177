from __future__ import annotations

import logging
import sys
from typing import Optional

from dotenv import load_dotenv
load_dotenv()

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from catalog.config import Settings, get_settings
from catalog.errors import register_exception_handlers
from catalog.infra.db import QueryGateway, create_db_engine
from catalog.infra.models import create_schema
from catalog.infra.storage_s3 import ObjectStore

from catalog.api.routers.health import router as health_router
from catalog.api.routers.products import router as products_router

logger = logging.getLogger("catalog")

# campos de texto + boundary do multipart
FORM_OVERHEAD_BYTES = 1024 * 1024


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[QueryGateway] = None,
    store: Optional[ObjectStore] = None,
) -> FastAPI:
    """
    Build the API.

    The connection pool and the S3 store are handles on `app.state`. Anything
    passed in is used as is; whatever is missing is built on startup from
    `settings` and released on shutdown.
    """
    settings = settings or get_settings()

    app = FastAPI(title="Product Catalog API")
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.store = store

    register_exception_handlers(app)

    max_request_bytes = settings.MAX_UPLOAD_BYTES + FORM_OVERHEAD_BYTES

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > max_request_bytes:
            return JSONResponse(status_code=413, content={"message": "Payload too large"})
        return await call_next(request)

    # adicionado por ultimo = mais externo, assim o 413 tambem leva headers de CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    owned: list[str] = []

    @app.on_event("startup")
    def _startup() -> None:
        if app.state.gateway is None:
            engine = create_db_engine(settings)
            create_schema(engine)
            app.state.gateway = QueryGateway(engine)
            owned.append("gateway")
            logger.info("[startup] database pool ready, tables created/checked")
        if app.state.store is None:
            app.state.store = ObjectStore.from_settings(settings)
            logger.info("[startup] object store ready (bucket=%s)", settings.AWS_BUCKET_NAME)

    @app.on_event("shutdown")
    def _shutdown() -> None:
        if "gateway" in owned:
            app.state.gateway.dispose()

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Backend is running"

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(products_router, prefix="/api/products", tags=["products"])

    logger.info("[CORS] allow_origins = %s", settings.allowed_origins)
    return app


configure_logging(get_settings().LOG_LEVEL)
app = create_app()


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)


if __name__ == "__main__":
    run()

# catalog/api/routers/health.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from catalog.api.deps import AppSettings, Gateway
from catalog.config import Settings
from catalog.errors import QueryError
from catalog.infra.db import QueryGateway

logger = logging.getLogger(__name__)

router = APIRouter()


def _safe_err(e: Exception) -> str:
    s = str(e) or e.__class__.__name__
    # evita vazar url/credenciais (best effort)
    for k in ("postgres://", "postgresql://", "postgresql+psycopg2://"):
        if k in s:
            s = "db_error"
    return s[:300]


@router.head("/health", include_in_schema=False)
def health_head() -> Response:
    return Response(status_code=200)


@router.get("/health")
async def health(gateway: QueryGateway = Gateway, settings: Settings = AppSettings) -> Any:
    try:
        result = await run_in_threadpool(gateway.query, "SELECT CURRENT_TIMESTAMP AS now")
    except QueryError as e:
        logger.warning("health check failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={
                "status": "Error",
                "database": "Disconnected",
                "error": _safe_err(e),
            },
        )

    row = result.first() or {}
    return {
        "status": "Online",
        "database": "Connected",
        "server_time": row.get("now"),
        "environment": settings.APP_ENV,
    }

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_utils import configure_logging, log_event
from .middleware import RequestStatsMiddleware
from .serialization import to_json_dict, to_xml
from .settings import get_settings
from .stats import RequestStats

XML_MEDIA_TYPE = "application/xml"
SUPPORTED_FORMATS = ("json", "xml")

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()
stats = RequestStats()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    stats.start()
    log_event(
        logger,
        "service.started",
        pid=stats.store.process_id,
        stats_path=settings.stats_path,
    )
    try:
        yield
    finally:
        stats.stop(timeout=5)


app = FastAPI(title="reqstats", lifespan=lifespan)
app.add_middleware(RequestStatsMiddleware, stats=stats)



def _error_payload(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


def _raise_http_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> None:
    raise HTTPException(
        status_code=status_code,
        detail=_error_payload(code=code, message=message, details=details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        payload = exc.detail
    else:
        payload = _error_payload(code="http_error", message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next: Any) -> Response:
    request_id = request.headers.get("X-Request-ID", str(uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response



def _negotiate_format(requested: Optional[str], accept: str) -> str:
    if requested is None:
        return "xml" if XML_MEDIA_TYPE in accept else "json"
    normalized = requested.strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        _raise_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="unsupported_format",
            message="Unsupported stats format",
            details={"format": requested, "supported": list(SUPPORTED_FORMATS)},
        )
    return normalized


@app.get("/health/live", summary="Liveness check endpoint")
async def liveness_check() -> dict[str, str]:
    return {"status": "ok"}


@app.get(settings.stats_path, summary="Request statistics snapshot")
def read_stats(
    request: Request,
    output_format: Optional[str] = Query(None, alias="format", description="json or xml"),
) -> Response:
    chosen = _negotiate_format(output_format, request.headers.get("accept", ""))
    snapshot = stats.data()
    if chosen == "xml":
        return Response(content=to_xml(snapshot), media_type=XML_MEDIA_TYPE)
    return JSONResponse(content=to_json_dict(snapshot))

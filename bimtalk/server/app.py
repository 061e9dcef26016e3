"""
bimtalk HTTP API.
Chat intent detection and metadata summaries for the model viewer.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from bimtalk import __version__
from bimtalk.config import Settings, configure_logging, load_settings
from bimtalk.metadata import InputShapeError, OverloadError, build_element_summary, build_wall_summary
from bimtalk.metadata.report import COMMON_PROPERTIES, WALL_PROPERTIES
from bimtalk.nlp import ChatAssistant, ChatResponse

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str | None = None
    thread_id: str | None = None


class RowsRequest(BaseModel):
    # Left untyped so a missing or malformed batch maps to 400, not 422
    rows: Any = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Parameters
    ----------
    settings:
        Runtime settings.  Loaded from the environment when omitted.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="bimtalk",
        description="Chat intents and metadata summaries for a BIM model viewer",
        version=__version__,
    )
    app.state.settings = settings
    app.state.assistant = ChatAssistant()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- error mapping ----------------------------------------------------

    @app.exception_handler(InputShapeError)
    async def _input_shape(request: Request, exc: InputShapeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(OverloadError)
    async def _overload(request: Request, exc: OverloadError) -> JSONResponse:
        logger.warning("Rejected %d rows on %s (limit %d)", exc.received, request.url.path, exc.limit)
        return JSONResponse(status_code=413, content={"error": "Too many rows"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and request.url.path.startswith("/api"):
            return JSONResponse(status_code=404, content={"error": "Unknown API route."})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)},
        )

    # -- health -----------------------------------------------------------

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True, "msg": "bimtalk server up", "endpoint": "POST /api/chat"}

    @app.get("/api/chat/health")
    async def chat_health() -> dict[str, Any]:
        return {"ok": True, "endpoint": "POST /api/chat"}

    # -- chat -------------------------------------------------------------

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(body: ChatRequest, request: Request) -> ChatResponse:
        assistant: ChatAssistant = request.app.state.assistant
        return assistant.respond(body.message, body.thread_id)

    # -- metadata ---------------------------------------------------------

    @app.get("/api/walls/fields")
    async def wall_fields() -> dict[str, list[str]]:
        return {"properties": list(WALL_PROPERTIES)}

    @app.get("/api/elements/fields")
    async def element_fields() -> dict[str, list[str]]:
        return {"properties": list(COMMON_PROPERTIES)}

    @app.get("/api/walls/summary")
    async def wall_summary_query(
        request: Request,
        rows: str | None = Query(default=None, description="JSON array of wall rows"),
    ) -> Any:
        parsed: Any = None
        if rows is not None:
            try:
                parsed = json.loads(rows)
            except json.JSONDecodeError:
                return JSONResponse(
                    status_code=400, content={"error": "rows query must be JSON array"}
                )
        summary = build_wall_summary(parsed, request.app.state.settings.max_rows)
        return summary.grouped_summary()

    @app.post("/api/walls/summary")
    async def wall_summary(body: RowsRequest, request: Request) -> dict[str, Any]:
        summary = build_wall_summary(body.rows, request.app.state.settings.max_rows)
        return summary.to_payload()

    @app.post("/api/elements/summary")
    async def element_summary(body: RowsRequest, request: Request) -> dict[str, Any]:
        summary = build_element_summary(body.rows, request.app.state.settings.max_rows)
        return summary.to_payload()

    return app


app = create_app()

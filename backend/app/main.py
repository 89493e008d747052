from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backend.db import create_engine, create_session_factory, init_db

from .ai import ChatCompanion, OpenAIClient, SuggestionSelector
from .ai.templates import SYSTEM_PROMPT
from .api.v1.routes import router as api_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .middleware import RequestLoggingMiddleware
from .services.conversation import ConversationStore
from .services.storage import StorageService

logger = logging.getLogger(__name__)
FRONTEND_DIR = Path(__file__).resolve().parents[2] / "public"
INDEX_FILE = FRONTEND_DIR / "index.html"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire storage, text generation and the chat companion for the app's lifetime."""

    configure_logging()
    settings: Settings = get_settings()

    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    await init_db(engine, session_factory, settings.version)
    storage_service = StorageService(session_factory)

    openai_client = OpenAIClient(
        settings.openai_api_key,
        model=settings.openai_model,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature,
        timeout=settings.request_timeout_seconds,
    )
    conversations = ConversationStore(SYSTEM_PROMPT, limit=settings.chat_history_limit)
    suggestion_selector = SuggestionSelector(openai_client, window=settings.suggestions_window)
    chat_companion = ChatCompanion(
        conversations=conversations,
        client=openai_client,
        storage=storage_service,
    )

    app.state.settings = settings
    app.state.storage_service = storage_service
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.openai_client = openai_client
    app.state.conversations = conversations
    app.state.suggestion_selector = suggestion_selector
    app.state.chat_companion = chat_companion

    logger.info(
        "MoodBuddy started version=%s ai=%s",
        settings.version,
        "openai" if openai_client.available else "scripted",
    )

    try:
        yield
    finally:
        await chat_companion.drain()
        await engine.dispose()


app = FastAPI(title="MoodBuddy", version=get_settings().version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

if FRONTEND_DIR.exists():
    app.mount("/static", StaticFiles(directory=FRONTEND_DIR, html=False), name="static")
else:  # pragma: no cover - depends on deployment layout
    logger.warning("Frontend directory not found at %s", FRONTEND_DIR)

app.include_router(api_router)


@app.get("/healthz")
async def healthz(request: Request) -> dict[str, str]:
    settings: Settings = request.app.state.settings
    return {"status": "ok", "version": settings.version}


@app.get("/readyz")
async def readyz(request: Request) -> dict[str, Any]:
    storage: StorageService = request.app.state.storage_service
    openai_client: OpenAIClient = request.app.state.openai_client

    db_ok = True
    db_detail = "ok"
    schema_version: str | None = None
    try:
        await storage.healthcheck()
        schema_version = await storage.get_setting("schema_version")
    except Exception as exc:
        logger.exception("Database readiness check failed: %s", exc)
        db_ok = False
        db_detail = str(exc)

    return {
        "ready": db_ok,
        "db": {"ok": db_ok, "detail": db_detail, "schema_version": schema_version},
        "ai": {
            "configured": openai_client.available,
            "model": openai_client.model if openai_client.available else "scripted",
        },
    }


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/", response_class=HTMLResponse)
async def root() -> str:
    if INDEX_FILE.exists():
        return INDEX_FILE.read_text(encoding="utf-8")
    return "<!DOCTYPE html><h1>MoodBuddy</h1><p>Track your mood, one day at a time.</p>"

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from ...ai import AIUnavailable, ChatCompanion, SuggestionSelector
from ...core.config import Settings
from ...core.security import hash_password, require_user, verify_password
from ...insights import (
    DashboardStats,
    UnknownMoodCategory,
    compute_dashboard_stats,
    evaluate_badges,
    is_known_mood,
)
from ...metrics import USER_API_COUNTER
from ...schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    UserPublic,
)
from ...schemas.chat import (
    ChatHistoryItem,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    SuggestionsRequest,
    SuggestionsResponse,
)
from ...schemas.mood import (
    BadgeListResponse,
    BadgeModel,
    DashboardResponse,
    MoodCreate,
    MoodCreateResponse,
    MoodEntryModel,
)
from ...services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["core"])

AI_UNAVAILABLE_DETAIL = "AI service temporarily unavailable. Please try again later."


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


def get_suggestion_selector(request: Request) -> SuggestionSelector:
    return request.app.state.suggestion_selector


def get_chat_companion(request: Request) -> ChatCompanion:
    return request.app.state.chat_companion


async def _dashboard_for(
    storage: StorageService, settings: Settings, user_id: str
) -> DashboardStats:
    entries = await storage.list_moods_by_date(user_id)
    try:
        return compute_dashboard_stats(
            entries,
            strict=settings.strict_mood_categories,
            trend_policy=settings.mood_trend_policy,
        )
    except UnknownMoodCategory as exc:
        logger.error("Stored mood outside the category set", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


# -- auth --------------------------------------------------------------
@router.post(
    "/auth/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    payload: SignupRequest,
    storage: StorageService = Depends(get_storage_service),
) -> SignupResponse:
    existing = await storage.find_user_by_email_or_username(payload.email, payload.username)
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
    password_hash = await asyncio.to_thread(hash_password, payload.password)
    user = await storage.create_user(
        username=payload.username,
        email=payload.email,
        password_hash=password_hash,
    )
    logger.info("User signed up", extra={"user_id": user.id})
    USER_API_COUNTER.labels(endpoint="auth_signup").inc()
    return SignupResponse(user_id=user.id)


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    storage: StorageService = Depends(get_storage_service),
) -> LoginResponse:
    user = await storage.get_user_by_email(payload.email)
    if user is None or not await asyncio.to_thread(
        verify_password, payload.password, user.password_hash
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    USER_API_COUNTER.labels(endpoint="auth_login").inc()
    return LoginResponse(
        user=UserPublic(
            id=user.id,
            username=user.username,
            email=user.email,
            avatar_url=user.avatar_url,
        )
    )


# -- moods -------------------------------------------------------------
@router.post(
    "/moods",
    response_model=MoodCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_mood_entry(
    request: Request,
    payload: MoodCreate,
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
) -> MoodCreateResponse:
    user_id = await require_user(request, payload.user_id)
    if settings.strict_mood_categories and not is_known_mood(payload.mood):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"unknown mood category: {payload.mood!r}",
        )
    entry = await storage.add_mood_entry(user_id=user_id, mood=payload.mood, note=payload.note)
    USER_API_COUNTER.labels(endpoint="moods_post").inc()
    return MoodCreateResponse(mood=MoodEntryModel.model_validate(entry))


@router.get("/moods/{user_id}", response_model=list[MoodEntryModel])
async def list_mood_entries(
    user_id: str = Depends(require_user),
    storage: StorageService = Depends(get_storage_service),
    limit: int | None = Query(default=None, ge=1, le=1000),
) -> list[MoodEntryModel]:
    entries = await storage.list_mood_entries(user_id=user_id, limit=limit)
    USER_API_COUNTER.labels(endpoint="moods_get").inc()
    return [MoodEntryModel.model_validate(entry) for entry in entries]


@router.get("/dashboard/{user_id}", response_model=DashboardResponse)
async def dashboard(
    user_id: str = Depends(require_user),
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
) -> DashboardResponse:
    stats = await _dashboard_for(storage, settings, user_id)
    USER_API_COUNTER.labels(endpoint="dashboard").inc()
    return DashboardResponse(**asdict(stats))


@router.get("/badges/{user_id}", response_model=BadgeListResponse)
async def badges(
    user_id: str = Depends(require_user),
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
) -> BadgeListResponse:
    stats = await _dashboard_for(storage, settings, user_id)
    USER_API_COUNTER.labels(endpoint="badges").inc()
    return BadgeListResponse(
        badges=[BadgeModel.model_validate(badge) for badge in evaluate_badges(stats)]
    )


# -- suggestions and chat ----------------------------------------------
@router.post("/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    request: Request,
    payload: SuggestionsRequest,
    storage: StorageService = Depends(get_storage_service),
    selector: SuggestionSelector = Depends(get_suggestion_selector),
) -> SuggestionsResponse:
    user_id = await require_user(request, payload.user_id)
    recent = payload.recent_moods
    if recent is None:
        recent = await storage.recent_moods(user_id, limit=selector.window)
    if not recent:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Log some moods first to get personalized suggestions",
        )
    try:
        result = await selector.select(recent)
    except AIUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=AI_UNAVAILABLE_DETAIL,
        ) from exc
    USER_API_COUNTER.labels(endpoint="suggestions").inc()
    return SuggestionsResponse(suggestions=result.suggestions, source=result.source)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    payload: ChatRequest,
    companion: ChatCompanion = Depends(get_chat_companion),
) -> ChatResponse:
    user_id = await require_user(request, payload.user_id)
    try:
        response = await companion.reply(user_id, payload.message)
    except AIUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=AI_UNAVAILABLE_DETAIL,
        ) from exc
    USER_API_COUNTER.labels(endpoint="chat_post").inc()
    return ChatResponse(response=response)


@router.get("/chat/{user_id}", response_model=ChatHistoryResponse)
async def chat_history(
    user_id: str = Depends(require_user),
    storage: StorageService = Depends(get_storage_service),
    limit: int = Query(default=100, ge=1, le=500),
) -> ChatHistoryResponse:
    rows = await storage.list_chat_messages(user_id, limit=limit)
    USER_API_COUNTER.labels(endpoint="chat_get").inc()
    return ChatHistoryResponse(history=[ChatHistoryItem.model_validate(row) for row in rows])


# -- account -----------------------------------------------------------
@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str = Depends(require_user),
    storage: StorageService = Depends(get_storage_service),
    companion: ChatCompanion = Depends(get_chat_companion),
) -> Response:
    await companion.drain()
    await storage.delete_user(user_id)
    await companion.forget(user_id)
    logger.info("User deleted", extra={"user_id": user_id})
    USER_API_COUNTER.labels(endpoint="user_delete").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

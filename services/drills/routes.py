# services/drills/routes.py
"""HTTP routes for drills, attempts and the caller's profile."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.auth import User, get_current_user
from packages.common.cache import TTLCache
from packages.common.config import get_settings
from packages.common.errors import NotFound
from packages.common.metrics import mark_attempt, mark_cache
from packages.common.rbac import require_roles
from packages.common.tracing import emit_event
from packages.schemas.drills import (
    AttemptDetail,
    AttemptHistory,
    AttemptResult,
    AttemptSummary,
    Difficulty,
    Drill,
    DrillList,
    DrillRef,
    DrillSummary,
    UserProfile,
)
from . import repo
from .scorer import score_attempt
from .validation import validate_drill, validate_submission

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_cache(request: Request) -> TTLCache:
    """The drill list cache attached to the app at startup."""
    return request.app.state.drills_cache


def list_cache_key(difficulty: Optional[str], tag: Optional[str]) -> str:
    return f"drills:list?difficulty={difficulty or ''}&tag={tag or ''}"


@router.get("/drills", response_model=DrillList, tags=["drills"])
async def list_drills(
    difficulty: Optional[Difficulty] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(repo.get_session),
    cache: TTLCache = Depends(get_cache),
) -> Any:
    """List drill summaries newest first; served from the TTL cache when fresh."""
    key = list_cache_key(difficulty, tag)
    cached = await cache.get(key)
    mark_cache(cached is not None)
    if cached is not None:
        return cached
    rows = await repo.list_drills(session, difficulty=difficulty, tag=tag)
    data = DrillList(
        drills=[DrillSummary(id=d.id, title=d.title, difficulty=d.difficulty, tags=d.tags or []) for d in rows]
    ).model_dump(mode="json", by_alias=True)
    await cache.set(key, data)
    return data


@router.get("/drills/{drill_id}", response_model=Drill, response_model_exclude={"created_at"}, tags=["drills"])
async def read_drill(drill_id: str, session: AsyncSession = Depends(repo.get_session)) -> Drill:
    row = await repo.get_drill(session, drill_id)
    if row is None:
        raise NotFound("Drill not found")
    return repo.drill_to_schema(row)


@router.post("/drills", response_model=Drill, status_code=status.HTTP_201_CREATED, tags=["drills"])
async def create_drill(
    payload: Any = Body(...),
    user: User = Depends(require_roles("admin")),
    session: AsyncSession = Depends(repo.get_session),
    cache: TTLCache = Depends(get_cache),
) -> Drill:
    """Create a drill; rejected with VALIDATION_ERROR unless it has exactly five questions."""
    result = validate_drill(payload)
    if not result.ok:
        result.raise_for_api()
    row = await repo.create_drill(session, result.value)
    await cache.clear()
    emit_event(user.sub, "created", f"drill:{row.id}", title=row.title)
    return repo.drill_to_schema(row)


@router.post("/attempts", response_model=AttemptResult, tags=["attempts"])
async def submit_attempt(
    payload: Any = Body(...),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(repo.get_session),
) -> AttemptResult:
    """Score the submitted answers against the drill and store the attempt.

    Resubmitting the same answers stores another attempt.
    """
    result = validate_submission(payload)
    if not result.ok:
        result.raise_for_api()
    submission = result.value

    row = await repo.get_drill(session, submission.drill_id)
    if row is None:
        raise NotFound("Drill not found")

    scored = score_attempt(repo.drill_to_schema(row), submission.answers)
    attempt = await repo.add_attempt(session, user.sub, row.id, submission.answers, scored.score)
    # a rollback during the user refresh expires loaded rows
    attempt_id, drill_id, difficulty = attempt.id, row.id, row.difficulty
    try:
        await repo.upsert_user(session, user)
    except IntegrityError:
        # the attempt is already stored; the profile catches up on the next call
        log.warning("user refresh failed", exc_info=True, extra={"fields": {"user_id": user.sub}})

    mark_attempt(difficulty, scored.score)
    emit_event(user.sub, "attempted", f"drill:{drill_id}", attempt_id=attempt_id, score=scored.score)
    log.info("attempt scored", extra={"fields": {"attempt_id": attempt_id, "score": scored.score}})
    return AttemptResult(id=attempt_id, score=scored.score, details=scored.details)


@router.get("/attempts", response_model=AttemptHistory, tags=["attempts"])
async def list_attempts(
    limit: int = Query(default=5),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(repo.get_session),
) -> AttemptHistory:
    """The caller's latest attempts, newest first."""
    limit = max(1, min(limit, get_settings().ATTEMPTS_MAX_LIMIT))
    rows = await repo.list_attempts(session, user.sub, limit=limit)
    return AttemptHistory(
        attempts=[
            AttemptSummary(
                id=a.id,
                drill=DrillRef(id=d.id, title=d.title, difficulty=d.difficulty) if d is not None else None,
                score=a.score,
                created_at=a.created_at,
            )
            for a, d in rows
        ]
    )


@router.get("/attempts/{attempt_id}", response_model=AttemptDetail, tags=["attempts"])
async def read_attempt(
    attempt_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(repo.get_session),
) -> AttemptDetail:
    a = await repo.get_attempt(session, attempt_id, user.sub)
    if a is None:
        raise NotFound("Attempt not found")
    return AttemptDetail(
        id=a.id,
        user_id=a.user_id,
        drill_id=a.drill_id,
        answers=a.answers,
        score=a.score,
        created_at=a.created_at,
    )


@router.get("/me", response_model=UserProfile, tags=["users"])
async def me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(repo.get_session),
) -> UserProfile:
    row = await repo.upsert_user(session, user)
    return UserProfile(
        id=row.id,
        email=row.email,
        name=row.name,
        picture=row.picture,
        created_at=row.created_at,
    )

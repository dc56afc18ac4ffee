"""Repository layer for the Drills service.

Provides async database initialization, a per-request session dependency and
CRUD helpers for users, drills and attempts.
"""

from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool

from .models import Base, User, Drill, Attempt
from packages.common.auth import User as TokenUser
from packages.common.config import get_settings
from packages.schemas import drills as schemas


@lru_cache()
def get_engine() -> AsyncEngine:
    """Return the process-wide async engine built from settings.

    SQLite connections are not pooled; aiosqlite connections are tied to the
    event loop that opened them.
    """
    dsn = get_settings().DATABASE_DSN
    if dsn.startswith("sqlite"):
        return create_async_engine(dsn, echo=False, poolclass=NullPool)
    return create_async_engine(dsn, echo=False)


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    async with get_sessionmaker()() as session:
        yield session


async def init_db() -> None:
    """Create database schema if it doesn't exist."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _email_held_by_other(session: AsyncSession, email: str, user_id: str) -> bool:
    res = await session.execute(select(User.id).where(User.email == email, User.id != user_id))
    return res.first() is not None


async def upsert_user(session: AsyncSession, who: TokenUser, retries: int = 3) -> User:
    """Create the user on first sight, refresh profile fields from later tokens.

    An email already held by another user is not copied onto this one. A
    concurrent insert of the same user (or email) loses with IntegrityError;
    the transaction is rolled back and the row re-read before trying again.
    """
    email = who.email.strip().lower() if who.email else None
    failures = 0
    while True:
        if email and await _email_held_by_other(session, email, who.sub):
            email = None
        user = await session.get(User, who.sub)
        if user is None:
            user = User(id=who.sub, email=email, name=who.name, picture=who.picture)
            session.add(user)
        else:
            user.email = email or user.email
            user.name = who.name or user.name
            user.picture = who.picture or user.picture
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            failures += 1
            if failures >= retries:
                raise
            continue
        await session.refresh(user)
        return user


async def create_drill(session: AsyncSession, payload: schemas.CreateDrill) -> Drill:
    """Insert a validated drill and return the created row."""
    drill = Drill(
        title=payload.title,
        difficulty=payload.difficulty,
        tags=list(payload.tags),
        questions=[q.model_dump() for q in payload.questions],
    )
    session.add(drill)
    await session.commit()
    await session.refresh(drill)
    return drill


async def get_drill(session: AsyncSession, drill_id: str) -> Drill | None:
    """Fetch a single drill by id.

    Returns:
        The Drill if found; otherwise None.
    """
    return await session.get(Drill, drill_id)


async def get_drill_by_title(session: AsyncSession, title: str) -> Drill | None:
    res = await session.execute(select(Drill).where(Drill.title == title.strip()))
    return res.scalars().first()


async def list_drills(
    session: AsyncSession,
    difficulty: str | None = None,
    tag: str | None = None,
) -> list[Drill]:
    """List drills newest first, optionally filtered by difficulty and tag."""
    q = select(Drill).order_by(Drill.created_at.desc())
    if difficulty is not None:
        q = q.where(Drill.difficulty == difficulty)
    res = await session.execute(q)
    rows = list(res.scalars())
    # JSON containment differs per dialect; tags are few, filter here.
    if tag is not None:
        rows = [d for d in rows if tag in (d.tags or [])]
    return rows


async def delete_drills(session: AsyncSession) -> int:
    res = await session.execute(delete(Drill))
    await session.commit()
    return res.rowcount or 0


async def add_attempt(
    session: AsyncSession,
    user_id: str,
    drill_id: str,
    answers: list[schemas.Answer],
    score: int,
) -> Attempt:
    """Persist a scored attempt and return it."""
    attempt = Attempt(
        user_id=user_id,
        drill_id=drill_id,
        answers=[a.model_dump() for a in answers],
        score=score,
    )
    session.add(attempt)
    await session.commit()
    await session.refresh(attempt)
    return attempt


async def list_attempts(
    session: AsyncSession,
    user_id: str,
    limit: int = 5,
) -> list[tuple[Attempt, Drill | None]]:
    """Return the user's latest attempts paired with their drill (None if gone)."""
    q = (
        select(Attempt, Drill)
        .outerjoin(Drill, Drill.id == Attempt.drill_id)
        .where(Attempt.user_id == user_id)
        .order_by(Attempt.created_at.desc())
        .limit(limit)
    )
    res = await session.execute(q)
    return [(a, d) for a, d in res.all()]


async def get_attempt(session: AsyncSession, attempt_id: str, user_id: str) -> Attempt | None:
    """Fetch an attempt only if it belongs to `user_id`."""
    res = await session.execute(
        select(Attempt).where(Attempt.id == attempt_id, Attempt.user_id == user_id)
    )
    return res.scalar_one_or_none()


def drill_to_schema(row: Drill) -> schemas.Drill:
    return schemas.Drill(
        id=row.id,
        title=row.title,
        difficulty=row.difficulty,
        tags=list(row.tags or []),
        questions=[schemas.Question.model_validate(q) for q in row.questions],
        created_at=row.created_at,
    )

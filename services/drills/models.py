"""SQLAlchemy models for the Drills service.

Defines three tables:
- User: Accounts known from verified tokens.
- Drill: Five-question drills; questions and tags are stored as JSON documents.
- Attempt: A user's scored submission; answers are stored as a JSON document.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import JSON, DateTime, Index, Integer, String, Text

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Account entity keyed by the token subject.

    Attributes:
        id: Token `sub` claim.
        email: Lowercased email address, unique when present.
        name: Display name.
        picture: Optional avatar URL.
        created_at: First time the user was seen.
    """

    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), unique=True, nullable=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    picture: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Drill(Base):
    """Drill entity.

    Attributes:
        id: Opaque hex id.
        title: Trimmed drill title.
        difficulty: One of easy/medium/hard.
        tags: JSON list of tag strings.
        questions: JSON list of `{id, prompt, keywords}` documents.
        created_at: Creation time; the drill list is ordered newest first.
    """

    __tablename__ = "drills"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200))
    difficulty: Mapped[str] = mapped_column(String(16), index=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    questions: Mapped[list] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Attempt(Base):
    """Attempt entity; immutable once written.

    Attributes:
        id: Opaque hex id.
        user_id: Owner (User.id); not enforced as a foreign key.
        drill_id: Scored drill (Drill.id); not enforced as a foreign key.
        answers: JSON list of `{qid, text}` documents in submission order.
        score: Aggregate percentage in [0, 100].
        created_at: Submission time.
    """

    __tablename__ = "attempts"
    __table_args__ = (Index("ix_attempts_user_created", "user_id", "created_at"),)
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255))
    drill_id: Mapped[str] = mapped_column(String(32))
    answers: Mapped[list] = mapped_column(JSON)
    score: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

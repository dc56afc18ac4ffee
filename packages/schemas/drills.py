"""Drill schemas: questions, drills, submitted answers, scores and attempts.

Wire payloads use camelCase (`drillId`, `createdAt`); models accept either
spelling on input and FastAPI serializes responses by alias.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Difficulty = Literal["easy", "medium", "hard"]

QUESTIONS_PER_DRILL = 5


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Question(_Wire):
    """An interview-style prompt with the keywords a good answer mentions."""
    id: str
    prompt: str
    keywords: List[str] = []


class Drill(_Wire):
    """A set of questions answered and scored together."""
    id: str
    title: str
    difficulty: Difficulty
    tags: List[str] = []
    questions: List[Question]
    created_at: Optional[datetime] = None


class CreateDrill(_Wire):
    """Payload for creating a new drill."""
    title: str
    difficulty: Difficulty
    tags: List[str] = []
    questions: List[Question]

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v

    @field_validator("questions")
    @classmethod
    def _exactly_five(cls, v: List[Question]) -> List[Question]:
        if len(v) != QUESTIONS_PER_DRILL:
            raise ValueError(f"Each drill must have exactly {QUESTIONS_PER_DRILL} questions")
        for q in v:
            if not q.keywords or any(not k.strip() for k in q.keywords):
                raise ValueError(f"Question {q.id!r} needs at least one non-empty keyword")
        return v


class Answer(_Wire):
    """A learner's free-text answer to one question."""
    qid: str
    text: str


class SubmitAttempt(_Wire):
    """Payload for submitting answers to a drill."""
    drill_id: str
    answers: List[Answer]


class ScoreDetail(_Wire):
    """Per-answer keyword match report."""
    qid: str
    score: int = Field(ge=0)
    total: int = Field(default=0, ge=0)
    details: str


class ScoreResult(_Wire):
    score: int = Field(ge=0, le=100)
    details: List[ScoreDetail] = []


class AttemptResult(ScoreResult):
    """Response to a submitted attempt."""
    id: str


class DrillSummary(_Wire):
    id: str
    title: str
    difficulty: Difficulty
    tags: List[str] = []


class DrillList(_Wire):
    drills: List[DrillSummary]


class DrillRef(_Wire):
    id: str
    title: str
    difficulty: Difficulty


class AttemptSummary(_Wire):
    """One row of the attempt history."""
    id: str
    drill: Optional[DrillRef] = None
    score: int
    created_at: datetime


class AttemptHistory(_Wire):
    attempts: List[AttemptSummary]


class AttemptDetail(_Wire):
    """A stored attempt with the answers it was scored on."""
    id: str
    user_id: str
    drill_id: str
    answers: List[Answer]
    score: int
    created_at: datetime


class UserProfile(_Wire):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    created_at: datetime

"""Request payload validation returning typed results.

Validators never raise; they return `Valid` with the parsed model or
`Invalid` with field-level issues, leaving persistence and HTTP concerns to
the caller (`Invalid.raise_for_api` maps onto the shared error shape).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from packages.common.errors import VALIDATION_ERROR, ValidationFailed
from packages.schemas.drills import CreateDrill, SubmitAttempt

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Valid(Generic[M]):
    value: M
    ok: bool = True


@dataclass(frozen=True)
class Invalid:
    message: str
    issues: List[dict] = field(default_factory=list)
    code: str = VALIDATION_ERROR
    ok: bool = False

    def raise_for_api(self) -> None:
        raise ValidationFailed(self.message, self.issues or None)


Result = Union[Valid[M], Invalid]


def _issues(err: ValidationError) -> List[dict]:
    return [
        {"loc": [str(p) for p in e["loc"]], "msg": e["msg"].removeprefix("Value error, ")}
        for e in err.errors()
    ]


def validate(model: Type[M], payload: Any) -> Result:
    """Parse `payload` into `model`, collecting issues instead of raising."""
    if not isinstance(payload, dict):
        return Invalid("Invalid input data", [{"loc": [], "msg": "Expected a JSON object"}])
    try:
        return Valid(model.model_validate(payload))
    except ValidationError as e:
        return Invalid("Invalid input data", _issues(e))


def validate_submission(payload: Any) -> Result:
    """`drillId` and `answers` (a list of `{qid, text}` strings) are required."""
    return validate(SubmitAttempt, payload)


def validate_drill(payload: Any) -> Result:
    """A drill needs a title, a known difficulty and exactly five keyworded questions."""
    return validate(CreateDrill, payload)

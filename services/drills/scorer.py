"""Keyword scoring for drill attempts.

Functions:
- match_keywords: which of a question's keywords occur in an answer.
- score_answer: per-answer report against the drill's questions.
- score_attempt: aggregate the reports into a percentage `ScoreResult`.

Matching is a case-insensitive substring test: "prescoped" matches the
keyword "scope". Scoring never raises for unknown question ids; such answers
score 0 of 0 and do not move the aggregate.
"""

from typing import Iterable, List, Optional, Sequence

from packages.schemas.drills import Answer, Drill, Question, ScoreDetail, ScoreResult

QUESTION_NOT_FOUND = "Question not found"


def percent_half_up(matched: int, total: int) -> int:
    """Return round(100 * matched / total) with halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * matched + total) // (2 * total)


def find_question(questions: Sequence[Question], qid: str) -> Optional[Question]:
    return next((q for q in questions if q.id == qid), None)


def match_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Return the keywords contained in `text`, ignoring case, in keyword order."""
    haystack = text.lower()
    return [k for k in keywords if k.lower() in haystack]


def score_answer(questions: Sequence[Question], answer: Answer) -> ScoreDetail:
    """Score one answer against the question it names."""
    q = find_question(questions, answer.qid)
    if q is None:
        return ScoreDetail(qid=answer.qid, score=0, total=0, details=QUESTION_NOT_FOUND)
    matched = len(match_keywords(answer.text, q.keywords))
    total = len(q.keywords)
    return ScoreDetail(
        qid=answer.qid,
        score=matched,
        total=total,
        details=f"Matched {matched} of {total} keywords",
    )


def score_attempt(drill: Drill, answers: Sequence[Answer]) -> ScoreResult:
    """Aggregate per-answer keyword matches into a percentage in [0, 100].

    Details follow the order of `answers`, not the drill's question order.
    """
    details = [score_answer(drill.questions, a) for a in answers]
    matched = sum(d.score for d in details)
    total = sum(d.total for d in details)
    return ScoreResult(score=percent_half_up(matched, total), details=details)

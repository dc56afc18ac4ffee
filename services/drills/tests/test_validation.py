"""Tests for request payload validation."""

from conftest import drill_payload
import pytest

from packages.common.errors import ValidationFailed
from services.drills.validation import Invalid, Valid, validate_drill, validate_submission


def test_valid_submission() -> None:
    res = validate_submission({"drillId": "abc", "answers": [{"qid": "q1", "text": "scope"}]})
    assert isinstance(res, Valid)
    assert res.value.drill_id == "abc"
    assert res.value.answers[0].text == "scope"


def test_empty_answers_are_allowed() -> None:
    assert validate_submission({"drillId": "abc", "answers": []}).ok


@pytest.mark.parametrize(
    "payload,loc",
    [
        ({"answers": []}, ["drillId"]),
        ({"drillId": "abc"}, ["answers"]),
        ({"drillId": 7, "answers": []}, ["drillId"]),
        ({"drillId": "abc", "answers": [{"qid": "q1"}]}, ["answers", "0", "text"]),
        ({"drillId": "abc", "answers": [{"qid": 1, "text": "x"}]}, ["answers", "0", "qid"]),
        ({"drillId": "abc", "answers": "q1=scope"}, ["answers"]),
    ],
)
def test_invalid_submission(payload: dict, loc: list) -> None:
    res = validate_submission(payload)
    assert isinstance(res, Invalid)
    assert res.code == "VALIDATION_ERROR"
    assert loc in [i["loc"] for i in res.issues]


def test_non_object_payload() -> None:
    res = validate_submission(["drillId"])
    assert not res.ok
    assert res.issues == [{"loc": [], "msg": "Expected a JSON object"}]


def test_valid_drill_trims_title() -> None:
    payload = drill_payload(title="  Closures  ")
    res = validate_drill(payload)
    assert res.ok
    assert res.value.title == "Closures"
    assert len(res.value.questions) == 5


@pytest.mark.parametrize("n", [0, 4, 6])
def test_drill_needs_exactly_five_questions(n: int) -> None:
    res = validate_drill(drill_payload(n=n))
    assert not res.ok
    assert any("exactly 5 questions" in i["msg"] for i in res.issues)


def test_drill_rejects_unknown_difficulty() -> None:
    res = validate_drill(drill_payload(difficulty="expert"))
    assert not res.ok
    assert ["difficulty"] in [i["loc"] for i in res.issues]


def test_drill_rejects_blank_title_and_empty_keywords() -> None:
    payload = drill_payload(title="   ")
    payload["questions"][2]["keywords"] = []
    res = validate_drill(payload)
    locs = [i["loc"] for i in res.issues]
    assert ["title"] in locs
    assert ["questions"] in locs


def test_invalid_raises_shared_error() -> None:
    res = validate_drill({})
    with pytest.raises(ValidationFailed) as ei:
        res.raise_for_api()
    assert ei.value.status_code == 400
    assert ei.value.details

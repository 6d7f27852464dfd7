from __future__ import annotations

import json

import pytest

from estrategia_enem.core.exceptions import ParseError, UpstreamError, ValidationError
from estrategia_enem.services.ai_service.essay_grading_service import (
    ESSAY_MAX_TOKENS,
    ESSAY_TEMPERATURE,
    fallback_grade,
    grade_essay,
    parse_grading_reply,
    validate_essay,
)

pytestmark = pytest.mark.anyio

THEME = "Desafios da inteligência artificial na educação"


def _reply(scores, total=None, feedback="Bom texto."):
    return json.dumps(
        {
            "nota_total": sum(scores) if total is None else total,
            "competencias": {f"competencia_{i}": s for i, s in enumerate(scores, start=1)},
            "feedback": feedback,
        }
    )


async def test_body_of_99_chars_is_rejected_before_network_call(completion_endpoint):
    with pytest.raises(ValidationError, match="pelo menos 100 caracteres"):
        await grade_essay(THEME, "a" * 99, completion_endpoint.client())

    assert completion_endpoint.requests == []


async def test_body_of_100_chars_is_graded(completion_endpoint):
    completion_endpoint.reply_with(_reply([160, 140, 120, 180, 100]))

    grade = await grade_essay(THEME, "a" * 100, completion_endpoint.client())

    assert grade.total_score == 700
    assert grade.competencies == (160, 140, 120, 180, 100)
    assert grade.used_fallback is False
    body = completion_endpoint.requests[0]["json"]
    assert body["temperature"] == ESSAY_TEMPERATURE
    assert body["max_tokens"] == ESSAY_MAX_TOKENS
    assert body["messages"][0]["content"].endswith(f"Tema da redação: {THEME}")


async def test_non_json_reply_falls_back_to_default_grade(completion_endpoint):
    raw = "Sua redação está boa, mas precisa de uma proposta de intervenção."
    completion_endpoint.reply_with(raw)

    grade = await grade_essay(THEME, "b" * 150, completion_endpoint.client())

    assert grade.total_score == 600
    assert grade.competencies == (120, 120, 120, 120, 120)
    assert grade.feedback == raw
    assert grade.used_fallback is True


async def test_upstream_failure_propagates(completion_endpoint):
    completion_endpoint.fail_with(503, "The server is overloaded")

    with pytest.raises(UpstreamError, match="overloaded"):
        await grade_essay(THEME, "c" * 150, completion_endpoint.client())


def test_missing_theme_is_rejected():
    with pytest.raises(ValidationError):
        validate_essay("   ", "x" * 200)


def test_parse_accepts_fenced_json():
    raw = "```json\n" + _reply([200, 200, 200, 200, 200]) + "\n```"

    grade = parse_grading_reply(raw)

    assert grade.total_score == 1000


def test_parse_clamps_out_of_range_competencies_and_recomputes_total():
    grade = parse_grading_reply(_reply([250, -10, 120, 120, 120], total=600))

    assert grade.competencies == (200, 0, 120, 120, 120)
    assert grade.total_score == 560
    assert grade.total_score == sum(grade.competencies)


def test_parse_recomputes_inconsistent_total():
    grade = parse_grading_reply(_reply([100, 100, 100, 100, 100], total=900))

    assert grade.total_score == 500


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "null",
        "[1, 2, 3]",
        json.dumps({"nota_total": 600, "feedback": "sem competências"}),
        json.dumps({"nota_total": 600, "competencias": {"competencia_1": 120}, "feedback": "x"}),
        _reply(["alto", 120, 120, 120, 120], total=480),
        _reply([120, 120, 120, 120, 120], feedback=None),
    ],
)
def test_parse_rejects_nonconforming_replies(raw):
    with pytest.raises(ParseError):
        parse_grading_reply(raw)


def test_fallback_is_deterministic():
    assert fallback_grade("texto") == fallback_grade("texto")
    assert fallback_grade("texto").to_response() == {
        "totalScore": 600,
        "competencies": {
            "competency1": 120,
            "competency2": 120,
            "competency3": 120,
            "competency4": 120,
            "competency5": 120,
        },
        "feedback": "texto",
    }

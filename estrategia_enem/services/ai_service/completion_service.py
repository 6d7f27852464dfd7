"""Single entry point for the AI activities behind the quota gate."""

from __future__ import annotations

from typing import Mapping, Union

from estrategia_enem.core.completion_client import CompletionClient
from estrategia_enem.core.exceptions import ValidationError
from estrategia_enem.services.ai_service.essay_grading_service import EssayGrade, grade_essay
from estrategia_enem.services.ai_service.tutoring_service import ChatCompletion, answer_question
from estrategia_enem.utils.enums import ActivityKind

CompletionResult = Union[ChatCompletion, EssayGrade]


async def request_completion(
    kind: ActivityKind,
    payload: Mapping[str, str],
    client: CompletionClient,
) -> CompletionResult:
    """Run one completion for ``kind``.

    ``payload`` holds ``question``/``subject`` for chat and ``theme``/``body``
    for essays.

    Raises:
        ValidationError: If the payload is incomplete or the essay too short
        UpstreamError: If the completion endpoint fails
    """
    kind = ActivityKind(kind)
    if kind == ActivityKind.chat:
        return await answer_question(payload.get("question", ""), payload.get("subject"), client)
    if not payload.get("theme") or not payload.get("body"):
        raise ValidationError("Tema, texto e userId são obrigatórios")
    return await grade_essay(payload["theme"], payload["body"], client)

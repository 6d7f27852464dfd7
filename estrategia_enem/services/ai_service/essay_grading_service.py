"""ENEM essay correction through the completion endpoint.

The model is asked for a JSON reply with the five official competencies.
Model output cannot be trusted to follow the format, so a reply that does not
parse is replaced by a fixed default grade (120 per competency, 600 total)
with the raw reply kept as feedback. A reply that parses but breaks the
score bounds is clamped, and the total is always recomputed from the
competencies.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Tuple

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from estrategia_enem.core.completion_client import CompletionClient
from estrategia_enem.core.exceptions import ParseError, ValidationError

logger = logging.getLogger(__name__)

ESSAY_TEMPERATURE = 0.3
ESSAY_MAX_TOKENS = 1500
MIN_ESSAY_LENGTH = 100

COMPETENCY_MIN = 0
COMPETENCY_MAX = 200
COMPETENCY_COUNT = 5
FALLBACK_COMPETENCY_SCORE = 120

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)

RUBRIC_PROMPT = """Você é um corretor oficial do ENEM com experiência na avaliação de redações. Avalie a redação seguindo EXATAMENTE os critérios oficiais do ENEM.

CRITÉRIOS DE AVALIAÇÃO (0 a 200 pontos cada):

1. COMPETÊNCIA 1 - Domínio da modalidade escrita formal da língua portuguesa
   - Ortografia, acentuação, pontuação, concordância, regência e sintaxe

2. COMPETÊNCIA 2 - Compreensão da proposta e aplicação de conceitos das várias áreas do conhecimento
   - Compreensão do tema, repertório sociocultural, articulação de conhecimentos

3. COMPETÊNCIA 3 - Seleção, relação, organização e interpretação de informações em defesa de um ponto de vista
   - Argumentação, progressão textual, autoria

4. COMPETÊNCIA 4 - Conhecimento dos mecanismos linguísticos necessários para a construção da argumentação
   - Conectivos, referenciação, sequenciação, coesão textual

5. COMPETÊNCIA 5 - Elaboração de proposta de intervenção para o problema abordado
   - Proposta de solução, detalhamento, viabilidade, articulação com o texto

Responda SOMENTE com um objeto JSON neste formato:
{
  "nota_total": <soma das 5 competências>,
  "competencias": {
    "competencia_1": <nota 0-200>,
    "competencia_2": <nota 0-200>,
    "competencia_3": <nota 0-200>,
    "competencia_4": <nota 0-200>,
    "competencia_5": <nota 0-200>
  },
  "feedback": "<feedback detalhado: nota de cada competência, pontos fortes, pontos a melhorar e sugestões>"
}"""


class _Competencies(BaseModel):
    model_config = ConfigDict(extra="ignore")

    competencia_1: int
    competencia_2: int
    competencia_3: int
    competencia_4: int
    competencia_5: int


class _GradingReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    nota_total: int
    competencias: _Competencies
    feedback: str


@dataclass(frozen=True)
class EssayGrade:
    total_score: int
    competencies: Tuple[int, int, int, int, int]
    feedback: str
    used_fallback: bool = False

    def to_response(self) -> dict:
        return {
            "totalScore": self.total_score,
            "competencies": {
                f"competency{i}": score for i, score in enumerate(self.competencies, start=1)
            },
            "feedback": self.feedback,
        }


def build_rubric_prompt(theme: str) -> str:
    return f"{RUBRIC_PROMPT}\n\nTema da redação: {theme}"


def validate_essay(theme: str, body: str) -> None:
    """Input checks that must pass before any network call."""
    if not theme or not theme.strip() or not body:
        raise ValidationError("Tema, texto e userId são obrigatórios")
    if len(body) < MIN_ESSAY_LENGTH:
        raise ValidationError(
            f"A redação deve ter pelo menos {MIN_ESSAY_LENGTH} caracteres"
        )


def _clamp(score: int) -> int:
    return max(COMPETENCY_MIN, min(COMPETENCY_MAX, score))


def parse_grading_reply(raw: str) -> EssayGrade:
    """Strictly parse the model reply.

    Raises:
        ParseError: If the reply is not JSON or does not match the format
    """
    text = raw or ""
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        reply = _GradingReply.model_validate(json.loads(text))
    except (json.JSONDecodeError, PydanticValidationError, TypeError) as e:
        raise ParseError(f"Resposta de correção fora do formato: {e}") from e

    raw_scores = [
        reply.competencias.competencia_1,
        reply.competencias.competencia_2,
        reply.competencias.competencia_3,
        reply.competencias.competencia_4,
        reply.competencias.competencia_5,
    ]
    scores = tuple(_clamp(score) for score in raw_scores)
    total = sum(scores)
    if list(scores) != raw_scores or total != reply.nota_total:
        logger.warning(
            f"Normalized essay grade: reported total={reply.nota_total}, "
            f"competencies={raw_scores}, stored total={total}"
        )
    return EssayGrade(total_score=total, competencies=scores, feedback=reply.feedback)


def fallback_grade(raw: str) -> EssayGrade:
    scores = (FALLBACK_COMPETENCY_SCORE,) * COMPETENCY_COUNT
    return EssayGrade(
        total_score=sum(scores),
        competencies=scores,
        feedback=raw,
        used_fallback=True,
    )


async def grade_essay(theme: str, body: str, client: CompletionClient) -> EssayGrade:
    """Grade an essay against the five ENEM competencies.

    Raises:
        ValidationError: If the essay is too short, before any network call
        UpstreamError: If the completion endpoint fails
    """
    validate_essay(theme, body)

    messages = [
        {"role": "system", "content": build_rubric_prompt(theme)},
        {"role": "user", "content": f'Corrija esta redação sobre "{theme}":\n\n{body}'},
    ]
    raw = await client.complete(
        messages,
        temperature=ESSAY_TEMPERATURE,
        max_tokens=ESSAY_MAX_TOKENS,
    )

    try:
        return parse_grading_reply(raw)
    except ParseError as e:
        logger.warning(f"Falling back to default essay grade: {e.message}")
        return fallback_grade(raw)

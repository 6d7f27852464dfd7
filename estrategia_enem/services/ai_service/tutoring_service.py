# Standard library imports
import logging
from dataclasses import dataclass
from typing import Optional

# Local imports
from estrategia_enem.core.completion_client import CompletionClient
from estrategia_enem.core.exceptions import ValidationError

# Initialize logger
logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1000
DEFAULT_SUBJECT = "Geral"

TUTOR_PERSONA = """Você é um tutor especialista em ENEM com ampla experiência na preparação de estudantes para o vestibular.

DIRETRIZES:
- Responda de forma clara, didática e objetiva
- Use exemplos práticos sempre que ajudarem a entender o conteúdo
- Inclua dicas específicas para a prova do ENEM quando fizer sentido
- Explique fórmulas e conceitos de maneira simples
- Priorize os conteúdos que realmente são cobrados no ENEM
- Relacione o assunto com temas transversais (sustentabilidade, direitos humanos, tecnologia) quando for relevante

ÁREAS DE CONHECIMENTO DO ENEM:
- Matemática e suas Tecnologias
- Ciências da Natureza e suas Tecnologias
- Ciências Humanas e suas Tecnologias
- Linguagens, Códigos e suas Tecnologias
- Redação

TEMAS EM ALTA:
- Inteligência Artificial e sociedade
- Mudanças climáticas e sustentabilidade
- Herança africana e cultura afro-brasileira
- Ditadura militar e redemocratização
- Desigualdade social e políticas públicas"""


@dataclass(frozen=True)
class ChatCompletion:
    answer: str
    subject: str


def build_tutor_prompt(subject: Optional[str]) -> str:
    """System prompt for the tutor; the subject is its only parameter."""
    return f"{TUTOR_PERSONA}\n\nMatéria atual: {subject or DEFAULT_SUBJECT}"


async def answer_question(
    question: str,
    subject: Optional[str],
    client: CompletionClient,
) -> ChatCompletion:
    """Ask the completion endpoint to answer a student's question.

    The answer text is returned verbatim.

    Raises:
        ValidationError: If the question is empty
        UpstreamError: If the completion endpoint fails
    """
    if not question or not question.strip():
        raise ValidationError("Pergunta e userId são obrigatórios")

    messages = [
        {"role": "system", "content": build_tutor_prompt(subject)},
        {"role": "user", "content": question},
    ]
    answer = await client.complete(
        messages,
        temperature=CHAT_TEMPERATURE,
        max_tokens=CHAT_MAX_TOKENS,
    )
    logger.debug(f"Tutor answered {len(answer)} characters for subject={subject or DEFAULT_SUBJECT}")
    return ChatCompletion(answer=answer, subject=subject or DEFAULT_SUBJECT.lower())

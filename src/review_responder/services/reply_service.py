"""
Reply Service - Drafts review replies with an OpenAI chat completion
"""
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from ..core.config import settings
from ..core.exceptions import UpstreamAPIError
from ..core.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = "Você é um assistente profissional para gerar respostas a avaliações."

POSITIVE_INSTRUCTION = "Agradeça o feedback positivo."
NEGATIVE_INSTRUCTION = "Reconheça as preocupações e mostre compromisso em melhorar."


def build_prompt(rating: int, comment: str) -> str:
    """Prompt for one review; ratings of 4 and up get a grateful tone"""
    tone = POSITIVE_INSTRUCTION if rating >= 4 else NEGATIVE_INSTRUCTION
    return (
        "Você é um assistente profissional que gera respostas educadas e apropriadas "
        "para avaliações do Google Maps.\n\n"
        "Avaliação recebida:\n"
        f"Nota: {rating}/5\n"
        f"Comentário: {comment}\n\n"
        f"Gere uma resposta profissional, educada e apropriada. {tone} "
        "Mantenha a resposta concisa (máximo 3 frases)."
    )


class ReplyDrafter:
    """Single request/response call to the chat completions API"""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            timeout=settings.HTTP_TIMEOUT,
            max_retries=settings.HTTP_MAX_ATTEMPTS - 1,
        )

    async def draft(self, rating: int, comment: str) -> str:
        """
        Draft a reply for a review

        Raises:
            UpstreamAPIError: If the completion request fails
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(rating, comment)},
                ],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {str(e)}")
            raise UpstreamAPIError(
                "Failed to generate response",
                status_code=getattr(e, "status_code", None),
                body=str(e),
            ) from e

        if not completion.choices:
            return ""
        return (completion.choices[0].message.content or "").strip()

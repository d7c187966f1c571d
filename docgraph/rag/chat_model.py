"""OpenAI chat-completions client used for answer synthesis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings
from docgraph.rag.embedding import build_openai_client
from docgraph.utils.errors import UnsupportedError, UpstreamError


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatResult:
    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class OpenAIChatModel:
    """Generates one completion for a list of role/content messages."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.OPENAI_MAX_TOKENS

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = build_openai_client()
        return self._client

    async def generate(self, messages: List[Dict[str, str]]) -> ChatResult:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            app_logger.error(f"Chat completion failed: {e}")
            raise UpstreamError("chat model request failed", {"error": str(e)}) from e

        if not response.choices:
            raise UpstreamError("chat model returned no choices")

        content = response.choices[0].message.content or ""
        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return ChatResult(content=content, usage=usage)


def build_chat_model(client: Optional[AsyncOpenAI] = None) -> OpenAIChatModel:
    if settings.LLM_PROVIDER.lower() != "openai":
        raise UnsupportedError(
            f"unsupported LLM provider: {settings.LLM_PROVIDER}",
            {"provider": settings.LLM_PROVIDER},
        )
    return OpenAIChatModel(client=client)

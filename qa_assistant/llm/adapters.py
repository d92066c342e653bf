"""
Provider adapters: one per LLM backend.

Each adapter turns a generic (system prompt, user prompt, options) triple into
a provider-specific LangChain chat call and returns only the generated text.
Adapters do not retry, wrap, or swallow errors; failure handling belongs to
the failover invoker.

New backends are added by subclassing ChatAdapter and decorating the class
with @register_adapter(kind); the registry looks adapters up by kind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from qa_assistant.models import InvocationOptions

DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 2000


class ProviderKind(str, Enum):
    """Supported LLM backends, in registry priority order."""

    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


def extract_text(content: Any) -> str:
    """Keep only generated text from a chat response's content.

    Some backends return a list of typed parts (text, citations, thinking);
    everything except text parts is discarded.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type", "text") == "text" and "text" in item:
                parts.append(str(item["text"]))
        return "".join(parts)
    return "" if content is None else str(content)


class ChatAdapter(ABC):
    """Base adapter. Subclasses build the chat model and, if needed, reshape messages."""

    kind: ProviderKind
    DEFAULT_MODEL: str = ""

    def __init__(
        self,
        api_key: str,
        model_override: str = "",
        base_url: Optional[str] = None,
    ) -> None:
        self._api_key = api_key
        self._model_override = (model_override or "").strip()
        self._base_url = base_url.rstrip("/") if base_url else None

    @property
    def name(self) -> str:
        return self.kind.value

    def resolve_model(self, options: InvocationOptions) -> str:
        """options.model, then the configured override, then the provider default."""
        return options.model or self._model_override or self.DEFAULT_MODEL

    @abstractmethod
    def _build_model(self, model: str, temperature: float, max_tokens: int) -> BaseChatModel:
        """Chat model configured for one call."""

    def _messages(self, system_prompt: str, user_prompt: str) -> list[BaseMessage]:
        return [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]

    async def __call__(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[InvocationOptions] = None,
    ) -> str:
        options = options or InvocationOptions()
        temperature = options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE
        max_tokens = options.max_tokens if options.max_tokens is not None else DEFAULT_MAX_TOKENS
        model = self._build_model(self.resolve_model(options), temperature, max_tokens)
        response = await model.ainvoke(self._messages(system_prompt, user_prompt))
        return extract_text(getattr(response, "content", response))


_ADAPTERS: dict[ProviderKind, type[ChatAdapter]] = {}


def register_adapter(kind: ProviderKind) -> Callable[[type[ChatAdapter]], type[ChatAdapter]]:
    """Class decorator: make an adapter available to the registry under kind."""

    def _register(cls: type[ChatAdapter]) -> type[ChatAdapter]:
        cls.kind = kind
        _ADAPTERS[kind] = cls
        return cls

    return _register


def adapter_for(kind: ProviderKind) -> type[ChatAdapter]:
    """Look up the adapter class registered for kind."""
    try:
        return _ADAPTERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown provider: {kind}. Available: {[k.value for k in _ADAPTERS]}"
        ) from None


@register_adapter(ProviderKind.GROQ)
class GroqAdapter(ChatAdapter):
    """Groq through its OpenAI-compatible endpoint."""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

    def _build_model(self, model: str, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatOpenAI(
            base_url=self._base_url or self.DEFAULT_BASE_URL,
            api_key=self._api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )


@register_adapter(ProviderKind.OPENAI)
class OpenAIAdapter(ChatAdapter):
    DEFAULT_MODEL = "gpt-4o-mini"

    def _build_model(self, model: str, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatOpenAI(
            base_url=self._base_url,
            api_key=self._api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )


@register_adapter(ProviderKind.ANTHROPIC)
class AnthropicAdapter(ChatAdapter):
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

    def _build_model(self, model: str, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatAnthropic(
            model=model,
            api_key=self._api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )


@register_adapter(ProviderKind.GEMINI)
class GeminiAdapter(ChatAdapter):
    """Google Gemini. Takes a single prompt, so system and user prompts are joined."""

    DEFAULT_MODEL = "gemini-1.5-flash"

    def _build_model(self, model: str, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=self._api_key,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

    def _messages(self, system_prompt: str, user_prompt: str) -> list[BaseMessage]:
        return [HumanMessage(content=f"{system_prompt}\n\n{user_prompt}")]

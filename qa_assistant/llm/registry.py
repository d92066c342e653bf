"""
Provider registry: the ordered list of usable LLM providers.

Built once at process start by validating each provider's key in a fixed
priority order (Groq, OpenAI, Anthropic, Gemini). Providers whose key does not
validate are left out entirely. The registry is read-only after construction.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Optional

import structlog

from qa_assistant.config import Settings
from qa_assistant.llm.adapters import ProviderKind, adapter_for
from qa_assistant.llm.credentials import is_usable, mask_secret
from qa_assistant.models import InvocationOptions

logger = structlog.get_logger()

Adapter = Callable[[str, str, Optional[InvocationOptions]], Awaitable[str]]

PROVIDER_ORDER: tuple[ProviderKind, ...] = (
    ProviderKind.GROQ,
    ProviderKind.OPENAI,
    ProviderKind.ANTHROPIC,
    ProviderKind.GEMINI,
)

KEY_PREFIXES: dict[ProviderKind, Optional[str]] = {
    ProviderKind.GROQ: "gsk_",
    ProviderKind.OPENAI: "sk-",
    ProviderKind.ANTHROPIC: "sk-ant-",
    ProviderKind.GEMINI: None,
}

ENV_KEYS: dict[ProviderKind, str] = {
    ProviderKind.GROQ: "GROQ_API_KEY",
    ProviderKind.OPENAI: "OPENAI_API_KEY",
    ProviderKind.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderKind.GEMINI: "GOOGLE_API_KEY",
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """A usable provider: its name, its adapter, and its position in the registry."""

    name: str
    call: Adapter
    priority: int


class ProviderRegistry:
    """Ordered, read-only collection of usable providers."""

    def __init__(self, providers: list[ProviderDescriptor] | None = None) -> None:
        self._providers: tuple[ProviderDescriptor, ...] = tuple(providers or ())

    @classmethod
    def from_adapters(cls, adapters: list[tuple[str, Adapter]]) -> ProviderRegistry:
        """Registry from (name, adapter) pairs, priority taken from list order."""
        return cls([ProviderDescriptor(name=n, call=a, priority=i) for i, (n, a) in enumerate(adapters)])

    @classmethod
    def from_secrets(
        cls,
        secrets: Mapping[ProviderKind, Optional[str]],
        model_overrides: Mapping[ProviderKind, str] | None = None,
        groq_base_url: str = "https://api.groq.com/openai/v1",
    ) -> ProviderRegistry:
        """Validate each provider's key in priority order and keep those that pass."""
        overrides = model_overrides or {}
        base_urls = {ProviderKind.GROQ: groq_base_url}
        accepted: list[ProviderDescriptor] = []
        for kind in PROVIDER_ORDER:
            secret = secrets.get(kind)
            if not is_usable(secret, KEY_PREFIXES[kind]):
                if secret:
                    logger.warning(
                        "llm_provider_key_rejected",
                        provider=kind.value,
                        env_var=ENV_KEYS[kind],
                        required_prefix=KEY_PREFIXES[kind] or "",
                    )
                continue
            adapter = adapter_for(kind)(
                secret,
                overrides.get(kind, ""),
                base_url=base_urls.get(kind),
            )
            accepted.append(ProviderDescriptor(name=kind.value, call=adapter, priority=len(accepted)))
            logger.info("llm_provider_configured", provider=kind.value, key_suffix=mask_secret(secret))

        registry = cls(accepted)
        if registry.is_empty():
            logger.error(
                "no_llm_providers_configured",
                hint="Add at least one valid API key to .env",
                env_vars=[ENV_KEYS[k] for k in PROVIDER_ORDER],
            )
        else:
            logger.info("llm_providers_ready", providers=registry.names())
        return registry

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderRegistry:
        llm = settings.llm
        return cls.from_secrets(
            {
                ProviderKind.GROQ: llm.groq_api_key,
                ProviderKind.OPENAI: llm.openai_api_key,
                ProviderKind.ANTHROPIC: llm.anthropic_api_key,
                ProviderKind.GEMINI: llm.google_api_key,
            },
            model_overrides={
                ProviderKind.GROQ: llm.groq_model,
                ProviderKind.OPENAI: llm.openai_model,
                ProviderKind.ANTHROPIC: llm.anthropic_model,
                ProviderKind.GEMINI: llm.gemini_model,
            },
            groq_base_url=llm.groq_base_url,
        )

    def size(self) -> int:
        return len(self._providers)

    def get(self, index: int) -> ProviderDescriptor:
        return self._providers[index]

    def is_empty(self) -> bool:
        return not self._providers

    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._providers)

"""
Error taxonomy for the LLM invocation layer.

Only NoProvidersConfigured and AllProvidersExhausted ever reach callers.
ProviderCallFailed is recorded per attempt and absorbed by failover;
ResponseParseError is absorbed by the response normalizer.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Why a single provider attempt failed (diagnostics only)."""

    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


class LLMClientError(Exception):
    """Base for LLM client errors."""

    pass


class NoProvidersConfigured(LLMClientError):
    """No provider passed credential validation; raised before any network call."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No LLM providers configured. Please add API keys in .env file."
        )


class ProviderCallFailed(LLMClientError):
    """One provider attempt failed. Carries the classified kind and the original error."""

    def __init__(self, provider: str, kind: FailureKind, cause: BaseException) -> None:
        self.provider = provider
        self.kind = kind
        self.cause = cause
        super().__init__(f"{provider} failed ({kind.value}): {cause}")


class AllProvidersExhausted(LLMClientError):
    """Every configured provider was attempted once and failed."""

    def __init__(
        self,
        attempted: list[str],
        last_error: str,
        failures: list[ProviderCallFailed] | None = None,
    ) -> None:
        self.attempted = list(attempted)
        self.last_error = last_error
        self.failures = list(failures or [])
        super().__init__(
            f"All LLM providers failed. Attempted: {', '.join(self.attempted)}. "
            f"Last error: {last_error}"
        )


class ResponseParseError(LLMClientError):
    """Model output could not be parsed into an analysis record."""

    pass

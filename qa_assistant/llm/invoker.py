"""
Failover invoker: single-flight calls across the provider registry.

Design decisions:
  - Providers are tried one at a time in registry order, starting at a
    persistent cursor and wrapping once; the first success wins.
  - The cursor is sticky: a success leaves it where it is, a failure moves it
    past the provider that failed. The next invocation therefore starts at the
    provider that last worked instead of retrying a known-bad one first.
  - Failures are classified (rate limit, auth, transport, unknown) for logs and
    metrics only. Every kind advances the cursor the same way.
  - The cursor advance is a compare-and-set: two concurrent invocations that
    fail on the same provider move the cursor once, not twice.
"""

from __future__ import annotations

import asyncio
import threading
from functools import lru_cache
from typing import Optional

import structlog

from qa_assistant.config import get_settings
from qa_assistant.llm.errors import (
    AllProvidersExhausted,
    FailureKind,
    NoProvidersConfigured,
    ProviderCallFailed,
)
from qa_assistant.llm.registry import ProviderRegistry
from qa_assistant.models import InvocationOptions, InvocationResult
from qa_assistant.observability import metrics as obs_metrics

logger = structlog.get_logger()


_RATE_LIMIT_MARKERS = (
    "quota",
    "429",
    "billing",
    "rate limit",
    "rate_limit",
    "too many requests",
    "resource_exhausted",
)
_AUTH_MARKERS = (
    "401",
    "403",
    "invalid api key",
    "invalid_api_key",
    "invalid x-api-key",
    "api key not valid",
    "unauthorized",
    "permission denied",
)
_TRANSPORT_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "reset by peer",
    "500",
    "502",
    "503",
    "504",
    "overloaded",
    "unavailable",
)


def _status_code_of(exc: BaseException) -> Optional[int]:
    """HTTP status carried by SDK errors (openai/anthropic expose status_code, httpx a response)."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    return status if isinstance(status, int) else None


def classify_failure(exc: BaseException) -> FailureKind:
    """Classify a provider error for diagnostics."""
    status = _status_code_of(exc)
    if status is not None:
        if status in (402, 429):
            return FailureKind.RATE_LIMITED
        if status in (401, 403):
            return FailureKind.AUTH_FAILED
        if status == 408 or status >= 500:
            return FailureKind.TRANSPORT
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, ConnectionError)):
        return FailureKind.TRANSPORT

    msg = str(exc).lower()
    if any(m in msg for m in _RATE_LIMIT_MARKERS):
        return FailureKind.RATE_LIMITED
    if any(m in msg for m in _AUTH_MARKERS):
        return FailureKind.AUTH_FAILED
    if any(m in msg for m in _TRANSPORT_MARKERS):
        return FailureKind.TRANSPORT
    return FailureKind.UNKNOWN


class InvocationCursor:
    """Index of the provider to try first on the next invocation."""

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def advance_past(self, index: int, size: int) -> int:
        """Move to index + 1 (mod size) if the cursor still points at index. Returns the cursor."""
        with self._lock:
            if self._value == index:
                self._value = (index + 1) % size
            return self._value


class FailoverInvoker:
    """
    Calls the first working provider, failing over in registry order.

    Raises:
        NoProvidersConfigured: registry is empty (no network call is made).
        AllProvidersExhausted: every provider was tried once and failed.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        cursor: Optional[InvocationCursor] = None,
    ) -> None:
        self._registry = registry
        self._cursor = cursor or InvocationCursor()

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cursor(self) -> int:
        """Current cursor value (index of the next provider to try first)."""
        return self._cursor.value

    async def invoke(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[InvocationOptions] = None,
    ) -> str:
        """Return generated text from the first provider that succeeds."""
        result = await self.invoke_detailed(system_prompt, user_prompt, options)
        return result.text

    async def invoke_detailed(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[InvocationOptions] = None,
    ) -> InvocationResult:
        """Like invoke(), but also reports which provider answered and which were tried."""
        if self._registry.is_empty():
            logger.error("llm_invoke_without_providers")
            raise NoProvidersConfigured()

        options = options or InvocationOptions()
        n = self._registry.size()
        start = self._cursor.value % n
        attempted: list[str] = []
        failures: list[ProviderCallFailed] = []

        for offset in range(n):
            index = (start + offset) % n
            provider = self._registry.get(index)
            attempted.append(provider.name)
            logger.info("llm_attempt", provider=provider.name, attempt=offset + 1, of=n)

            try:
                async with obs_metrics.track_provider_call(provider=provider.name):
                    text = await provider.call(system_prompt, user_prompt, options)
            except Exception as e:
                kind = classify_failure(e)
                failures.append(ProviderCallFailed(provider.name, kind, e))
                self._cursor.advance_past(index, n)
                logger.warning(
                    "llm_attempt_failed",
                    provider=provider.name,
                    failure_kind=kind.value,
                    error=str(e)[:200],
                )
                obs_metrics.record_provider_failure(provider=provider.name, kind=kind.value)
                if offset + 1 < n:
                    next_name = self._registry.get((index + 1) % n).name
                    logger.info(
                        "llm_failover",
                        from_provider=provider.name,
                        to_provider=next_name,
                        failure_kind=kind.value,
                    )
                    obs_metrics.record_failover(from_provider=provider.name, to_provider=next_name)
                continue

            logger.info("llm_attempt_succeeded", provider=provider.name, attempted=attempted)
            return InvocationResult(text=text, provider=provider.name, attempted=attempted)

        last_error = str(failures[-1].cause)
        logger.error("llm_providers_exhausted", attempted=attempted, last_error=last_error[:200])
        obs_metrics.record_exhausted()
        raise AllProvidersExhausted(attempted, last_error, failures)


@lru_cache(maxsize=1)
def get_invoker() -> FailoverInvoker:
    """Process-wide invoker built from settings on first use."""
    return FailoverInvoker(ProviderRegistry.from_settings(get_settings()))

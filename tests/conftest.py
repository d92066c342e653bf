"""Shared pytest fixtures for QA Assistant tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Optional

import pytest

from qa_assistant.llm.invoker import FailoverInvoker, InvocationCursor
from qa_assistant.llm.registry import ProviderRegistry
from qa_assistant.models import InvocationOptions


class FakeAdapter:
    """Stands in for a provider adapter: returns a canned result or raises a canned error."""

    def __init__(
        self,
        result: Any = "ok",
        error: Optional[BaseException] = None,
        yield_first: bool = False,
    ) -> None:
        self.result = result
        self.error = error
        self.yield_first = yield_first
        self.calls: list[tuple[str, str, Optional[InvocationOptions]]] = []

    async def __call__(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[InvocationOptions] = None,
    ) -> Any:
        self.calls.append((system_prompt, user_prompt, options))
        if self.yield_first:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_invoker() -> Callable[..., FailoverInvoker]:
    """Build an invoker over named fake adapters, e.g. make_invoker(("a", FakeAdapter()), cursor=1)."""

    def _make(*adapters: tuple[str, FakeAdapter], cursor: int = 0) -> FailoverInvoker:
        registry = ProviderRegistry.from_adapters(list(adapters))
        return FailoverInvoker(registry, InvocationCursor(cursor))

    return _make


@pytest.fixture
def valid_analysis_json() -> str:
    return (
        '{"summary": "Login button unresponsive", '
        '"reproductionSteps": "1. Open login\\n2. Click login three times", '
        '"rootCause": "Click handler detached after retry", '
        '"affectedModule": "Auth", '
        '"suggestedFix": "Re-bind handler after retry", '
        '"testCases": "it(\'logs in\')", '
        '"priority": "High", '
        '"severity": "Critical"}'
    )

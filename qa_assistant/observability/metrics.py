"""
Prometheus metrics for the QA Assistant's LLM layer.

All metrics are no-op when observability.metrics_enabled is False.
Exposes track_provider_call, record_provider_failure, record_failover,
record_exhausted, record_parse_fallback, start_server.
"""

from __future__ import annotations

import contextlib
import threading
import time
from typing import Any

import structlog
from prometheus_client import (
    Counter,
    Histogram,
    start_http_server as prometheus_start_http_server,
)

logger = structlog.get_logger()


def _enabled() -> bool:
    from qa_assistant.config import get_settings

    return bool(get_settings().observability.metrics_enabled)


# Lazy registry: only create metrics when enabled and first used
_metrics_created = False


def _ensure_metrics() -> bool:
    global _metrics_created
    if _metrics_created or not _enabled():
        return _metrics_created
    _create_metrics()
    _metrics_created = True
    return True


def _create_metrics() -> None:
    """Create all Prometheus metrics (called once when enabled)."""
    _provider_duration = Histogram(
        "llm_provider_call_duration_seconds",
        "Latency of a single provider attempt",
        ["provider", "outcome"],
        buckets=[0.5, 1, 2, 5, 10, 30],
    )
    _provider_failures = Counter(
        "llm_provider_failures_total",
        "Failed provider attempts by failure kind",
        ["provider", "kind"],
    )
    _failovers = Counter(
        "llm_failover_total",
        "Switches from a failed provider to the next one",
        ["from_provider", "to_provider"],
    )
    _exhausted = Counter(
        "llm_providers_exhausted_total",
        "Invocations where every configured provider failed",
        [],
    )
    _parse_fallbacks = Counter(
        "analysis_parse_fallback_total",
        "Model responses replaced by the fallback analysis",
        [],
    )

    _registry = {
        "provider_duration": _provider_duration,
        "provider_failures": _provider_failures,
        "failovers": _failovers,
        "exhausted": _exhausted,
        "parse_fallbacks": _parse_fallbacks,
    }
    setattr(_MetricsCollector, "_registry", _registry)


class _MetricsCollector:
    """Collector that delegates to Prometheus when enabled, no-op otherwise."""

    _registry: dict[str, Any] = {}

    def _get(self, name: str) -> Any:
        _ensure_metrics()
        return self._registry.get(name)

    @contextlib.asynccontextmanager
    async def track_provider_call(self, provider: str = ""):
        h = self._get("provider_duration")
        start = time.perf_counter()
        outcome = "success"
        try:
            yield
        except Exception:
            outcome = "error"
            raise
        finally:
            if h:
                h.labels(provider=provider or "unknown", outcome=outcome).observe(
                    time.perf_counter() - start
                )

    def record_provider_failure(self, provider: str, kind: str) -> None:
        c = self._get("provider_failures")
        if c:
            c.labels(provider=provider or "unknown", kind=kind or "unknown").inc()

    def record_failover(self, from_provider: str, to_provider: str) -> None:
        c = self._get("failovers")
        if c:
            c.labels(
                from_provider=from_provider or "unknown",
                to_provider=to_provider or "unknown",
            ).inc()

    def record_exhausted(self) -> None:
        c = self._get("exhausted")
        if c:
            c.inc()

    def record_parse_fallback(self) -> None:
        c = self._get("parse_fallbacks")
        if c:
            c.inc()

    def start_server(self, port: int = 8000) -> None:
        if not _enabled():
            return
        _ensure_metrics()

        def run() -> None:
            try:
                prometheus_start_http_server(port, addr="0.0.0.0")
            except OSError as e:
                logger.warning("metrics_server_failed", port=port, error=str(e))
                return
            logger.info("metrics_server_started", port=port)

        t = threading.Thread(target=run, daemon=True)
        t.start()


metrics = _MetricsCollector()

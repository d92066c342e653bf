"""Observability: structlog setup and Prometheus metrics for the QA Assistant."""

from qa_assistant.observability.logging import configure_logging
from qa_assistant.observability.metrics import metrics

__all__ = ["configure_logging", "metrics"]

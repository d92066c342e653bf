"""
Response normalizer: raw model text to AnalysisPayload.

The model is asked for a bare JSON object but often wraps it in a fenced code
block. If the text cannot be turned into a JSON object at all, a deterministic
fallback analysis is returned instead. normalize() never raises.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from qa_assistant.llm.errors import ResponseParseError
from qa_assistant.models import AnalysisPayload, Priority, Severity
from qa_assistant.observability import metrics as obs_metrics

logger = structlog.get_logger()

# Closing fence must start its own line.
_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL | re.IGNORECASE)

FALLBACK_SUMMARY_LENGTH = 100


def extract_json_text(raw: str) -> str:
    """Contents of the first fenced code block, or the whole text if there is none."""
    match = _FENCE_RE.search(raw)
    return match.group(1) if match else raw


def parse_analysis(raw: Optional[str]) -> AnalysisPayload:
    """Parse model output into an AnalysisPayload; raises ResponseParseError on failure."""
    if raw is None or not str(raw).strip():
        raise ResponseParseError("Empty response from LLM")
    try:
        data: Any = json.loads(extract_json_text(str(raw)))
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        raise ResponseParseError(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected JSON object, got {type(data).__name__}")
    try:
        return AnalysisPayload.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(f"Response does not fit the analysis shape: {e}") from e


def fallback_analysis(fallback_seed: Optional[str]) -> AnalysisPayload:
    """Placeholder analysis used when the model's output is unusable."""
    seed = fallback_seed if isinstance(fallback_seed, str) else str(fallback_seed or "")
    return AnalysisPayload(
        summary=seed[:FALLBACK_SUMMARY_LENGTH],
        reproduction_steps="Reproduction steps could not be auto-generated",
        root_cause="Analysis pending manual review",
        affected_module="Unknown",
        suggested_fix="Manual analysis required",
        test_cases="Test cases require manual creation",
        priority=Priority.MEDIUM.value,
        severity=Severity.MAJOR.value,
    )


def normalize(raw_text: Optional[str], fallback_seed: Optional[str]) -> AnalysisPayload:
    """Structured analysis from raw model text, or the fallback analysis if it cannot be parsed."""
    try:
        return parse_analysis(raw_text)
    except ResponseParseError as e:
        logger.warning("analysis_parse_fallback", error=str(e)[:200])
        obs_metrics.record_parse_fallback()
        return fallback_analysis(fallback_seed)

"""Multi-provider LLM layer: credential validation, provider registry, adapters, failover."""

from qa_assistant.llm.adapters import ProviderKind
from qa_assistant.llm.credentials import is_usable
from qa_assistant.llm.errors import (
    AllProvidersExhausted,
    FailureKind,
    LLMClientError,
    NoProvidersConfigured,
    ProviderCallFailed,
    ResponseParseError,
)
from qa_assistant.llm.invoker import FailoverInvoker, InvocationCursor, classify_failure, get_invoker
from qa_assistant.llm.registry import ProviderDescriptor, ProviderRegistry

__all__ = [
    "AllProvidersExhausted",
    "FailoverInvoker",
    "FailureKind",
    "InvocationCursor",
    "LLMClientError",
    "NoProvidersConfigured",
    "ProviderCallFailed",
    "ProviderDescriptor",
    "ProviderKind",
    "ProviderRegistry",
    "ResponseParseError",
    "classify_failure",
    "get_invoker",
    "is_usable",
]

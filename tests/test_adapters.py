"""Tests for provider adapters (no network: chat models are patched)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from qa_assistant.llm.adapters import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    AnthropicAdapter,
    ChatAdapter,
    GeminiAdapter,
    GroqAdapter,
    OpenAIAdapter,
    ProviderKind,
    adapter_for,
    extract_text,
)
from qa_assistant.models import InvocationOptions

KEY = "sk-" + "k" * 40


def _fake_model(content):
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return model


def test_extract_text_plain_string():
    assert extract_text("hello") == "hello"


def test_extract_text_drops_non_text_parts():
    content = [
        {"type": "thinking", "thinking": "hmm"},
        {"type": "text", "text": '{"summary": '},
        {"type": "text", "text": '"x"}', "citations": [{"url": "https://example.com"}]},
        {"type": "tool_use", "id": "t1", "name": "lookup", "input": {}},
    ]
    assert extract_text(content) == '{"summary": "x"}'


def test_extract_text_none_is_empty():
    assert extract_text(None) == ""


def test_adapter_for_known_kinds():
    assert adapter_for(ProviderKind.GROQ) is GroqAdapter
    assert adapter_for(ProviderKind.OPENAI) is OpenAIAdapter
    assert adapter_for(ProviderKind.ANTHROPIC) is AnthropicAdapter
    assert adapter_for(ProviderKind.GEMINI) is GeminiAdapter


def test_base_adapter_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ChatAdapter(KEY)


def test_adapter_for_unknown_kind():
    with pytest.raises(ValueError, match="Unknown provider"):
        adapter_for("mistral")


def test_resolve_model_precedence():
    adapter = OpenAIAdapter(KEY, model_override="gpt-4.1")
    assert adapter.resolve_model(InvocationOptions(model="o3-mini")) == "o3-mini"
    assert adapter.resolve_model(InvocationOptions()) == "gpt-4.1"
    assert OpenAIAdapter(KEY).resolve_model(InvocationOptions()) == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_chat_adapter_sends_system_and_user_messages():
    fake = _fake_model("answer")
    adapter = OpenAIAdapter(KEY)
    with patch.object(OpenAIAdapter, "_build_model", return_value=fake) as build:
        text = await adapter("SYS", "USER")

    assert text == "answer"
    build.assert_called_once_with("gpt-4o-mini", DEFAULT_TEMPERATURE, DEFAULT_MAX_TOKENS)
    messages = fake.ainvoke.call_args[0][0]
    assert isinstance(messages[0], SystemMessage)
    assert messages[0].content == "SYS"
    assert isinstance(messages[1], HumanMessage)
    assert messages[1].content == "USER"


@pytest.mark.asyncio
async def test_zero_temperature_is_honoured():
    fake = _fake_model("ok")
    adapter = AnthropicAdapter("sk-ant-" + "a" * 40)
    with patch.object(AnthropicAdapter, "_build_model", return_value=fake) as build:
        await adapter("s", "u", InvocationOptions(temperature=0.0, max_tokens=50))
    build.assert_called_once_with("claude-3-5-sonnet-20241022", 0.0, 50)


@pytest.mark.asyncio
async def test_gemini_joins_system_and_user_prompt():
    fake = _fake_model("gemini says hi")
    adapter = GeminiAdapter("AIza" + "z" * 35)
    with patch.object(GeminiAdapter, "_build_model", return_value=fake) as build:
        text = await adapter("SYS", "USER")

    assert text == "gemini says hi"
    build.assert_called_once_with("gemini-1.5-flash", DEFAULT_TEMPERATURE, DEFAULT_MAX_TOKENS)
    messages = fake.ainvoke.call_args[0][0]
    assert len(messages) == 1
    assert isinstance(messages[0], HumanMessage)
    assert messages[0].content == "SYS\n\nUSER"


@pytest.mark.asyncio
async def test_anthropic_content_blocks_reduced_to_text():
    fake = _fake_model([{"type": "text", "text": "only this"}, {"type": "tool_use", "id": "x", "name": "n", "input": {}}])
    adapter = AnthropicAdapter("sk-ant-" + "a" * 40)
    with patch.object(AnthropicAdapter, "_build_model", return_value=fake):
        assert await adapter("s", "u") == "only this"


@pytest.mark.asyncio
async def test_adapter_errors_propagate():
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=RuntimeError("429 Too Many Requests"))
    adapter = GroqAdapter("gsk_" + "g" * 40)
    with patch.object(GroqAdapter, "_build_model", return_value=model):
        with pytest.raises(RuntimeError, match="429"):
            await adapter("s", "u")


def test_groq_builds_openai_compatible_client():
    adapter = GroqAdapter("gsk_" + "g" * 40)
    model = adapter._build_model("llama-3.3-70b-versatile", 0.3, 2000)
    assert isinstance(model, ChatOpenAI)
    assert model.model_name == "llama-3.3-70b-versatile"
    assert model.openai_api_base == GroqAdapter.DEFAULT_BASE_URL
    assert model.max_tokens == 2000

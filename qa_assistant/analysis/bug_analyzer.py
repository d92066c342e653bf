"""
Bug Analyzer: turns a tester's bug description into a developer-ready ticket.

Builds the prompts, drives the failover invoker, and normalizes the model's
answer. analyze() surfaces only provider exhaustion (or an empty registry);
malformed model output degrades to the fallback analysis.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

import structlog

from qa_assistant.analysis.normalizer import normalize
from qa_assistant.llm.errors import LLMClientError
from qa_assistant.llm.invoker import FailoverInvoker, get_invoker
from qa_assistant.models import AnalysisPayload, Assignee, InvocationOptions, UserStoryContext
from qa_assistant.prompts.templates import (
    AVAILABLE_COMPONENTS_SECTION_TEMPLATE,
    BUG_ANALYSIS_SYSTEM,
    BUG_ANALYSIS_USER_TEMPLATE,
    LOGS_SECTION_TEMPLATE,
    MODULE_IDENTIFIER_SYSTEM,
    MODULE_IDENTIFIER_USER_TEMPLATE,
    TEST_CASE_GENERATOR_SYSTEM,
    TEST_CASE_GENERATOR_USER_TEMPLATE,
    USER_STORY_SECTION_TEMPLATE,
)

logger = structlog.get_logger()

UNKNOWN_MODULE = "Unknown"
TEST_GENERATION_FAILED = "Test case generation failed. Please write tests manually."


def build_analysis_prompt(
    description: str,
    logs: Optional[str] = None,
    user_story_context: Optional[UserStoryContext] = None,
) -> str:
    """User prompt for analyze(); story and log sections are left out when empty."""
    story_section = ""
    if user_story_context is not None:
        story_section = USER_STORY_SECTION_TEMPLATE.format(
            summary=user_story_context.summary,
            description=user_story_context.description,
            acceptance_criteria=user_story_context.acceptance_criteria,
            components=", ".join(user_story_context.components),
        )
    logs_section = LOGS_SECTION_TEMPLATE.format(logs=logs) if logs else ""
    return BUG_ANALYSIS_USER_TEMPLATE.format(
        user_story_section=story_section,
        description=description,
        logs_section=logs_section,
    )


class BugAnalyzer:
    """LLM-backed bug analysis use cases."""

    MODULE_OPTIONS = InvocationOptions(temperature=0.2, max_tokens=50)

    def __init__(self, invoker: Optional[FailoverInvoker] = None) -> None:
        self.llm = invoker or get_invoker()

    async def analyze(
        self,
        description: str,
        logs: Optional[str] = None,
        user_story_context: Union[UserStoryContext, Mapping[str, Any], None] = None,
    ) -> AnalysisPayload:
        """
        Produce a structured analysis for a bug description.

        Raises:
            NoProvidersConfigured: no usable provider.
            AllProvidersExhausted: every provider failed.
        """
        story = (
            UserStoryContext.model_validate(user_story_context)
            if isinstance(user_story_context, Mapping)
            else user_story_context
        )
        user_prompt = build_analysis_prompt(description, logs, story)
        raw = await self.llm.invoke(BUG_ANALYSIS_SYSTEM, user_prompt)
        analysis = normalize(raw, description)
        logger.info(
            "bug_analysis_done",
            affected_module=analysis.affected_module,
            priority=analysis.priority,
            severity=analysis.severity,
        )
        return analysis

    async def identify_affected_module(
        self,
        description: str,
        available_components: Sequence[str] = (),
    ) -> str:
        """Name of the most likely affected module, or "Unknown" if no provider answers."""
        components_section = (
            AVAILABLE_COMPONENTS_SECTION_TEMPLATE.format(components=", ".join(available_components))
            if available_components
            else ""
        )
        user_prompt = MODULE_IDENTIFIER_USER_TEMPLATE.format(
            description=description,
            components_section=components_section,
        )
        try:
            raw = await self.llm.invoke(MODULE_IDENTIFIER_SYSTEM, user_prompt, self.MODULE_OPTIONS)
        except LLMClientError as e:
            logger.warning("module_identification_error", error=str(e)[:200])
            return UNKNOWN_MODULE
        return raw.strip()

    async def generate_test_cases(
        self,
        analysis: Union[AnalysisPayload, Mapping[str, Any]],
    ) -> str:
        """Jest/RTL test code for the fix described by analysis."""
        if isinstance(analysis, Mapping):
            analysis = AnalysisPayload.model_validate(analysis)
        user_prompt = TEST_CASE_GENERATOR_USER_TEMPLATE.format(
            summary=analysis.summary,
            reproduction_steps=analysis.reproduction_steps,
            suggested_fix=analysis.suggested_fix,
        )
        try:
            return await self.llm.invoke(TEST_CASE_GENERATOR_SYSTEM, user_prompt)
        except LLMClientError as e:
            logger.warning("test_case_generation_error", error=str(e)[:200])
            return TEST_GENERATION_FAILED

    def suggest_assignee(
        self,
        module: str,
        recent_assignees: Sequence[Union[Assignee, Mapping[str, Any]]] = (),
    ) -> Optional[str]:
        """Most recent assignee for similar issues in module, if any."""
        if not recent_assignees:
            return None
        first = recent_assignees[0]
        assignee = Assignee.model_validate(first) if isinstance(first, Mapping) else first
        logger.debug("assignee_suggested", module=module, assignee=assignee.name)
        return assignee.name

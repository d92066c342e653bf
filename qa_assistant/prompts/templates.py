"""
Prompt templates for the bug analysis use cases.

Each prompt has one focused job. Optional context (user story, logs) is
rendered as its own section and omitted entirely when absent.
"""

# ═══════════════════════════════════════════════════════════
# BUG ANALYSIS
# ═══════════════════════════════════════════════════════════

BUG_ANALYSIS_SYSTEM = (
    "You are an expert QA analyst and software engineer. Analyze bug reports and "
    "generate comprehensive, developer-ready bug tickets. Always respond with valid JSON."
)

USER_STORY_SECTION_TEMPLATE = """
**Related User Story Context:**
Summary: {summary}
Description: {description}
Acceptance Criteria: {acceptance_criteria}
Components: {components}
"""

LOGS_SECTION_TEMPLATE = """
**Logs/Error Messages:**
{logs}
"""

BUG_ANALYSIS_USER_TEMPLATE = """
Analyze the following bug report and generate a comprehensive, developer-ready bug ticket.
{user_story_section}
**Bug Description from QA:**
{description}
{logs_section}
Please provide a structured analysis in the following JSON format:
{{
  "summary": "Clear, concise bug title (max 100 chars)",
  "reproductionSteps": "Numbered step-by-step instructions to reproduce the bug",
  "rootCause": "Analysis of what might be causing this bug",
  "affectedModule": "The specific component, module, or feature affected",
  "suggestedFix": "Technical suggestion for how to fix this issue",
  "testCases": "Jest/React Testing Library test cases to verify the fix",
  "priority": "Critical|High|Medium|Low",
  "severity": "Blocker|Critical|Major|Minor|Trivial"
}}

Be specific, technical, and actionable. Focus on clarity for developers. Respond ONLY with valid JSON.
"""


# ═══════════════════════════════════════════════════════════
# MODULE IDENTIFICATION
# ═══════════════════════════════════════════════════════════

MODULE_IDENTIFIER_SYSTEM = (
    "You are an expert at identifying software components and modules from bug "
    "descriptions. Respond with only the module name."
)

AVAILABLE_COMPONENTS_SECTION_TEMPLATE = """
Available Components: {components}
"""

MODULE_IDENTIFIER_USER_TEMPLATE = """
Given the following bug description, identify the most likely affected module or component:

Bug Description: {description}
{components_section}
Return ONLY the name of the most likely affected module/component. Be specific and concise.
"""


# ═══════════════════════════════════════════════════════════
# TEST CASE GENERATION
# ═══════════════════════════════════════════════════════════

TEST_CASE_GENERATOR_SYSTEM = (
    "You are an expert in writing Jest and React Testing Library tests. "
    "Generate comprehensive test cases."
)

TEST_CASE_GENERATOR_USER_TEMPLATE = """
Generate comprehensive Jest and React Testing Library test cases for the following bug fix:

Summary: {summary}
Reproduction Steps: {reproduction_steps}
Suggested Fix: {suggested_fix}

Generate test cases that:
1. Test the bug scenario (should fail before fix)
2. Test the expected behavior (should pass after fix)
3. Test edge cases
4. Include proper setup, assertions, and cleanup

Return the test code in a well-formatted, ready-to-use format.
"""

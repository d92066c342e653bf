"""
QA Assistant command-line entry point.

Usage:
    python -m qa_assistant.main providers
    python -m qa_assistant.main analyze "Login button does nothing" --logs-file app.log
    python -m qa_assistant.main analyze "Checkout total wrong" --story story.json --json
    python -m qa_assistant.main identify-module "Cart badge stale" --components Cart,Header
    python -m qa_assistant.main generate-tests --analysis analysis.json
"""

from __future__ import annotations

# Load .env before any other imports so provider SDKs never see stale env keys
import qa_assistant.config  # noqa: F401, E402

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from qa_assistant.analysis.bug_analyzer import BugAnalyzer
from qa_assistant.config import Settings, get_settings
from qa_assistant.llm.adapters import ProviderKind, adapter_for
from qa_assistant.llm.credentials import is_usable, mask_secret
from qa_assistant.llm.errors import LLMClientError
from qa_assistant.llm.invoker import get_invoker
from qa_assistant.llm.registry import ENV_KEYS, KEY_PREFIXES, PROVIDER_ORDER
from qa_assistant.models import AnalysisPayload
from qa_assistant.observability import configure_logging
from qa_assistant.observability import metrics as obs_metrics

console = Console(highlight=False)


def _provider_rows(settings: Settings) -> list[tuple[str, str, str, str, bool]]:
    """(provider, env var, key suffix, model, usable) for each provider kind, in priority order."""
    llm = settings.llm
    secrets = {
        ProviderKind.GROQ: (llm.groq_api_key, llm.groq_model),
        ProviderKind.OPENAI: (llm.openai_api_key, llm.openai_model),
        ProviderKind.ANTHROPIC: (llm.anthropic_api_key, llm.anthropic_model),
        ProviderKind.GEMINI: (llm.google_api_key, llm.gemini_model),
    }
    rows = []
    for kind in PROVIDER_ORDER:
        secret, model = secrets[kind]
        rows.append(
            (
                kind.value,
                ENV_KEYS[kind],
                mask_secret(secret),
                model or adapter_for(kind).DEFAULT_MODEL,
                is_usable(secret, KEY_PREFIXES[kind]),
            )
        )
    return rows


def show_providers() -> int:
    rows = _provider_rows(get_settings())
    table = Table(title="LLM Providers", border_style="#ea580c", title_style="bold #ea580c")
    table.add_column("Priority", justify="right", style="#64748b")
    table.add_column("Provider", style="bold #94a3b8")
    table.add_column("Env var", style="#64748b")
    table.add_column("Key", style="#e2e8f0")
    table.add_column("Model", style="#e2e8f0")
    table.add_column("Status")
    for i, (name, env_var, key, model, usable) in enumerate(rows):
        status = "[green]ready[/green]" if usable else "[#dc2626]skipped[/#dc2626]"
        table.add_row(str(i), name, env_var, key, model, status)
    console.print(table)
    if not any(r[4] for r in rows):
        console.print("[bold #dc2626]No valid LLM providers configured.[/bold #dc2626] Add at least one API key to .env")
        return 1
    return 0


def _display_analysis(analysis: AnalysisPayload) -> None:
    table = Table(title="Bug Analysis", border_style="#ea580c", title_style="bold #ea580c", show_lines=True)
    table.add_column("Field", style="bold #94a3b8")
    table.add_column("Value", style="#e2e8f0")
    for key, value in analysis.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


async def run_analysis(
    description: str,
    logs: Optional[str] = None,
    story: Optional[dict] = None,
    as_json: bool = False,
) -> int:
    analyzer = BugAnalyzer(get_invoker())
    try:
        analysis = await analyzer.analyze(description, logs=logs, user_story_context=story)
    except LLMClientError as e:
        console.print(Panel(str(e), title="[#dc2626] LLM analysis failed[/#dc2626]", border_style="#dc2626"))
        return 1
    if as_json:
        print(json.dumps(analysis.to_dict(), indent=2))
    else:
        _display_analysis(analysis)
    return 0


async def run_identify_module(description: str, components: list[str]) -> int:
    module = await BugAnalyzer(get_invoker()).identify_affected_module(description, components)
    console.print(f"[bold #ea580c]Affected module:[/bold #ea580c] {module}")
    return 0


async def run_generate_tests(analysis: dict) -> int:
    tests = await BugAnalyzer(get_invoker()).generate_test_cases(analysis)
    console.print(Panel(tests, title="[#ea580c] Generated Test Cases[/#ea580c]", border_style="#ea580c"))
    return 0


def _read_json(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="QA Assistant: LLM bug analysis")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("providers", help="Show which LLM providers are configured")

    an = sub.add_parser("analyze", help="Analyze a bug description")
    an.add_argument("description", help="Bug description from QA")
    an.add_argument("--logs-file", help="File with logs / error messages")
    an.add_argument("--story", help="JSON file with related user story context")
    an.add_argument("--json", action="store_true", help="Print the analysis as JSON")

    im = sub.add_parser("identify-module", help="Identify the affected module")
    im.add_argument("description", help="Bug description")
    im.add_argument("--components", default="", help="Comma-separated list of known components")

    gt = sub.add_parser("generate-tests", help="Generate test cases for a bug fix")
    gt.add_argument("--analysis", required=True, help="JSON file with a bug analysis")

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.observability.log_level)
    if settings.observability.metrics_enabled:
        obs_metrics.start_server(port=settings.observability.metrics_port)

    if args.command == "providers":
        return show_providers()
    if args.command == "analyze":
        logs = Path(args.logs_file).read_text(encoding="utf-8") if args.logs_file else None
        story = _read_json(args.story) if args.story else None
        return asyncio.run(run_analysis(args.description, logs, story, args.json))
    if args.command == "identify-module":
        components = [c.strip() for c in args.components.split(",") if c.strip()]
        return asyncio.run(run_identify_module(args.description, components))
    if args.command == "generate-tests":
        return asyncio.run(run_generate_tests(_read_json(args.analysis)))
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

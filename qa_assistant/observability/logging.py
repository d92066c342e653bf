"""
structlog configuration for the QA Assistant.

Log lines are rendered through Rich. Failover and exhaustion events get a
highlighted line so a provider switch is visible in a busy terminal.
"""

from __future__ import annotations

import logging

import structlog
from rich.console import Console

console = Console(stderr=True, highlight=False)


class _RichStructlogRenderer:
    """Custom structlog processor that renders log lines via Rich."""

    _SKIP_KEYS = frozenset({"event", "level", "_record"})

    def __call__(self, logger_: object, method: str, event_dict: dict) -> str:  # noqa: ARG002
        event = event_dict.get("event", "")
        level = event_dict.get("level", "info").lower()

        if event == "llm_failover":
            console.print(
                f"  [bold #f59e0b]── FAILOVER ──[/bold #f59e0b]  "
                f"[#64748b]{event_dict.get('from_provider', '?')}[/#64748b] "
                f"[bold #ea580c]→[/bold #ea580c] "
                f"[bold #0ea5e9]{event_dict.get('to_provider', '?')}[/bold #0ea5e9]  "
                f"[bold #dc2626][{event_dict.get('failure_kind', 'unknown')}][/bold #dc2626]"
            )
            raise structlog.DropEvent()

        kv_parts = []
        for k, v in event_dict.items():
            if k in self._SKIP_KEYS:
                continue
            vs = str(v)
            if len(vs) > 120:
                vs = vs[:117] + "…"
            kv_parts.append(f"[#64748b]{k}[/#64748b]=[#94a3b8]{vs}[/#94a3b8]")
        kv_str = "  ".join(kv_parts)

        if level == "warning":
            prefix = "[bold #f59e0b]⚠[/bold #f59e0b]"
            ev_fmt = f"[bold #f59e0b]{event}[/bold #f59e0b]"
        elif level in ("error", "critical"):
            prefix = "[bold #dc2626]✗[/bold #dc2626]"
            ev_fmt = f"[bold #dc2626]{event}[/bold #dc2626]"
        elif level == "debug":
            prefix = "[#64748b]·[/#64748b]"
            ev_fmt = f"[#64748b]{event}[/#64748b]"
        else:
            prefix = "[#ea580c]▪[/#ea580c]"
            ev_fmt = f"[bold #e2e8f0]{event}[/bold #e2e8f0]"

        console.print(f"  {prefix} {ev_fmt}  {kv_str}")
        raise structlog.DropEvent()


def configure_logging(level: str = "INFO") -> None:
    """Route structlog events through the Rich renderer, dropping those below level."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            _RichStructlogRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )

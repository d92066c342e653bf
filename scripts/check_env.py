#!/usr/bin/env python3
"""
Check that the LLM API keys from .env are valid and working.

`qa-assistant providers` only validates key shape. This script goes further:
it sends a minimal prompt to every provider whose key validates, directly
through its adapter (no failover), and reports which ones actually answer.
Use it before a demo to avoid "401 Unauthorized" or quota errors mid-analysis.

Usage:
    python scripts/check_env.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Project root = parent of scripts/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_assistant.config import get_settings  # noqa: E402
from qa_assistant.llm.invoker import classify_failure  # noqa: E402
from qa_assistant.llm.registry import ENV_KEYS, ProviderDescriptor, ProviderRegistry  # noqa: E402
from qa_assistant.models import InvocationOptions  # noqa: E402

PING_OPTIONS = InvocationOptions(temperature=0.0, max_tokens=5)
PING_TIMEOUT_SECONDS = 20.0


async def ping(provider: ProviderDescriptor) -> tuple[bool, str]:
    """Send "Say OK" to one provider. Returns (ok, message)."""
    try:
        text = await asyncio.wait_for(
            provider.call("Reply with one word.", "Say OK", PING_OPTIONS),
            timeout=PING_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        return False, f"transport: no answer within {PING_TIMEOUT_SECONDS:g}s"
    except Exception as e:
        return False, f"{classify_failure(e).value}: {str(e)[:200]}"
    return True, f"OK ({text.strip()[:20]!r})"


def warn_duplicate_keys_in_env() -> None:
    """Warn if a provider key appears more than once in .env (last occurrence wins with dotenv)."""
    if not ENV_FILE.exists():
        return
    watched = set(ENV_KEYS.values())
    seen: dict[str, list[int]] = {}
    with open(ENV_FILE) as f:
        for i, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key = line.partition("=")[0].strip()
            if key in watched:
                seen.setdefault(key, []).append(i)
    dupes = {k: v for k, v in seen.items() if len(v) > 1}
    if dupes:
        print("[WARN] Duplicate keys in .env (the last value wins; remove duplicates to avoid using an old key):")
        for k, lines in dupes.items():
            print(f"       {k} on lines {lines}")
        print()


async def main() -> int:
    print("Loading .env from", ENV_FILE)
    warn_duplicate_keys_in_env()

    registry = ProviderRegistry.from_settings(get_settings())
    if registry.is_empty():
        print("[FAIL] No provider key passed validation. Set one of: " + ", ".join(ENV_KEYS.values()))
        return 1

    print()
    failed = 0
    for provider in registry:
        ok, msg = await ping(provider)
        status = "[OK]  " if ok else "[FAIL]"
        if not ok:
            failed += 1
        print(f"  {status} {provider.name} (priority {provider.priority})")
        print(f"         → {msg}")
        print()

    if failed == registry.size():
        print("No configured provider answered. Analyses will fail until a key is fixed.")
        return 1
    if failed:
        print("Some providers failed; requests will fail over to the ones marked OK.")
        return 0
    print("All configured providers answered.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

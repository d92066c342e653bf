"""Credential validation: decide whether an environment-provided key is usable."""

from __future__ import annotations

from typing import Optional

# Substrings that only ever appear in example/placeholder keys.
PLACEHOLDER_MARKERS = ("your-key", "your-api-key", "xxxxx")

# All real provider keys are at least this long.
MIN_KEY_LENGTH = 20


def is_usable(secret: Optional[str], prefix: Optional[str] = None) -> bool:
    """Return True if secret looks like a real API key (optionally with the given prefix)."""
    if not secret or not secret.strip():
        return False
    if any(marker in secret for marker in PLACEHOLDER_MARKERS):
        return False
    if len(secret) < MIN_KEY_LENGTH:
        return False
    if prefix and not secret.startswith(prefix):
        return False
    return True


def mask_secret(secret: Optional[str]) -> str:
    """Mask key for logs and display."""
    if not secret:
        return "(not set)"
    if len(secret) < 8:
        return "(too short)"
    return f"...{secret[-4:]}"

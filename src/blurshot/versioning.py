"""Version resolution helpers."""

from __future__ import annotations

import os

SCRIPT_VERSION = "2026-10-19.1"


def get_version(script_name: str, script_version: str = SCRIPT_VERSION) -> str:
    """Return a human-readable version string with an env override."""

    return os.getenv("BLURSHOT_VERSION", f"{script_name}:{script_version}")


__all__ = ["SCRIPT_VERSION", "get_version"]

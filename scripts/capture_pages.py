#!/usr/bin/env python3
"""CLI shim for the page capture batch.

Reads TARGET_URLS / COOKIE_MAP / USER_AGENT / IMGE_API_KEY / IMGE_ALBUM_ID from
the environment (flags override), then screenshots, blurs and optionally
uploads every target.

Usage (examples)
----------------
TARGET_URLS="https://a.example,https://b.streamlit.app" python scripts/capture_pages.py

python scripts/capture_pages.py --urls https://example.com --settle-delay-ms 0 --clean
"""
from __future__ import annotations

import asyncio
import os

from blurshot import RunConfig, get_version, parse_args, run
from blurshot.logging import configure_logging, logging_context, set_global_context

SCRIPT_NAME = "capture"


def main() -> None:
    """Parse configuration and execute the capture batch."""
    configure_logging()
    set_global_context(app="blurshot", pipeline=SCRIPT_NAME)
    version = get_version(SCRIPT_NAME)
    with logging_context(script=SCRIPT_NAME, version=version):
        config: RunConfig = parse_args(cookie_dir=os.path.dirname(os.path.abspath(__file__)))
        asyncio.run(run(config))


if __name__ == "__main__":
    main()

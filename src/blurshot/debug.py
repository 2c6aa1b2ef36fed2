"""Debug artifacts (page HTML, Playwright traces) written per target."""

from __future__ import annotations

import os

from playwright.async_api import Page

from .logging import jlog

DEBUG_DIR = os.path.join("media", "debug")


def debug_artifact_path(debug_dir: str, kind: str, number: int, ext: str) -> str:
    """Return ``<debug_dir>/<kind>_<number>.<ext>``, creating the directory."""

    os.makedirs(debug_dir, exist_ok=True)
    return os.path.join(debug_dir, f"{kind}_{number}.{ext}")


async def dump_page_html(page: Page, debug_dir: str, number: int) -> str | None:
    """Persist the current page HTML (best effort)."""

    try:
        path = debug_artifact_path(debug_dir, "page", number, "html")
        html = await page.content()
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(html)
        return path
    except Exception as exc:  # pragma: no cover - logging only
        jlog("error", event="debug_save_html_error", index=number, error=str(exc))
        return None


__all__ = ["DEBUG_DIR", "debug_artifact_path", "dump_page_html"]

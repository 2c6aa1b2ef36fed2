"""Playwright helpers shared by the capture pipeline."""

from __future__ import annotations

from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from .logging import jlog

MANAGE_APP_TEXT = "Manage app"
DEFAULT_BUTTON_TIMEOUT_MS = 30000


async def dismiss_manage_app_banner(page: Page, *, timeout_ms: int = DEFAULT_BUTTON_TIMEOUT_MS) -> bool:
    """Click the first button whose text contains "Manage app".

    Best effort: returns False when no button shows up in time or none matches.
    """

    try:
        await page.wait_for_selector("button", state="visible", timeout=timeout_ms)
        for btn in await page.query_selector_all("button"):
            text = (await btn.inner_text()).strip()
            if MANAGE_APP_TEXT in text:
                await btn.click()
                return True
    except PlaywrightError as exc:
        jlog("info", event="banner_wait_failed", error=str(exc).splitlines()[0] if str(exc) else repr(exc))
    return False


async def cleanup_context(context: BrowserContext | None, *, trace_path: str | None = None) -> None:
    """Stop tracing (if a trace path is given) and close the browsing context."""

    try:
        if trace_path and context:
            await context.tracing.stop(path=trace_path)
    except Exception:
        pass
    try:
        if context:
            await context.close()
    except Exception:
        pass


CHROMIUM_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


__all__ = [
    "CHROMIUM_LAUNCH_ARGS",
    "DEFAULT_BUTTON_TIMEOUT_MS",
    "MANAGE_APP_TEXT",
    "cleanup_context",
    "dismiss_manage_app_banner",
]

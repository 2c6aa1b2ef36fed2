"""
Batch page capture: screenshot, blur and optionally upload each target URL.

Overview
--------
One shared Chromium hosts an isolated context per target. Each target is
visited with the cookies resolved for its domain, hosted Streamlit apps get
their "Manage app" button clicked, and the viewport is saved as
``screenshot_<n>.jpg`` next to a blurred ``blurred_<n>.jpg``. When im.ge
credentials are configured the blurred image is uploaded. Cookies observed at
the end of a visit replace the cached entry for that domain.

Failures are isolated per target and reported as a :class:`TargetOutcome`; only
run-level problems (browser launch, a corrupt cookie cache) stop the batch.
"""
from __future__ import annotations

import asyncio
import functools
import os
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Browser, BrowserContext, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import VIEWPORT, RunConfig
from .cookies import CookieCacheError, CookieStore, resolve_cookies
from .debug import DEBUG_DIR, debug_artifact_path, dump_page_html
from .imaging import JPEG_QUALITY, blur_image
from .logging import jlog, logging_context, targetlog
from .playwright import CHROMIUM_LAUNCH_ARGS, cleanup_context, dismiss_manage_app_banner
from .publisher import upload_image
from .urls import Target, blurred_path, build_targets, is_artifact_name, is_hosted_app, screenshot_path

STATUS_DONE = "done"
STATUS_TIMEOUT = "timeout"
STATUS_ERROR = "error"

Uploader = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class TargetOutcome:
    target: Target
    status: str
    error: str | None = None
    screenshot_path: str | None = None
    blurred_path: str | None = None
    upload_url: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_DONE


def make_uploader(config: RunConfig) -> Uploader | None:
    """Return a blocking upload callable, or None when upload is not configured."""

    if not config.upload_enabled:
        return None
    return functools.partial(upload_image, api_key=config.imge_api_key, album_id=config.imge_album_id)


def purge_stale_artifacts(output_dir: str) -> int:
    """Delete screenshot/blurred files left over from a previous run."""

    if not os.path.isdir(output_dir):
        return 0
    removed = 0
    for name in sorted(os.listdir(output_dir)):
        if is_artifact_name(name):
            os.remove(os.path.join(output_dir, name))
            removed += 1
    jlog("info", event="stale_artifacts_removed", output_dir=output_dir, count=removed)
    return removed


async def _capture(
    context: BrowserContext,
    target: Target,
    config: RunConfig,
    store: CookieStore,
    uploader: Uploader | None,
) -> TargetOutcome:
    page = await context.new_page()
    await page.goto(target.url, wait_until="networkidle", timeout=config.page_timeout_ms)
    targetlog("navigated", target=target, final_url=page.url)

    if config.settle_delay_ms:
        await page.wait_for_timeout(config.settle_delay_ms)

    if is_hosted_app(target.url):
        clicked = await dismiss_manage_app_banner(page, timeout_ms=config.button_timeout_ms)
        targetlog("banner_dismissed" if clicked else "banner_not_found", target=target)

    if config.debug_html:
        await dump_page_html(page, DEBUG_DIR, target.number)

    shot = screenshot_path(config.output_dir, target)
    blurred = blurred_path(config.output_dir, target)
    await page.screenshot(path=shot, type="jpeg", quality=JPEG_QUALITY)
    width, height = await asyncio.to_thread(blur_image, shot, blurred)
    targetlog("captured", target=target, screenshot=shot, blurred=blurred, width=width, height=height)

    upload_url = None
    if uploader is not None:
        upload_url = await asyncio.to_thread(uploader, blurred)
        if upload_url:
            targetlog("uploaded", target=target, upload_url=upload_url)

    cookies = await context.cookies([page.url])
    store.save(target.domain, cookies)
    targetlog("cookies_saved", target=target, count=len(cookies))

    return TargetOutcome(
        target=target,
        status=STATUS_DONE,
        screenshot_path=shot,
        blurred_path=blurred,
        upload_url=upload_url,
    )


async def process_target(
    browser: Browser,
    target: Target,
    config: RunConfig,
    store: CookieStore,
    *,
    uploader: Uploader | None = None,
) -> TargetOutcome:
    """Process one target end-to-end on a browser lent by the caller.

    Returns an outcome tagged 'done' | 'timeout' | 'error'. A corrupt cookie
    cache raises :class:`CookieCacheError` instead, since no target can use it,
    as does a context failure once the browser has disconnected.
    """

    with logging_context(index=target.number, domain=target.domain):
        targetlog("target_start", target=target)
        try:
            context = await browser.new_context(user_agent=config.user_agent, viewport=dict(VIEWPORT))
        except PlaywrightError as exc:
            if not browser.is_connected():
                raise
            targetlog("target_failed", target=target, level="error", status=STATUS_ERROR, error=repr(exc))
            return TargetOutcome(target=target, status=STATUS_ERROR, error=repr(exc))
        trace_path = None
        try:
            cookies = resolve_cookies(target.domain, store, config.cookie_map)
            try:
                if config.trace:
                    await context.tracing.start(screenshots=True, snapshots=True, sources=True)
                    trace_path = debug_artifact_path(DEBUG_DIR, "trace", target.number, "zip")
                if cookies:
                    await context.add_cookies(cookies)
                return await _capture(context, target, config, store, uploader)
            except CookieCacheError:
                raise
            except PlaywrightTimeoutError as exc:
                targetlog("target_failed", target=target, level="warning", status=STATUS_TIMEOUT, error=str(exc))
                return TargetOutcome(target=target, status=STATUS_TIMEOUT, error=str(exc))
            except Exception as exc:  # outermost safety net per target
                targetlog("target_failed", target=target, level="error", status=STATUS_ERROR, error=repr(exc))
                return TargetOutcome(target=target, status=STATUS_ERROR, error=repr(exc))
        finally:
            await cleanup_context(context, trace_path=trace_path)


async def run_targets(
    browser: Browser,
    targets: list[Target],
    config: RunConfig,
    store: CookieStore,
    *,
    uploader: Uploader | None = None,
) -> list[TargetOutcome]:
    """Process every target with at most ``config.concurrency`` in flight.

    Outcomes are returned in target order, whatever order they finished in.
    """

    semaphore = asyncio.Semaphore(config.concurrency)

    async def _bounded(target: Target) -> TargetOutcome:
        async with semaphore:
            return await process_target(browser, target, config, store, uploader=uploader)

    tasks = [asyncio.create_task(_bounded(t), name=f"target-{t.number}") for t in targets]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def summarize(outcomes: list[TargetOutcome]) -> dict[str, int]:
    counts = Counter(o.status for o in outcomes)
    jlog(
        "info",
        event="run_summary",
        total=len(outcomes),
        counts=dict(counts),
        failed=[o.target.number for o in outcomes if not o.ok],
        uploaded=sum(1 for o in outcomes if o.upload_url),
    )
    return dict(counts)


async def run(
    config: RunConfig,
    *,
    browser: Browser | None = None,
    uploader: Uploader | None = None,
) -> list[TargetOutcome]:
    """Execute the capture batch for the supplied configuration.

    When ``browser`` is given it is used as-is and left open; otherwise a
    headless Chromium is launched for the run and closed afterwards.
    """

    targets = build_targets(config.urls)
    os.makedirs(config.output_dir, exist_ok=True)
    if config.clean:
        purge_stale_artifacts(config.output_dir)
    store = CookieStore(config.cookie_file)
    if uploader is None:
        uploader = make_uploader(config)

    jlog(
        "info",
        event="run_start",
        targets=len(targets),
        concurrency=config.concurrency,
        output_dir=config.output_dir,
        cookie_file=config.cookie_file,
        upload=uploader is not None,
    )

    if browser is not None:
        outcomes = await run_targets(browser, targets, config, store, uploader=uploader)
    else:
        async with async_playwright() as pw:
            launched = await pw.chromium.launch(headless=config.headless, args=CHROMIUM_LAUNCH_ARGS)
            try:
                outcomes = await run_targets(launched, targets, config, store, uploader=uploader)
            finally:
                try:
                    await launched.close()
                except Exception:
                    pass

    summarize(outcomes)
    return outcomes


__all__ = [
    "STATUS_DONE",
    "STATUS_ERROR",
    "STATUS_TIMEOUT",
    "TargetOutcome",
    "make_uploader",
    "process_target",
    "purge_stale_artifacts",
    "run",
    "run_targets",
    "summarize",
]

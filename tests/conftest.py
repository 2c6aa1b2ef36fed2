from __future__ import annotations

import asyncio
import os

import pytest
from blurshot.config import RunConfig
from blurshot.urls import domain_of
from PIL import Image
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeButton:
    def __init__(self, page: "FakePage", text: str) -> None:
        self.page = page
        self.text = text

    async def inner_text(self) -> str:
        return self.text

    async def click(self) -> None:
        self.page.clicked.append(self.text.strip())


class FakePage:
    def __init__(self, context: "FakeContext") -> None:
        self.context = context
        self.url = "about:blank"
        self.clicked: list[str] = []
        self.waited_ms: list[int] = []

    async def goto(self, url: str, wait_until: str | None = None, timeout: int | None = None) -> None:
        browser = self.context.browser
        browser.visited.append(url)
        await asyncio.sleep(browser.delay_s)
        if url in browser.failing:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self.url = url

    async def wait_for_timeout(self, timeout: int) -> None:
        self.waited_ms.append(timeout)

    async def wait_for_selector(self, selector: str, state: str | None = None, timeout: int | None = None) -> FakeButton:
        buttons = self.context.browser.buttons
        if not buttons:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return FakeButton(self, buttons[0])

    async def query_selector_all(self, selector: str) -> list[FakeButton]:
        return [FakeButton(self, text) for text in self.context.browser.buttons]

    async def content(self) -> str:
        return "<html></html>"

    async def screenshot(self, path: str, type: str = "png", quality: int | None = None) -> None:
        size = (self.context.viewport["width"], self.context.viewport["height"])
        Image.new("RGB", size, (30, 120, 200)).save(path, format="JPEG", quality=quality)


class FakeContext:
    def __init__(self, browser: "FakeBrowser", user_agent: str, viewport: dict[str, int]) -> None:
        self.browser = browser
        self.user_agent = user_agent
        self.viewport = viewport
        self.added_cookies: list[dict] = []
        self.pages: list[FakePage] = []
        self.closed = False

    async def add_cookies(self, cookies: list[dict]) -> None:
        self.added_cookies.extend(cookies)

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def cookies(self, urls: list[str] | None = None) -> list[dict]:
        domain = domain_of(urls[0]) if urls else ""
        session = {
            "name": "session",
            "value": f"sid-{domain}",
            "domain": domain,
            "path": "/",
            "httpOnly": True,
            "secure": True,
        }
        return [*self.added_cookies, session]

    async def close(self) -> None:
        self.closed = True
        self.browser.open_contexts -= 1


class FakeBrowser:
    """Stands in for a Playwright Browser and records how it was driven."""

    def __init__(
        self,
        *,
        failing: set[str] | None = None,
        buttons: list[str] | None = None,
        delay_s: float = 0.01,
        context_failures: int = 0,
        connected: bool = True,
    ) -> None:
        self.context_failures = context_failures
        self.connected = connected
        self.failing = failing or set()
        self.buttons = buttons or []
        self.delay_s = delay_s
        self.contexts: list[FakeContext] = []
        self.visited: list[str] = []
        self.open_contexts = 0
        self.max_open_contexts = 0

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, user_agent: str, viewport: dict[str, int]) -> FakeContext:
        if self.context_failures:
            self.context_failures -= 1
            raise PlaywrightError("Target page, context or browser has been closed")
        context = FakeContext(self, user_agent, viewport)
        self.contexts.append(context)
        self.open_contexts += 1
        self.max_open_contexts = max(self.max_open_contexts, self.open_contexts)
        return context


@pytest.fixture
def make_config(tmp_path):
    def _make(urls: list[str], **overrides) -> RunConfig:
        fields = dict(
            urls=urls,
            cookie_map={},
            user_agent="test-agent/1.0",
            imge_api_key=None,
            imge_album_id=None,
            concurrency=5,
            output_dir=str(tmp_path),
            cookie_file=os.path.join(str(tmp_path), "cookies.json"),
            page_timeout_ms=1000,
            button_timeout_ms=1000,
            settle_delay_ms=0,
            headless=True,
            trace=False,
            debug_html=False,
            clean=False,
        )
        fields.update(overrides)
        return RunConfig(**fields)

    return _make


@pytest.fixture
def fake_browser_cls():
    return FakeBrowser

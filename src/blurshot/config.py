"""Run configuration assembled once from the environment and CLI flags."""

from __future__ import annotations

import argparse
import json
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .playwright import DEFAULT_BUTTON_TIMEOUT_MS
from .urls import split_target_urls

DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_CONCURRENCY = 5
DEFAULT_PAGE_TIMEOUT_MS = 30000
DEFAULT_SETTLE_DELAY_MS = 3000
DEFAULT_COOKIE_FILENAME = "cookies.json"
VIEWPORT = {"width": 1280, "height": 800}

_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Configuration values are missing or malformed."""


@dataclass(frozen=True)
class RunConfig:
    urls: list[str]
    cookie_map: dict[str, str]
    user_agent: str
    imge_api_key: str | None
    imge_album_id: str | None
    concurrency: int
    output_dir: str
    cookie_file: str
    page_timeout_ms: int
    button_timeout_ms: int
    settle_delay_ms: int
    headless: bool
    trace: bool
    debug_html: bool
    clean: bool

    @property
    def upload_enabled(self) -> bool:
        return bool(self.imge_api_key and self.imge_album_id)


def parse_cookie_map(raw: str | None) -> dict[str, str]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"COOKIE_MAP is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("COOKIE_MAP must be a JSON object mapping domain to cookie header")
    return {str(k): str(v) for k, v in data.items()}


def validate_config(config: RunConfig) -> None:
    if not config.urls:
        raise ConfigError("no target URLs supplied; set TARGET_URLS or pass --urls")
    if config.concurrency < 1:
        raise ConfigError(f"concurrency must be at least 1, got {config.concurrency}")
    for name in ("page_timeout_ms", "button_timeout_ms", "settle_delay_ms"):
        if getattr(config, name) < 0:
            raise ConfigError(f"{name} must not be negative")


def _build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Screenshot, blur and optionally upload a batch of web pages")
    p.add_argument("--urls", default=env.get("TARGET_URLS"), help="Comma-separated target URLs (default from TARGET_URLS).")
    p.add_argument("--cookie-map", default=env.get("COOKIE_MAP"), help="JSON object mapping domain to a raw cookie header (default from COOKIE_MAP).")
    p.add_argument("--user-agent", default=env.get("USER_AGENT") or DEFAULT_USER_AGENT)
    p.add_argument("--imge-api-key", default=env.get("IMGE_API_KEY"))
    p.add_argument("--imge-album-id", default=env.get("IMGE_ALBUM_ID"))
    p.add_argument("--concurrency", type=int, default=env.get("CONCURRENCY") or DEFAULT_CONCURRENCY)
    p.add_argument("--output-dir", default=env.get("OUTPUT_DIR") or ".", help="Directory for screenshot_<n>.jpg / blurred_<n>.jpg.")
    p.add_argument("--cookie-file", default=env.get("COOKIE_FILE"), help="Cookie cache path (default cookies.json beside the capture script).")
    p.add_argument(
        "--page-timeout-ms",
        type=int,
        default=env.get("PAGE_TIMEOUT_MS") or DEFAULT_PAGE_TIMEOUT_MS,
        help=(
            "Timeout (ms) for page navigation (default from PAGE_TIMEOUT_MS env or 30000). Navigation waits for "
            "network idle with no requests in flight, so pages that poll continuously may need a larger value."
        ),
    )
    p.add_argument(
        "--button-timeout-ms",
        type=int,
        default=env.get("BUTTON_TIMEOUT_MS") or DEFAULT_BUTTON_TIMEOUT_MS,
        help="How long (ms) to wait for a clickable button on hosted apps.",
    )
    p.add_argument(
        "--settle-delay-ms",
        type=int,
        default=env.get("SETTLE_DELAY_MS") or DEFAULT_SETTLE_DELAY_MS,
        help="Fixed delay (ms) after load so client-rendered content can paint; 0 disables.",
    )
    p.add_argument(
        "--headed",
        action="store_true",
        default=(env.get("HEADLESS", "1").lower() in _FALSE_VALUES),
        help="Show the browser window instead of running headless.",
    )
    p.add_argument("--trace", action="store_true", help="Save a Playwright trace per target under media/debug.")
    p.add_argument("--debug-html", action="store_true", help="Dump page HTML per target under media/debug.")
    p.add_argument("--clean", action="store_true", help="Delete screenshot_*.jpg / blurred_*.jpg left by earlier runs first.")
    return p


def parse_args(
    argv: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
    *,
    cookie_dir: str | None = None,
) -> RunConfig:
    """Build the run configuration; ``cookie_dir`` holds the default cookie cache (else the output dir)."""
    env = os.environ if env is None else env
    p = _build_parser(env)
    ns = p.parse_args(argv)
    try:
        output_dir = ns.output_dir
        config = RunConfig(
            urls=split_target_urls(ns.urls),
            cookie_map=parse_cookie_map(ns.cookie_map),
            user_agent=ns.user_agent,
            imge_api_key=ns.imge_api_key or None,
            imge_album_id=ns.imge_album_id or None,
            concurrency=ns.concurrency,
            output_dir=output_dir,
            cookie_file=ns.cookie_file or os.path.join(cookie_dir or output_dir, DEFAULT_COOKIE_FILENAME),
            page_timeout_ms=ns.page_timeout_ms,
            button_timeout_ms=ns.button_timeout_ms,
            settle_delay_ms=ns.settle_delay_ms,
            headless=not ns.headed,
            trace=ns.trace,
            debug_html=ns.debug_html,
            clean=ns.clean,
        )
        validate_config(config)
    except ConfigError as exc:
        p.error(str(exc))
    return config


__all__ = ["ConfigError", "RunConfig", "VIEWPORT", "parse_args", "parse_cookie_map", "validate_config"]

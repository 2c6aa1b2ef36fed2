"""URL helpers for capture targets."""

from __future__ import annotations

import os
import re
import urllib.parse
from dataclasses import dataclass

HOSTED_APP_MARKERS = ("streamlit.app",)
SCREENSHOT_NAME = "screenshot_{number}.jpg"
BLURRED_NAME = "blurred_{number}.jpg"
ARTIFACT_RE = re.compile(r"^(screenshot|blurred)_[0-9]+\.jpg$")


@dataclass(frozen=True)
class Target:
    """One URL of the batch and its 0-based position in the configured list."""

    url: str
    index: int

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def domain(self) -> str:
        return domain_of(self.url)


def split_target_urls(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_targets(urls: list[str]) -> list[Target]:
    return [Target(url=url, index=i) for i, url in enumerate(urls)]


def domain_of(url: str) -> str:
    return (urllib.parse.urlparse(url).hostname or "").lower()


def is_hosted_app(url: str) -> bool:
    return any(marker in url for marker in HOSTED_APP_MARKERS)


def screenshot_path(output_dir: str, target: Target) -> str:
    return os.path.join(output_dir, SCREENSHOT_NAME.format(number=target.number))


def blurred_path(output_dir: str, target: Target) -> str:
    return os.path.join(output_dir, BLURRED_NAME.format(number=target.number))


def is_artifact_name(filename: str) -> bool:
    return bool(ARTIFACT_RE.match(filename))


__all__ = [
    "HOSTED_APP_MARKERS",
    "Target",
    "blurred_path",
    "build_targets",
    "domain_of",
    "is_artifact_name",
    "is_hosted_app",
    "screenshot_path",
    "split_target_urls",
]

"""Per-domain cookie cache and the policy that picks cookies for a visit."""

from __future__ import annotations

import json
import os
import threading
from typing import Any

from .logging import jlog

Cookie = dict[str, Any]


class CookieCacheError(ValueError):
    """The cookie cache file exists but does not hold a JSON object."""


class CookieStore:
    """JSON file mapping each domain to the cookies last observed for it.

    ``save`` rewrites the whole file. Calls are serialized with a lock so that
    concurrent targets in one process never drop each other's entries.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, list[Cookie]]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CookieCacheError(f"cookie cache {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise CookieCacheError(f"cookie cache {self.path} must hold a JSON object, got {type(data).__name__}")
        return data

    def load(self, domain: str) -> list[Cookie] | None:
        return self._read_all().get(domain)

    def save(self, domain: str, cookies: list[Cookie]) -> None:
        with self._lock:
            all_cookies = self._read_all()
            all_cookies[domain] = list(cookies)
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(all_cookies, fh, indent=2, ensure_ascii=False)


def parse_cookie_header(raw: str, domain: str) -> list[Cookie]:
    """Turn ``"a=1; b=2"`` into cookie records scoped to ``domain``.

    Only the first ``=`` of a segment separates name from value, so values such
    as base64 padding survive intact.
    """

    cookies: list[Cookie] = []
    for segment in raw.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        name, _, value = segment.partition("=")
        cookies.append(
            {
                "name": name.strip(),
                "value": value,
                "domain": domain,
                "path": "/",
                "httpOnly": False,
                "secure": True,
            }
        )
    return cookies


def resolve_cookies(domain: str, store: CookieStore, cookie_map: dict[str, str]) -> list[Cookie]:
    """Cached session cookies win over the statically configured header."""

    cached = store.load(domain)
    if cached is not None:
        jlog("info", event="cookies_resolved", domain=domain, source="cache", count=len(cached))
        return cached
    raw = cookie_map.get(domain)
    if raw:
        parsed = parse_cookie_header(raw, domain)
        jlog("info", event="cookies_resolved", domain=domain, source="config", count=len(parsed))
        return parsed
    return []


__all__ = ["Cookie", "CookieCacheError", "CookieStore", "parse_cookie_header", "resolve_cookies"]

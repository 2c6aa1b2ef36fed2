"""Upload helpers for the im.ge image host."""

from __future__ import annotations

import os
from typing import Any

import requests

from .logging import jlog

IMGE_UPLOAD_URL = "https://im.ge/api/1/upload"
UPLOAD_TIMEOUT_S = 60


def upload_image(
    path: str,
    *,
    api_key: str,
    album_id: str,
    session: requests.Session | None = None,
    endpoint: str = IMGE_UPLOAD_URL,
) -> str | None:
    """Upload ``path`` and return the hosted image URL.

    A non-2xx response or a body without ``image.url`` yields ``None``.
    Transport errors propagate to the caller.
    """

    http = session or requests.Session()
    data = {"key": api_key, "album_id": album_id, "nsfw": "1"}
    with open(path, "rb") as fh:
        files = {"source": (os.path.basename(path), fh, "image/jpeg")}
        resp = http.post(endpoint, data=data, files=files, timeout=UPLOAD_TIMEOUT_S)
    if not resp.ok:
        jlog("warning", event="upload_failed", path=path, status_code=resp.status_code)
        return None
    body: Any = resp.json()
    image = body.get("image") if isinstance(body, dict) else None
    url = image.get("url") if isinstance(image, dict) else None
    if not url:
        jlog("warning", event="upload_missing_url", path=path, status_code=resp.status_code)
        return None
    return url


__all__ = ["IMGE_UPLOAD_URL", "upload_image"]

from __future__ import annotations

import urllib.request
from collections.abc import Mapping


def fetch_url_bytes(
    url: str,
    *,
    timeout_seconds: float,
    headers: Mapping[str, str] | None = None,
) -> bytes:
    request = urllib.request.Request(url, headers=dict(headers or {}))
    with urllib.request.urlopen(  # noqa: S310
        request,
        timeout=timeout_seconds,
    ) as response:
        return response.read()


def fetch_url_text(
    url: str,
    *,
    timeout_seconds: float,
    headers: Mapping[str, str] | None = None,
) -> str:
    return fetch_url_bytes(url, timeout_seconds=timeout_seconds, headers=headers).decode(
        "utf-8"
    )

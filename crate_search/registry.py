from __future__ import annotations

import http.client
import json
import logging
import urllib.parse
from datetime import datetime
from email.utils import format_datetime
from typing import Any

from crate_search import __version__
from crate_search.downloads import fetch_url_bytes
from crate_search.models import Crate

logger = logging.getLogger(__name__)

CRATES_API_URL = "https://crates.io/api/v1/crates"
DEFAULT_USER_AGENT = f"crate-search/{__version__} (interactive crate name search)"


class RegistryError(RuntimeError):
    pass


def build_query_url(text: str, *, per_page: int) -> str:
    params = urllib.parse.urlencode(
        {
            "page": 1,
            "per_page": per_page,
            "q": text,
            "sort": "relevance",
        }
    )
    return f"{CRATES_API_URL}?{params}"


def format_timestamp(value: str | None) -> str:
    if not value:
        return "not available"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return format_datetime(parsed)


def _optional_tags(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(str(item) for item in value)


def crate_from_api(entry: dict[str, Any]) -> Crate:
    return Crate(
        id=entry["id"],
        name=entry.get("name") or entry["id"],
        max_version=entry.get("max_version") or entry.get("newest_version") or "",
        downloads=int(entry.get("downloads") or 0),
        created_at=format_timestamp(entry.get("created_at")),
        updated_at=format_timestamp(entry.get("updated_at")),
        description=entry.get("description"),
        license=entry.get("license"),
        documentation=entry.get("documentation"),
        homepage=entry.get("homepage"),
        repository=entry.get("repository"),
        recent_downloads=entry.get("recent_downloads"),
        categories=_optional_tags(entry.get("categories")),
        keywords=_optional_tags(entry.get("keywords")),
        exact_match=entry.get("exact_match"),
    )


def query_crates(
    text: str,
    *,
    per_page: int = 50,
    timeout_seconds: float = 10.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> list[Crate]:
    """Search crates.io, returning records in relevance order."""
    url = build_query_url(text, per_page=per_page)
    logger.debug("Querying registry: %s", url)
    try:
        payload = fetch_url_bytes(
            url,
            timeout_seconds=timeout_seconds,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )
        data = json.loads(payload)
        crates = [crate_from_api(entry) for entry in data.get("crates", [])]
    except (
        OSError,
        ValueError,
        KeyError,
        TypeError,
        AttributeError,
        http.client.HTTPException,
    ) as exc:
        raise RegistryError(f"Registry query failed: {exc!s}") from exc

    logger.info("Registry returned %d crates for %r", len(crates), text)
    return crates

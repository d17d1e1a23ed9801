from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token

from crate_search.downloads import fetch_url_text
from crate_search.results import ResultSet

logger = logging.getLogger(__name__)

# Repositories on any other default branch are never enriched.
DEFAULT_BRANCH = "master"
GITHUB_RAW_HOST = "raw.githubusercontent.com"

ReadmeFetcher = Callable[..., str]

_MARKDOWN = MarkdownIt("commonmark")


def _is_html_markup(markup: str) -> bool:
    # Rust generics such as <T> or <Mutex> parse as inline HTML; real tags are
    # lowercase.
    if markup.startswith(("<!", "<?")):
        return True
    name = markup.lstrip("</").split(maxsplit=1)[0].rstrip("/>")
    return name[:1].islower()


def _inline_text(children: Sequence[Token]) -> str:
    parts = []
    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append("\n")
        elif child.type == "image":
            parts.append(_inline_text(child.children or []))
        elif child.type == "html_inline" and not _is_html_markup(child.content):
            parts.append(child.content)
    return "".join(parts)


def strip_markdown(text: str) -> str:
    """Reduce Markdown to plain text suitable for a wrapped paragraph."""
    blocks = []
    for token in _MARKDOWN.parse(text):
        if token.type == "inline":
            blocks.append(_inline_text(token.children or []))
        elif token.type in ("fence", "code_block"):
            blocks.append(token.content.rstrip("\n"))
    return "\n\n".join(block for block in blocks if block.strip())


def readme_url(repository_url: str) -> str | None:
    if "github" in repository_url:
        parts = repository_url.rstrip("/").rsplit("/", 2)
        if len(parts) < 3 or not parts[1] or not parts[2]:
            return None
        owner, repo = parts[1], parts[2]
        return f"https://{GITHUB_RAW_HOST}/{owner}/{repo}/{DEFAULT_BRANCH}/README.md"
    if "gitlab" in repository_url:
        return f"{repository_url.rstrip('/')}/raw/{DEFAULT_BRANCH}/README.md"
    return None


def fetch_readme(url: str, *, timeout_seconds: float) -> str:
    return strip_markdown(fetch_url_text(url, timeout_seconds=timeout_seconds))


class EnrichmentWorker(threading.Thread):
    """Background thread filling in readme text for one result set.

    Each record gets a single fetch attempt. The worker runs until ``stop``
    is called; the flag is checked once per scan pass and between fetches.
    """

    SCAN_INTERVAL_SECONDS = 0.05
    FETCH_TIMEOUT_SECONDS = 10.0

    def __init__(
        self,
        results: ResultSet,
        *,
        fetch: ReadmeFetcher = fetch_readme,
        timeout_seconds: float = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(name="readme-enrichment", daemon=True)
        self._results = results
        self._fetch = fetch
        self._timeout_seconds = timeout_seconds
        self._stop_requested = threading.Event()
        self._attempted: set[int] = set()

    @property
    def results(self) -> ResultSet:
        return self._results

    @property
    def stopped(self) -> bool:
        return self._stop_requested.is_set()

    def stop(self) -> None:
        self._stop_requested.set()

    def run(self) -> None:
        while not self._stop_requested.wait(self.SCAN_INTERVAL_SECONDS):
            self.scan_once()
        logger.debug("Enrichment worker stopped")

    def scan_once(self) -> int:
        enriched = 0
        for index, repository_url in self._results.pending_enrichment():
            if self._stop_requested.is_set():
                break
            if index in self._attempted:
                continue
            self._attempted.add(index)

            url = readme_url(repository_url)
            if url is None:
                logger.debug("No readme source for %s", repository_url)
                continue

            try:
                text = self._fetch(url, timeout_seconds=self._timeout_seconds)
            except Exception as exc:
                logger.debug("Readme fetch failed for %s: %s", url, exc)
                continue

            if self._results.set_enrichment(index, text):
                enriched += 1
        return enriched

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Mode = Literal["search", "results"]
Overlay = Literal["none", "intro", "help"]
CommandKind = Literal["search", "open_url", "copy", "notify", "quit"]
Severity = Literal["information", "warning", "error"]

CRATE_PAGE_URL = "https://crates.io/crates/{crate_id}"


@dataclass(frozen=True)
class Crate:
    id: str
    name: str
    max_version: str
    downloads: int
    created_at: str
    updated_at: str
    description: str | None = None
    license: str | None = None
    documentation: str | None = None
    homepage: str | None = None
    repository: str | None = None
    recent_downloads: int | None = None
    categories: tuple[str, ...] | None = None
    keywords: tuple[str, ...] | None = None
    exact_match: bool | None = None
    readme: str | None = None

    @property
    def crate_page_url(self) -> str:
        return CRATE_PAGE_URL.format(crate_id=self.id)

    @property
    def dependency_line(self) -> str | None:
        """Cargo.toml dependency declaration for the latest version."""
        if not self.max_version:
            return None
        return f'{self.name} = "{self.max_version}"'

    @property
    def clone_and_run_line(self) -> str | None:
        if not self.repository:
            return None
        repository = self.repository.rstrip("/")
        directory = repository.rsplit("/", 1)[-1].removesuffix(".git")
        return f"git clone {repository} && cd {directory} && cargo run"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    payload: str | None = None
    severity: Severity = "information"

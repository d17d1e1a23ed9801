from __future__ import annotations

import asyncio
import logging
import webbrowser
from functools import partial

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Static

from crate_search.dispatcher import InputDispatcher
from crate_search.enrichment import EnrichmentWorker
from crate_search.models import Command
from crate_search.registry import RegistryError, query_crates
from crate_search.rendering import (
    COMPARE_TAB,
    HELP,
    INTRO,
    TAB_TITLES,
    render_compare_header,
    render_compare_rows,
    render_results_list,
    render_search_text,
    render_tab,
)
from crate_search.results import ResultSet

logger = logging.getLogger(__name__)


class CrateSearchTui(App[None]):
    CSS_PATH = "crate_search.tcss"
    ENABLE_COMMAND_PALETTE = False
    REFRESH_INTERVAL_SECONDS = 0.25
    BINDINGS = [
        Binding("ctrl+c", "quit", show=False, priority=True),
    ]

    def __init__(
        self,
        *,
        initial_query: str | None = None,
        per_page: int = 50,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__()
        self._initial_query = initial_query
        self._search_in_progress = False
        self._timeout_seconds = timeout_seconds
        self._dispatcher = InputDispatcher(
            query=partial(
                query_crates, per_page=per_page, timeout_seconds=timeout_seconds
            ),
            worker_factory=self._create_worker,
        )

    @property
    def dispatcher(self) -> InputDispatcher:
        return self._dispatcher

    def _create_worker(self, results: ResultSet) -> EnrichmentWorker:
        return EnrichmentWorker(results, timeout_seconds=self._timeout_seconds)

    def compose(self) -> ComposeResult:
        with Horizontal(id="body"):
            with Vertical(id="left-panel"):
                yield Static("", id="search-bar", markup=False)
                yield Static("", id="results-list")
            with Vertical(id="right-panel"):
                yield Static("", id="tabs")
                yield Static("", id="detail", markup=False)

    def on_mount(self) -> None:
        self.set_interval(self.REFRESH_INTERVAL_SECONDS, self._refresh_view)
        if self._initial_query:
            self._dispatcher.search_text = self._initial_query
            self._execute(Command("search", self._initial_query))
        self._refresh_view()

    def on_unmount(self) -> None:
        self._dispatcher.shutdown()

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        command = self._dispatcher.handle(event.key, event.character)
        if command is not None:
            self._execute(command)
        self._refresh_view()

    def _execute(self, command: Command) -> None:
        if command.kind == "search":
            self._search_in_progress = True
            self.run_worker(
                self._run_search(command.payload or ""),
                group="search",
                exclusive=True,
                exit_on_error=False,
            )
            return
        if command.kind == "quit":
            self.exit()
            return
        if command.kind == "notify":
            self.notify(
                command.payload or "",
                title="Search",
                severity=command.severity,
            )
            return
        if command.payload is None:
            return
        if command.kind == "copy":
            self.copy_to_clipboard(command.payload)
            self.notify(f"Copied: {command.payload}", title="Clipboard")
            return
        if command.kind == "open_url":
            self._open_url(command.payload)

    async def _run_search(self, text: str) -> None:
        try:
            crates = await asyncio.to_thread(self._dispatcher.run_query, text)
        except RegistryError as exc:
            self._execute(self._dispatcher.search_failed(text, exc))
        else:
            self._dispatcher.apply_results(crates)
        self._search_in_progress = False
        self._refresh_view()

    def _open_url(self, url: str) -> None:
        try:
            opened = webbrowser.open(url)
        except (webbrowser.Error, OSError) as exc:
            logger.warning("Opening %s failed: %s", url, exc)
            opened = False
        if not opened:
            self.notify(
                f"Could not open {url}",
                title="Browser",
                severity="warning",
            )

    def _results_list_width(self) -> int:
        results_list = self.query_one("#results-list", Static)
        if results_list.size.width <= 0:
            return 60
        return results_list.size.width

    def _tabs_text(self) -> str:
        return "  ".join(
            f"[bold]{title}[/bold]"
            if index == self._dispatcher.tab
            else f"[dim]{title}[/dim]"
            for index, title in enumerate(TAB_TITLES)
        )

    def _refresh_view(self) -> None:
        dispatcher = self._dispatcher
        crates, selected, scroll = dispatcher.results.snapshot()
        searching = dispatcher.mode == "search"

        search_bar = self.query_one("#search-bar", Static)
        search_bar.update(render_search_text(dispatcher.search_text, editing=searching))
        search_bar.set_class(searching, "active")
        search_bar.border_title = (
            "Search (searching...)" if self._search_in_progress else "Search"
        )

        results_list = self.query_one("#results-list", Static)
        results_list.set_class(not searching, "active")
        if dispatcher.tab == COMPARE_TAB:
            width = self._results_list_width()
            rows = [escape(row) for row in render_compare_rows(crates, width)]
            if selected is not None and selected < len(rows):
                rows[selected] = f"[reverse]{rows[selected]}[/reverse]"
            results_list.border_title = render_compare_header(width)
            results_list.update("\n".join(rows))
        else:
            results_list.border_title = "Results"
            results_list.update(render_results_list(crates, selected))

        tabs = self.query_one("#tabs", Static)
        detail = self.query_one("#detail", Static)
        if dispatcher.overlay == "intro":
            tabs.update("")
            detail.update(INTRO)
        elif dispatcher.overlay == "help":
            tabs.update("")
            detail.update(HELP)
        else:
            crate = crates[selected] if selected is not None else None
            tabs.update(self._tabs_text())
            detail.update(render_tab(dispatcher.tab, crate, scroll))

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from crate_search.models import Command, CommandKind, Crate, Mode, Overlay
from crate_search.registry import RegistryError
from crate_search.rendering import TAB_TITLES
from crate_search.results import ResultSet

logger = logging.getLogger(__name__)

GLOBAL_ACTIONS = {
    "ctrl+h": "toggle_help",
    "f1": "toggle_help",
    "ctrl+a": "toggle_intro",
    "f2": "toggle_intro",
    "ctrl+q": "quit",
    "ctrl+c": "quit",
}

SEARCH_ACTIONS = {
    "backspace": "delete_char",
    "ctrl+s": "clear_word",
    "enter": "submit",
    "escape": "focus_results",
    "ctrl+r": "focus_results",
}

RESULTS_ACTIONS = {
    "escape": "focus_search",
    "ctrl+s": "focus_search",
    "h": "previous_tab",
    "left": "previous_tab",
    "l": "next_tab",
    "right": "next_tab",
    "k": "move_up",
    "up": "move_up",
    "j": "move_down",
    "down": "move_down",
    "g": "jump_to_top",
    "G": "jump_to_bottom",
    "enter": "open_crate_page",
    "ctrl+g": "open_repository",
    "ctrl+o": "open_documentation",
    "y": "copy_dependency_line",
    "Y": "copy_clone_line",
    "ctrl+u": "scroll_up",
    "pageup": "scroll_up",
    "ctrl+d": "scroll_down",
    "pagedown": "scroll_down",
    "q": "quit",
}

COUNT_DIGITS = frozenset("123456789")


class Worker(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


QueryFn = Callable[[str], Sequence[Crate]]
WorkerFactory = Callable[[ResultSet], Worker]


def key_name(key: str, character: str | None) -> str:
    """Name a key by its printable character when it has one."""
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return key


@dataclass
class KeyMemory:
    """The last two keys seen plus any pending repeat count."""

    last_key: str | None = None
    previous_key: str | None = None
    count: int | None = None

    def observe(self, key: str) -> None:
        self.previous_key = self.last_key
        self.last_key = key

    def push_digit(self, digit: int) -> None:
        self.count = digit if self.count is None else self.count * 10 + digit

    def take_count(self) -> int:
        count = self.count if self.count is not None else 1
        self.count = None
        return count

    def is_chord(self, key: str) -> bool:
        return self.last_key == key and self.previous_key == key


class InputDispatcher:
    SCROLL_STEP = 5

    def __init__(
        self,
        *,
        query: QueryFn,
        worker_factory: WorkerFactory,
        tab_count: int = len(TAB_TITLES),
    ) -> None:
        self._query = query
        self._worker_factory = worker_factory
        self.tab_count = tab_count
        self.mode: Mode = "search"
        self.overlay: Overlay = "intro"
        self.tab = 0
        self.search_text = ""
        self.memory = KeyMemory()
        self.results = ResultSet()
        self._worker: Worker | None = None

    def handle(self, key: str, character: str | None = None) -> Command | None:
        name = key_name(key, character)
        self.memory.observe(name)

        if self.mode == "results" and name in COUNT_DIGITS:
            self.memory.push_digit(int(name))
            return None

        try:
            action = self._resolve(name)
            if action is not None:
                return getattr(self, f"_action_{action}")()
            if self.mode == "search" and name == character:
                self.search_text += character
            return None
        finally:
            self.memory.count = None

    def _resolve(self, name: str) -> str | None:
        action = GLOBAL_ACTIONS.get(name)
        if action is not None:
            return action
        if self.mode == "search":
            return SEARCH_ACTIONS.get(name)
        return RESULTS_ACTIONS.get(name)

    def run_query(self, text: str) -> Sequence[Crate]:
        """Run the blocking registry query for ``text``."""
        return self._query(text)

    def apply_results(self, crates: Sequence[Crate]) -> None:
        self.replace_results(ResultSet(crates))
        self.results.select(0)
        self.overlay = "none"
        self.mode = "results"

    def search_failed(self, text: str, exc: RegistryError) -> Command:
        logger.warning("Search for %r failed: %s", text, exc)
        return Command("notify", f"Search failed: {exc!s}", severity="error")

    def replace_results(self, results: ResultSet) -> None:
        if self._worker is not None:
            self._worker.stop()
        self.results = results
        self._worker = self._worker_factory(results)
        self._worker.start()

    def shutdown(self) -> None:
        if self._worker is not None:
            self._worker.stop()
            self._worker = None

    def _selected_command(self, kind: CommandKind, attribute: str) -> Command | None:
        crate = self.results.selected_record()
        if crate is None:
            return None
        value = getattr(crate, attribute)
        if not value:
            return None
        return Command(kind, value)

    def _action_toggle_help(self) -> None:
        self.overlay = "none" if self.overlay == "help" else "help"

    def _action_toggle_intro(self) -> None:
        self.overlay = "none" if self.overlay == "intro" else "intro"

    def _action_quit(self) -> Command:
        return Command("quit")

    def _action_delete_char(self) -> None:
        self.search_text = self.search_text[:-1]

    def _action_clear_word(self) -> None:
        head, separator, _ = self.search_text.partition(" ")
        self.search_text = head if separator else ""

    def _action_submit(self) -> Command:
        return Command("search", self.search_text)

    def _action_focus_results(self) -> None:
        self.mode = "results"

    def _action_focus_search(self) -> None:
        self.mode = "search"

    def _action_previous_tab(self) -> None:
        self.tab = max(0, self.tab - 1)

    def _action_next_tab(self) -> None:
        self.tab = min(self.tab_count - 1, self.tab + 1)

    def _action_move_up(self) -> None:
        self.results.select_relative(-1, self.memory.take_count())

    def _action_move_down(self) -> None:
        self.results.select_relative(1, self.memory.take_count())

    def _action_jump_to_top(self) -> None:
        if self.memory.is_chord("g"):
            self.results.select(0)

    def _action_jump_to_bottom(self) -> None:
        self.results.select_last()

    def _action_open_crate_page(self) -> Command | None:
        return self._selected_command("open_url", "crate_page_url")

    def _action_open_repository(self) -> Command | None:
        return self._selected_command("open_url", "repository")

    def _action_open_documentation(self) -> Command | None:
        return self._selected_command("open_url", "documentation")

    def _action_copy_dependency_line(self) -> Command | None:
        return self._selected_command("copy", "dependency_line")

    def _action_copy_clone_line(self) -> Command | None:
        return self._selected_command("copy", "clone_and_run_line")

    def _action_scroll_up(self) -> None:
        self.results.scroll_by(-self.SCROLL_STEP)

    def _action_scroll_down(self) -> None:
        self.results.scroll_by(self.SCROLL_STEP)

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rich.markup import escape

from crate_search.models import Crate

TAB_TITLES = ("Summary", "Readme", "Repository", "Stats", "Compare")
COMPARE_TAB = TAB_TITLES.index("Compare")
COMPARE_TITLES = ("downloads ", "recent downloads ")

INTRO = r"""
                  __
.----.----.---.-.|  |_.-----.
|  __|   _|  _  ||   _|  -__|
|____|__| |___._||____|_____|
.-----.-----.---.-.----.----.|  |--.
|__ --|  -__|  _  |   _|  __||     |
|_____|_____|___._|__| |____||__|__|

Type a crate name and press <Enter> to search crates.io.

<C-h> shows the key bindings, <C-a> toggles this screen.
"""

HELP = """
<C-h> | <F1> toggle this help window
<C-a> | <F2> toggle the intro window

# search mode
<C-s> clear input down to the first word
<Enter> perform the search and focus the results block
<Escape> | <C-r> focus the results block
<C-q> | <C-c> quit

# results mode
<Escape> | <C-s> focus the search bar
<j>, <k>, <up>, <down> move up and down the results
<5j> move down five results (any count works)
<gg>, <G> jump to the first / last result
<h>, <l>, <left>, <right> move left and right between result tabs
<C-u>, <C-d> scroll the readme up and down
<Enter> go to crate (browser)
<C-g> go to repository (browser)
<C-o> go to documentation (browser)
<y> copy the Cargo.toml dependency line
<Y> copy a clone-and-run command line
<C-q> | <C-c> | <q> quit
"""


def format_columns(
    label: str,
    values: Sequence[str],
    widths: Sequence[int],
    fill: str,
    divider: str,
    width: int,
) -> str:
    """Lay out a left label and right-aligned columns in ``width`` characters.

    Each column takes ``divider``, a space and the value padded with ``fill``
    to its reserved width. When the columns do not fit, the gap after the
    label shrinks to nothing instead of going negative.
    """
    columns_width = sum(column_width + 2 for column_width in widths)
    gap = max(0, width - len(label) - columns_width)
    parts = [label, fill * gap]
    for value, column_width in zip(values, widths):
        parts.append(f"{divider} {value}")
        parts.append(fill * max(0, column_width - len(value)))
    return "".join(parts)


def format_detail_row(label: str, value: str) -> str:
    return f"{label:<20}{value}"


def format_record_value(value: Any) -> str:
    if value is None:
        return "not available"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "none"
        return ", ".join(str(item) for item in value)
    return str(value)


def render_search_text(text: str, *, editing: bool) -> str:
    return f"{text}|" if editing else text


def render_results_list(crates: Sequence[Crate], selected: int | None) -> str:
    lines = []
    for index, crate in enumerate(crates):
        name = escape(crate.name)
        if index == selected:
            lines.append(f"[reverse]{name}[/reverse]")
        else:
            lines.append(name)
    return "\n".join(lines)


def render_compare_header(width: int) -> str:
    return format_columns(
        "Results",
        COMPARE_TITLES,
        [len(title) for title in COMPARE_TITLES],
        "─",
        "|",
        width,
    )


def render_compare_rows(crates: Sequence[Crate], width: int) -> list[str]:
    widths = [len(title) for title in COMPARE_TITLES]
    rows = []
    for crate in crates:
        recent = (
            str(crate.recent_downloads) if crate.recent_downloads is not None else "n/a"
        )
        rows.append(
            format_columns(
                crate.name,
                [str(crate.downloads), recent],
                widths,
                " ",
                "|",
                width,
            )
        )
    return rows


def render_summary(crate: Crate | None) -> str:
    if crate is None:
        return "select a crate"
    return (
        "\n"
        f"{crate.name}\n\n"
        f"{crate.description or ''}\n\n\n"
        f"All-time: {crate.downloads}\n"
        f"Recent: {crate.recent_downloads or 0}\n"
        f"Last update: {crate.updated_at}\n"
        f"First created: {crate.created_at}\n"
    )


def render_readme(crate: Crate | None, scroll: int) -> str:
    if crate is None:
        return "select a crate"
    if crate.readme is None:
        if not crate.repository:
            return "(no repository linked)"
        return "(downloading...)"
    return "\n".join(crate.readme.splitlines()[scroll:])


def render_repository(crate: Crate | None) -> str:
    if crate is None:
        return "select a crate"
    lines = [
        "",
        format_detail_row("Repository", format_record_value(crate.repository)),
        format_detail_row("Homepage", format_record_value(crate.homepage)),
        format_detail_row("Documentation", format_record_value(crate.documentation)),
        format_detail_row("License", format_record_value(crate.license)),
        "",
        "Dependency:",
        f" {crate.dependency_line or 'not available'}",
        "",
        "Clone and run:",
        f" {crate.clone_and_run_line or 'not available'}",
    ]
    return "\n".join(lines)


def render_stats(crate: Crate | None) -> str:
    if crate is None:
        return "select a crate"
    lines = [
        "",
        format_detail_row("Latest version", crate.max_version or "not available"),
        format_detail_row("All-time downloads", format_record_value(crate.downloads)),
        format_detail_row(
            "Recent downloads", format_record_value(crate.recent_downloads)
        ),
        format_detail_row("First created", crate.created_at),
        format_detail_row("Last update", crate.updated_at),
        format_detail_row("Categories", format_record_value(crate.categories)),
        format_detail_row("Keywords", format_record_value(crate.keywords)),
        format_detail_row("Exact match", format_record_value(crate.exact_match)),
    ]
    return "\n".join(lines)


def render_tab(tab: int, crate: Crate | None, scroll: int) -> str:
    if tab == 0:
        return render_summary(crate)
    if tab == 1:
        return render_readme(crate, scroll)
    if tab == 2:
        return render_repository(crate)
    if tab == 3:
        return render_stats(crate)
    return ""

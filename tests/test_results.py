import threading

from crate_search.results import ResultSet


def _result_set(crate_factory, count: int) -> ResultSet:
    return ResultSet(crate_factory(f"crate-{index}") for index in range(count))


def test_new_result_set_has_no_cursor(crate_factory) -> None:
    results = _result_set(crate_factory, 3)

    assert len(results) == 3
    assert results.selected is None
    assert results.scroll == 0
    assert results.selected_record() is None


def test_select_clamps_to_last_index(crate_factory) -> None:
    results = _result_set(crate_factory, 3)

    for index, expected in [(0, 0), (2, 2), (3, 2), (99, 2)]:
        results.select(index)
        assert results.selected == expected


def test_select_on_empty_set_leaves_cursor_unset() -> None:
    results = ResultSet()

    results.select(0)
    assert results.selected is None

    results.select_last()
    assert results.selected is None


def test_select_none_clears_cursor(crate_factory) -> None:
    results = _result_set(crate_factory, 2)
    results.select(1)

    results.select(None)

    assert results.selected is None


def test_changing_cursor_resets_scroll(crate_factory) -> None:
    results = _result_set(crate_factory, 3)
    results.select(0)
    results.scroll_by(10)
    assert results.scroll == 10

    results.select_relative(1)

    assert results.selected == 1
    assert results.scroll == 0


def test_scroll_never_goes_negative(crate_factory) -> None:
    results = _result_set(crate_factory, 1)

    results.scroll_by(-5)

    assert results.scroll == 0


def test_select_relative_clamps_at_both_ends(crate_factory) -> None:
    results = _result_set(crate_factory, 4)
    results.select(0)

    results.select_relative(-1)
    assert results.selected == 0

    results.select_relative(1, 2)
    assert results.selected == 2

    results.select_relative(1, 10)
    assert results.selected == 3

    results.select_relative(1)
    assert results.selected == 3

    results.select_relative(-1, 100)
    assert results.selected == 0


def test_select_relative_without_cursor_is_noop(crate_factory) -> None:
    results = _result_set(crate_factory, 3)

    results.select_relative(1, 2)

    assert results.selected is None


def test_get_returns_none_out_of_range(crate_factory) -> None:
    results = _result_set(crate_factory, 2)

    assert results.get(1).name == "crate-1"
    assert results.get(2) is None
    assert results.get(-1) is None


def test_set_enrichment_keeps_first_write(crate_factory) -> None:
    results = _result_set(crate_factory, 2)

    assert results.set_enrichment(0, "first") is True
    assert results.set_enrichment(0, "second") is False
    assert results.set_enrichment(5, "missing") is False

    assert results.get(0).readme == "first"
    assert results.get(1).readme is None


def test_pending_enrichment_lists_records_with_repository(crate_factory) -> None:
    results = ResultSet(
        [
            crate_factory("a", repository="https://github.com/o/a"),
            crate_factory("b"),
            crate_factory("c", repository="https://gitlab.com/o/c", readme="done"),
            crate_factory("d", repository="https://example.org/d"),
        ]
    )

    assert results.pending_enrichment() == [
        (0, "https://github.com/o/a"),
        (3, "https://example.org/d"),
    ]


def test_snapshot_is_detached_from_later_enrichment(crate_factory) -> None:
    results = _result_set(crate_factory, 2)
    results.select(1)
    results.scroll_by(3)

    crates, selected, scroll = results.snapshot()
    results.set_enrichment(1, "later")

    assert selected == 1
    assert scroll == 3
    assert crates[1].readme is None
    assert results.selected_record().readme == "later"


def test_concurrent_enrichment_writes_once(crate_factory) -> None:
    results = _result_set(crate_factory, 1)
    outcomes: list[bool] = []
    lock = threading.Lock()

    def _write(text: str) -> None:
        stored = results.set_enrichment(0, text)
        with lock:
            outcomes.append(stored)

    threads = [threading.Thread(target=_write, args=(f"t{n}",)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count(True) == 1
    assert results.get(0).readme is not None

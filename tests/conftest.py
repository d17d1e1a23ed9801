from __future__ import annotations

import pytest

from crate_search.models import Crate


def make_crate(name: str = "demo", **overrides: object) -> Crate:
    fields: dict[str, object] = {
        "id": name,
        "name": name,
        "max_version": "1.0.0",
        "downloads": 1000,
        "created_at": "Mon, 01 Jan 2018 00:00:00 +0000",
        "updated_at": "Tue, 02 Jan 2024 00:00:00 +0000",
    }
    fields.update(overrides)
    return Crate(**fields)  # type: ignore[arg-type]


@pytest.fixture
def crate_factory():
    return make_crate

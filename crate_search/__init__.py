from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("crate-search")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

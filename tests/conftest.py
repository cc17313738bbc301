"""Pytest configuration – make the project root importable.

Both the ``entrypoint`` package and the ``tools.src`` helpers are imported
from a plain checkout, which only works when the repository root sits on
``sys.path``.  ``PYTEST_PROJECT_ROOT`` overrides the location when the suite
is started from another directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


def pytest_configure() -> None:  # noqa: D401 – Pytest hook name
    root = Path(os.getenv("PYTEST_PROJECT_ROOT", Path(__file__).resolve().parents[1])).resolve()
    if str(root) not in sys.path:  # pragma: no cover – executed once
        sys.path.insert(0, str(root))

"""askflow test bootstrap.

Tests import both the `askflow` package and the `web.backend` app from a source
checkout, so the repository root must be importable even when the package is
not installed.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _prepend_sys_path(path: Path) -> None:
    p = str(path)
    if p and p not in sys.path:
        sys.path.insert(0, p)


HERE = Path(__file__).resolve()
ASKFLOW_ROOT = HERE.parents[1]

_prepend_sys_path(ASKFLOW_ROOT)

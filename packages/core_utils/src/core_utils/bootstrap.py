from __future__ import annotations

import sys
from pathlib import Path

def ensure_monorepo_paths() -> None:
    """Put the repo root and every ``packages/*/src`` / ``services/*/src`` on sys.path.

    Lets ``python -m flow_bff`` run from a checkout without an editable install.
    """
    # packages/core_utils/src/core_utils/bootstrap.py -> repo root
    root = Path(__file__).resolve().parents[4]
    roots = [root, *sorted((root / "packages").glob("*/src")), *sorted((root / "services").glob("*/src"))]
    for p in map(str, reversed(roots)):
        if p not in sys.path:
            sys.path.insert(0, p)

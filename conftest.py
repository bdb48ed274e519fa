"""
Project-wide PyTest bootstrap.

Puts every ``*/src`` directory on ``sys.path`` so tests import the project's
packages without an editable install.
"""

from pathlib import Path
import sys

ROOT = Path(__file__).parent.resolve()
_paths = (
    [str(ROOT)]                                           # project root
    + [str(p) for p in (ROOT / "packages").glob("*/src")] # packages/*/src
    + [str(p) for p in (ROOT / "services").glob("*/src")] # services/*/src
)
# local paths take precedence over site-packages
for _p in reversed(_paths):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Fail early with a readable message when the async test plugin is missing.
try:
    __import__("pytest_asyncio")
except ImportError as exc:
    raise RuntimeError(
        "pytest_asyncio is required for async tests; install the project's test extra."
    ) from exc

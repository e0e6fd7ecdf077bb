"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local reloader package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of reloader modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("reloader"):
        del sys.modules[module_name]

import structlog  # noqa: E402


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Each test starts from structlog defaults (every level passes)."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()

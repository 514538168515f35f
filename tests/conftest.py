"""Root test configuration"""

import os
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Drop POSTPUB_* variables from the outer shell so settings start from defaults."""
    for name in [n for n in os.environ if n.startswith("POSTPUB_")]:
        monkeypatch.delenv(name)


@pytest.fixture(scope="session", autouse=True)
def remove_build_outputs():
    """Delete the default rebuild cache and output directory if a test wrote them."""
    yield
    (_PROJECT_ROOT / "postpub.db").unlink(missing_ok=True)
    shutil.rmtree(_PROJECT_ROOT / "dist", ignore_errors=True)

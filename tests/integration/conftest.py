"""Integration test fixtures.

The wired ``app_state`` fixture comes from tests/conftest.py; this module
adds what the subprocess tests need.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for ``python -m pubsuggest`` with no user config leaking in."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("PUBSUGGEST__")}
    env["HOME"] = str(tmp_path / "home")
    env["XDG_CONFIG_HOME"] = str(tmp_path / "config")
    return env

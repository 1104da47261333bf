"""Shared test fixtures for the crudd test suite.

Commands under test are small shell scripts written into a temporary
directory, so the suite never depends on what is installed on the host.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest
from fastapi.templating import Jinja2Templates

from crudd.runner import ProcessLauncher
from crudd.web.server import TEMPLATES_DIR

ScriptFactory = Callable[..., str]


# ---------------------------------------------------------------------------
# Command Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_script(tmp_path: Path) -> ScriptFactory:
    """Write an executable /bin/sh script and return its path.

    ``make_script("echo hi")`` creates ``<tmp>/bin/script-N``;
    ``make_script("echo hi", path="/usr/bin/top", root=tmp)`` places it
    under a fake filesystem root instead.
    """
    counter = iter(range(1000))

    def factory(body: str, path: str | None = None, root: Path | None = None) -> str:
        if path is None:
            target = tmp_path / "bin" / f"script-{next(counter)}"
        else:
            target = (root or tmp_path) / path.lstrip("/")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f"#!/bin/sh\n{body}\n")
        os.chmod(target, 0o700)
        return str(target)

    return factory


@pytest.fixture
def echo_script(make_script: ScriptFactory) -> str:
    """A command that prints a single known line."""
    return make_script("echo fake command output")


@pytest.fixture
def missing_path(tmp_path: Path) -> str:
    """A path where no executable exists."""
    return str(tmp_path / "does" / "not" / "exist")


# ---------------------------------------------------------------------------
# Runner Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def launcher() -> ProcessLauncher:
    """A launcher with a short grace period to keep tests fast."""
    return ProcessLauncher(grace_period=0.5)


@pytest.fixture
def templates() -> Jinja2Templates:
    return Jinja2Templates(directory=str(TEMPLATES_DIR))

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from pathlib import Path

import pytest

# Register fixture plugins from tests/fixtures/
pytest_plugins = [
    "tests.fixtures.invoker",
]


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Runs automatically for every test so log output goes to stderr at
    WARNING level and never mixes with test stdout.
    """
    from gitdrive.logging import clear_context, configure_logging

    configure_logging(level=logging.WARNING)
    yield
    clear_context()


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove all GITDRIVE_ environment variables for clean testing."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("GITDRIVE_"):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fake_git(temp_dir: Path) -> Path:
    """An empty file standing in for the git executable."""
    path = temp_dir / "bin" / "git"
    path.parent.mkdir()
    path.touch()
    return path


@pytest.fixture
def repo_dir(temp_dir: Path) -> Path:
    """An empty repository directory with a .git folder."""
    path = temp_dir / "repo"
    (path / ".git").mkdir(parents=True)
    return path

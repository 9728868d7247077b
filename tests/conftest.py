"""Shared test fixtures for spotapi.

Provides config isolation, output-state reset and a CLI runner. These
fixtures are discovered by pytest and available to every test module.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from spotapi.output import OutputFormat, OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager
    would write to closed files in the next test.
    """
    yield
    reset_output()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration, cache and data directories under tmp_path.

    Clears every SPOTAPI_* variable that could leak in from the
    developer's environment.
    """
    monkeypatch.setattr("spotapi.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPOTAPI_TOKEN",
        "SPOTAPI_TOKEN_SOURCE",
        "SPOTAPI_TIMEOUT",
        "SPOTAPI_ALLOW_INSECURE_TLS",
        "SPOTAPI_CACHE_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers() -> None:
    """Remove stderr handlers installed by ``configure_logging`` during a test.

    CliRunner closes its captured stderr on exit, so a handler left on the
    ``spotapi`` logger would write to a closed stream later.
    """
    yield
    logger = logging.getLogger("spotapi")
    for handler in list(logger.handlers):
        if getattr(handler, "_spotapi", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)

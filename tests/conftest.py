"""Shared test fixtures for hardhat_core.

Provides reusable fixtures for building plugins and configs, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import pytest

from hardhat_core.hooks import HookContext, HookManager
from hardhat_core.interruptions import UserInterruptionManager
from hardhat_core.models import Plugin, ResolvedConfig
from hardhat_core.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Forget the CliOutput installed by a CLI invocation after every test.

    ``main_callback`` installs one per invocation with the flags of that
    invocation (``--json``, ``--verbose``); later tests must not inherit it.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Plugin fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_plugin() -> Callable[..., Plugin]:
    """Factory for plugins contributing handlers to a single category.

    ``make_plugin("a", hre={"created": handler})`` returns a plugin with id
    ``"a"`` whose ``hre`` handler set is the given mapping.
    """

    def _make(plugin_id: str, **hook_handlers: Any) -> Plugin:
        return Plugin(id=plugin_id, hook_handlers=hook_handlers)

    return _make


@pytest.fixture
def hook_context() -> Callable[[HookManager], HookContext]:
    """Factory that installs a minimal context on a hook manager."""

    def _install(hooks: HookManager) -> HookContext:
        context = HookContext(
            config=ResolvedConfig(),
            hooks=hooks,
            global_arguments={},
            interruptions=UserInterruptionManager(hooks),
        )
        hooks.set_context(context)
        return context

    return _install


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user data directory. Clears all HARDHAT_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    # Clear any HARDHAT vars that might leak into tests.
    for var in list(os.environ):
        if var.startswith("HARDHAT_"):
            monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()

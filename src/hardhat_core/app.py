"""Typer application factory and CLI entry point for hardhat-core.

The CLI is a thin shell over the core: it loads ``hardhat.config.py``,
builds a runtime environment with the ``--global name=value`` arguments,
and lists or runs tasks.

Commands:

* ``globals`` -- registered global parameters and their resolved values.
* ``tasks`` -- the task tree.
* ``run TASK... [--arg name=value]`` -- run a task.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from hardhat_core import __version__
from hardhat_core.exceptions import HardhatCoreError
from hardhat_core.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from hardhat_core.output import (
    CliOutput,
    choose_listing_style,
    colour_disabled,
    get_output,
    set_output,
)

T = TypeVar("T")

app = typer.Typer(
    name="hardhat-core",
    help="List and run the tasks defined by plugins and hardhat.config.py.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"hardhat-core {__version__}")
        raise typer.Exit()


def _parse_assignments(values: list[str], option: str) -> list[tuple[str, str]]:
    """Split ``name=value`` option values, keeping their order."""
    pairs = []
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            get_output().error(f"Expected {option} name=value, got '{item}'")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        pairs.append((name, value))
    return pairs


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to hardhat.config.py."
    ),
    global_arguments: list[str] = typer.Option(
        [], "--global", "-g", help="Global argument as name=value (repeatable)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~hardhat_core.output.CliOutput`,
    enables debug logging with ``--verbose``, and stores the config path
    and raw global arguments in ``ctx.obj``.
    """
    no_color = colour_disabled(no_color)
    set_output(
        CliOutput(
            choose_listing_style(json_output, no_color),
            no_color=no_color,
            verbose=verbose,
        )
    )
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["global_arguments"] = dict(_parse_assignments(global_arguments, "--global"))


def _run_async(factory: Callable[[], Awaitable[T]]) -> T:
    """Run a coroutine, turning core errors into a clean exit."""
    try:
        return asyncio.run(factory())
    except HardhatCoreError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


async def _create_runtime(ctx: typer.Context) -> Any:
    from hardhat_core.config import load_user_config, resolve_config_path
    from hardhat_core.runtime import create_runtime_environment

    path = resolve_config_path(ctx.obj["config"])
    get_output().debug(f"Loading config from {path}")
    user_config = load_user_config(path)
    return await create_runtime_environment(
        user_config,
        ctx.obj["global_arguments"],
        console=get_output().stderr_console,
    )


@app.command("globals")
def globals_command(ctx: typer.Context) -> None:
    """Show the global parameters and their resolved values."""

    async def _collect() -> list[list[Any]]:
        runtime = await _create_runtime(ctx)
        return [
            [
                name,
                entry.plugin_id,
                entry.param.parameter_type.value,
                runtime.global_arguments[name],
                entry.param.description,
            ]
            for name, entry in runtime.global_parameters_map.items()
        ]

    rows = _run_async(_collect)
    get_output().listing(
        "Global parameters", ["Name", "Plugin", "Type", "Value", "Description"], rows
    )


@app.command("tasks")
def tasks_command(ctx: typer.Context) -> None:
    """List every task and subtask."""

    async def _collect() -> list[list[str]]:
        runtime = await _create_runtime(ctx)
        return [
            [" ".join(task.id), task.description, "empty" if task.is_empty else ""]
            for task in runtime.tasks.iter_tasks()
        ]

    rows = _run_async(_collect)
    get_output().listing("Tasks", ["Task", "Description", "Status"], rows)


@app.command("run")
def run_command(
    ctx: typer.Context,
    task_id: list[str] = typer.Argument(..., help="Task path, e.g. 'test solidity'."),
    task_arguments: list[str] = typer.Option(
        [], "--arg", "-a", help="Task argument as name=value (repeatable)."
    ),
) -> None:
    """Run a task."""
    raw: dict[str, list[str]] = {}
    for name, value in _parse_assignments(task_arguments, "--arg"):
        raw.setdefault(name, []).append(value)

    async def _run() -> Any:
        runtime = await _create_runtime(ctx)
        task = runtime.tasks.get_task(task_id)
        return await task.run(task.parse_arguments(raw), runtime)

    get_output().task_result(_run_async(_run))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from hardhat_core.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``hardhat-core`` console script.

    :class:`~hardhat_core.exceptions.HardhatCoreError` instances cause a
    clean exit with the error's ``exit_code``. Any other exception,
    including one raised by a plugin handler or a task action, produces a
    crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        if isinstance(exc, HardhatCoreError):
            get_output().error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        get_output().error(f"Unexpected error: {exc}. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

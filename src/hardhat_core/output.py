"""Terminal output for the ``hardhat-core`` CLI.

Listings (``tasks``, ``globals``) and task results are data and go to
stdout. Errors and ``--verbose`` diagnostics go to stderr, whose console is
also the one the default user interruptions prompt on.

Listings come in three styles, see :class:`ListingStyle`. Colour is off
with ``--no-color``, when ``NO_COLOR`` is set (any value) or when
``TERM=dumb``, following `clig.dev <https://clig.dev/>`_.

:func:`~hardhat_core.app.main_callback` installs one :class:`CliOutput`
with :func:`set_output`; everything else reaches it through
:func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table


class ListingStyle(str, Enum):
    """How listings are rendered.

    ``TABLE`` is a rich table for an interactive terminal, ``TSV`` a header
    line plus one tab-separated line per row, ``JSON`` an array of objects
    keyed by column name holding the typed values.
    """

    TABLE = "table"
    TSV = "tsv"
    JSON = "json"


def _stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


def colour_disabled(no_color_flag: bool = False) -> bool:
    """Return ``True`` if output must not be coloured."""
    return (
        no_color_flag
        or os.environ.get("NO_COLOR") is not None
        or os.environ.get("TERM") == "dumb"
    )


def choose_listing_style(json_requested: bool = False, no_color: bool = False) -> ListingStyle:
    """Pick the listing style for the current stdout.

    ``--json`` always wins. Otherwise a rich table is only drawn on a
    colour-capable terminal; pipes and ``--no-color`` get TSV.
    """
    if json_requested:
        return ListingStyle.JSON
    if no_color or not _stdout_is_terminal():
        return ListingStyle.TSV
    return ListingStyle.TABLE


def format_cell(value: Any) -> str:
    """Render a typed value the way it would be written on the command line.

    Booleans are ``true``/``false``, ``None`` is blank and the values of a
    variadic parameter are space separated.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(format_cell(item) for item in value)
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return str(value)


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=_json_default)


class CliOutput:
    """Writes listings and task results to stdout and diagnostics to stderr.

    Args:
        style: Listing style, usually from :func:`choose_listing_style`.
        no_color: Print diagnostics without rich markup.
        verbose: Show :meth:`debug` messages.
    """

    def __init__(
        self,
        style: ListingStyle = ListingStyle.TSV,
        no_color: bool = False,
        verbose: bool = False,
    ) -> None:
        self.style = style
        self.no_color = no_color
        self.verbose = verbose
        # No explicit file: the consoles follow sys.stdout / sys.stderr
        # when they are swapped (e.g. by typer's CliRunner).
        self._stdout = Console(
            no_color=no_color, force_terminal=style == ListingStyle.TABLE, highlight=False
        )
        self._stderr = Console(stderr=True, no_color=no_color, highlight=False)

    @property
    def stderr_console(self) -> Console:
        """The console used for diagnostics and interactive prompts."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def listing(
        self,
        title: str,
        columns: Sequence[str],
        rows: Iterable[Sequence[Any]],
    ) -> None:
        """Print *rows* under *columns* in the active :class:`ListingStyle`.

        Cells may hold typed values (``bool``, ``int``, lists); JSON keeps
        them typed, the other styles render them with :func:`format_cell`.
        """
        rows = [list(row) for row in rows]

        if self.style == ListingStyle.JSON:
            typer.echo(_to_json([dict(zip(columns, row)) for row in rows]))
            return

        if self.style == ListingStyle.TSV:
            typer.echo("\t".join(columns))
            for row in rows:
                typer.echo("\t".join(format_cell(cell) for cell in row))
            return

        table = Table(title=title, header_style="bold cyan")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(escape(format_cell(cell)) for cell in row))
        self._stdout.print(table)

    def task_result(self, result: Any) -> None:
        """Print what a task action returned. ``None`` prints nothing."""
        if result is None:
            return
        if self.style == ListingStyle.JSON:
            typer.echo(_to_json(result))
        else:
            typer.echo(format_cell(result))

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def error(self, message: str) -> None:
        """Print an error. Never suppressed."""
        if self.no_color:
            typer.echo(f"Error: {message}", err=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)

    def debug(self, message: str) -> None:
        """Print a diagnostic, only with ``--verbose``."""
        if not self.verbose:
            return
        if self.no_color:
            typer.echo(f"[debug] {message}", err=True)
        else:
            self._stderr.print(f"[dim]\\[debug] {escape(message)}[/dim]", soft_wrap=True)


_output: Optional[CliOutput] = None


def get_output() -> CliOutput:
    """Return the installed :class:`CliOutput`, creating a default one lazily."""
    global _output
    if _output is None:
        no_color = colour_disabled()
        _output = CliOutput(choose_listing_style(no_color=no_color), no_color=no_color)
    return _output


def set_output(output: CliOutput) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed :class:`CliOutput`; used between tests."""
    global _output
    _output = None

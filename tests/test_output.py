"""Tests for listing styles, task results and diagnostics."""

from __future__ import annotations

import json

import pytest

from hardhat_core.models import ConfigurationVariable
from hardhat_core.output import (
    CliOutput,
    ListingStyle,
    choose_listing_style,
    colour_disabled,
    format_cell,
    get_output,
    reset_output,
    set_output,
)


COLUMNS = ["Task", "Description", "Status"]
ROWS = [["compile", "Compile the project", ""], ["test", "Run tests", "empty"]]


@pytest.fixture
def terminal(monkeypatch):
    monkeypatch.setattr("hardhat_core.output._stdout_is_terminal", lambda: True)


@pytest.fixture
def pipe(monkeypatch):
    monkeypatch.setattr("hardhat_core.output._stdout_is_terminal", lambda: False)


class TestListingStyle:
    def test_json_always_wins(self, terminal) -> None:
        assert choose_listing_style(json_requested=True, no_color=True) == ListingStyle.JSON

    def test_table_on_a_terminal(self, terminal) -> None:
        assert choose_listing_style() == ListingStyle.TABLE

    def test_tsv_when_piped(self, pipe) -> None:
        assert choose_listing_style() == ListingStyle.TSV

    def test_tsv_without_colour(self, terminal) -> None:
        assert choose_listing_style(no_color=True) == ListingStyle.TSV


class TestColourDisabled:
    def test_flag(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert colour_disabled(True) is True
        assert colour_disabled() is False

    def test_no_color_with_any_value(self, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert colour_disabled() is True

    def test_dumb_terminal(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert colour_disabled() is True


class TestFormatCell:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "true"),
            (False, "false"),
            (10**30, "1000000000000000000000000000000"),
            (["a.sol", "b.sol"], "a.sol b.sol"),
            ("sepolia", "sepolia"),
        ],
    )
    def test_values(self, value, expected: str) -> None:
        assert format_cell(value) == expected


class TestListing:
    def test_tsv(self, capsys) -> None:
        CliOutput(ListingStyle.TSV).listing("Tasks", COLUMNS, ROWS)
        assert capsys.readouterr().out.splitlines() == [
            "Task\tDescription\tStatus",
            "compile\tCompile the project\t",
            "test\tRun tests\tempty",
        ]

    def test_tsv_renders_typed_cells(self, capsys) -> None:
        CliOutput(ListingStyle.TSV).listing("Globals", ["Name", "Value"], [["showLogs", True]])
        assert capsys.readouterr().out.splitlines()[1] == "showLogs\ttrue"

    def test_json_keeps_types(self, capsys) -> None:
        rows = [
            ["showLogs", True],
            ["gasLimit", 30_000_000],
            ["key", ConfigurationVariable(name="k")],
        ]
        CliOutput(ListingStyle.JSON).listing("Globals", ["Name", "Value"], rows)
        assert json.loads(capsys.readouterr().out) == [
            {"Name": "showLogs", "Value": True},
            {"Name": "gasLimit", "Value": 30_000_000},
            {"Name": "key", "Value": {"type": "ConfigurationVariable", "name": "k", "env": None}},
        ]

    def test_json_without_rows(self, capsys) -> None:
        CliOutput(ListingStyle.JSON).listing("Tasks", COLUMNS, [])
        assert json.loads(capsys.readouterr().out) == []

    def test_table(self, capsys) -> None:
        CliOutput(ListingStyle.TABLE, no_color=True).listing("Tasks", COLUMNS, ROWS)
        out = capsys.readouterr().out
        assert "Tasks" in out
        assert "Compile the project" in out
        assert "empty" in out

    def test_table_cells_are_not_markup(self, capsys) -> None:
        CliOutput(ListingStyle.TABLE, no_color=True).listing(
            "Tasks", ["Task"], [["[bold]deploy[/bold]"]]
        )
        assert "[bold]deploy[/bold]" in capsys.readouterr().out


class TestTaskResult:
    def test_none_prints_nothing(self, capsys) -> None:
        CliOutput(ListingStyle.TSV).task_result(None)
        assert capsys.readouterr().out == ""

    def test_text(self, capsys) -> None:
        CliOutput(ListingStyle.TSV).task_result("Compiled 3 files")
        assert capsys.readouterr().out == "Compiled 3 files\n"

    def test_json(self, capsys) -> None:
        CliOutput(ListingStyle.JSON).task_result({"compiled": ["A.sol"], "cached": False})
        assert json.loads(capsys.readouterr().out) == {"compiled": ["A.sol"], "cached": False}


class TestDiagnostics:
    def test_error_goes_to_stderr(self, capsys) -> None:
        CliOutput(ListingStyle.TSV, no_color=True).error("Task 'x' not found.")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: Task 'x' not found.\n"

    def test_rich_error_keeps_brackets(self, capsys) -> None:
        CliOutput(ListingStyle.TSV).error("bad value [1, 2]")
        assert "Error: bad value [1, 2]" in capsys.readouterr().err

    def test_debug_needs_verbose(self, capsys) -> None:
        CliOutput(ListingStyle.TSV, no_color=True).debug("hidden")
        assert capsys.readouterr().err == ""

    def test_debug_with_verbose(self, capsys) -> None:
        CliOutput(ListingStyle.TSV, no_color=True, verbose=True).debug("Loading config")
        assert capsys.readouterr().err == "[debug] Loading config\n"

    def test_stderr_console(self) -> None:
        assert CliOutput().stderr_console.stderr is True


class TestGlobalInstance:
    def test_default_is_created_once(self, pipe) -> None:
        output = get_output()
        assert output is get_output()
        assert output.style == ListingStyle.TSV

    def test_set_and_reset(self) -> None:
        output = CliOutput(ListingStyle.JSON)
        set_output(output)
        assert get_output() is output
        reset_output()
        assert get_output() is not output

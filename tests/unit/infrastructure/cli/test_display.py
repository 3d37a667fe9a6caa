import io
import json

import pytest
from rich.console import Console
from rich.table import Table

from slogcli.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@pytest.fixture
def display(streams):
    out, err = streams
    return ConsoleDisplay(
        console=Console(file=out, width=120, color_system=None),
        err_console=Console(file=err, width=120, color_system=None),
    )


def test_display_json_is_plain_on_stdout(display, streams):
    out, err = streams
    data = [{"id": "1", "title": "[bold]not markup[/bold]"}]

    display.display_json(data)

    assert json.loads(out.getvalue()) == data
    assert err.getvalue() == ""


def test_display_json_compact(display, streams):
    display.display_json({"id": "1"}, compact=True)
    assert streams[0].getvalue() == '{"id":"1"}\n'


def test_display_output_string_is_not_markup(display, streams):
    display.display_output("No issues found [x]")
    assert streams[0].getvalue() == "No issues found [x]\n"


def test_display_output_renderable(display, streams):
    table = Table("ID")
    table.add_row("WEB-1")
    display.display_output(table)
    assert "WEB-1" in streams[0].getvalue()


def test_messages_go_to_stderr(display, streams):
    out, err = streams

    display.display_error("Sentry API error: 404 Not Found")
    display.display_warning("careful [now]")
    display.display_info("Polling every 10s")

    assert out.getvalue() == ""
    lines = err.getvalue().splitlines()
    assert lines == [
        "Error: Sentry API error: 404 Not Found",
        "Warning: careful [now]",
        "Polling every 10s",
    ]


def test_console_setters():
    display = ConsoleDisplay()
    replacement = Console(file=io.StringIO())
    display.console = replacement
    display.err_console = replacement
    assert display.console is replacement
    assert display.err_console is replacement

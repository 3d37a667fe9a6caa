import logging
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.infrastructure.cli.formatters import to_json

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library.

    Results go to stdout; errors, warnings and info go to stderr so that
    piping `--format json` output stays clean.
    """

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self._console = console or Console()
        self._err_console = err_console or Console(stderr=True)

    @property
    def console(self) -> Console:
        """The stdout console."""
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    @property
    def err_console(self) -> Console:
        """The stderr console."""
        return self._err_console

    @err_console.setter
    def err_console(self, value: Console) -> None:
        self._err_console = value

    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Prints a renderable (table, text) or plain string.

        Args:
            output: Anything rich can render.
            **kwargs: `style` for plain strings.
        """
        if isinstance(output, str):
            self.console.print(output, style=kwargs.get("style"), markup=False, highlight=False)
        else:
            self.console.print(output)

    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Writes JSON without markup, highlighting or wrapping."""
        self.console.out(to_json(data, compact=kwargs.get("compact", False)), highlight=False)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        self.err_console.print(f"[bold red]Error:[/bold red] {escape(error_message)}")

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.debug(f"Display warning: {warning_message}")
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(warning_message)}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.err_console.print(f"[bright_black]{escape(info_message)}[/bright_black]")

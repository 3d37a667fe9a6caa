"""Interface for presenting results and messages to the user.

Defines the contract for displaying tables, JSON documents, errors,
warnings and info, allowing different UI implementations (console, test
doubles).
"""

import abc
from typing import Any


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays command output (a rich renderable or plain text) on stdout."""
        pass

    @abc.abstractmethod
    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Writes `data` as JSON on stdout, without markup.

        Args:
            data: Any JSON-serializable value.
            **kwargs: `compact=True` renders a single line.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message on stderr."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message on stderr."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message on stderr."""
        pass

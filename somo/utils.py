"""Address helpers and styled console messages."""

from __future__ import annotations

import re

from rich.console import Console
from rich.text import Text

_DELIMITER = ":"
_BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
_MESSAGE_STYLE = "grey46"
_BOLD_STYLE = "bold white"


def split_address(address: str) -> tuple[str, str] | None:
    """Split ``address:port`` at the last colon.

    Returns ``(address, port)``, or ``None`` when there is no colon.
    """
    host, sep, port = address.rpartition(_DELIMITER)
    if not sep:
        return None
    return host, port


def get_address_parts(address: str) -> tuple[str, str]:
    """Split ``address:port``, using ``"-"`` as the port when there is none."""
    parts = split_address(address)
    if parts is None:
        return address, "-"
    return parts


def _message(label: str, label_style: str, text: str) -> Text:
    message = Text()
    message.append(label, style=label_style)
    message.append(": ")
    position = 0
    for match in _BOLD_PATTERN.finditer(text):
        message.append(text[position:match.start()], style=_MESSAGE_STYLE)
        message.append(match.group(1), style=_BOLD_STYLE)
        position = match.end()
    message.append(text[position:], style=_MESSAGE_STYLE)
    return message


def pretty_print_info(text: str) -> None:
    """Print an informational message; ``**bold**`` parts are highlighted."""
    Console().print(_message("Info", "cyan", text))


def pretty_print_error(text: str) -> None:
    """Print an error message; ``**bold**`` parts are highlighted."""
    Console().print(_message("Error", "red", text))
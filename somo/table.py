"""Render connections as a terminal table, JSON or a user template."""

from __future__ import annotations

import json
import re
import shutil
from collections.abc import Mapping, Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.theme import Theme

from somo.schemas import AddressType, Connection
from somo.utils import pretty_print_info

_EMPTY_CHARACTER = "\u2800"
_MAX_COLUMN_SPACES = (5, 8, 8, 28, 7, 24, 13)
_CENTER_ROW = "| :-: | :-: | :-: | :-: | :-: | :-: | :-: |\n"
_HEADER_ROW = (
    "| **#** | **proto** | **local port** | **remote address** "
    "| **remote port** | **pid** *program* | **state** |\n"
)
# Outer borders plus one separator and two padding cells per column.
_TABLE_OVERHEAD = 3 * len(_MAX_COLUMN_SPACES) + 1

_TABLE_THEME = Theme(
    {
        "markdown.strong": "bold cyan",
        "markdown.em": "italic grey62",
        "markdown.code": "yellow",
        "markdown.s": "red blink",
    }
)

_PLACEHOLDER = re.compile(
    r"\{\{\{\s*(?P<raw>[\w.]+)\s*\}\}\}|\{\{\s*(?P<escaped>[\w.]+)\s*\}\}"
)
_HTML_ESCAPES = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "&": "&amp;",
        "'": "&#x27;",
        "`": "&#x60;",
        "=": "&#x3D;",
    }
)


def format_known_address(remote_address: str, address_type: AddressType) -> str:
    """Mark localhost and unspecified addresses with Markdown emphasis."""
    if address_type is AddressType.UNSPECIFIED:
        return f"*{remote_address}*"
    if address_type is AddressType.LOCALHOST:
        return f"*{remote_address} localhost*"
    return remote_address


def fill_terminal_width(terminal_width: int, max_column_spaces: Sequence[int]) -> str:
    """Build a Markdown row of blank characters that spreads the table to the given width.

    Each column gets a share of the width proportional to its maximum space.
    """
    total = sum(max_column_spaces)
    cells = []
    for column_space in max_column_spaces:
        width = int(column_space / total * terminal_width) if total else 0
        cells.append(f"| {_EMPTY_CHARACTER * width} ")
    return "".join(cells) + "|\n"


def render_template(template: str, values: Mapping[str, object]) -> str:
    """Fill ``{{name}}`` (HTML-escaped) and ``{{{name}}}`` (raw) placeholders.

    Unknown names render as empty text. An unclosed placeholder raises ``ValueError``.
    """
    parts = []
    position = 0
    for match in _PLACEHOLDER.finditer(template):
        literal = template[position:match.start()]
        if "{{" in literal:
            raise ValueError(f"invalid template: {template!r}")
        parts.append(literal)
        name = match.group("raw") or match.group("escaped")
        value = values.get(name)
        text = "" if value is None else str(value)
        if match.group("escaped") is not None:
            text = text.translate(_HTML_ESCAPES)
        parts.append(text)
        position = match.end()
    tail = template[position:]
    if "{{" in tail:
        raise ValueError(f"invalid template: {template!r}")
    parts.append(tail)
    return "".join(parts)


def _connections_markdown(all_connections: Sequence[Connection], terminal_width: int) -> str:
    rows = [_HEADER_ROW, _CENTER_ROW]
    for index, connection in enumerate(all_connections, start=1):
        remote_address = format_known_address(
            connection.remote_address, connection.address_type
        )
        rows.append(
            f"| *{index}* | {connection.proto} | {connection.local_port} "
            f"| {remote_address} | {connection.remote_port} "
            f"| {connection.pid} *{connection.program}* | {connection.state} |\n"
        )
    fill_width = max(terminal_width - _TABLE_OVERHEAD, len(_MAX_COLUMN_SPACES))
    rows.append(fill_terminal_width(fill_width, _MAX_COLUMN_SPACES))
    return "".join(rows)


def print_connections_table(all_connections: Sequence[Connection]) -> None:
    """Print the connections as a styled table followed by a count."""
    terminal_width = shutil.get_terminal_size().columns
    console = Console(theme=_TABLE_THEME)
    console.print(Markdown(_connections_markdown(all_connections, terminal_width)))
    pretty_print_info(f"**{len(all_connections)} Connections**")


def get_connections_json(all_connections: Sequence[Connection]) -> str:
    """Return the connections as pretty-printed JSON."""
    return json.dumps(
        [connection.to_dict() for connection in all_connections],
        indent=2,
        ensure_ascii=False,
    )


def get_connections_formatted(
    all_connections: Sequence[Connection], template_string: str
) -> str:
    """Render every connection with the template, one line each."""
    return "\n".join(
        render_template(template_string, connection.to_dict())
        for connection in all_connections
    )
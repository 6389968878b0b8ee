"""Command-line interface: parse flags, show connections, optionally kill a process."""

from __future__ import annotations

import argparse
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from somo.connections import get_all_connections
from somo.schemas import Connection, FilterOptions
from somo.table import (
    get_connections_formatted,
    get_connections_json,
    print_connections_table,
)
from somo.utils import pretty_print_error, pretty_print_info

_VERSION = "1.0.1"
_KILL_PROMPT = "Which process to kill (search or type index)?"


@dataclass
class Flags:
    """Flag values given on the command line."""

    kill: bool = False
    proto: str | None = None
    ip: str | None = None
    remote_port: str | None = None
    port: str | None = None
    program: str | None = None
    pid: str | None = None
    format: str | None = None
    json: bool = False
    open: bool = False
    listen: bool = False
    exclude_ipv6: bool = False


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="somo",
        description="A human-friendly alternative to netstat for socket and port monitoring on Linux.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"somo {_VERSION}")
    parser.add_argument("-k", "--kill", action="store_true")
    parser.add_argument("--proto")
    parser.add_argument("--ip")
    parser.add_argument("--remote-port", dest="remote_port")
    parser.add_argument("-p", "--port")
    parser.add_argument("--program")
    parser.add_argument("--pid")
    parser.add_argument("--format")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("-o", "--open", action="store_true")
    parser.add_argument("-l", "--listen", action="store_true")
    parser.add_argument("--exclude-ipv6", dest="exclude_ipv6", action="store_true")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Flags:
    """Parse command-line arguments into ``Flags``."""
    return Flags(**vars(_build_parser().parse_args(argv)))


def kill_process(pid: str) -> None:
    """Kill a process by its PID with the ``kill`` command and report the outcome."""
    try:
        result = subprocess.run(["kill", pid], capture_output=True, check=False)
    except OSError as exc:
        raise RuntimeError(f"Failed to kill process with PID {pid}") from exc

    if result.returncode == 0:
        pretty_print_info(f"Killed process with PID {pid}.")
    else:
        print("Failed to kill process, try running")
        pretty_print_error("Couldn't kill process! Try again using sudo.")


def interactive_process_kill(connections: Sequence[Connection]) -> None:
    """Ask for a table index and kill the process behind that connection."""
    if not connections:
        print("Couldn't find process.")
        return
    try:
        answer = input(f"{_KILL_PROMPT} [1-{len(connections)}] ")
    except (EOFError, KeyboardInterrupt):
        print("Couldn't find process.")
        return
    try:
        choice = int(answer.strip())
    except ValueError:
        print("Couldn't find process.")
        return
    if not 1 <= choice <= len(connections):
        print("Couldn't find process.")
        return
    kill_process(connections[choice - 1].pid)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command: list connections and optionally kill one of their processes."""
    flags = parse_args(argv)
    filter_options = FilterOptions(
        by_proto=flags.proto,
        by_remote_address=flags.ip,
        by_remote_port=flags.remote_port,
        by_local_port=flags.port,
        by_program=flags.program,
        by_pid=flags.pid,
        by_open=flags.open,
        by_listen=flags.listen,
        exclude_ipv6=flags.exclude_ipv6,
    )
    all_connections = get_all_connections(filter_options)

    if flags.json:
        print(get_connections_json(all_connections))
    elif flags.format is not None:
        print(get_connections_formatted(all_connections, flags.format))
    else:
        print_connections_table(all_connections)

    if flags.kill:
        interactive_process_kill(all_connections)
    return 0
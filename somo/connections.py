"""Collect TCP and UDP socket connections from the proc filesystem."""

from __future__ import annotations

import ipaddress
import os
import re
import struct
from pathlib import Path

from somo.schemas import AddressType, Connection, FilterOptions, NetEntry
from somo.utils import get_address_parts

_PROC_ROOT = Path("/proc")
_SOCKET_TARGET = re.compile(r"socket:\[(\d+)\]")
_UNKNOWN = "-"

_TCP_STATES = {
    0x01: "established",
    0x02: "synsent",
    0x03: "synrecv",
    0x04: "finwait1",
    0x05: "finwait2",
    0x06: "timewait",
    0x07: "close",
    0x08: "closewait",
    0x09: "lastack",
    0x0A: "listen",
    0x0B: "closing",
    0x0C: "newsynrecv",
}

_UDP_STATES = {
    0x01: "established",
    0x07: "close",
}

# Field positions in a /proc/net/{tcp,udp}[6] line.
_LOCAL_FIELD = 1
_REMOTE_FIELD = 2
_STATE_FIELD = 3
_INODE_FIELD = 9


def decode_socket_address(hex_address: str) -> str:
    """Decode a kernel ``HEXADDR:HEXPORT`` pair into ``address:port``.

    The address is stored as native-endian 32-bit words; IPv6 addresses
    come back wrapped in brackets, e.g. ``[::1]:80``.
    """
    host_hex, sep, port_hex = hex_address.partition(":")
    if not sep:
        raise ValueError(f"invalid socket address: {hex_address!r}")
    try:
        raw = bytes.fromhex(host_hex)
        port = int(port_hex, 16)
    except ValueError as exc:
        raise ValueError(f"invalid socket address: {hex_address!r}") from exc
    if len(raw) not in (4, 16):
        raise ValueError(f"invalid socket address: {hex_address!r}")

    word_count = len(raw) // 4
    words = struct.unpack(f">{word_count}I", raw)
    packed = struct.pack(f"={word_count}I", *words)

    if len(packed) == 4:
        return f"{ipaddress.IPv4Address(packed)}:{port}"

    address = ipaddress.IPv6Address(packed)
    mapped = address.ipv4_mapped
    text = f"::ffff:{mapped}" if mapped is not None else address.compressed
    return f"[{text}]:{port}"


def parse_net_table(text: str, protocol: str) -> list[NetEntry]:
    """Parse the contents of a ``/proc/net`` TCP or UDP socket table."""
    states = _UDP_STATES if protocol == "udp" else _TCP_STATES
    entries = []
    for line in text.splitlines()[1:]:
        fields = line.split()
        if not fields:
            continue
        if len(fields) <= _INODE_FIELD:
            raise ValueError(f"malformed socket table line: {line!r}")
        try:
            state_code = int(fields[_STATE_FIELD], 16)
            inode = int(fields[_INODE_FIELD])
        except ValueError as exc:
            raise ValueError(f"malformed socket table line: {line!r}") from exc
        try:
            state = states[state_code]
        except KeyError:
            raise ValueError(
                f"unknown {protocol} state {fields[_STATE_FIELD]!r}"
            ) from None
        entries.append(
            NetEntry(
                protocol=protocol,
                local_address=decode_socket_address(fields[_LOCAL_FIELD]),
                remote_address=decode_socket_address(fields[_REMOTE_FIELD]),
                state=state,
                inode=inode,
            )
        )
    return entries


def _parse_stat(stat: str) -> tuple[str, str]:
    """Return ``(program, pid)`` from a ``/proc/<pid>/stat`` line."""
    pid = stat.split(maxsplit=1)[0]
    start = stat.find("(")
    end = stat.rfind(")")
    program = stat[start + 1:end] if 0 <= start < end else _UNKNOWN
    return program, pid


def get_processes() -> dict[int, tuple[str, str]]:
    """Map each socket inode to the ``(program, pid)`` of a process holding it."""
    process_dirs = sorted(
        (entry for entry in _PROC_ROOT.iterdir() if entry.name.isdigit()),
        key=lambda entry: int(entry.name),
    )
    processes: dict[int, tuple[str, str]] = {}
    for process_dir in process_dirs:
        try:
            info = _parse_stat((process_dir / "stat").read_text())
            fds = list((process_dir / "fd").iterdir())
        except OSError:
            continue
        for fd in fds:
            try:
                target = os.readlink(fd)
            except OSError:
                continue
            match = _SOCKET_TARGET.fullmatch(target)
            if match:
                processes[int(match.group(1))] = info
    return processes


def filter_out_connection(connection: Connection, filter_options: FilterOptions) -> bool:
    """Return ``True`` if the connection does not pass the user's filters."""
    checks = (
        (filter_options.by_remote_port, connection.remote_port),
        (filter_options.by_local_port, connection.local_port),
        (filter_options.by_remote_address, connection.remote_address),
        (filter_options.by_program, connection.program),
        (filter_options.by_pid, connection.pid),
    )
    if any(wanted is not None and wanted != actual for wanted, actual in checks):
        return True
    if filter_options.by_listen and connection.state != "listen":
        return True
    if filter_options.by_open and connection.state == "close":
        return True
    return False


def get_address_type(remote_address: str) -> AddressType:
    """Classify an address as localhost, unspecified or external."""
    if remote_address in ("127.0.0.1", "[::1]"):
        return AddressType.LOCALHOST
    if remote_address in ("0.0.0.0", "[::]"):
        return AddressType.UNSPECIFIED
    return AddressType.EXTERN


def get_connection_data(
    net_entry: NetEntry, all_processes: dict[int, tuple[str, str]]
) -> Connection:
    """Turn a raw socket table entry into a displayable connection."""
    _, local_port = get_address_parts(net_entry.local_address)
    remote_address, remote_port = get_address_parts(net_entry.remote_address)
    program, pid = all_processes.get(net_entry.inode, (_UNKNOWN, _UNKNOWN))
    return Connection(
        proto=net_entry.protocol,
        local_port=local_port,
        remote_address=remote_address,
        remote_port=remote_port,
        program=program,
        pid=pid,
        state=net_entry.state,
        address_type=get_address_type(remote_address),
    )


def _get_connections(
    protocol: str,
    all_processes: dict[int, tuple[str, str]],
    filter_options: FilterOptions,
) -> list[Connection]:
    tables = [protocol]
    if not filter_options.exclude_ipv6:
        tables.append(f"{protocol}6")

    entries = [
        entry
        for table in tables
        for entry in parse_net_table((_PROC_ROOT / "net" / table).read_text(), protocol)
    ]
    connections = (get_connection_data(entry, all_processes) for entry in entries)
    return [
        connection
        for connection in connections
        if not filter_out_connection(connection, filter_options)
    ]


def get_tcp_connections(
    all_processes: dict[int, tuple[str, str]], filter_options: FilterOptions
) -> list[Connection]:
    """Return all TCP connections that pass the filters."""
    return _get_connections("tcp", all_processes, filter_options)


def get_udp_connections(
    all_processes: dict[int, tuple[str, str]], filter_options: FilterOptions
) -> list[Connection]:
    """Return all UDP connections that pass the filters."""
    return _get_connections("udp", all_processes, filter_options)


def get_all_connections(filter_options: FilterOptions) -> list[Connection]:
    """Return TCP and/or UDP connections depending on the protocol filter."""
    all_processes = get_processes()
    if filter_options.by_proto == "tcp":
        return get_tcp_connections(all_processes, filter_options)
    if filter_options.by_proto == "udp":
        return get_udp_connections(all_processes, filter_options)
    return get_tcp_connections(all_processes, filter_options) + get_udp_connections(
        all_processes, filter_options
    )
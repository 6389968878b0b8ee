"""Data types shared by the connection collector and the output formatters."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class AddressType(Enum):
    """Classification of a remote IP address."""

    LOCALHOST = "Localhost"
    UNSPECIFIED = "Unspecified"
    EXTERN = "Extern"


@dataclass
class Connection:
    """A processed socket connection with everything shown to the user."""

    proto: str
    local_port: str
    remote_address: str
    remote_port: str
    program: str
    pid: str
    state: str
    address_type: AddressType

    def to_dict(self) -> dict[str, str]:
        """Return the connection as a plain, JSON-ready mapping in field order."""
        data = asdict(self)
        data["address_type"] = self.address_type.value
        return data


@dataclass(frozen=True)
class NetEntry:
    """A raw TCP or UDP socket table entry.

    Addresses are in ``address:port`` form, IPv6 addresses wrapped in brackets.
    """

    protocol: str
    local_address: str
    remote_address: str
    state: str
    inode: int


@dataclass
class FilterOptions:
    """Options that decide which connections are shown."""

    by_proto: str | None = None
    by_program: str | None = None
    by_pid: str | None = None
    by_remote_address: str | None = None
    by_remote_port: str | None = None
    by_local_port: str | None = None
    by_open: bool = False
    by_listen: bool = False
    exclude_ipv6: bool = False
import json

import pytest

from somo.schemas import AddressType, Connection, FilterOptions, NetEntry


def _connection(**overrides):
    values = dict(
        proto="tcp",
        local_port="44796",
        remote_address="192.168.1.0",
        remote_port="443",
        program="firefox",
        pid="200",
        state="established",
        address_type=AddressType.LOCALHOST,
    )
    values.update(overrides)
    return Connection(**values)


@pytest.mark.parametrize(
    "member, name",
    [
        (AddressType.LOCALHOST, "Localhost"),
        (AddressType.UNSPECIFIED, "Unspecified"),
        (AddressType.EXTERN, "Extern"),
    ],
)
def test_address_type_serialised_names(member, name):
    assert _connection(address_type=member).to_dict()["address_type"] == name


def test_to_dict_field_order():
    keys = list(_connection().to_dict())
    assert keys == [
        "proto",
        "local_port",
        "remote_address",
        "remote_port",
        "program",
        "pid",
        "state",
        "address_type",
    ]


def test_to_dict_values_and_json():
    conn = _connection(program="-", pid="-", state="timewait")
    data = conn.to_dict()
    assert data["program"] == "-"
    assert data["state"] == "timewait"
    assert json.loads(json.dumps(data)) == data


def test_connection_state_is_mutable():
    conn = _connection(state="close")
    conn.state = "listen"
    assert conn.to_dict()["state"] == "listen"


def test_filter_options_defaults():
    options = FilterOptions()
    assert options.by_proto is None
    assert options.by_program is None
    assert options.by_pid is None
    assert options.by_remote_address is None
    assert options.by_remote_port is None
    assert options.by_local_port is None
    assert options.by_open is False
    assert options.by_listen is False
    assert options.exclude_ipv6 is False


def test_filter_options_partial_override():
    options = FilterOptions(by_local_port="8080", by_listen=True)
    assert options.by_local_port == "8080"
    assert options.by_listen is True
    assert options.by_open is False


def test_net_entry_is_frozen():
    entry = NetEntry("udp", "0.0.0.0:53", "0.0.0.0:0", "close", 1234)
    with pytest.raises(AttributeError):
        entry.inode = 1
    assert entry.protocol == "udp"
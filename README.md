# somo

A human-friendly alternative to `netstat` for socket and port monitoring on Linux.

`somo` reads the kernel's TCP and UDP socket tables from `/proc/net`, matches
each socket to the process that holds it by looking through `/proc/<pid>/fd`,
and prints everything as a readable table. You can filter the list, print it
as JSON or through your own template, and pick a process to kill
interactively.

## Installation

```
pip install .
```

Requires Python 3.10 or later on Linux. The only dependency is `rich`, used
for the coloured terminal output.

## Usage

Show all TCP and UDP connections (IPv4 and IPv6):

```
somo
```

The table has the columns `#`, `proto`, `local port`, `remote address`,
`remote port`, `pid program` and `state`, followed by a count of the
connections shown. Remote addresses `127.0.0.1` and `[::1]` are marked as
localhost; `0.0.0.0` and `[::]` are shown in italics as unspecified.

Sockets whose owning process cannot be read show `-` for program and PID. Run
with `sudo` to see the program name and PID of sockets owned by other users.

Print the version:

```
somo --version
```

### Filters

| Flag | Meaning |
| --- | --- |
| `--proto tcp\|udp` | only show one protocol (any other value shows both) |
| `--ip ADDRESS` | only show connections to this remote address |
| `--remote-port PORT` | only show connections to this remote port |
| `-p`, `--port PORT` | only show connections on this local port |
| `--program NAME` | only show connections owned by this program |
| `--pid PID` | only show connections owned by this process |
| `-o`, `--open` | hide connections in the `close` state |
| `-l`, `--listen` | only show sockets in the `listen` state |
| `--exclude-ipv6` | leave out IPv6 sockets |

Filters compare text exactly and can be combined. IPv6 remote addresses are
written in brackets, e.g. `--ip "[::1]"`.

Example: listening TCP sockets on local port 8080:

```
somo --proto tcp -p 8080 -l
```

### Output formats

Print the connections as JSON:

```
somo --json
```

Each connection is an object with the fields `proto`, `local_port`,
`remote_address`, `remote_port`, `program`, `pid`, `state` and
`address_type` (one of `Localhost`, `Unspecified`, `Extern`).

Print one line per connection from a template. The same field names can be
used between double braces:

```
somo --format "{{pid}} {{program}} -> {{remote_address}}:{{remote_port}}"
```

Values inside `{{name}}` are HTML-escaped; use `{{{name}}}` for the raw value.
Unknown names render as empty text, and an unclosed `{{` is an error.

### Killing a process

```
somo -k
```

After the output is printed you are asked for the row number of the
connection whose process should be killed. `somo` then runs `kill` on that
PID and reports whether it worked; if it failed, try again with `sudo`.

## Using it as a library

The modules can be used on their own:

- `somo.connections.get_all_connections(FilterOptions(...))` returns a list of
  `Connection` objects; `parse_net_table(text, protocol)` and
  `decode_socket_address(hex_address)` parse the raw `/proc/net` tables.
- `somo.table.get_connections_json(connections)`,
  `get_connections_formatted(connections, template)` and
  `print_connections_table(connections)` produce the three output forms.
- `somo.schemas` holds the `Connection`, `NetEntry`, `FilterOptions` and
  `AddressType` types.
- `somo.utils.get_address_parts("127.0.0.1:5432")` returns
  `("127.0.0.1", "5432")`.

## Limitations

`somo` only works where the Linux `/proc` filesystem is available; it has no
support for other operating systems. It takes a single snapshot of the socket
tables and does not watch them continuously.
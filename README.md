# dhcpserv

A small DHCP server for local testing. It listens for UDP datagrams on
`127.0.0.1`, hands out up to four addresses in `192.168.1.x` and names itself
as server `192.168.1.0`. The package also has helpers to build, parse and
print BOOTP/DHCP messages.

## How the server replies

- `DHCPDISCOVER` gets a `DHCPOFFER` with a 30-day lease.
- `DHCPREQUEST` with server identifier `192.168.1.0` gets a `DHCPACK` with a
  30-day lease. Any other server identifier gets a `DHCPNAK` with `yiaddr`
  set to `0.0.0.0`.
- `DHCPRELEASE` gets no reply. It marks the client's slot as free, and the
  same client or a new one can take that slot later.
- Once all four slots are taken, any other client gets a `DHCPNAK`.

Every reply has the server identifier option and ends with the end option.
The server reads only options 50 (requested address), 51 (lease time),
53 (message type) and 54 (server identifier). It ignores any other option.
A datagram with broken options is dropped.

## Installation

```
pip install .
```

## Command line

```
dhcpserv -p 6767 -s 5    # serve one datagram at a time on port 6767
dhcpserv -p 6767 -t 5    # serve two batches of four datagrams, each in a worker thread
```

Options:

- `-s TIMEOUT` runs the server one datagram at a time. It stops when no
  datagram arrives within `TIMEOUT` seconds. A timeout of 0 waits forever.
- `-t TIMEOUT` collects four datagrams, handles them in a worker thread, and
  does the same for a second batch of four. Then it stops. It also stops
  when a receive times out.
- `-p PORT` sets the UDP port to bind. The default, 0, lets the operating
  system choose a port.
- `-d` prints `Shutting down` to stderr before serving.
- `-h` prints a usage line.

An unknown option, `-h`, or an option with no argument prints a message to
stderr and stops option parsing. The options read before that point still
take effect. The command always exits with status 0.

## Library use

```python
from dhcpserv.server import DhcpServer

server = DhcpServer()
reply = server.handle(packet)              # reply bytes, or None for a release
replies = server.handle_batch([p1, p2])    # one entry per packet
server.reset()                             # empty every pool slot
```

`dhcpserv.server.echo_server(timeout, port, host)` and
`dhcpserv.server.echo_server_thread(timeout, port, host)` run the
socket loops that the command uses.

`dhcpserv.dhcp` has the message building blocks:

- `Message`: the fixed BOOTP header, with `from_bytes` and `to_bytes`.
- `Options` and `parse_options`: read the options that follow the cookie.
- `append_cookie` and `append_option`: build an option block.
- `MessageType` and `HardwareType`: enums for the option and header values.
- `hardware_address_length`: gives the address length for a hardware type.
- `dump_packet`: writes the raw bytes as grouped hex, to stderr by default.

`dhcpserv.format` prints messages in readable form:

- `dump_msg(output, buffer)` writes the BOOTP fields and, when the magic
  cookie is present, the DHCP options.
- `htype_description` and `format_duration` are the helpers it uses.

## Limits

This is not a general DHCP server. It binds to the loopback address only.
It does not handle broadcast replies or relay agents. Leases never expire,
the pool size and server address are fixed, and it keeps no lease database:
all state is lost when the process stops.

## Tests

```
pip install .[test]
pytest
```
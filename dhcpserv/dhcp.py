"""DHCP/BOOTP wire structures and option helpers."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from ipaddress import IPv4Address
from typing import ClassVar, TextIO, Union

MAX_DHCP_LENGTH = 576

BOOTREQUEST = 1
BOOTREPLY = 2

MAGIC_COOKIE = 0x63825363
COOKIE_BYTES = struct.pack("!I", MAGIC_COOKIE)

OPT_PAD = 0
OPT_REQUESTED_IP = 50
OPT_LEASE_TIME = 51
OPT_MESSAGE_TYPE = 53
OPT_SERVER_ID = 54
OPT_END = 255


class MessageType(IntEnum):
    """DHCP message types carried in option 53."""

    DISCOVER = 1
    OFFER = 2
    REQUEST = 3
    DECLINE = 4
    ACK = 5
    NAK = 6
    RELEASE = 7


class HardwareType(IntEnum):
    """ARP hardware types used in the htype field."""

    ETH = 1
    IEEE802 = 6
    ARCNET = 7
    FRAME_RELAY = 15
    FIBRE = 18


_ADDRESS_LENGTHS = {
    HardwareType.ETH: 6,
    HardwareType.IEEE802: 6,
    HardwareType.ARCNET: 1,
    HardwareType.FRAME_RELAY: 2,
    HardwareType.FIBRE: 3,
}

_HEADER = struct.Struct("!BBBBIHH4s4s4s4s16s64s128s")

AddressLike = Union[IPv4Address, str, int, bytes]


def _zero_address() -> IPv4Address:
    return IPv4Address(0)


def _address(value: AddressLike) -> IPv4Address:
    return value if isinstance(value, IPv4Address) else IPv4Address(value)


@dataclass
class Message:
    """The fixed-size BOOTP header that precedes the DHCP options."""

    op: int = BOOTREQUEST
    htype: int = HardwareType.ETH
    hlen: int = 6
    hops: int = 0
    xid: int = 0
    secs: int = 0
    flags: int = 0
    ciaddr: IPv4Address = field(default_factory=_zero_address)
    yiaddr: IPv4Address = field(default_factory=_zero_address)
    siaddr: IPv4Address = field(default_factory=_zero_address)
    giaddr: IPv4Address = field(default_factory=_zero_address)
    chaddr: bytes = bytes(16)
    sname: bytes = bytes(64)
    file: bytes = bytes(128)

    SIZE: ClassVar[int] = _HEADER.size

    def __post_init__(self) -> None:
        self.ciaddr = _address(self.ciaddr)
        self.yiaddr = _address(self.yiaddr)
        self.siaddr = _address(self.siaddr)
        self.giaddr = _address(self.giaddr)
        self.chaddr = bytes(self.chaddr).ljust(16, b"\0")[:16]
        self.sname = bytes(self.sname).ljust(64, b"\0")[:64]
        self.file = bytes(self.file).ljust(128, b"\0")[:128]

    @classmethod
    def from_bytes(cls, data: bytes) -> "Message":
        """Decode the header from the start of a packet."""
        if len(data) < cls.SIZE:
            raise ValueError(
                f"packet too short for BOOTP header: {len(data)} < {cls.SIZE}"
            )
        (op, htype, hlen, hops, xid, secs, flags, ciaddr, yiaddr, siaddr,
         giaddr, chaddr, sname, file) = _HEADER.unpack_from(data)
        return cls(
            op=op, htype=htype, hlen=hlen, hops=hops, xid=xid, secs=secs,
            flags=flags,
            ciaddr=IPv4Address(ciaddr), yiaddr=IPv4Address(yiaddr),
            siaddr=IPv4Address(siaddr), giaddr=IPv4Address(giaddr),
            chaddr=chaddr, sname=sname, file=file,
        )

    def to_bytes(self) -> bytes:
        """Encode the header in network byte order."""
        return _HEADER.pack(
            self.op, self.htype, self.hlen, self.hops, self.xid, self.secs,
            self.flags,
            self.ciaddr.packed, self.yiaddr.packed,
            self.siaddr.packed, self.giaddr.packed,
            self.chaddr, self.sname, self.file,
        )


@dataclass
class Options:
    """The DHCP options this server understands; unset ones are None."""

    request: IPv4Address | None = None
    lease: int | None = None
    type: int | None = None
    sid: IPv4Address | None = None


def _option_value(code: int, value: bytes, size: int) -> bytes:
    if len(value) < size:
        raise ValueError(f"option {code} needs {size} bytes, got {len(value)}")
    return value[:size]


def parse_options(data: bytes) -> Options:
    """Parse the DHCP options that follow the magic cookie."""
    options = Options()
    offset = 0
    while offset < len(data):
        code = data[offset]
        offset += 1
        if code == OPT_END:
            break
        if code == OPT_PAD:
            continue
        if offset >= len(data):
            raise ValueError(f"option {code} is missing its length byte")
        length = data[offset]
        offset += 1
        value = data[offset:offset + length]
        if len(value) < length:
            raise ValueError(f"option {code} is truncated")
        offset += length

        if code == OPT_REQUESTED_IP:
            options.request = IPv4Address(_option_value(code, value, 4))
        elif code == OPT_LEASE_TIME:
            options.lease = int.from_bytes(_option_value(code, value, 4), "big")
        elif code == OPT_MESSAGE_TYPE:
            raw = _option_value(code, value, 1)[0]
            try:
                options.type = MessageType(raw)
            except ValueError:
                options.type = raw
        elif code == OPT_SERVER_ID:
            options.sid = IPv4Address(_option_value(code, value, 4))
    return options


def append_cookie(packet: bytes) -> bytes:
    """Return the packet with the DHCP magic cookie appended."""
    return bytes(packet) + COOKIE_BYTES


def append_option(packet: bytes, option: int, value: bytes = b"") -> bytes:
    """Return the packet with one option appended.

    The end option is written as its single code byte.
    """
    if not 0 <= option <= 255:
        raise ValueError(f"option code out of range: {option}")
    if option in (OPT_END, OPT_PAD):
        return bytes(packet) + bytes([option])
    value = bytes(value)
    if len(value) > 255:
        raise ValueError(f"option value too long: {len(value)} bytes")
    return bytes(packet) + bytes([option, len(value)]) + value


def hardware_address_length(htype: int) -> int:
    """Hardware address length for an ARP hardware type, 0 if unknown."""
    try:
        return _ADDRESS_LENGTHS[HardwareType(htype)]
    except ValueError:
        return 0


def dump_packet(data: bytes, stream: TextIO | None = None) -> None:
    """Write the raw bytes of a packet as grouped hex."""
    out = sys.stderr if stream is None else stream
    pieces = []
    index = 0
    for index, byte in enumerate(data, start=1):
        pieces.append(f" {byte:02x}")
        if index % 32 == 0:
            pieces.append("\n")
        elif index % 16 == 0:
            pieces.append("  ")
        elif index % 8 == 0:
            pieces.append(" .")
    if index % 32 != 0:
        pieces.append("\n")
    pieces.append("\n")
    out.write("".join(pieces))
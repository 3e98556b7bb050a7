"""Human-readable dumps of DHCP messages."""

from __future__ import annotations

from ipaddress import IPv4Address
from typing import TextIO

from .dhcp import (
    BOOTREQUEST,
    COOKIE_BYTES,
    OPT_END,
    OPT_LEASE_TIME,
    OPT_MESSAGE_TYPE,
    OPT_PAD,
    OPT_REQUESTED_IP,
    OPT_SERVER_ID,
    HardwareType,
    Message,
    MessageType,
)

_RULE = "-" * 54

_HTYPE_NAMES = {
    HardwareType.ETH: "Ethernet (10Mb)",
    HardwareType.IEEE802: "IEEE 802 Networks",
    HardwareType.ARCNET: "ARCNET",
    HardwareType.FRAME_RELAY: "Frame Relay",
    HardwareType.FIBRE: "Fibre Channel",
}

_TYPE_NAMES = {
    MessageType.DISCOVER: "DHCP Discover",
    MessageType.OFFER: "DHCP Offer",
    MessageType.REQUEST: "DHCP Request",
    MessageType.DECLINE: "DHCP Decline",
    MessageType.ACK: "DHCP ACK",
    MessageType.NAK: "DHCP NAK",
    MessageType.RELEASE: "DHCP Release",
}

_SHOWS_REQUEST = {MessageType.REQUEST, MessageType.DECLINE, MessageType.RELEASE}
_SHOWS_LEASE = {MessageType.OFFER, MessageType.ACK}
_SHOWS_SERVER_ID = set(MessageType) - {MessageType.DISCOVER}


def htype_description(htype: int) -> str:
    """Name of an ARP hardware type, or "Unknown"."""
    try:
        return _HTYPE_NAMES[HardwareType(htype)]
    except ValueError:
        return "Unknown"


def format_duration(seconds: int) -> str:
    """Render a number of seconds as "D Days, H:MM:SS"."""
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{days} Days, {hours}:{minutes:02d}:{secs:02d}"


def _bootp_lines(msg: Message) -> list[str]:
    op_desc = "BOOTREQUEST" if msg.op == BOOTREQUEST else "BOOTREPLY"
    chaddr = msg.chaddr[: min(msg.hlen, len(msg.chaddr))].hex()
    return [
        _RULE,
        "BOOTP Options",
        _RULE,
        f"Op Code (op) = {msg.op} [{op_desc}]",
        f"Hardware Type (htype) = {msg.htype} [{htype_description(msg.htype)}]",
        f"Hardware Address Length (hlen) = {msg.hlen}",
        f"Hops (hops) = {msg.hops}",
        f"Transaction ID (xid) = {msg.xid} (0x{msg.xid:x})",
        f"Seconds (secs) = {format_duration(msg.secs)}",
        f"Flags (flags) = {msg.flags}",
        f"Client IP Address (ciaddr) = {msg.ciaddr}",
        f"Your IP Address (yiaddr) = {msg.yiaddr}",
        f"Server IP Address (siaddr) = {msg.siaddr}",
        f"Relay IP Address (giaddr) = {msg.giaddr}",
        f"Client Ethernet Address (chaddr) = {chaddr}",
    ]


def _dhcp_lines(options: bytes) -> list[str]:
    lines = [_RULE, "DHCP Options", _RULE, "Magic Cookie = [OK]"]
    current: MessageType | None = None
    offset = 0
    while offset < len(options):
        code = options[offset]
        offset += 1
        if code == OPT_END:
            break
        if code == OPT_PAD:
            continue
        if offset >= len(options):
            break
        length = options[offset]
        offset += 1
        data = options[offset:offset + length]
        offset += length

        if code == OPT_MESSAGE_TYPE and data:
            if data[0] in _TYPE_NAMES:
                current = MessageType(data[0])
                lines.append(f"Message Type = {_TYPE_NAMES[current]}")
        elif code == OPT_REQUESTED_IP and len(data) >= 4:
            if current in _SHOWS_REQUEST:
                lines.append(f"Request = {IPv4Address(data[:4])}")
        elif code == OPT_LEASE_TIME and len(data) >= 4:
            if current in _SHOWS_LEASE:
                lease = int.from_bytes(data[:4], "big")
                lines.append(f"IP Address Lease Time = {format_duration(lease)}")
        elif code == OPT_SERVER_ID and len(data) >= 4:
            if current in _SHOWS_SERVER_ID:
                lines.append(f"Server Identifier = {IPv4Address(data[:4])}")
    return lines


def dump_msg(output: TextIO, buffer: bytes) -> None:
    """Write a description of a BOOTP/DHCP packet to the output stream."""
    msg = Message.from_bytes(buffer)
    lines = _bootp_lines(msg)
    cookie_end = Message.SIZE + len(COOKIE_BYTES)
    if buffer[Message.SIZE:cookie_end] == COOKIE_BYTES:
        lines.extend(_dhcp_lines(buffer[cookie_end:]))
    output.write("\n".join(lines) + "\n")
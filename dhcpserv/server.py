"""A small DHCP server that leases four addresses from 192.168.1.0/24."""

from __future__ import annotations

import socket
import threading
from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import Iterable

from .dhcp import (
    BOOTREPLY,
    OPT_END,
    OPT_LEASE_TIME,
    OPT_MESSAGE_TYPE,
    OPT_SERVER_ID,
    COOKIE_BYTES,
    Message,
    MessageType,
    Options,
    append_cookie,
    append_option,
    parse_options,
)

MAX_IPS = 5
POOL_SIZE = 4
SERVER_ID = IPv4Address("192.168.1.0")
LEASE_TIME = 0x00278D00  # thirty days
DEFAULT_HOST = "127.0.0.1"
BATCH_SIZE = 4
# Receive size: the BOOTP header plus room for the option block.
RECV_SIZE = Message.SIZE + 32

_ZERO = IPv4Address(0)
_EMPTY_CHADDR = bytes(16)


@dataclass
class IpRecord:
    """One slot of the address pool."""

    chaddr: bytes = _EMPTY_CHADDR
    yiaddr_count: int = 0
    dhcp_type: int = 0
    is_tombstone: bool = False


@dataclass
class DhcpServer:
    """Address assignment state and reply generation."""

    count: int = 1
    next_host: int = 1
    records: list[IpRecord] = field(
        default_factory=lambda: [IpRecord() for _ in range(POOL_SIZE)]
    )

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Clear every pool slot; the counters are left as they are."""
        with self._lock:
            self.records = [IpRecord() for _ in range(POOL_SIZE)]

    def handle(self, packet: bytes) -> bytes | None:
        """Process one received packet and return the reply, if any."""
        with self._lock:
            return self._handle(bytes(packet))

    def handle_batch(self, packets: Iterable[bytes]) -> list[bytes | None]:
        """Process packets in order, returning one reply slot per packet."""
        return [self.handle(packet) for packet in packets]

    def _handle(self, packet: bytes) -> bytes | None:
        header = packet[:Message.SIZE].ljust(Message.SIZE, b"\0")
        msg = Message.from_bytes(header)
        options = parse_options(packet[Message.SIZE + len(COOKIE_BYTES):])

        if self.count >= MAX_IPS and self.records[-1].chaddr != msg.chaddr:
            if options.type == MessageType.RELEASE:
                self._release(msg.chaddr)
                return None
            msg.op = BOOTREPLY
            msg.yiaddr = _ZERO
            msg.ciaddr = _ZERO
            return self._nak_reply(msg)

        host = self._assign(msg.chaddr)
        if host is None:
            host = self._reuse_tombstone(msg.chaddr)
        self._fill_reply(msg, options, host)
        return self._valid_reply(msg, options)

    def _assign(self, chaddr: bytes) -> int | None:
        """Find or create the client's slot; None if tombstones must be checked."""
        for record in self.records:
            if record.chaddr == chaddr:
                return record.yiaddr_count
            if record.chaddr == _EMPTY_CHADDR and not record.is_tombstone:
                record.chaddr = chaddr
                record.is_tombstone = False
                record.yiaddr_count = self.next_host
                self.next_host += 1
                self.count += 1
                return record.yiaddr_count
        return None

    def _reuse_tombstone(self, chaddr: bytes) -> int:
        for record in self.records:
            if record.chaddr == chaddr:
                record.dhcp_type = MessageType.DISCOVER
                record.is_tombstone = False
                return record.yiaddr_count
        for record in self.records:
            if record.chaddr != chaddr and record.is_tombstone:
                record.chaddr = chaddr
                record.dhcp_type = MessageType.DISCOVER
                record.is_tombstone = False
                return record.yiaddr_count
        return 0

    def _release(self, chaddr: bytes) -> None:
        for record in self.records:
            if record.chaddr == chaddr:
                record.is_tombstone = True
                self.count -= 1

    @staticmethod
    def _fill_reply(msg: Message, options: Options, host: int) -> None:
        msg.op = BOOTREPLY
        if options.type == MessageType.REQUEST and options.sid != SERVER_ID:
            msg.yiaddr = _ZERO
        else:
            msg.yiaddr = IPv4Address(f"192.168.1.{host}")
        msg.ciaddr = _ZERO

    def _valid_reply(self, msg: Message, options: Options) -> bytes | None:
        reply = append_cookie(msg.to_bytes())
        lease = LEASE_TIME.to_bytes(4, "big")
        if options.type == MessageType.DISCOVER:
            reply = append_option(reply, OPT_MESSAGE_TYPE, bytes([MessageType.OFFER]))
            reply = append_option(reply, OPT_LEASE_TIME, lease)
        if options.type == MessageType.REQUEST:
            if options.sid == SERVER_ID:
                reply = append_option(reply, OPT_MESSAGE_TYPE, bytes([MessageType.ACK]))
                reply = append_option(reply, OPT_LEASE_TIME, lease)
            else:
                reply = append_option(reply, OPT_MESSAGE_TYPE, bytes([MessageType.NAK]))
        if options.type == MessageType.RELEASE:
            self._release(msg.chaddr)
            return None

        for record in self.records:
            if record.dhcp_type == 0:
                record.dhcp_type = MessageType.DISCOVER
            elif record.dhcp_type == MessageType.DISCOVER:
                record.dhcp_type = MessageType.REQUEST

        reply = append_option(reply, OPT_SERVER_ID, SERVER_ID.packed)
        return append_option(reply, OPT_END)

    @staticmethod
    def _nak_reply(msg: Message) -> bytes:
        reply = append_cookie(msg.to_bytes())
        reply = append_option(reply, OPT_MESSAGE_TYPE, bytes([MessageType.NAK]))
        reply = append_option(reply, OPT_SERVER_ID, SERVER_ID.packed)
        return append_option(reply, OPT_END)


def _open_socket(timeout: int, port: int, host: str) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(timeout if timeout > 0 else None)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def echo_server(timeout: int, port: int = 0, host: str = DEFAULT_HOST) -> None:
    """Serve one packet at a time until no packet arrives within the timeout."""
    server = DhcpServer()
    with _open_socket(timeout, port, host) as sock:
        server.reset()
        while True:
            try:
                packet, addr = sock.recvfrom(RECV_SIZE)
            except (socket.timeout, OSError):
                return
            try:
                reply = server.handle(packet)
            except ValueError:
                continue
            if reply is not None:
                sock.sendto(reply, addr)


def _receive_batch(sock: socket.socket) -> tuple[list[bytes], tuple] | None:
    packets = []
    addr: tuple = ()
    for _ in range(BATCH_SIZE):
        try:
            packet, addr = sock.recvfrom(RECV_SIZE)
        except (socket.timeout, OSError):
            return None
        packets.append(packet)
    return packets, addr


def _serve_batch(server: DhcpServer, sock: socket.socket,
                 packets: list[bytes], addr: tuple) -> None:
    for packet in packets:
        try:
            reply = server.handle(packet)
        except ValueError:
            continue
        if reply is not None:
            sock.sendto(reply, addr)


def echo_server_thread(timeout: int, port: int = 0,
                       host: str = DEFAULT_HOST) -> None:
    """Receive two batches of four packets, serving each batch in a worker thread."""
    server = DhcpServer()
    with _open_socket(timeout, port, host) as sock:
        server.reset()
        for batch_number in range(2):
            batch = _receive_batch(sock)
            if batch is None:
                return
            packets, addr = batch
            worker = threading.Thread(
                target=_serve_batch, args=(server, sock, packets, addr)
            )
            worker.start()
            worker.join()
            if batch_number == 0:
                print("Should have finished sending offers")
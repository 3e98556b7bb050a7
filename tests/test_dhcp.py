import io
from ipaddress import IPv4Address

import pytest

from dhcpserv.dhcp import (
    BOOTREPLY,
    COOKIE_BYTES,
    MAGIC_COOKIE,
    OPT_END,
    OPT_LEASE_TIME,
    OPT_MESSAGE_TYPE,
    OPT_REQUESTED_IP,
    OPT_SERVER_ID,
    HardwareType,
    Message,
    MessageType,
    Options,
    append_cookie,
    append_option,
    dump_packet,
    hardware_address_length,
    parse_options,
)


def _sample_message():
    return Message(
        op=BOOTREPLY,
        htype=HardwareType.ETH,
        hlen=6,
        xid=0x12345678,
        secs=90,
        flags=0x8000,
        ciaddr="10.0.0.1",
        yiaddr="192.168.1.3",
        chaddr=bytes([0x02, 0, 0, 0, 0, 0x01]),
    )


def test_message_size_is_bootp_header():
    assert Message.SIZE == 236
    assert len(Message().to_bytes()) == Message.SIZE


def test_message_round_trip():
    msg = _sample_message()
    assert Message.from_bytes(msg.to_bytes()) == msg


def test_message_wire_layout():
    raw = _sample_message().to_bytes()
    assert raw[0] == BOOTREPLY
    assert raw[4:8] == bytes([0x12, 0x34, 0x56, 0x78])
    assert raw[12:16] == IPv4Address("10.0.0.1").packed
    assert raw[16:20] == IPv4Address("192.168.1.3").packed
    assert raw[28:34] == bytes([0x02, 0, 0, 0, 0, 0x01])


def test_message_from_short_buffer_raises():
    with pytest.raises(ValueError):
        Message.from_bytes(bytes(Message.SIZE - 1))


def test_message_ignores_trailing_bytes():
    msg = _sample_message()
    assert Message.from_bytes(msg.to_bytes() + b"\x01\x02") == msg


def test_append_cookie_writes_magic_value():
    packet = append_cookie(b"abc")
    assert packet[:3] == b"abc"
    assert int.from_bytes(packet[3:], "big") == MAGIC_COOKIE
    assert packet[3:] == bytes([0x63, 0x82, 0x53, 0x63])


def test_append_option_layout():
    packet = append_option(b"", OPT_MESSAGE_TYPE, bytes([MessageType.OFFER]))
    assert packet == bytes([53, 1, 2])


def test_append_end_option_is_single_byte():
    assert append_option(b"x", OPT_END) == b"x\xff"


def test_append_option_rejects_long_value():
    with pytest.raises(ValueError):
        append_option(b"", OPT_REQUESTED_IP, bytes(256))


def test_append_option_rejects_bad_code():
    with pytest.raises(ValueError):
        append_option(b"", 300, b"")


def test_parse_options_round_trip():
    data = b""
    data = append_option(data, OPT_MESSAGE_TYPE, bytes([MessageType.REQUEST]))
    data = append_option(data, OPT_REQUESTED_IP, IPv4Address("192.168.1.2").packed)
    data = append_option(data, OPT_LEASE_TIME, (3600).to_bytes(4, "big"))
    data = append_option(data, OPT_SERVER_ID, IPv4Address("192.168.1.0").packed)
    data = append_option(data, OPT_END)
    opts = parse_options(data)
    assert opts == Options(
        request=IPv4Address("192.168.1.2"),
        lease=3600,
        type=MessageType.REQUEST,
        sid=IPv4Address("192.168.1.0"),
    )


def test_parse_options_skips_pad_and_stops_at_end():
    data = bytes([0, 0]) + append_option(b"", OPT_MESSAGE_TYPE, b"\x01")
    data = append_option(data, OPT_END) + append_option(b"", OPT_MESSAGE_TYPE, b"\x05")
    assert parse_options(data).type == MessageType.DISCOVER


def test_parse_options_unknown_options_ignored():
    data = append_option(b"", 12, b"hostname") + append_option(b"", OPT_END)
    assert parse_options(data) == Options()


def test_parse_options_truncated_raises():
    with pytest.raises(ValueError):
        parse_options(bytes([OPT_SERVER_ID, 4, 1, 2]))


def test_parse_options_missing_length_raises():
    with pytest.raises(ValueError):
        parse_options(bytes([OPT_SERVER_ID]))


def test_parse_options_unknown_type_kept_as_int():
    opts = parse_options(append_option(b"", OPT_MESSAGE_TYPE, b"\x09"))
    assert opts.type == 9


@pytest.mark.parametrize(
    "htype, expected",
    [
        (HardwareType.ETH, 6),
        (HardwareType.IEEE802, 6),
        (HardwareType.ARCNET, 1),
        (HardwareType.FRAME_RELAY, 2),
        (HardwareType.FIBRE, 3),
        (99, 0),
    ],
)
def test_hardware_address_length(htype, expected):
    assert hardware_address_length(htype) == expected


def test_dump_packet_short():
    out = io.StringIO()
    dump_packet(bytes(range(8)), out)
    assert out.getvalue() == " 00 01 02 03 04 05 06 07 .\n\n"


def test_dump_packet_full_line():
    out = io.StringIO()
    dump_packet(bytes(32), out)
    text = out.getvalue()
    assert text.count("00") == 32
    assert text.endswith("\n\n")
    assert text.count("\n") == 2


def test_dump_packet_empty():
    out = io.StringIO()
    dump_packet(b"", out)
    assert out.getvalue() == "\n"
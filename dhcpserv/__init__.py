"""A small loopback DHCP server with BOOTP/DHCP message helpers."""

__version__ = "0.1.0"
__all__ = ["dhcp", "format", "server", "cli"]
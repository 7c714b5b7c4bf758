"""Host and address parsing."""

from __future__ import annotations

import ipaddress
import socket


def parse_host(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Parse a literal IP address; raises ValueError otherwise."""
    return ipaddress.ip_address(host)


def parse_host_port(host_port: str) -> tuple[str, int]:
    """Resolve ``host:port`` to the first (ip, port) it maps to."""
    host, sep, port_text = host_port.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Unable to resolve host {host_port}: missing port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError as err:
        raise ValueError(f"Unable to resolve host {host_port}: invalid port") from err
    if not 0 <= port <= 65535:
        raise ValueError(f"Unable to resolve host {host_port}: invalid port")
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (OSError, UnicodeError) as err:
        raise ValueError(f"Unable to resolve host {host_port}: {err}") from err
    if not infos:
        raise ValueError(f"Unable to resolve host: {host_port}")
    address = infos[0][4]
    return address[0], address[1]
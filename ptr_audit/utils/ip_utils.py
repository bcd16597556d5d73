"""IP address utilities for reverse lookups and server addresses."""

import ipaddress
import re


IPV4_REVERSE_SUFFIX = "in-addr.arpa."
IPV6_REVERSE_SUFFIX = "ip6.arpa."
DEFAULT_DNS_PORT = 53

_SERVER_WITH_PORT = re.compile(r"^\[?(?P<ip>[^\]]+)\]?:(?P<port>[0-9]+)$")


def is_valid_ip(ip: str) -> bool:
    """Validate if string is a valid IPv4 or IPv6 address.

    Args:
        ip: IP address string to validate.

    Returns:
        bool: True if valid, False otherwise.

    Examples:
        >>> is_valid_ip("203.0.113.45")
        True
        >>> is_valid_ip("2001:db8::1")
        True
        >>> is_valid_ip("256.0.0.1")
        False
    """
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False


def reverse_query_name(
    ip: str | ipaddress.IPv4Address | ipaddress.IPv6Address,
) -> str:
    """Derive the fully-qualified reverse lookup name for an IP address.

    IPv4 octets are reversed under in-addr.arpa. IPv6 addresses are expanded
    to 32 nibbles, reversed and dot-separated under ip6.arpa.

    Args:
        ip: IP address as string or ipaddress object.

    Returns:
        str: Reverse lookup name with trailing dot.

    Raises:
        ValueError: If ip is not a valid IP address.

    Examples:
        >>> reverse_query_name("192.0.2.1")
        '1.2.0.192.in-addr.arpa.'
        >>> reverse_query_name("2001:db8::1")[:12]
        '1.0.0.0.0.0.'
    """
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        raise ValueError(f"Invalid IP address: {ip}") from None

    if isinstance(addr, ipaddress.IPv4Address):
        octets = str(addr).split(".")
        return ".".join(reversed(octets)) + "." + IPV4_REVERSE_SUFFIX

    nibbles = addr.exploded.replace(":", "")
    return ".".join(reversed(nibbles)) + "." + IPV6_REVERSE_SUFFIX


def parse_server_address(server: str) -> tuple[str, int]:
    """Parse an AXFR server address into (ip, port).

    Accepts "IP", "IP:port" and "[IPv6]:port". A bare IPv6 address without
    brackets is taken as an address with the default port.

    Args:
        server: Server address string.

    Returns:
        tuple[str, int]: Normalized IP address and port.

    Raises:
        ValueError: If the IP or port is invalid.

    Examples:
        >>> parse_server_address("192.0.2.53")
        ('192.0.2.53', 53)
        >>> parse_server_address("[2001:db8::53]:5353")
        ('2001:db8::53', 5353)
    """
    server = server.strip()
    match = None if is_valid_ip(server) else _SERVER_WITH_PORT.match(server)

    # Unbracketed IPv6 text can end in ":<digits>"; only split when the head is an IP
    if match and (server.startswith("[") or is_valid_ip(match.group("ip"))):
        ip_str = match.group("ip")
        port = int(match.group("port"))
        if not 1 <= port <= 65535:
            raise ValueError(
                f"Port should be an integer between 1 and 65535. Got: {port}"
            )
    else:
        ip_str = server.replace("[", "").replace("]", "")
        port = DEFAULT_DNS_PORT

    if not is_valid_ip(ip_str):
        raise ValueError(f"Not a valid IP address: {ip_str}")

    return str(ipaddress.ip_address(ip_str)), port


def format_server_address(ip: str, port: int) -> str:
    """Format (ip, port) for display, bracketing IPv6 addresses.

    Examples:
        >>> format_server_address("192.0.2.53", 53)
        '192.0.2.53:53'
        >>> format_server_address("2001:db8::53", 53)
        '[2001:db8::53]:53'
    """
    if ":" in ip:
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"

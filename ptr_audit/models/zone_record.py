"""Zone transfer record models."""

import ipaddress
from dataclasses import dataclass
from enum import Enum


class AddressFamily(Enum):
    """Address family of a forward address record."""

    IPV4 = "IPv4"  # A record
    IPV6 = "IPv6"  # AAAA record


ADDRESS_RECORD_TYPES = {
    "A": AddressFamily.IPV4,
    "AAAA": AddressFamily.IPV6,
}


@dataclass(frozen=True)
class ZoneRecord:
    """A single resource record from a zone transfer.

    Attributes:
        name: Owner name, fully qualified (e.g. "host1.example.com.").
        record_type: Record type mnemonic (e.g. "A", "MX").
        data: Record data in presentation format.
        ttl: Record TTL in seconds.
    """

    name: str
    record_type: str
    data: str
    ttl: int = 0


@dataclass(frozen=True)
class AddressRecord:
    """Forward address record (A/AAAA) extracted from the zone.

    Attributes:
        name: Owner name pointing at the address.
        ip: Parsed IP address.
        family: IPv4 for A records, IPv6 for AAAA records.
    """

    name: str
    ip: ipaddress.IPv4Address | ipaddress.IPv6Address
    family: AddressFamily

    @property
    def address(self) -> str:
        """Compressed text form of the IP address."""
        return str(self.ip)

"""Extraction of forward address records from a transferred zone."""

import ipaddress
from typing import Iterable, Iterator, List

from ptr_audit.models.zone_record import (
    ADDRESS_RECORD_TYPES,
    AddressFamily,
    AddressRecord,
    ZoneRecord,
)
from ptr_audit.services.logger import log_malformed_record


class AddressExtractor:
    """Filters zone records down to A/AAAA address records.

    Records of other types are dropped. A/AAAA records whose data does not
    parse as an address of the matching family are collected in
    ``malformed`` instead of being yielded.

    Example:
        >>> extractor = AddressExtractor()
        >>> addresses = list(extractor.extract(zone_records))
        >>> len(extractor.malformed)
        0
    """

    def __init__(self):
        self.malformed: List[ZoneRecord] = []

    def extract(self, records: Iterable[ZoneRecord]) -> Iterator[AddressRecord]:
        """Lazily yield address records in zone order.

        Args:
            records: Zone records in transfer order.

        Yields:
            AddressRecord: One per well-formed A/AAAA record.
        """
        for record in records:
            family = ADDRESS_RECORD_TYPES.get(record.record_type.upper())
            if family is None:
                continue

            address = self._parse(record.data, family)
            if address is None:
                self.malformed.append(record)
                log_malformed_record(record.name, record.record_type, record.data)
                continue

            yield AddressRecord(name=record.name, ip=address, family=family)

    @staticmethod
    def _parse(
        data: str, family: AddressFamily
    ) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
        try:
            if family == AddressFamily.IPV4:
                return ipaddress.IPv4Address(data.strip())
            return ipaddress.IPv6Address(data.strip())
        except ValueError:
            return None

"""Zone transfer (AXFR) client."""

import logging
import time
from typing import Iterable, Iterator

import dns.exception
import dns.message
import dns.query
import dns.rcode
import dns.rdatatype

from ptr_audit.errors import TransferMalformed, TransferRefused, TransferTimeout
from ptr_audit.models.zone_record import ZoneRecord
from ptr_audit.services.logger import log_transfer_complete
from ptr_audit.utils.ip_utils import format_server_address, parse_server_address


logger = logging.getLogger(__name__)


def iter_zone_records(messages: Iterable[dns.message.Message]) -> Iterator[ZoneRecord]:
    """Flatten AXFR response messages into zone records in wire order.

    The SOA that closes an AXFR stream is a repeat of the opening one and is
    not yielded a second time.

    Args:
        messages: AXFR response messages.

    Yields:
        ZoneRecord: One per rdata, in the order the server sent them.
    """
    seen_soa = False
    for message in messages:
        for rrset in message.answer:
            if rrset.rdtype == dns.rdatatype.SOA:
                if seen_soa:
                    continue
                seen_soa = True

            record_type = dns.rdatatype.to_text(rrset.rdtype)
            owner = rrset.name.to_text()
            for rdata in rrset:
                yield ZoneRecord(
                    name=owner,
                    record_type=record_type,
                    data=rdata.to_text(),
                    ttl=rrset.ttl,
                )


class ZoneTransferClient:
    """Performs full zone transfers over TCP using dnspython."""

    def __init__(self, timeout: float = 30.0):
        """Initialize transfer client.

        Args:
            timeout: Total AXFR timeout in seconds.
        """
        self.timeout = timeout

    def transfer(self, server: str, zone: str) -> list[ZoneRecord]:
        """Transfer a zone and return all of its records.

        Args:
            server: Server address ("IP", "IP:port" or "[IPv6]:port").
            zone: Zone name to transfer.

        Returns:
            list[ZoneRecord]: Records in transfer order.

        Raises:
            TransferRefused: Non-NOERROR rcode, FormError or connection failure.
            TransferTimeout: No complete transfer within the timeout.
            TransferMalformed: Empty or unparseable transfer.
        """
        ip, port = parse_server_address(server)
        display = format_server_address(ip, port)
        start = time.time()

        logger.info(f"Connecting to {ip} port {port} for AXFR of zone {zone}")

        try:
            messages = dns.query.xfr(
                ip,
                zone,
                port=port,
                timeout=self.timeout,
                lifetime=self.timeout,
                relativize=False,
            )
            records = list(iter_zone_records(messages))

        except dns.exception.Timeout as e:
            raise TransferTimeout(
                f"AXFR of {zone} from {display} timed out after {self.timeout}s",
                server=display,
                zone=zone,
            ) from e

        except dns.query.BadResponse as e:
            raise TransferMalformed(
                f"Bad AXFR response from {display}: {e}", server=display, zone=zone
            ) from e

        except dns.exception.FormError as e:
            # Servers commonly answer a refused AXFR with an empty, unusable response
            raise TransferRefused(
                f"DNS server at {display} refused our AXFR: {e}",
                server=display,
                zone=zone,
            ) from e

        except dns.exception.DNSException as e:
            rcode = getattr(e, "rcode", None)
            if rcode is not None:
                raise TransferRefused(
                    f"DNS server at {display} refused our AXFR "
                    f"({dns.rcode.to_text(rcode)})",
                    server=display,
                    zone=zone,
                ) from e
            raise TransferMalformed(
                f"AXFR of {zone} from {display} failed: {e}",
                server=display,
                zone=zone,
            ) from e

        except TimeoutError as e:
            raise TransferTimeout(
                f"AXFR of {zone} from {display} timed out: {e}",
                server=display,
                zone=zone,
            ) from e

        except OSError as e:
            raise TransferRefused(
                f"Could not connect to {display} for AXFR: {e}",
                server=display,
                zone=zone,
            ) from e

        if not records:
            raise TransferMalformed(
                f"AXFR of {zone} from {display} returned no answers",
                server=display,
                zone=zone,
            )

        log_transfer_complete(
            server=display,
            zone=zone,
            record_count=len(records),
            duration_ms=int((time.time() - start) * 1000),
        )
        return records

"""
ASN ownership table.

Rows follow the ip2location ASN lite CSV layout
(https://lite.ip2location.com/database-asn)::

    "ip_from","ip_to","cidr","asn","as"
    "37720064","37724159","2.63.144.0/20","201776","Miranda-Media Ltd"

Only the CIDR (column 2) and the AS name (column 4) are used.
"""

import csv
import io
import ipaddress
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from connstat.lib.address import IPAddress
from connstat.lib.errors import MalformedAsnRow
from connstat.lib.filesystem import read_source

if TYPE_CHECKING:
    from connstat.core.context import Context


NETWORK_COLUMN = 2
NAME_COLUMN = 4

_PREFIX_RE = re.compile(r"[0-9]+")

# Owner used for addresses that no range matches
OTHER_OWNER = "_other"

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


@dataclass(frozen=True)
class AsnRecord:
    """A network range and its autonomous system name."""

    network: IPNetwork
    name: str

    def contains(self, ip: IPAddress) -> bool:
        # IPv4-mapped IPv6 addresses (::ffff:a.b.c.d) match IPv4 ranges
        if ip.version == 6 and self.network.version == 4 and ip.ipv4_mapped is not None:
            return ip.ipv4_mapped in self.network
        return ip in self.network


def parse_network(value: str) -> IPNetwork:
    """
    Parse a CIDR network such as ``2.63.144.0/20``.

    A decimal prefix length is required; netmask forms such as
    ``8.8.8.0/255.255.255.0`` are rejected. Host bits are masked off, so
    ``10.1.2.3/8`` gives ``10.0.0.0/8``.

    Raises:
        ValueError: If the value is not CIDR notation
    """
    _, sep, prefix = value.partition("/")
    if not sep:
        raise ValueError(f"missing prefix length in {value!r}")
    if not _PREFIX_RE.fullmatch(prefix):
        raise ValueError(f"prefix length must be decimal digits in {value!r}")
    return ipaddress.ip_network(value, strict=False)


class AsnTable:
    """
    Ordered, read-only list of ASN ranges.

    Lookups return the first listed range containing the address, not the
    most specific one. With overlapping ranges the file order decides.
    """

    def __init__(self, records: Iterable[AsnRecord] = ()):
        self._records = tuple(records)

    @classmethod
    def load(cls, stream: Iterable[str], source: str = "<stream>") -> "AsnTable":
        """
        Load ASN rows from CSV text.

        Args:
            stream: Text stream or iterable of CSV lines
            source: Name used in error messages

        Returns:
            AsnTable with rows in file order

        Raises:
            MalformedAsnRow: If any row has a missing or invalid network
        """
        records = []
        reader = csv.reader(stream)
        for row in reader:
            if not row:
                continue
            row_number = reader.line_num
            if len(row) <= NAME_COLUMN:
                raise MalformedAsnRow(
                    f"not enough columns: {len(row)}, {row}", source, row_number, None
                )

            value = row[NETWORK_COLUMN]
            try:
                network = parse_network(value)
            except ValueError as e:
                raise MalformedAsnRow(
                    f"can not parse ip value: {value}: {e}", source, row_number, value
                ) from e

            records.append(AsnRecord(network=network, name=row[NAME_COLUMN]))

        return cls(records)

    @classmethod
    def from_path(cls, path: str, context: "Context | None" = None) -> "AsnTable":
        """
        Load an ASN table from a CSV file.

        Raises:
            SourceUnavailable: If the file can't be read
            MalformedAsnRow: If any row is invalid
        """
        content = read_source(path, context=context)
        return cls.load(io.StringIO(content, newline=""), source=path)

    @property
    def records(self) -> tuple[AsnRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def lookup(self, ip: IPAddress) -> AsnRecord | None:
        """Return the first record whose network contains ip."""
        for record in self._records:
            if record.contains(ip):
                return record
        return None

    def owner(self, ip: IPAddress) -> str:
        """Return the AS name owning ip, or OTHER_OWNER."""
        record = self.lookup(ip)
        if record is None:
            return OTHER_OWNER
        return record.name

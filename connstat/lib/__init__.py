"""Socket table, ASN table and aggregation library."""

from connstat.lib.address import decode_address, encode_address
from connstat.lib.aggregate import CountTable, Sample, aggregate
from connstat.lib.asn import OTHER_OWNER, AsnRecord, AsnTable
from connstat.lib.errors import (
    AddressError,
    ConfigError,
    ConnstatError,
    MalformedAsnRow,
    MalformedRecord,
    SourceUnavailable,
)
from connstat.lib.filesystem import read_source
from connstat.lib.sockets import SOCKET_STATES, SocketRecord, parse_socket_table

__all__ = [
    "AddressError",
    "AsnRecord",
    "AsnTable",
    "ConfigError",
    "ConnstatError",
    "CountTable",
    "MalformedAsnRow",
    "MalformedRecord",
    "OTHER_OWNER",
    "SOCKET_STATES",
    "Sample",
    "SocketRecord",
    "SourceUnavailable",
    "aggregate",
    "decode_address",
    "encode_address",
    "parse_socket_table",
    "read_source",
]

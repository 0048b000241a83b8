"""Parser for the kernel socket tables in /proc/net/tcp and /proc/net/tcp6."""

from collections.abc import Iterable
from dataclasses import dataclass

from connstat.lib.address import IPAddress, decode_address, parse_hex
from connstat.lib.errors import AddressError, MalformedRecord


# Indexed by the state code from include/net/tcp_states.h
SOCKET_STATES = (
    "UNKNOWN",
    "ESTABLISHED",
    "SYN_SENT",
    "SYN_RECV",
    "FIN_WAIT1",
    "FIN_WAIT2",
    "TIME_WAIT",
    "_close",  # CLOSE
    "CLOSE_WAIT",
    "LAST_ACK",
    "LISTEN",
    "CLOSING",
)

MIN_FIELDS = 12

REMOTE_ADDRESS_FIELD = 2
STATE_FIELD = 3


@dataclass(frozen=True)
class SocketRecord:
    """Remote endpoint and state of one socket table line."""

    remote_ip: IPAddress
    remote_port: int
    state: int

    @property
    def state_name(self) -> str:
        return state_name(self.state)


def state_name(code: int) -> str:
    """
    Look up the name of a TCP state code.

    Raises:
        ValueError: If the code is outside the state table
    """
    if not 0 <= code < len(SOCKET_STATES):
        raise ValueError(f"unknown socket state code: {code}")
    return SOCKET_STATES[code]


def parse_socket_line(line: str, source: str = "<stream>", line_number: int = 0) -> SocketRecord:
    """Parse one data line of a socket table."""
    # Skip comments
    content = line.split("#", 1)[0]

    fields = content.split()
    if len(fields) < MIN_FIELDS:
        raise MalformedRecord(
            f"not enough fields: {len(fields)}, {fields}", source, line_number, line
        )

    try:
        remote_ip, remote_port = decode_address(fields[REMOTE_ADDRESS_FIELD])
    except AddressError as e:
        raise MalformedRecord(
            f"can not parse remote address: {e}", source, line_number, line
        ) from e

    try:
        state = parse_hex(fields[STATE_FIELD], 8)
        state_name(state)
    except ValueError as e:
        raise MalformedRecord(
            f"bad socket state {fields[STATE_FIELD]!r}: {e}", source, line_number, line
        ) from e

    return SocketRecord(remote_ip=remote_ip, remote_port=remote_port, state=state)


def parse_socket_table(
    lines: Iterable[str] | str,
    source: str = "<stream>",
) -> list[SocketRecord]:
    """
    Parse /proc/net/tcp or /proc/net/tcp6 content.

    The first line is a header and is skipped without inspection. Every
    other line must decode; one malformed line fails the whole table.

    Args:
        lines: Table content as a string or an iterable of lines
        source: Name used in error messages

    Returns:
        List of SocketRecord in table order

    Raises:
        MalformedRecord: If any data line is malformed
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    records = []
    for line_number, line in enumerate(lines, start=1):
        if line_number == 1:
            continue  # Skip header
        records.append(parse_socket_line(line, source, line_number))

    return records

"""Packed hex address codec for /proc/net/tcp and /proc/net/tcp6.

The kernel prints each address as ``<hexaddr>:<hexport>``. The address is
dumped as 32-bit words in host byte order, so on little-endian machines
``127.0.0.1`` reads as ``0100007F``. IPv6 addresses are four such words,
each swapped on its own.
"""

import ipaddress
import re

from connstat.lib.errors import AddressError

IPV4_HEX_LEN = 8
IPV6_HEX_LEN = 32
_WORD_LEN = 8

_HEX_RE = re.compile(r"[0-9A-Fa-f]+")

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def parse_hex(value: str, bits: int) -> int:
    """
    Parse an unsigned hex integer that must fit in ``bits`` bits.

    Only bare hex digits are accepted: no sign, ``0x`` prefix,
    underscores or surrounding whitespace.

    Raises:
        ValueError: If the value is malformed or out of range
    """
    if not _HEX_RE.fullmatch(value):
        raise ValueError(f"invalid hex value: {value!r}")
    number = int(value, 16)
    if number >= 1 << bits:
        raise ValueError(f"hex value out of range for {bits} bits: {value!r}")
    return number


def _decode_words(hexaddr: str) -> bytes:
    packed = b""
    for i in range(0, len(hexaddr), _WORD_LEN):
        word = parse_hex(hexaddr[i:i + _WORD_LEN], 32)
        packed += word.to_bytes(4, "little")
    return packed


def decode_ip(hexaddr: str) -> IPAddress:
    """Decode the address half of a packed address."""
    try:
        if len(hexaddr) == IPV4_HEX_LEN:
            return ipaddress.IPv4Address(_decode_words(hexaddr))
        if len(hexaddr) == IPV6_HEX_LEN:
            return ipaddress.IPv6Address(_decode_words(hexaddr))
    except ValueError as e:
        raise AddressError(f"bad address {hexaddr!r}: {e}") from e
    raise AddressError(f"bad formatted address {hexaddr!r}")


def decode_address(value: str) -> tuple[IPAddress, int]:
    """
    Decode a ``<hexaddr>:<hexport>`` pair.

    Args:
        value: Address field from a socket table line

    Returns:
        Tuple of (ip address, port)

    Raises:
        AddressError: If either half is malformed
    """
    parts = value.split(":")
    if len(parts) < 2:
        raise AddressError(f"not enough fields in address {value!r}")

    ip = decode_ip(parts[0])
    try:
        port = parse_hex(parts[1], 16)
    except ValueError as e:
        raise AddressError(f"bad port in address {value!r}: {e}") from e

    return ip, port


def encode_address(ip: IPAddress | str, port: int) -> str:
    """Encode an address and port the way the kernel prints them."""
    ip = ipaddress.ip_address(ip)
    if not 0 <= port <= 0xFFFF:
        raise AddressError(f"port out of range: {port}")

    packed = ip.packed
    words = []
    for i in range(0, len(packed), 4):
        words.append(f"{int.from_bytes(packed[i:i + 4], 'little'):08X}")
    return f"{''.join(words)}:{port:04X}"

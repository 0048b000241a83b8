"""Fold socket records into per-ASN state counts."""

from collections.abc import Iterable, Iterator
from typing import NamedTuple

from connstat.lib.asn import AsnTable
from connstat.lib.sockets import SocketRecord


class Sample(NamedTuple):
    """One non-zero cell of a count table."""

    owner: str
    state: str
    count: int
    family: str


class CountTable:
    """
    Socket counts keyed by owner name, then state name.

    Cells are created on first increment, so every stored count is at
    least one. A table belongs to a single collection cycle.
    """

    def __init__(self):
        self._counts: dict[str, dict[str, int]] = {}

    def add(self, owner: str, state: str) -> None:
        """Count one socket."""
        states = self._counts.setdefault(owner, {})
        states[state] = states.get(state, 0) + 1

    def count(self, owner: str, state: str) -> int:
        return self._counts.get(owner, {}).get(state, 0)

    def total(self) -> int:
        return sum(sum(states.values()) for states in self._counts.values())

    def __len__(self) -> int:
        """Number of non-zero cells."""
        return sum(len(states) for states in self._counts.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CountTable):
            return NotImplemented
        return self._counts == other._counts

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {owner: dict(states) for owner, states in self._counts.items()}

    def samples(self, family: str) -> Iterator[Sample]:
        """Yield a Sample per cell, ordered by owner then state."""
        for owner in sorted(self._counts):
            states = self._counts[owner]
            for state in sorted(states):
                yield Sample(owner, state, states[state], family)


def aggregate(records: Iterable[SocketRecord], asn_table: AsnTable) -> CountTable:
    """
    Count sockets by remote owner and state.

    Addresses outside every ASN range are counted under OTHER_OWNER.
    """
    table = CountTable()
    for record in records:
        table.add(asn_table.owner(record.remote_ip), record.state_name)
    return table

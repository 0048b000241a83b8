"""
Socket state by ASN collector.

Loads the ASN table once, then on each collection cycle counts the
sockets in /proc/net/tcp and /proc/net/tcp6 by remote owner and state.
Implements the prometheus_client custom collector protocol, exposing
``node_netstat_sockets{asn, state, ipv}``.
"""

import time
from collections.abc import Iterator
from typing import Any

from prometheus_client.core import GaugeMetricFamily, Metric

from connstat.core.config import Config
from connstat.core.context import Context
from connstat.core.logging import CollectorLogger, get_log_path
from connstat.lib.aggregate import CountTable, Sample, aggregate
from connstat.lib.asn import AsnTable
from connstat.lib.errors import ConnstatError
from connstat.lib.filesystem import read_source
from connstat.lib.sockets import parse_socket_table


COLLECTOR_NAME = "connstat"
NAMESPACE = "node"
SUBSYSTEM = "netstat"

# Address family label -> socket table under proc_root
SOCKET_TABLES = {
    "4": "net/tcp",
    "6": "net/tcp6",
}


class NetStatCollector:
    """Counts open TCP sockets by remote ASN and state."""

    def __init__(
        self,
        asn_table: AsnTable,
        proc_root: str = "/proc",
        context: Context | None = None,
        logger: CollectorLogger | None = None,
    ):
        self.asn_table = asn_table
        self.proc_root = proc_root.rstrip("/") or "/"
        self.context = context or Context()
        self.logger = logger

    @classmethod
    def from_config(
        cls,
        config: Config,
        context: Context | None = None,
        logger: CollectorLogger | None = None,
    ) -> "NetStatCollector":
        """
        Build a collector, loading the ASN table from config.asn_file.

        Raises:
            SourceUnavailable: If the ASN file can't be read
            MalformedAsnRow: If the ASN file has an invalid row
        """
        if logger is None:
            logger = CollectorLogger(
                COLLECTOR_NAME, get_log_path(COLLECTOR_NAME, config.log_dir)
            )

        try:
            asn_table = AsnTable.from_path(config.asn_file, context=context)
        except ConnstatError as e:
            logger.error(
                "Unable to load ASN table",
                path=config.asn_file,
                error=str(e),
                kind=type(e).__name__,
            )
            raise

        logger.info("Loaded ASN table", path=config.asn_file, records=len(asn_table))
        return cls(asn_table, proc_root=config.proc_root, context=context, logger=logger)

    def _log(self, level: str, message: str, **extra: Any) -> None:
        if self.logger is not None:
            getattr(self.logger, level)(message, **extra)

    def table_path(self, family: str) -> str:
        return f"{self.proc_root}/{SOCKET_TABLES[family]}"

    def count_family(self, family: str) -> CountTable:
        """Read, parse and count one socket table."""
        path = self.table_path(family)
        content = read_source(path, context=self.context)
        records = parse_socket_table(content, source=path)
        return aggregate(records, self.asn_table)

    def collect_cycle(self) -> dict[str, CountTable]:
        """
        Run one collection cycle.

        Returns:
            Fresh CountTable per address family ("4", "6")

        Raises:
            SourceUnavailable: If a socket table can't be read
            MalformedRecord: If a socket table line is malformed
        """
        tables = {}
        try:
            for family in SOCKET_TABLES:
                tables[family] = self.count_family(family)
        except ConnstatError as e:
            self._log(
                "error",
                "Collection cycle failed",
                error=str(e),
                kind=type(e).__name__,
            )
            raise

        self._log(
            "debug",
            "Collection cycle complete",
            **{f"ipv{family}_sockets": table.total() for family, table in tables.items()},
        )
        return tables

    def samples(self) -> list[Sample]:
        """Run one cycle and flatten it, IPv4 first."""
        samples = []
        for family, table in self.collect_cycle().items():
            samples.extend(table.samples(family))
        return samples

    def collect(self) -> Iterator[Metric]:
        """Yield metrics for one scrape."""
        start = time.monotonic()
        sockets = GaugeMetricFamily(
            f"{NAMESPACE}_{SUBSYSTEM}_sockets",
            "Current os sockets",
            labels=["asn", "state", "ipv"],
        )

        success = 1
        try:
            for sample in self.samples():
                sockets.add_metric(
                    [sample.owner, sample.state, sample.family], float(sample.count)
                )
        except ConnstatError:
            # Already logged by collect_cycle
            success = 0
        else:
            yield sockets

        duration = GaugeMetricFamily(
            f"{NAMESPACE}_scrape_collector_duration_seconds",
            f"{NAMESPACE}_exporter: Duration of a collector scrape.",
            labels=["collector"],
        )
        duration.add_metric([COLLECTOR_NAME], time.monotonic() - start)
        yield duration

        succeeded = GaugeMetricFamily(
            f"{NAMESPACE}_scrape_collector_success",
            f"{NAMESPACE}_exporter: Whether a collector succeeded.",
            labels=["collector"],
        )
        succeeded.add_metric([COLLECTOR_NAME], success)
        yield succeeded

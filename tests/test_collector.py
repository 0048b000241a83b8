"""Tests for the netstat collector."""

import json

import pytest
from prometheus_client import CollectorRegistry

from connstat.collector import NetStatCollector
from connstat.core.config import Config
from connstat.core.logging import CollectorLogger
from connstat.lib.aggregate import Sample
from connstat.lib.errors import MalformedAsnRow, MalformedRecord, SourceUnavailable
from tests.conftest import MockContext, load_fixture


@pytest.fixture
def logger(tmp_path):
    with CollectorLogger("connstat", log_path=tmp_path / "connstat.jsonl") as logger:
        yield logger


def log_entries(logger):
    logger.close()
    return [json.loads(line) for line in logger.log_path.read_text().splitlines()]


@pytest.fixture
def collector(proc_context, logger):
    return NetStatCollector.from_config(Config(), context=proc_context, logger=logger)


class TestFromConfig:
    """Tests for collector construction."""

    def test_loads_asn_table(self, collector, logger):
        assert len(collector.asn_table) == 4

        entry = log_entries(logger)[0]
        assert entry["message"] == "Loaded ASN table"
        assert entry["records"] == 4

    def test_missing_asn_file(self, logger):
        context = MockContext(file_contents={})

        with pytest.raises(SourceUnavailable):
            NetStatCollector.from_config(Config(), context=context, logger=logger)

        entry = log_entries(logger)[0]
        assert entry["level"] == "error"
        assert entry["kind"] == "SourceUnavailable"

    def test_malformed_asn_file(self, logger):
        context = MockContext(
            file_contents={"/srv/asn.csv": load_fixture("asn", "asn_malformed.csv")}
        )

        with pytest.raises(MalformedAsnRow):
            NetStatCollector.from_config(
                Config(asn_file="/srv/asn.csv"), context=context, logger=logger
            )

    def test_default_logger_uses_log_dir(self, proc_context, tmp_path):
        collector = NetStatCollector.from_config(Config(log_dir=tmp_path), context=proc_context)
        collector.logger.close()

        assert collector.logger.log_path.parent.parent == tmp_path


class TestCollectCycle:
    """Tests for collect_cycle."""

    def test_counts_both_families(self, collector, proc_context):
        tables = collector.collect_cycle()

        assert list(tables) == ["4", "6"]
        assert tables["4"].total() == 6
        assert tables["4"].count("Google LLC", "TIME_WAIT") == 1
        assert tables["6"].to_dict() == {
            "_other": {"LISTEN": 1, "ESTABLISHED": 1},
            "Google LLC": {"ESTABLISHED": 1},
        }
        assert proc_context.files_read[-2:] == ["/proc/net/tcp", "/proc/net/tcp6"]

    def test_fresh_tables_each_cycle(self, collector):
        first = collector.collect_cycle()
        second = collector.collect_cycle()

        assert first["4"] is not second["4"]
        assert first["4"] == second["4"]
        assert second["4"].total() == 6

    def test_proc_root(self, logger):
        context = MockContext(
            file_contents={
                "/asn.csv": load_fixture("asn", "asn.csv"),
                "/host/proc/net/tcp": load_fixture("net", "tcp"),
                "/host/proc/net/tcp6": load_fixture("net", "tcp6"),
            }
        )
        collector = NetStatCollector.from_config(
            Config(asn_file="/asn.csv", proc_root="/host/proc/"), context=context, logger=logger
        )

        assert collector.collect_cycle()["4"].total() == 6

    def test_missing_tcp6_fails_cycle(self, collector, proc_context):
        del proc_context.file_contents["/proc/net/tcp6"]

        with pytest.raises(SourceUnavailable, match="/proc/net/tcp6"):
            collector.collect_cycle()

    def test_malformed_table_fails_cycle(self, collector, proc_context):
        proc_context.file_contents["/proc/net/tcp"] = load_fixture("net", "tcp_truncated")

        with pytest.raises(MalformedRecord, match="/proc/net/tcp:3"):
            collector.collect_cycle()

    def test_samples(self, collector):
        samples = collector.samples()

        assert samples[0].family == "4"
        assert samples[-1].family == "6"
        assert Sample("Miranda-Media Ltd", "ESTABLISHED", 1, "4") in samples
        assert Sample("_other", "ESTABLISHED", 1, "6") in samples
        assert Sample("Google LLC", "ESTABLISHED", 1, "6") in samples
        assert sum(s.count for s in samples) == 9

    def test_logs_cycle(self, collector, logger):
        collector.collect_cycle()

        entry = log_entries(logger)[-1]
        assert entry["level"] == "debug"
        assert entry["ipv4_sockets"] == 6
        assert entry["ipv6_sockets"] == 3


class TestPrometheus:
    """Tests for the prometheus_client collector protocol."""

    @pytest.fixture
    def registry(self, collector):
        registry = CollectorRegistry()
        registry.register(collector)
        return registry

    def test_socket_gauges(self, registry):
        value = registry.get_sample_value(
            "node_netstat_sockets",
            {"asn": "Google LLC", "state": "ESTABLISHED", "ipv": "4"},
        )
        assert value == 1.0

        value = registry.get_sample_value(
            "node_netstat_sockets",
            {"asn": "_other", "state": "ESTABLISHED", "ipv": "6"},
        )
        assert value == 1.0

        value = registry.get_sample_value(
            "node_netstat_sockets",
            {"asn": "Google LLC", "state": "ESTABLISHED", "ipv": "6"},
        )
        assert value == 1.0

    def test_no_zero_cells(self, registry):
        value = registry.get_sample_value(
            "node_netstat_sockets",
            {"asn": "Edgecast Inc.", "state": "LISTEN", "ipv": "4"},
        )
        assert value is None

    def test_success_gauge(self, registry):
        value = registry.get_sample_value(
            "node_scrape_collector_success", {"collector": "connstat"}
        )
        assert value == 1.0
        assert registry.get_sample_value(
            "node_scrape_collector_duration_seconds", {"collector": "connstat"}
        ) >= 0

    def test_failed_cycle_reports_no_sockets(self, registry, proc_context, logger):
        del proc_context.file_contents["/proc/net/tcp6"]

        assert registry.get_sample_value(
            "node_scrape_collector_success", {"collector": "connstat"}
        ) == 0.0
        assert registry.get_sample_value(
            "node_netstat_sockets",
            {"asn": "Google LLC", "state": "ESTABLISHED", "ipv": "4"},
        ) is None

        errors = [e for e in log_entries(logger) if e["level"] == "error"]
        assert errors[0]["kind"] == "SourceUnavailable"

    def test_recovers_after_failed_cycle(self, registry, proc_context):
        tcp6 = proc_context.file_contents.pop("/proc/net/tcp6")
        registry.get_sample_value("node_scrape_collector_success", {"collector": "connstat"})

        proc_context.file_contents["/proc/net/tcp6"] = tcp6

        assert registry.get_sample_value(
            "node_scrape_collector_success", {"collector": "connstat"}
        ) == 1.0

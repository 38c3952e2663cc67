import logging

import structlog

from cityfinder.observability.log import configure_logging, get_logger
from cityfinder.observability.metrics import MetricsRegistry, record_duration


def test_metrics_defaults_and_increments():
    metrics = MetricsRegistry()
    assert metrics.get("provider_requests") == 0
    metrics.incr("provider_requests")
    metrics.incr("provider_requests", 2)
    assert metrics.snapshot()["provider_requests"] == 3
    assert metrics.get("unknown") == 0


def test_record_duration_adds_elapsed_time():
    metrics = MetricsRegistry()
    with record_duration(metrics, "command_duration_ms"):
        pass
    assert metrics.get("command_duration_ms") >= 0
    assert "command_duration_ms" in metrics.snapshot()


def test_configure_logging_from_yaml(tmp_path):
    config = tmp_path / "logging.yaml"
    config.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "loggers:\n"
        "  cityfinder:\n"
        "    level: DEBUG\n",
        encoding="utf-8",
    )
    try:
        configure_logging(config)
        assert logging.getLogger("cityfinder").level == logging.DEBUG
    finally:
        structlog.reset_defaults()


def test_configure_logging_without_file(tmp_path):
    try:
        configure_logging(tmp_path / "missing.yaml")
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()


def test_metrics_registry_starts_with_zeroed_counters():
    snapshot = MetricsRegistry().snapshot()
    assert snapshot["forward_cache_hits"] == 0
    assert snapshot["cities_unmatched"] == 0
    assert set(snapshot.values()) == {0}


def test_cache_hit_ratio():
    metrics = MetricsRegistry()
    assert metrics.cache_hit_ratio() is None
    metrics.incr("forward_cache_hits")
    metrics.incr("forward_cache_misses")
    assert metrics.cache_hit_ratio() == 0.5


def test_loggers_route_through_stdlib_logging(capsys):
    get_logger("cityfinder.test").warning("routed", detail=1)
    assert capsys.readouterr().out == ""

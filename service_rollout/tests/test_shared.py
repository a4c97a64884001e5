"""
Tests for shared configuration, errors and logging.
"""

import pytest
import structlog

from shared.config import RolloutConfig, get_config
from shared.metrics import MetricsCollector, get_metrics_collector
from shared.errors import ConfigurationError, ErrorResponse, RolloutException, StoreConnectionError
from shared.logging import (
    add_correlation_context, add_service_context, clear_context, configure_logging, get_logger, set_request_id
)


class TestConfig:
    """Test cases for RolloutConfig."""

    def test_defaults(self, monkeypatch):
        """Test default configuration."""
        for name in ("ROLLOUT_MIGRATE", "ROLLOUT_REDIS_URL", "ROLLOUT_LEGACY_REDIS_URL"):
            monkeypatch.delenv(name, raising=False)

        config = RolloutConfig()

        assert config.redis_url == "redis://localhost:6379/0"
        assert config.migrate is False
        assert config.effective_legacy_redis_url == "redis://localhost:6379/0"

    def test_environment(self, monkeypatch):
        """Test values are read from prefixed environment variables."""
        monkeypatch.setenv("ROLLOUT_REDIS_URL", "redis://cache:6379/2")
        monkeypatch.setenv("ROLLOUT_RANDOMIZE_PERCENTAGE", "true")
        monkeypatch.setenv("ROLLOUT_ID_USER_BY", "uuid")

        config = get_config()

        assert config.redis_url == "redis://cache:6379/2"
        assert config.randomize_percentage is True
        assert config.id_user_by == "uuid"

    def test_legacy_url_override(self):
        """Test a dedicated legacy URL wins over the store URL."""
        config = RolloutConfig(legacy_redis_url="redis://legacy:6379/0")

        assert config.effective_legacy_redis_url == "redis://legacy:6379/0"


class TestErrors:
    """Test cases for error types."""

    def test_to_response(self):
        """Test exceptions convert to error responses."""
        error = RolloutException("SOME_CODE", "Something failed", {"feature": "chat"})

        assert error.to_response() == ErrorResponse(
            code="SOME_CODE", message="Something failed", details={"feature": "chat"}
        )

    def test_configuration_error(self):
        """Test configuration error code."""
        error = ConfigurationError()

        assert error.code == "CONFIGURATION_ERROR"
        assert isinstance(error, RolloutException)

    def test_store_connection_error(self):
        """Test store connection errors name the store."""
        error = StoreConnectionError("redis", "refused")

        assert error.code == "STORE_CONNECTION_ERROR"
        assert str(error) == "redis: refused"


class TestLogging:
    """Test cases for logging processors."""

    @pytest.fixture(autouse=True)
    def reset_context(self):
        """Clear correlation context around each test."""
        clear_context()
        yield
        clear_context()

    def test_service_context(self):
        """Test the service is taken from the logger name."""
        event = add_service_context(None, "info", {"logger": "rollout.engine"})

        assert event["service"] == "rollout"

    def test_correlation_context(self):
        """Test the request id is added when set."""
        request_id = set_request_id("req-1")

        event = add_correlation_context(None, "info", {})

        assert request_id == "req-1"
        assert event["request_id"] == "req-1"

    def test_no_correlation_context(self):
        """Test nothing is added without a request id."""
        assert add_correlation_context(None, "info", {}) == {}


class TestConfigureLogging:
    """Test cases for structlog configuration."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()

    def test_configure_logging(self):
        """Test configuration installs the JSON renderer."""
        configure_logging("rollout", "debug")

        processors = structlog.get_config()["processors"]
        assert add_service_context in processors
        assert add_correlation_context in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert get_logger("rollout.engine") is not None

    def test_iso_timestamp_is_kept(self):
        """Test later processors do not replace the ISO timestamp."""
        configure_logging("rollout", "info")

        processors = structlog.get_config()["processors"]
        stamper = next(p for p in processors if isinstance(p, structlog.processors.TimeStamper))
        event = {"event": "Feature checked", "logger": "rollout.engine"}
        for processor in processors[processors.index(stamper):-1]:
            event = processor(None, "info", event)

        assert isinstance(event["timestamp"], str)
        assert "T" in event["timestamp"]


class TestMetrics:
    """Test cases for MetricsCollector."""

    def test_export(self):
        """Test metrics render in the Prometheus text format."""
        metrics = MetricsCollector()
        metrics.increment_counter("rollout_store_writes_total", kind="feature")

        output = metrics.export().decode("utf-8")

        assert 'rollout_store_writes_total{kind="feature"} 1.0' in output

    def test_unknown_metric_is_ignored(self):
        """Test recording an unknown metric is a no-op."""
        metrics = MetricsCollector()

        metrics.increment_counter("unknown_total", kind="x")
        metrics.observe_histogram("unknown_seconds", 1.0)

        assert metrics.get_sample_value("unknown_total", kind="x") is None

    def test_separate_registries(self):
        """Test two collectors do not share samples."""
        first = get_metrics_collector()
        second = get_metrics_collector()

        first.increment_counter("rollout_legacy_migrations_total")

        assert first.get_sample_value("rollout_legacy_migrations_total") == 1.0
        assert second.get_sample_value("rollout_legacy_migrations_total") == 0.0

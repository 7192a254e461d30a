"""
Unit tests for settings, logging setup and metrics.
"""

import io
import json
import logging

import pytest
import structlog
from prometheus_client import REGISTRY

from flatmerkle.core.config import Settings, get_settings
from flatmerkle import __version__
from flatmerkle.core.logging import LOGGER_NAMESPACE, setup_logging
from flatmerkle.crypto.merkle import MerkleTree
from flatmerkle.metrics import TreeMetrics, get_tree_metrics


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Test default values."""
        settings = Settings()

        assert settings.HASH_ALGORITHM == "sha256"
        assert settings.HASH_SIZE is None
        assert settings.MAX_TREE_WIDTH == 2**20
        assert settings.METRICS_ENABLED is True

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings are read from the environment."""
        monkeypatch.setenv("HASH_ALGORITHM", "blake2b")
        monkeypatch.setenv("HASH_SIZE", "32")
        monkeypatch.setenv("MAX_TREE_WIDTH", "1024")

        settings = Settings()

        assert settings.HASH_ALGORITHM == "blake2b"
        assert settings.HASH_SIZE == 32
        assert settings.MAX_TREE_WIDTH == 1024

    def test_invalid_hash_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test out-of-range hash sizes fail validation."""
        monkeypatch.setenv("HASH_SIZE", "0")

        with pytest.raises(ValueError):
            Settings()

    def test_cached(self) -> None:
        """Test get_settings returns one instance."""
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for setup_logging."""

    def test_configures_structlog(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test console rendering outside production."""
        from flatmerkle.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "ENV", "development")
        setup_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_in_production(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test JSON rendering in production."""
        from flatmerkle.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "ENV", "production")
        setup_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_root_logger_untouched(self) -> None:
        """Test only the flatmerkle namespace gets a handler."""
        root = logging.getLogger()
        handlers_before = list(root.handlers)
        level_before = root.level

        setup_logging(level="WARNING", stream=io.StringIO())

        assert root.handlers == handlers_before
        assert root.level == level_before

    def test_repeat_calls_replace_handler(self) -> None:
        """Test calling twice leaves a single installed handler."""
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())

        installed = [h for h in logger.handlers if getattr(h, "_flatmerkle", False)]
        assert logger.name == LOGGER_NAMESPACE
        assert len(installed) == 1

    def test_level_argument(self) -> None:
        """Test an explicit level overrides LOG_LEVEL."""
        logger = setup_logging(level="debug", stream=io.StringIO())

        assert logger.level == logging.DEBUG

    def test_json_to_stream(self) -> None:
        """Test JSON events are written to the given stream."""
        stream = io.StringIO()
        setup_logging(level="INFO", use_json=True, stream=stream)

        structlog.get_logger("flatmerkle.tests.json_stream").info("layer built", width=4)

        event = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert event["event"] == "layer built"
        assert event["width"] == 4
        assert event["level"] == "info"
        assert event["logger"] == "flatmerkle.tests.json_stream"

    def test_build_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test tree construction emits a log record."""
        setup_logging()

        with caplog.at_level(logging.INFO):
            MerkleTree.from_leaves([b"a", b"b"])

        assert "Built Merkle tree" in caplog.text


class TestTreeMetrics:
    """Tests for TreeMetrics."""

    def test_singleton(self) -> None:
        """Test the metrics instance is shared."""
        metrics = get_tree_metrics()

        assert isinstance(metrics, TreeMetrics)
        assert metrics is get_tree_metrics()

    def test_build_recorded(self) -> None:
        """Test builds are counted per algorithm."""
        labels = {"algorithm": "sha256"}
        before = REGISTRY.get_sample_value("flatmerkle_trees_built_total", labels) or 0.0

        MerkleTree.from_leaves([b"a", b"b", b"c"])

        assert REGISTRY.get_sample_value("flatmerkle_trees_built_total", labels) == before + 1

    def test_metrics_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nothing is recorded when metrics are off."""
        from flatmerkle.crypto import merkle

        monkeypatch.setattr(merkle.settings, "METRICS_ENABLED", False)
        labels = {"algorithm": "sha256"}
        before = REGISTRY.get_sample_value("flatmerkle_trees_built_total", labels) or 0.0

        MerkleTree.from_leaves([b"a", b"b", b"c"])

        assert (REGISTRY.get_sample_value("flatmerkle_trees_built_total", labels) or 0.0) == before

    def test_library_info(self) -> None:
        """Test version and algorithm are exported when metrics are registered."""
        get_tree_metrics()

        assert REGISTRY.get_sample_value(
            "flatmerkle_info", {"version": __version__, "algorithm": "sha256"}
        ) == 1.0

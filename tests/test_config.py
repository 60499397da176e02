import json
import logging
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from fare_calculator.config import (
    FareConfig,
    ObservabilityConfig,
    get_config,
    reset_config,
)
from fare_calculator.domain.errors import ConfigurationError
from fare_calculator.logging_config import configure_logging, json_formatter, resolve_level


def test_defaults():
    config = get_config()

    assert config.directory.format == "json"
    assert config.directory.directory_path.name == "directory.json"
    assert config.build.max_workers == 1
    assert config.fare.default_policy == "svc"
    assert config.fare.discount_rate == Decimal("0.5")


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TFC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TFC_DATA_FORMAT", "text")
    monkeypatch.setenv("TFC_BUILD_MAX_WORKERS", "3")
    monkeypatch.setenv("TFC_FARE_DEFAULT_POLICY", "sjt")
    reset_config()

    config = get_config()

    assert config.directory.dir == Path(tmp_path)
    assert config.directory.transfers_path == Path(tmp_path) / "transfers.txt"
    assert config.directory.format == "text"
    assert config.build.max_workers == 3
    assert config.fare.default_policy == "sjt"


def test_config_is_cached():
    assert get_config() is get_config()


def test_discount_rate_must_be_a_fraction():
    with pytest.raises(ValidationError):
        FareConfig(discount_rate=Decimal("1.5"))


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord(
        "fare_calculator.graph", logging.INFO, __file__, 1, "Graph built", None, None
    )
    record.nodes = 5

    payload = json.loads(json_formatter().format(record))

    assert payload["event"] == "Graph built"
    assert payload["level"] == "info"
    assert payload["logger"] == "fare_calculator.graph"
    assert payload["nodes"] == 5
    assert "timestamp" in payload
    assert "lineno" not in payload


@pytest.mark.parametrize("name, expected", [("debug", logging.DEBUG), (" INFO ", logging.INFO)])
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected


def test_unknown_level_raises_configuration_error(monkeypatch):
    monkeypatch.setenv("TFC_LOG_LEVEL", "chatty")
    reset_config()

    with pytest.raises(ConfigurationError) as exc:
        configure_logging()

    assert exc.value.setting_name == "level"
    with pytest.raises(ConfigurationError):
        configure_logging(ObservabilityConfig(level="LOUD"))

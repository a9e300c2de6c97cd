"""Unit tests for plugin configuration."""

import pytest
from pydantic import ValidationError

from memorystack_openclaw import MemoryStackConfig, parse_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEMORYSTACK_API_KEY", raising=False)
    monkeypatch.delenv("MEMORYSTACK_BASE_URL", raising=False)


def test_defaults() -> None:
    config = parse_config(None)
    assert config == MemoryStackConfig()
    assert config.api_key == ""
    assert config.base_url == "https://memorystack.app"
    assert config.auto_recall is True
    assert config.auto_capture is True
    assert config.max_recall_results == 5
    assert config.debug is False


def test_camel_case_host_config() -> None:
    config = parse_config({
        "apiKey": "k",
        "baseUrl": "http://localhost:3000",
        "autoRecall": False,
        "autoCapture": False,
        "maxRecallResults": 10,
        "debug": True,
    })
    assert config.api_key == "k"
    assert config.base_url == "http://localhost:3000"
    assert config.auto_recall is False
    assert config.auto_capture is False
    assert config.max_recall_results == 10
    assert config.debug is True


def test_snake_case_accepted() -> None:
    assert parse_config({"api_key": "k", "max_recall_results": 2}).max_recall_results == 2


def test_api_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMORYSTACK_API_KEY", "env_key")
    assert parse_config({}).api_key == "env_key"
    assert parse_config({"apiKey": "explicit"}).api_key == "explicit"
    assert parse_config({"apiKey": ""}).api_key == "env_key"


def test_base_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMORYSTACK_BASE_URL", "http://staging")
    assert parse_config({}).base_url == "http://staging"
    assert parse_config({"baseUrl": "http://explicit"}).base_url == "http://explicit"


def test_none_values_use_defaults() -> None:
    assert parse_config({"autoRecall": None, "maxRecallResults": None}).max_recall_results == 5


@pytest.mark.parametrize("value", [0, 21])
def test_recall_results_bounds(value: int) -> None:
    with pytest.raises(ValidationError):
        parse_config({"maxRecallResults": value})

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from packstore import FORMAT_VERSION, ConfigError, StoreConfig, configure_logging


def test_defaults():
    cfg = StoreConfig()

    assert cfg.format_version == FORMAT_VERSION == 2
    assert cfg.max_objects is None
    assert cfg.time_budget is None
    assert cfg.validate_documents is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"format_version": 0},
        {"max_objects": 0},
        {"max_objects": -3},
        {"time_budget": 0},
        {"time_budget": "soon"},
        {"validate_documents": "yes"},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ConfigError):
        StoreConfig(**kwargs)


def test_from_env(monkeypatch):
    env = {
        "PACKSTORE_MAX_OBJECTS": "500",
        "PACKSTORE_TIME_BUDGET": "2.5",
        "PACKSTORE_VALIDATE": "off",
    }

    cfg = StoreConfig.from_env(env)

    assert cfg.max_objects == 500
    assert cfg.time_budget == 2.5
    assert cfg.validate_documents is False

    monkeypatch.delenv("PACKSTORE_MAX_OBJECTS", raising=False)
    monkeypatch.setenv("PACKSTORE_TIME_BUDGET", "1")
    assert StoreConfig.from_env().time_budget == 1.0


def test_from_env_rejects_garbage():
    with pytest.raises(ConfigError):
        StoreConfig.from_env({"PACKSTORE_MAX_OBJECTS": "lots"})


def test_json_roundtrip(tmp_path: Path):
    path = tmp_path / "store.json"
    StoreConfig(max_objects=10, time_budget=1.5).to_json(path)

    cfg = StoreConfig.from_json(path)

    assert cfg == StoreConfig(max_objects=10, time_budget=1.5)


def test_from_json_partial_and_errors(tmp_path: Path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"max_objects": 3}), encoding="utf-8")
    assert StoreConfig.from_json(path) == StoreConfig(max_objects=3)

    with pytest.raises(FileNotFoundError):
        StoreConfig.from_json(tmp_path / "missing.json")

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        StoreConfig.from_json(path)

    path.write_text("{ nope", encoding="utf-8")
    with pytest.raises(ConfigError):
        StoreConfig.from_json(path)


def _packstore_handlers(logger):
    return [h for h in logger.handlers if getattr(h, "_packstore_handler", False)]


@pytest.fixture
def packstore_logger():
    logger = logging.getLogger("packstore")
    saved_level, saved_handlers = logger.level, list(logger.handlers)
    yield logger
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


def test_configure_logging_respects_env(monkeypatch, packstore_logger):
    monkeypatch.setenv("PACKSTORE_LOG_LEVEL", "debug")

    logger = configure_logging()

    assert logger is packstore_logger
    assert logger.level == logging.DEBUG
    assert "%(name)s" in _packstore_handlers(logger)[0].formatter._fmt


def test_configure_logging_leaves_root_logger_alone(monkeypatch, packstore_logger):
    monkeypatch.delenv("PACKSTORE_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    root_level, root_handlers = root.level, list(root.handlers)

    logger = configure_logging()

    assert logger.level == logging.WARNING
    assert root.level == root_level
    assert root.handlers == root_handlers


def test_configure_logging_replaces_its_handler(packstore_logger):
    first, second = io.StringIO(), io.StringIO()
    configure_logging(logging.INFO, stream=first)
    logger = configure_logging("info", stream=second)

    assert len(_packstore_handlers(logger)) == 1
    logging.getLogger("packstore.store").info("Packed %d objects", 3)

    assert first.getvalue() == ""
    assert "[INFO] packstore.store: Packed 3 objects" in second.getvalue()

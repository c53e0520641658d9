# pylint: disable=missing-module-docstring,missing-function-docstring

from pathlib import Path

import pytest

from config import AppConfig


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("ENV", "LOG_LEVEL", "HOST", "PORT", "UPLOAD_DIR", "ZMQ_HOST", "ZMQ_PORT", "ZMQ_BIND"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig.load_from_env()

    assert config.env == "dev"
    assert config.http_port == 3001
    assert config.upload_dir == Path("uploads")
    assert config.publish_address == "tcp://127.0.0.1:5555"
    assert config.publish_bind is False


def test_publish_endpoint_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ZMQ_HOST", "10.0.0.7")
    monkeypatch.setenv("ZMQ_PORT", "6000")
    monkeypatch.setenv("ZMQ_BIND", "1")
    monkeypatch.setenv("PORT", "8080")

    config = AppConfig.load_from_env()

    assert config.publish_address == "tcp://10.0.0.7:6000"
    assert config.publish_bind is True
    assert config.http_port == 8080


def test_malformed_port_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ZMQ_PORT", "not-a-port")

    with pytest.raises(ValueError):
        AppConfig.load_from_env()

"""Tests for the uvicorn ASGI entry point lifecycle hooks."""

import importlib
import sys
from unittest.mock import AsyncMock

import pytest
import yaml

from config_loader import get_sample_config
from discovery.models import DiscoveredDevice, HardwareAddress


@pytest.fixture
def asgi_module(tmp_path, monkeypatch):
    config = get_sample_config()
    config["storage"]["path"] = str(tmp_path / "previous_devices.json")
    config["api"]["static_dir"] = str(tmp_path / "static")
    config["logging"].update({"file": None, "console_output": False})
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config))
    monkeypatch.setenv("CONFIG_FILE", str(path))

    sys.modules.pop("asgi", None)
    module = importlib.import_module("asgi")
    yield module
    sys.modules.pop("asgi", None)


async def test_shutdown_releases_radio_and_store(asgi_module, monkeypatch):
    release = AsyncMock()
    close = AsyncMock()
    monkeypatch.setattr(asgi_module.coordinator, "release_radio", release)
    monkeypatch.setattr(asgi_module.store, "close", close)

    await asgi_module.shutdown_event()

    release.assert_awaited_once()
    close.assert_awaited_once()


async def test_shutdown_disconnects_connected_device(asgi_module, monkeypatch):
    disconnect = AsyncMock()
    monkeypatch.setattr(asgi_module.driver, "disconnect", disconnect)
    asgi_module.coordinator.connected = DiscoveredDevice(
        address=HardwareAddress.parse("AA:01"), name="Speaker", handle=None
    )

    await asgi_module.shutdown_event()

    disconnect.assert_awaited_once()
    assert asgi_module.coordinator.connected is None

"""Tests for the HTTP routes built on the coordinator and Wi-Fi service."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.main_api import NexusAPI
from conftest import FakeRadioDriver
from database.store import JsonDeviceStore
from radio.base import DeviceUnreachableError
from services.connection_coordinator import ConnectionCoordinator
from wifi_service import PasswordRequiredError, WifiError

UNIT = 0.02


@pytest.fixture
def radio():
    return FakeRadioDriver([(UNIT, "aa:bb:cc:dd:ee:01", "Speaker"), (2 * UNIT, "AA:BB:CC:DD:EE:02", None)])


@pytest.fixture
def wifi():
    service = MagicMock()
    service.enabled = True
    service.scan = AsyncMock(return_value=[{"ssid": "HomeNet"}])
    service.current_connections = AsyncMock(return_value=[])
    service.connect = AsyncMock()
    service.disconnect = AsyncMock()
    return service


@pytest.fixture
def nexus(radio, tmp_path, wifi):
    store = JsonDeviceStore(str(tmp_path / "previous_devices.json"))
    coordinator = ConnectionCoordinator(radio, store, scan_duration=3 * UNIT, connect_scan_duration=3 * UNIT)
    config = {"api": {"static_dir": str(tmp_path / "missing")}}
    return NexusAPI(coordinator, wifi, config)


@pytest.fixture
def client(nexus):
    with TestClient(nexus.app) as client:
        yield client


class TestBluetoothRoutes:
    def test_scan(self, client):
        response = client.get("/api/bluetooth-devices")
        assert response.status_code == 200
        assert response.json() == [
            {"name": "Speaker", "address": "AA:BB:CC:DD:EE:01"},
            {"name": "Unknown Device", "address": "AA:BB:CC:DD:EE:02"},
        ]
        assert "X-Scan-Interrupted" not in response.headers

    def test_scan_while_busy(self, client, nexus):
        nexus.coordinator.gate.active = object()
        response = client.get("/api/bluetooth-devices")
        assert response.status_code == 429

    def test_scan_rejects_bad_duration(self, client):
        assert client.get("/api/bluetooth-devices?duration=-1").status_code == 422

    def test_connect_requires_address(self, client):
        response = client.post("/api/bluetooth-connect", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "Device address is required."

    def test_connect_cached(self, client, radio):
        client.get("/api/bluetooth-devices")
        response = client.post("/api/bluetooth-connect", json={"address": "aa:bb:cc:dd:ee:01"})
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully connected to Speaker"
        assert radio.start_calls == 1

    def test_connect_not_found(self, client):
        response = client.post("/api/bluetooth-connect", json={"address": "11:22:33:44:55:66"})
        assert response.status_code == 404

    def test_connect_failure(self, client, radio):
        radio.connect_error = DeviceUnreachableError("moved out of range")
        response = client.post("/api/bluetooth-connect", json={"address": "AA:BB:CC:DD:EE:01"})
        assert response.status_code == 500
        assert response.json()["detail"]["details"] == "moved out of range"

    def test_save_and_list(self, client):
        assert client.post("/api/bluetooth-save", json={"name": "Speaker", "address": "aa:01"}).status_code == 200
        assert client.post("/api/bluetooth-save", json={"address": "AA:01"}).status_code == 200

        response = client.get("/api/bluetooth-previous-devices")
        assert response.json() == [{"name": "Speaker", "address": "AA:01"}]

    def test_save_requires_address(self, client):
        assert client.post("/api/bluetooth-save", json={"name": "x"}).status_code == 400

    @pytest.mark.parametrize("path", ["/api/bluetooth-connect", "/api/bluetooth-save"])
    def test_blank_address_rejected(self, client, radio, path):
        response = client.post(path, json={"address": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Device address is required."
        assert radio.start_calls == 0
        assert client.get("/api/bluetooth-previous-devices").json() == []

    def test_disconnect_without_device(self, client):
        response = client.post("/api/bluetooth-disconnect")
        assert response.status_code == 200
        assert response.json()["message"] == "No Bluetooth device is connected."


class TestWifiRoutes:
    def test_scan(self, client):
        assert client.get("/api/wifi").json() == [{"ssid": "HomeNet"}]

    def test_scan_failure(self, client, wifi):
        wifi.scan.side_effect = WifiError("nmcli missing")
        response = client.get("/api/wifi")
        assert response.status_code == 500
        assert response.json()["detail"]["details"] == "nmcli missing"

    def test_connect_requires_ssid(self, client):
        assert client.post("/api/connect", json={}).status_code == 400

    def test_connect_password_required(self, client, wifi):
        wifi.connect.side_effect = PasswordRequiredError("Password is required for this secure network.")
        response = client.post("/api/connect", json={"ssid": "HomeNet"})
        assert response.status_code == 401

    def test_connect(self, client, wifi):
        response = client.post("/api/connect", json={"ssid": "HomeNet", "password": "pw"})
        assert response.status_code == 200
        wifi.connect.assert_awaited_once_with("HomeNet", "pw")

    def test_disconnect(self, client, wifi):
        assert client.post("/api/disconnect").status_code == 200
        wifi.disconnect.assert_awaited_once()


class TestSystemRoutes:
    def test_health(self, client):
        body = client.get("/api/system/health").json()
        assert body["status"] == "healthy"
        assert body["scanning"] is False
        assert body["saved_devices"] == 0
        assert body["wifi_enabled"] is True


def test_static_files_served(tmp_path, radio, wifi):
    static = tmp_path / "static"
    static.mkdir()
    (static / "index.html").write_text("<h1>Net Nexus</h1>")
    store = JsonDeviceStore(str(tmp_path / "d.json"))
    api = NexusAPI(ConnectionCoordinator(radio, store), wifi, {"api": {"static_dir": str(static)}})

    with TestClient(api.app) as client:
        assert "Net Nexus" in client.get("/").text
        assert client.get("/api/bluetooth-previous-devices").json() == []

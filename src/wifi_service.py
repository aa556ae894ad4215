"""
Wi-Fi Service Module
Scans and manages Wi-Fi connections through NetworkManager (nmcli)
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# nmcli terse mode separates fields with ':' and escapes literal colons as '\:'
_FIELD_SPLIT = re.compile(r'(?<!\\):')

SCAN_FIELDS = "SSID,BSSID,SIGNAL,MODE,SECURITY,WPA-FLAGS"
ACTIVE_FIELDS = "ACTIVE," + SCAN_FIELDS


class WifiError(Exception):
    """nmcli command failed"""


class PasswordRequiredError(WifiError):
    """Network is secured and no saved profile or password was available"""


def _split_terse(line: str) -> List[str]:
    return [part.replace('\\:', ':').replace('\\\\', '\\') for part in _FIELD_SPLIT.split(line)]


def _to_network(fields: List[str]) -> Dict[str, Any]:
    ssid, bssid, signal, mode, security, wpa_flags = fields[:6]
    return {
        "ssid": ssid,
        "bssid": bssid,
        "strength": signal,
        "networkType": mode,
        "authentication": security,
        "encryption": wpa_flags,
    }


def _is_secured(network: Dict[str, Any]) -> bool:
    security = (network.get("authentication") or "").strip()
    return security not in ("", "--", "Open")


class WifiService:
    """Manages Wi-Fi scanning and connections via nmcli"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config['wifi']
        self.enabled = self.config.get('enabled', True)
        self.iface: Optional[str] = self.config.get('iface')
        self.nmcli_path = self.config.get('nmcli_path', 'nmcli')
        self.timeout = self.config.get('command_timeout_seconds', 30)

        if not self.enabled:
            logger.info("Wi-Fi service disabled in configuration")

    async def _run(self, *args: str) -> str:
        """Run nmcli and return stdout; raises WifiError on failure"""
        if not self.enabled:
            raise WifiError("Wi-Fi service is disabled")

        cmd = [self.nmcli_path, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise WifiError(f"Failed to run {self.nmcli_path}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise WifiError(f"nmcli timed out after {self.timeout}s") from e

        out = stdout.decode(errors='replace')
        err = stderr.decode(errors='replace').strip()
        if proc.returncode != 0:
            raise WifiError(err or out.strip() or f"nmcli exited with status {proc.returncode}")
        if err:
            # nmcli prints warnings on stderr even on success
            logger.warning(f"nmcli stderr: {err}")
        return out

    def _iface_args(self) -> List[str]:
        return ["ifname", self.iface] if self.iface else []

    async def scan(self) -> List[Dict[str, Any]]:
        """Scan for nearby Wi-Fi networks"""
        out = await self._run("-t", "-f", SCAN_FIELDS, "dev", "wifi", "list",
                              *self._iface_args(), "--rescan", "yes")
        networks = []
        for line in out.splitlines():
            if not line.strip():
                continue
            fields = _split_terse(line)
            if len(fields) < 6 or not fields[0]:
                continue
            networks.append(_to_network(fields))
        logger.info(f"Wi-Fi scan found {len(networks)} networks")
        return networks

    async def current_connections(self) -> List[Dict[str, Any]]:
        """Networks the Wi-Fi interface is currently associated with"""
        out = await self._run("-t", "-f", ACTIVE_FIELDS, "dev", "wifi", "list", *self._iface_args())
        connections = []
        for line in out.splitlines():
            fields = _split_terse(line)
            if len(fields) < 7 or fields[0] != "yes":
                continue
            connections.append(_to_network(fields[1:]))
        return connections

    async def connect(self, ssid: str, password: Optional[str] = None) -> None:
        """
        Connect to a network. Without a password a direct connect is tried first,
        which works for open networks and networks with a saved profile.
        """
        if password:
            await self._run("dev", "wifi", "connect", ssid, "password", password, *self._iface_args())
            logger.info(f"Successfully initiated connection to {ssid}")
            return

        try:
            await self._run("dev", "wifi", "connect", ssid, *self._iface_args())
        except WifiError as e:
            networks = await self.scan()
            network = next((n for n in networks if n["ssid"] == ssid), None)
            if network and _is_secured(network):
                raise PasswordRequiredError("Password is required for this secure network.") from e
            raise
        logger.info(f"Successfully initiated connection to {ssid}")

    async def _wifi_device(self) -> str:
        if self.iface:
            return self.iface
        out = await self._run("-t", "-f", "DEVICE,TYPE", "dev")
        for line in out.splitlines():
            fields = _split_terse(line)
            if len(fields) >= 2 and fields[1] == "wifi":
                return fields[0]
        raise WifiError("No Wi-Fi interface found")

    async def disconnect(self) -> None:
        """Disconnect the Wi-Fi interface from its current network"""
        device = await self._wifi_device()
        await self._run("dev", "disconnect", device)
        logger.info(f"Disconnected {device} from the Wi-Fi network")

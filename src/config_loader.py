"""
Configuration loader for the Net Nexus portal
Loads and validates configuration from YAML files
"""

import yaml
import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('json', 'postgres')


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        # Validate required sections
        _validate_config(config)

        # Apply defaults
        config = _apply_defaults(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


def _validate_config(config: Dict) -> None:
    """Validate that required configuration sections exist"""
    required_sections = ['bluetooth', 'storage']

    for section in required_sections:
        if section not in config or config[section] is None:
            raise ValueError(f"Missing required configuration section: {section}")

    # Validate bluetooth durations
    bluetooth = config['bluetooth']
    for field in ('scan_duration_seconds', 'connect_scan_timeout_seconds', 'max_scan_duration_seconds'):
        if field in bluetooth:
            value = bluetooth[field]
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"bluetooth.{field} must be a positive number, got {value!r}")

    # Validate storage backend
    storage = config['storage']
    backend = storage.get('backend', 'json')
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"storage.backend must be one of {STORAGE_BACKENDS}, got {backend!r}")

    if backend == 'postgres':
        db = storage.get('postgres') or {}
        required_db_fields = ['host', 'port', 'database', 'username', 'password']
        for field in required_db_fields:
            if field not in db:
                raise ValueError(f"Missing required storage.postgres field: {field}")


def _apply_section_defaults(config: Dict, section: str, defaults: Dict) -> None:
    if section not in config or config[section] is None:
        config[section] = {}
    for key, default_value in defaults.items():
        if key not in config[section]:
            config[section][key] = default_value


def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Bluetooth defaults
    _apply_section_defaults(config, 'bluetooth', {
        'scan_duration_seconds': 5,
        'connect_scan_timeout_seconds': 7,
        'max_scan_duration_seconds': 30,
        'connect_timeout_seconds': 20,
    })

    # Wi-Fi defaults
    _apply_section_defaults(config, 'wifi', {
        'enabled': True,
        'iface': None,               # Use the first available Wi-Fi interface
        'nmcli_path': 'nmcli',
        'command_timeout_seconds': 30,
    })

    # Storage defaults
    _apply_section_defaults(config, 'storage', {
        'backend': 'json',
        'path': 'previous_devices.json',
    })

    # API defaults
    _apply_section_defaults(config, 'api', {
        'host': '0.0.0.0',
        'port': 3000,
        'static_dir': 'static',
    })

    # Logging defaults
    _apply_section_defaults(config, 'logging', {
        'level': 'INFO',
        'file': 'logs/net_nexus.log',
        'console_output': True,
        'timezone': 'UTC',
    })

    return config


class LocalTimeFormatter(logging.Formatter):
    """Formatter that renders timestamps in the configured timezone"""

    def __init__(self, fmt=None, timezone: str = 'UTC'):
        super().__init__(fmt)
        self.tz = pytz.timezone(timezone)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')


def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    timezone = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = LocalTimeFormatter(log_format, timezone)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={timezone}, console={log_config.get('console_output', True)}, file={log_file}")


def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "bluetooth": {
            "scan_duration_seconds": 5,
            "connect_scan_timeout_seconds": 7,
            "max_scan_duration_seconds": 30,
            "connect_timeout_seconds": 20
        },
        "wifi": {
            "enabled": True,
            "iface": None,
            "nmcli_path": "nmcli",
            "command_timeout_seconds": 30
        },
        "storage": {
            "backend": "json",  # or "postgres"
            "path": "previous_devices.json",
            "postgres": {
                "host": "localhost",
                "port": 5432,
                "database": "net_nexus",
                "username": "postgres",
                "password": "postgres"
            }
        },
        "api": {
            "host": "0.0.0.0",
            "port": 3000,
            "static_dir": "static"
        },
        "logging": {
            "level": "INFO",
            "file": "logs/net_nexus.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }

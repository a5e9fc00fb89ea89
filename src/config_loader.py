"""
Configuration loader for the Orion inventory client
Loads and validates configuration from YAML files
"""

import yaml
import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

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
    if 'swis' not in config:
        raise ValueError("Missing required configuration section: swis")

    swis = config['swis']
    required_swis_fields = ['server', 'username', 'password']
    for field in required_swis_fields:
        if not swis.get(field):
            raise ValueError(f"Missing required swis field: {field}")

    # Validate discovery section if present
    discovery = config.get('discovery', {})
    interval = discovery.get('poll_interval_seconds')
    if interval is not None and interval <= 0:
        raise ValueError("discovery.poll_interval_seconds must be positive")

    _validate_swis_ssl(swis)

def _validate_swis_ssl(swis_config: Dict) -> None:
    """Validate SWIS SSL configuration"""
    ssl_verify = swis_config.get('ssl_verify', False)
    ca_cert_path = swis_config.get('ca_cert_path')

    if ssl_verify and ca_cert_path:
        cert_path = Path(ca_cert_path)
        if not cert_path.exists():
            logger.warning(f"SSL CA certificate not found: {ca_cert_path}")

    if not ssl_verify:
        logger.warning("SWIS certificate verification disabled - Orion ships a self-signed certificate by default")

def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # SWIS connection defaults
    swis_defaults = {
        'port': 17778,
        'ssl_verify': False,
        'ca_cert_path': None,
        'timeout_seconds': 30
    }
    for key, default_value in swis_defaults.items():
        if key not in config['swis']:
            config['swis'][key] = default_value

    # Discovery job defaults
    if 'discovery' not in config:
        config['discovery'] = {}
    discovery_defaults = {
        'engine_id': 1,
        'poll_interval_seconds': 5,
        'poll_timeout_seconds': None,       # None: bounded only by job_timeout_seconds on the server
        'job_timeout_seconds': 3600,
        'search_timeout_ms': 5000,
        'snmp_timeout_ms': 5000,
        'snmp_retries': 2,
        'snmp_port': 161,
        'repeat_interval_ms': 1800,
        'hop_count': 0,
        'preferred_snmp_version': 'SNMP2c',
        'disable_icmp': False,
        'allow_duplicate_nodes': False,
        'auto_import': True,
        'delete_profile_after_discovery': True,
        'wmi_retries': 1,
        'wmi_retry_interval_ms': 1000
    }
    for key, default_value in discovery_defaults.items():
        if key not in config['discovery']:
            config['discovery'][key] = default_value

    # Interface import policy defaults
    if 'interfaces' not in config:
        config['interfaces'] = {}
    interface_defaults = {
        'auto_import_status': ['Up', 'Down', 'Shutdown'],
        'auto_import_vlan_port_types': ['Trunk', 'Access', 'Unknown'],
        'auto_import_virtual_types': ['Physical', 'Virtual', 'Unknown'],
        'auto_import_expression_filter': []
    }
    for key, default_value in interface_defaults.items():
        if key not in config['interfaces']:
            config['interfaces'][key] = default_value

    # Logging defaults
    if 'logging' not in config:
        config['logging'] = {}
    logging_defaults = {
        'level': 'INFO',
        'file': None,
        'console_output': True,
        'timezone': 'UTC'
    }
    for key, default_value in logging_defaults.items():
        if key not in config['logging']:
            config['logging'][key] = default_value

    return config

def get_swis_ssl_config(config: Dict) -> Dict[str, Any]:
    """Get SSL configuration for SWIS connections"""
    swis = config.get('swis', {})
    return {
        'ssl_verify': swis.get('ssl_verify', False),
        'ca_cert_path': swis.get('ca_cert_path'),
        'timeout_seconds': swis.get('timeout_seconds', 30)
    }


class TimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in a configured timezone"""

    def __init__(self, fmt=None, tz_name: str = 'UTC'):
        super().__init__(fmt)
        self.tz = pytz.timezone(tz_name)

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
    tz_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, tz_name)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[]
    )

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logging.getLogger().addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={tz_name}, console={log_config.get('console_output', True)}, file={log_file}")

def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "swis": {
            "server": "orion.example.com",
            "port": 17778,
            "username": "admin",
            "password": "changeme",
            "ssl_verify": False,                 # Orion default certificate is self-signed
            "ca_cert_path": None,
            "timeout_seconds": 30
        },
        "discovery": {
            "engine_id": 1,
            "poll_interval_seconds": 5,
            "poll_timeout_seconds": None,
            "job_timeout_seconds": 3600,
            "snmp_retries": 2,
            "auto_import": True,
            "delete_profile_after_discovery": True
        },
        "interfaces": {
            "auto_import_status": ["Up", "Down", "Shutdown"],
            "auto_import_vlan_port_types": ["Trunk", "Access", "Unknown"],
            "auto_import_virtual_types": ["Physical", "Virtual", "Unknown"]
        },
        "logging": {
            "level": "INFO",
            "file": "logs/orion_inventory.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }

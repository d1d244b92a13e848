"""
Configuration for the utxo-trie command line tools.
"""

import json
from pathlib import Path

from .contract import NETWORK_IDS, PLUTUS_VERSIONS

DEFAULT_CONFIG = {
    "network": "mainnet",
    "plutus_version": 2,
    "compiled_code": None,
    "blueprint": None,
    "validator_title": "trie.main",
    "min_lovelace": 2000000,
    "log_level": "INFO",
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_config_path(config_path=None):
    """Get the path to the configuration file."""
    if config_path:
        return Path(config_path)

    local_config = Path("utxo-trie.json")
    user_config = Path.home() / ".config/utxo-trie/config.json"

    if local_config.exists():
        return local_config
    return user_config


def _read_config_file(config_file):
    with open(config_file, 'r') as f:
        return json.load(f)


def load_config(config_path=None):
    """Load configuration from file, merged over the defaults."""
    config_file = get_config_path(config_path)

    if not config_file.exists():
        return DEFAULT_CONFIG.copy()

    try:
        user_config = _read_config_file(config_file)
    except (json.JSONDecodeError, IOError) as e:
        raise RuntimeError(f"Failed to load config from {config_file}: {e}")

    config = DEFAULT_CONFIG.copy()
    config.update(user_config)
    return config


def validate_config(config):
    """Validate configuration values."""
    if config.get("network") not in NETWORK_IDS:
        raise ValueError("network must be one of: " + ", ".join(NETWORK_IDS))

    if config.get("plutus_version") not in PLUTUS_VERSIONS.values():
        raise ValueError("plutus_version must be 1, 2 or 3")

    if config.get("compiled_code") is not None:
        try:
            bytes.fromhex(config["compiled_code"])
        except (TypeError, ValueError):
            raise ValueError("compiled_code must be a hex string")

    if config.get("blueprint") is not None and not isinstance(config["blueprint"], str):
        raise ValueError("blueprint must be a path")

    min_lovelace = config.get("min_lovelace")
    if not isinstance(min_lovelace, int) or isinstance(min_lovelace, bool) or min_lovelace <= 0:
        raise ValueError("min_lovelace must be a positive integer")

    if config.get("log_level") not in LOG_LEVELS:
        raise ValueError("log_level must be one of: " + ", ".join(LOG_LEVELS))

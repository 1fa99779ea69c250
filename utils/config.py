"""
Configuration management for the exporter.
"""

import copy
import json
import logging
import os
import sys
from pathlib import Path

# Default configuration
DEFAULT_CONFIG = {
    "export": {
        "endianness": "big",
        "max_workers": None,
        "show_progress": True
    },
    "logging": {
        "debug": False,
        "log_to_file": True
    }
}


def get_config_path(custom_path=None):
    """Get the path to the configuration file."""
    if custom_path:
        return Path(custom_path)

    if sys.platform == 'win32':
        config_dir = Path(os.path.expandvars('%APPDATA%')) / "mrc2tif"
    else:
        config_dir = Path(os.path.expanduser('~')) / ".mrc2tif"

    return config_dir / "config.json"


def load_config(custom_path=None):
    """Load configuration from file or return defaults if the file doesn't exist."""
    logger = logging.getLogger('mrc2tif')
    config_path = get_config_path(custom_path)

    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)

            if not isinstance(loaded_config, dict):
                raise ValueError("top level must be a JSON object")

            _recursive_update(config, loaded_config)
            logger.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration: {e}")
            logger.info("Using default configuration")
    else:
        logger.debug(f"Configuration file not found at {config_path}, using defaults")

    return config


def save_config(config, custom_path=None):
    """Save configuration to file."""
    logger = logging.getLogger('mrc2tif')
    config_path = get_config_path(custom_path)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logger.info(f"Configuration saved to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Error saving configuration: {e}")
        return False


def _recursive_update(d, u):
    """Recursively update a nested dictionary."""
    for k, v in u.items():
        if isinstance(v, dict) and k in d and isinstance(d[k], dict):
            _recursive_update(d[k], v)
        else:
            d[k] = v

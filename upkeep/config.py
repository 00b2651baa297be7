#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Optional

import logging
import sys

from .exit_codes import ConfigError

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(levelname)s: %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_console_handler = logging.StreamHandler(sys.stderr)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=CONSOLE_FORMAT,
    handlers=[
        _console_handler # Default to stderr
    ]
)
logger = logging.getLogger("upkeep")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None,
                      console_format: str = CONSOLE_FORMAT,
                      file_format: str = FILE_FORMAT) -> Optional[Path]:
    """
    Point the upkeep logger at its sinks: stderr, and optionally a log file.

    The console handler honours ``level``. The file handler always records
    DEBUG so command output lands in the log like ``tee -a`` did, while the
    terminal stays readable.

    Returns:
        The resolved log file path, or None when only stderr is used.
    """
    _console_handler.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    _console_handler.setFormatter(logging.Formatter(console_format))

    # Replace any file sink from a previous call
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    logging.getLogger().setLevel(logging.DEBUG)
    logger.setLevel(logging.DEBUG)

    if not log_file:
        return None

    path = Path(log_file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Cannot write log file {path}: {e}")
        return None
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(file_format, datefmt=FILE_DATE_FORMAT))
    logger.addHandler(file_handler)
    return path


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. UPKEEP_CONFIG environment variable
    2. ~/.upkeep/ directory
    """
    # Check for environment variable override
    if 'UPKEEP_CONFIG' in os.environ:
        path = Path(os.environ['UPKEEP_CONFIG'])
        if path.exists():
            return path

    upkeep_dir = Path.home() / '.upkeep'
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = upkeep_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return upkeep_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                import yaml
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)
        except Exception as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        # Merge file config with defaults
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config, config_path: Optional[Path] = None):
    """Save configuration to file."""
    config_path = config_path or get_config_path()

    # Create directory if it doesn't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() in ['.toml']:
        # tomllib is read-only
        import toml
        with open(config_path, 'w') as f:
            toml.dump(config, f)
    elif config_path.suffix.lower() in ['.yaml', '.yml']:
        import yaml
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        # Default to JSON format
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "logging": {
            "level": "INFO",
            "file": "",
        },
        "nvm": {
            "repository": "https://github.com/nvm-sh/nvm.git",
            "directory": "~/.nvm",
            "remote": "origin",
            "markers": "v",       # Accepted tag marker letters; empty accepts any letter
        },
        "node": {
            "lts": True,
        },
        "workstation": {
            "brew": True,
            "npm": True,
            "nvm": True,
            "node": True,
        },
        "pi": {
            "log_file": "/var/log/upkeep.log",
            "require_root": True,
            "full_upgrade": True,
            "pihole": True,
            "disk_path": "/",
            "disk_threshold_percent": 80,
            "temperature_threshold_c": 80,
            "sshd_config": "/etc/ssh/sshd_config",
            "reboot_required_file": "/var/run/reboot-required",
            "os_release_file": "/etc/os-release",
            "loadavg_file": "/proc/loadavg",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: UPKEEP_SECTION_KEY
    For example: UPKEEP_PI_DISK_THRESHOLD_PERCENT=90
    """
    env_prefix = "UPKEEP_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == 'UPKEEP_CONFIG':
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            # At the end of the env var: this is the key to set
            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                # Env var is longer than the config path
                break

    return config

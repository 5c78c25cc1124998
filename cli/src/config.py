#!/usr/bin/env python3
"""
Configuration loader for gscp settings
"""
import logging
import os
from pathlib import Path

import yaml

from errors import ConfigError

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_MULTIPLE = 256 * 1024
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

DEFAULTS = {
    'timeout_seconds': 120,
    'project': None,
    'ca_bundle': None,
    'chunk_size': None,
    'log_level': 'WARNING',
}


def get_config_paths():
    """Get possible config file locations, in lookup order"""
    paths = [
        Path.home() / ".gscp" / "config.yaml",
        Path.home() / ".config" / "gscp" / "config.yaml",
        # Environment variable override
        os.environ.get('GSCP_CONFIG'),
        # Local (convenient for dev)
        "config.yaml"
    ]
    return [p for p in paths if p is not None]


def load_config(config_path=None):
    """Load configuration from YAML file, return None if not found"""
    if config_path:
        paths = [config_path]
    else:
        paths = get_config_paths()

    for path in paths:
        if path and os.path.exists(path):
            try:
                with open(path, 'r') as f:
                    config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Error loading config from %s: %s", path, e)
                continue
            if not isinstance(config, dict):
                logger.warning("Ignoring config %s: top level is not a mapping", path)
                continue
            logger.debug("Loaded config from: %s", path)
            return config

    logger.debug("No config file found, using defaults")
    return None


def validate_config(config):
    """Validate configuration values, returns (ok, issues)"""
    issues = []

    for key in config:
        if key not in DEFAULTS:
            issues.append(f"Unknown setting '{key}'")

    timeout = config.get('timeout_seconds')
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            issues.append("'timeout_seconds' must be a non-negative number")

    for key in ('project', 'ca_bundle'):
        value = config.get(key)
        if value is not None and not isinstance(value, str):
            issues.append(f"'{key}' must be a string")

    ca_bundle = config.get('ca_bundle')
    if isinstance(ca_bundle, str) and not os.path.isfile(os.path.expanduser(ca_bundle)):
        issues.append(f"'ca_bundle' file not found: {ca_bundle}")

    chunk_size = config.get('chunk_size')
    if chunk_size is not None:
        if (isinstance(chunk_size, bool) or not isinstance(chunk_size, int)
                or chunk_size <= 0 or chunk_size % UPLOAD_CHUNK_MULTIPLE):
            issues.append(f"'chunk_size' must be a positive multiple of {UPLOAD_CHUNK_MULTIPLE}")

    log_level = config.get('log_level')
    if log_level is not None and str(log_level).upper() not in LOG_LEVELS:
        issues.append(f"'log_level' must be one of {', '.join(LOG_LEVELS)}")

    return not issues, issues


def get_settings(config_path=None):
    """Return validated settings with defaults filled in"""
    config = load_config(config_path) or {}

    ok, issues = validate_config(config)
    if not ok:
        raise ConfigError("Invalid configuration: " + "; ".join(issues))

    settings = dict(DEFAULTS)
    settings.update({k: v for k, v in config.items() if v is not None})
    if settings['ca_bundle']:
        settings['ca_bundle'] = os.path.expanduser(settings['ca_bundle'])
    settings['log_level'] = str(settings['log_level']).upper()
    return settings

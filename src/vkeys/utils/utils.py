# vkeys/utils/utils.py
"""
vkeys.utils.utils
=================

Application configuration for vkeys.

- An embedded default configuration (`DEFAULT_CONFIG`) that always lets the
  application start.
- The user configuration `config.toml` in the configuration directory,
  merged recursively over the defaults.
- First-run creation of the configuration directory and its `.env` template.

The configuration directory is `~/.config/vkeys`, or the directory named by
the VKEYS_CONFIG_DIR environment variable.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("vkeys")

CONFIG_DIR_ENV = "VKEYS_CONFIG_DIR"

ENV_TEMPLATE = """# Environment for vkeys.
# Set VKEYS_KEYTRACE=1 to record every decoded key in keytrace.log.
VKEYS_KEYTRACE=
"""

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "file_level": "INFO",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
        "log_dir": "",
    },
    "keys": {
        # Relative paths are resolved against the configuration directory.
        "file": "keys",
        "cmds_per_line": 6,
        "escdelay": 25,
    },
}


def get_config_dir() -> Path:
    """Return the vkeys configuration directory (not created)."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "vkeys"


def ensure_user_config_exists() -> None:
    """Creates the configuration directory and the `.env` template if missing."""
    try:
        config_dir = get_config_dir()
        config_dir.mkdir(parents=True, exist_ok=True)

        user_env_path = config_dir / ".env"
        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")
    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Loads the embedded defaults and merges the user's `config.toml` over them.
    An unparsable user file is logged and ignored.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = get_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def get_keys_file_path(config: Dict[str, Any]) -> Path:
    """Return the absolute path of the keys file named in *config*."""
    keys_file = Path(str(config.get("keys", {}).get("file", "keys"))).expanduser()
    if not keys_file.is_absolute():
        keys_file = get_config_dir() / keys_file
    return keys_file


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result

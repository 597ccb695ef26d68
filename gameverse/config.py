"""
Configuration Loader for GameVerse

Reads from config.json (plus .env / environment overrides) and provides a
simple interface for accessing settings. Defaults to sensible values if
config.json is missing.

Usage:
    from gameverse.config import get_config
    config = get_config()
    db_path = config.get("storage.db_path")
"""

# ============================================================================
# 1) IMPORTS
# ============================================================================
import copy
import json
import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv

from gameverse import policy

# ============================================================================
# 2) MODULE LOGGER
# ============================================================================
logger = logging.getLogger(__name__)

# ============================================================================
# 3) CONFIG WRAPPER (DOT-NOTATION ACCESS)
# ============================================================================
class Config:
    """Simple config wrapper with dot-notation access."""

    def __init__(self, data: dict):
        """Initialize with config dict."""
        self._data = data

    # 3.1) Dot-notation getter
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation.

        Examples:
            config.get("storage.db_path")
            config.get("voice.lang")
            config.get("nonexistent.key", "default_value")

        Args:
            key: Dot-separated config path
            default: Default value if key not found

        Returns:
            Config value or default
        """
        keys = key.split(".")
        value = self._data

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    # 3.2) Dict-style getter
    def __getitem__(self, key: str) -> Any:
        """Allow dict-style access."""
        return self.get(key)


# ============================================================================
# 4) DEFAULT CONFIGURATION (FALLBACK)
# ============================================================================
_DEFAULT_CONFIG = {
    "system": {
        "log_level": "INFO",
        "debug_mode": False,
    },
    "storage": {
        "backend": "sqlite",          # "sqlite" | "memory"
        "db_path": "data/gameverse.db",
        "data_key": "gameverse-data",
        "permission_key": "micPermissionStatus",
        "legacy_streak_key": "rps-streak",
    },
    "voice": {
        "lang": "en-US",
        "wake_prompt": "How can I help you?",
        "max_consecutive_errors": policy.MAX_CONSECUTIVE_ERRORS,
        "backoff_base_seconds": policy.BACKOFF_BASE_SECONDS,
        "backoff_cap_seconds": policy.BACKOFF_CAP_SECONDS,
        "restart_after_end_seconds": policy.RESTART_AFTER_END_SECONDS,
        "manual_restart_delay_seconds": policy.MANUAL_RESTART_DELAY_SECONDS,
        "command_prompt_delay_seconds": policy.COMMAND_PROMPT_DELAY_SECONDS,
        "wake_cooldown_seconds": policy.WAKE_COOLDOWN_SECONDS,
    },
    "speech": {
        "rate": policy.SPEECH_RATE,
        "pitch": policy.SPEECH_PITCH,
        "volume": policy.SPEECH_VOLUME,
    },
    "dispatcher": {
        "navigation_delay_seconds": policy.NAVIGATION_DELAY_SECONDS,
        "close_delay_seconds": policy.CLOSE_DELAY_SECONDS,
    },
    "chat": {
        "history_limit": policy.CHAT_HISTORY_LIMIT,
        "greeting": "Hi! I'm your GameVerse Buddy. How can I help you today?",
    },
}

# Environment variable -> dotted config key
_ENV_OVERRIDES = {
    "GAMEVERSE_LOG_LEVEL": "system.log_level",
    "GAMEVERSE_STORAGE_BACKEND": "storage.backend",
    "GAMEVERSE_DB_PATH": "storage.db_path",
    "GAMEVERSE_VOICE_LANG": "voice.lang",
}

# ============================================================================
# 5) CONFIG SINGLETON
# ============================================================================
_config_instance: Optional[Config] = None

# ============================================================================
# 6) RUNTIME OVERRIDES (NON-PERSISTENT)
# ============================================================================
_RUNTIME_OVERRIDES_DEFAULT = {
    "theme": "light",
    "speech_volume": policy.SPEECH_VOLUME,
    "speech_muted": False,
}
_runtime_overrides = dict(_RUNTIME_OVERRIDES_DEFAULT)


# ============================================================================
# 7) LOAD / GET CONFIG
# ============================================================================
def load_config(config_path: str = "config.json", env_file: Optional[str] = None) -> Config:
    """
    Load configuration from JSON file, then apply environment overrides.

    Falls back to defaults if file not found or on error.

    Args:
        config_path: Path to config.json
        env_file: Optional .env file (defaults to python-dotenv's lookup)

    Returns:
        Config instance
    """
    global _config_instance

    config_data = copy.deepcopy(_DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)
                # Deep merge user config over defaults
                _merge_dicts(config_data, user_config)
                logger.info(f"[Config] Loaded from {config_path}")
        except (OSError, ValueError) as e:
            logger.warning(f"[Config] Failed to load {config_path}: {e}, using defaults")
    else:
        logger.debug(f"[Config] No config file at {config_path}, using defaults")

    load_dotenv(env_file, override=False)
    _apply_env_overrides(config_data)

    _config_instance = Config(config_data)
    return _config_instance


def get_config() -> Config:
    """
    Get current config instance (lazy load if needed).

    Returns:
        Config instance
    """
    global _config_instance
    if _config_instance is None:
        load_config()
    return _config_instance


def set_config(config: Optional[Config]) -> None:
    """Replace the global config (used in testing)."""
    global _config_instance
    _config_instance = config


# ============================================================================
# 8) OVERRIDE ACCESSORS
# ============================================================================
def get_runtime_overrides() -> dict:
    return _runtime_overrides


def set_runtime_override(key: str, value) -> None:
    _runtime_overrides[key] = value


def clear_runtime_overrides() -> None:
    _runtime_overrides.clear()
    _runtime_overrides.update(_RUNTIME_OVERRIDES_DEFAULT)


# ============================================================================
# 9) HELPERS
# ============================================================================
def _apply_env_overrides(config_data: dict) -> None:
    for env_name, dotted in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None or value == "":
            continue
        section, key = dotted.split(".", 1)
        config_data.setdefault(section, {})[key] = value
        logger.debug(f"[Config] {dotted} overridden by {env_name}")


def _merge_dicts(base: dict, override: dict) -> None:
    """
    Deep merge override dict into base dict (modifies base in place).

    Args:
        base: Base dict to merge into
        override: Dict with values to override
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dicts(base[key], value)
        else:
            base[key] = value

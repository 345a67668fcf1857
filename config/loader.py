"""Configuration loader for the chat gateway

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, List
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigLoader:
    """Resolves settings from the environment, a .env file and defaults"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to '.env' in the current directory.
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        if self.env_path.exists():
            # Real environment variables keep precedence over the file
            load_dotenv(dotenv_path=self.env_path, override=False)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value with priority: env > default

        The raw environment string is coerced to the type of ``default``
        (bool, int or float). Unparsable numbers fall back to the default.
        """
        env_value = os.getenv(env_var)
        if env_value is None:
            if isinstance(default, str) and default.startswith("~/"):
                return str(Path(default).expanduser())
            return default

        # bool must be checked before int (bool is a subclass of int)
        if isinstance(default, bool):
            return env_value.strip().lower() in _TRUE_VALUES
        if isinstance(default, int):
            try:
                return int(env_value)
            except ValueError:
                logger.warning(f"Failed to parse {env_var}={env_value} as int, using default: {default}")
                return default
        if isinstance(default, float):
            try:
                return float(env_value)
            except ValueError:
                logger.warning(f"Failed to parse {env_var}={env_value} as float, using default: {default}")
                return default
        return env_value


_config_loader = None


def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_model_catalog(models_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Load extra model entries from a models.json file

    The file looks like ``{"models": [{"id": "gpt-4o", "max_output_tokens": 16384}]}``.

    Args:
        models_path: Path to the catalog file. Relative paths are resolved
                     against the current working directory.

    Returns:
        List of validated model entries. Returns an empty list if the file
        doesn't exist or can't be parsed.
    """
    path = Path(models_path or "models.json").expanduser().resolve()

    if not path.exists():
        logger.debug(f"Model catalog file not found: {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {path}: {e}")
        return []
    except OSError as e:
        logger.error(f"Failed to read {path}: {e}")
        return []

    entries = data.get("models", []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        logger.warning(f"Invalid models format in {path}: expected list, got {type(entries)}")
        return []

    validated = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping invalid model at index {idx}: not a dictionary")
            continue
        if not isinstance(entry.get("id"), str) or not entry["id"]:
            logger.warning(f"Skipping model at index {idx}: missing required field 'id'")
            continue

        max_output = entry.get("max_output_tokens")
        if max_output is not None and (not isinstance(max_output, int) or max_output <= 0):
            logger.warning(f"Skipping model '{entry['id']}': max_output_tokens must be a positive integer")
            continue

        entry.setdefault("context_window", 128_000)
        entry.setdefault("owned_by", "upstream")
        validated.append(entry)

    if validated:
        logger.info(f"Loaded {len(validated)} model(s) from {path}: {[m['id'] for m in validated]}")
    else:
        logger.warning(f"No valid models found in {path}")
    return validated

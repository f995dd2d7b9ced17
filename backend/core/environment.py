"""Environment configuration management for the diagnostic service.

This module handles loading environment variables from .env files
with proper priority handling for local development vs production.

File Priority (highest to lowest):
1. .env.local (local secrets, gitignored)
2. .env (base configuration, committed)
3. Environment variables set by hosting platform
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_GENERATOR_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL_ID = "gemini-2.0-flash"


def load_environment(env_dir: Optional[Union[str, Path]] = None) -> None:
    """Load environment variables from .env files.

    Args:
        env_dir: Directory containing .env files. Defaults to current directory.
    """
    if env_dir is None:
        env_dir = Path.cwd()
    else:
        env_dir = Path(env_dir)

    # Load files in reverse priority order (last loaded wins)
    env_files = [
        env_dir / ".env",          # Base configuration
        env_dir / ".env.local",    # Local overrides (secrets)
    ]

    loaded_files = []
    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=True)
            loaded_files.append(env_file.name)
            logger.debug(f"Loaded environment from {env_file}")

    if loaded_files:
        logger.info(f"Environment loaded from: {', '.join(loaded_files)}")
    else:
        logger.debug("No .env files found")


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid

    Returns:
        Boolean value
    """
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    else:
        return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid

    Returns:
        Integer value
    """
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        logger.warning(f"Invalid integer value for {key}, using default: {default}")
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable, falling back on anything unparsable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        logger.warning(f"Invalid float value for {key}, using default: {default}")
        return default


def get_env_list(key: str, separator: str = ",", default: Optional[list] = None) -> list:
    """Get list from environment variable.

    Args:
        key: Environment variable name
        separator: List item separator
        default: Default value if not set

    Returns:
        List of strings
    """
    if default is None:
        default = []

    value = os.getenv(key, "")
    if not value.strip():
        return default

    return [item.strip() for item in value.split(separator) if item.strip()]


def validate_required_env_vars(required_vars: list[str]) -> list[str]:
    """Validate that required environment variables are set.

    Args:
        required_vars: List of required environment variable names

    Returns:
        List of missing variables
    """
    missing = []
    for var in required_vars:
        value = os.getenv(var)
        if not value or value.strip() in ("", "your-api-key-here", "placeholder"):
            missing.append(var)

    return missing


@dataclass(frozen=True)
class GeneratorSettings:
    """Everything needed to reach the generative model."""
    api_key: str = field(default="", repr=False)
    model_id: str = DEFAULT_MODEL_ID
    base_url: str = DEFAULT_GENERATOR_BASE_URL
    timeout_seconds: float = 60.0
    temperature: float = 0.3
    max_output_tokens: int = 4000
    stream: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def get_generator_settings() -> GeneratorSettings:
    """Read generator settings from the environment on every call."""
    missing = validate_required_env_vars(["GEMINI_API_KEY"])

    return GeneratorSettings(
        api_key="" if missing else os.getenv("GEMINI_API_KEY", "").strip(),
        model_id=os.getenv("GEMINI_MODEL_ID", "").strip() or DEFAULT_MODEL_ID,
        base_url=os.getenv("GENERATOR_BASE_URL", "").strip() or DEFAULT_GENERATOR_BASE_URL,
        timeout_seconds=get_env_float("GENERATOR_TIMEOUT_SECONDS", 60.0),
        temperature=get_env_float("GENERATOR_TEMPERATURE", 0.3),
        max_output_tokens=get_env_int("GENERATOR_MAX_OUTPUT_TOKENS", 4000),
        stream=get_env_bool("GENERATOR_STREAM", False),
    )


# Load environment on import
load_environment()

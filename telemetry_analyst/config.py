"""
Configuration for the analysis boundary.

Values come from the environment (optionally a .env file loaded with
python-dotenv) and are returned as frozen objects. Nothing is cached at
module level: callers pass a Settings value into each call that needs it.

Environment variables:
    TELEMETRY_MODEL            model id sent to the analysis service
    TELEMETRY_THINKING_BUDGET  reasoning-token budget (int, >= 0)
    TELEMETRY_LOG_LEVEL        DEBUG / INFO / WARNING / ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


AVAILABLE_MODELS: dict[str, str] = {
    "gemini-3-pro-preview": "Gemini 3.0 Pro (recommended, strong reasoning)",
    "gemini-2.5-flash": "Gemini 2.5 Flash (fast)",
}

DEFAULT_MODEL = "gemini-3-pro-preview"
DEFAULT_THINKING_BUDGET = 2048
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ModelSettings:
    model_name: str = DEFAULT_MODEL
    thinking_budget: int = DEFAULT_THINKING_BUDGET

    def __post_init__(self):
        if self.thinking_budget < 0:
            raise ValueError(f"thinking_budget must be >= 0, got {self.thinking_budget}")


@dataclass(frozen=True)
class Settings:
    model: ModelSettings = field(default_factory=ModelSettings)
    log_level: str = DEFAULT_LOG_LEVEL


def load_env(env_file: Optional[Path] = None) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        env_file: Path to the .env file. Defaults to ./.env

    Returns:
        True if a file was loaded, False otherwise
    """
    target = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if target.exists():
        load_dotenv(target, override=True)
        logger.info("Loaded environment from %s", target)
        return True
    logger.debug("No .env file at %s, using process environment", target)
    return False


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ValueError: if TELEMETRY_THINKING_BUDGET is not a non-negative integer
    """
    load_env(env_file)

    raw_budget = os.getenv("TELEMETRY_THINKING_BUDGET", str(DEFAULT_THINKING_BUDGET))
    try:
        budget = int(raw_budget)
    except ValueError:
        raise ValueError(f"TELEMETRY_THINKING_BUDGET must be an integer, got {raw_budget!r}") from None

    model_name = os.getenv("TELEMETRY_MODEL", DEFAULT_MODEL)
    if model_name not in AVAILABLE_MODELS:
        logger.warning("Model %r is not in the known model list", model_name)

    return Settings(
        model=ModelSettings(model_name=model_name, thinking_budget=budget),
        log_level=os.getenv("TELEMETRY_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )

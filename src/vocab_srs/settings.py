"""User settings stored alongside the deck."""
import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from vocab_srs.config import SETTINGS_KEY
from vocab_srs.storage import read_json, write_json

logger = logging.getLogger(__name__)


class AppSettings(BaseModel):
    provider: Literal["anthropic", "openai", "gemini", "deepseek"] = "anthropic"
    api_key: str = ""
    theme: Literal["light", "dark", "system"] = "system"
    auto_add_to_flashcards: bool = True
    session_limit: int = Field(20, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


def load_settings(storage) -> AppSettings:
    """Stored values merged over the defaults; bad stored state gives the defaults."""
    stored = read_json(storage, SETTINGS_KEY, {})
    if not isinstance(stored, dict):
        return AppSettings()
    try:
        return AppSettings.model_validate(stored)
    except ValidationError as e:
        logger.warning("Stored settings are invalid, using defaults: %s", e)
        return AppSettings()


def save_settings(storage, **changes) -> AppSettings:
    current = load_settings(storage).model_dump()
    unknown = set(changes) - set(current)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
    current.update(changes)
    try:
        settings = AppSettings.model_validate(current)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
    write_json(storage, SETTINGS_KEY, settings.model_dump())
    return settings

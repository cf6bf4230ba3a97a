"""Default locations and storage keys."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class PathSettings(BaseSettings):
    """Data directory, overridable with the VOCAB_SRS_HOME environment variable."""

    model_config = SettingsConfigDict(env_prefix="VOCAB_SRS_")

    home: Path = Path.home() / ".vocab_srs"


DEFAULT_DATA_DIR = PathSettings().home
DEFAULT_DB_PATH = str(DEFAULT_DATA_DIR / "vocab.db")

FLASHCARDS_KEY = "vocab_srs:flashcards"
HISTORY_KEY = "vocab_srs:history"
SETTINGS_KEY = "vocab_srs:settings"

HISTORY_LIMIT = 200

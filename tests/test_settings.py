# tests/test_settings.py
import pytest

from vocab_srs.config import SETTINGS_KEY, PathSettings
from vocab_srs.settings import AppSettings, load_settings, save_settings
from vocab_srs.storage import MemoryStorage


def test_defaults(storage):
    settings = load_settings(storage)
    assert settings == AppSettings()
    assert settings.provider == "anthropic"
    assert settings.theme == "system"
    assert settings.auto_add_to_flashcards is True


def test_save_merges_over_existing(storage):
    save_settings(storage, provider="openai", api_key="sk-test")
    save_settings(storage, theme="dark")
    settings = load_settings(storage)
    assert settings.provider == "openai"
    assert settings.api_key == "sk-test"
    assert settings.theme == "dark"


def test_save_rejects_invalid_value(storage):
    with pytest.raises(ValueError):
        save_settings(storage, provider="cohere")
    with pytest.raises(ValueError):
        save_settings(storage, session_limit=0)
    assert load_settings(storage) == AppSettings()


def test_save_rejects_unknown_setting(storage):
    with pytest.raises(ValueError):
        save_settings(storage, colour="blue")


def test_load_ignores_unknown_keys():
    storage = MemoryStorage({SETTINGS_KEY: '{"theme": "light", "legacy": 1}'})
    assert load_settings(storage).theme == "light"


@pytest.mark.parametrize("raw", ["not json", "[]", '{"theme": "neon"}'])
def test_bad_stored_settings_give_defaults(raw):
    assert load_settings(MemoryStorage({SETTINGS_KEY: raw})) == AppSettings()


def test_save_coerces_prompt_strings(storage):
    settings = save_settings(storage, session_limit="5", auto_add_to_flashcards="no")
    assert settings.session_limit == 5
    assert settings.auto_add_to_flashcards is False
    assert load_settings(storage).session_limit == 5


@pytest.mark.parametrize("changes", [
    {"theme": "neon"},
    {"log_level": "LOUD"},
    {"session_limit": "many"},
])
def test_save_reports_validation_errors_as_value_error(storage, changes):
    with pytest.raises(ValueError, match="Invalid settings"):
        save_settings(storage, **changes)


def test_data_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("VOCAB_SRS_HOME", str(tmp_path / "decks"))
    assert PathSettings().home == tmp_path / "decks"


def test_data_dir_default(monkeypatch):
    monkeypatch.delenv("VOCAB_SRS_HOME", raising=False)
    assert PathSettings().home.name == ".vocab_srs"

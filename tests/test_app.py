import pytest
from unittest.mock import patch

from conftest import entry
from vocab_srs.app import (
    SessionExitRequested, cmd_add, cmd_remove, cmd_review, cmd_settings,
    run_review_session, session_prompt,
)
from vocab_srs.history import get_history
from vocab_srs.settings import AppSettings, load_settings


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("vocab_srs.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("vocab_srs.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("vocab_srs.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_prompt_allows_exit_words_among_choices():
    with patch("vocab_srs.app.Prompt.ask", return_value="good") as ask:
        session_prompt("grade", choices=["again", "good"])
    assert ask.call_args.kwargs["choices"] == ["again", "good", "q", "menu"]


def test_run_review_session_grades_cards(store, now):
    a = store.add(entry("一"))
    b = store.add(entry("二"))
    cards = store.due(now)
    # Card 1: reveal, good. Card 2: reveal, again.
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "good", "", "again"]):
        reviewed = run_review_session(store, cards)
    assert reviewed == 2
    assert store.get(b.id).repetitions == 1
    assert store.get(a.id).repetitions == 0
    assert store.get(a.id).last_review == now


def test_run_review_session_exits_on_q(store, now):
    """User types 'q' on the second card's reveal prompt; first card saved, exit raised."""
    store.add(entry("一"))
    store.add(entry("二"))
    cards = store.due(now)
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "easy", "q"]):
        with pytest.raises(SessionExitRequested):
            run_review_session(store, cards)
    assert store.get(cards[0].id).repetitions == 1
    assert store.get(cards[1].id).last_review is None


def test_run_review_session_remove(store, now):
    card = store.add(entry("一"))
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "r"]):
        reviewed = run_review_session(store, [card])
    assert reviewed == 0
    assert store.list() == []


def test_run_review_session_no_cards(store):
    assert run_review_session(store, []) == 0


def test_cmd_review_respects_session_limit(store, now):
    for word in ("一", "二", "三"):
        store.add(entry(word))
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "good", "", "good"]):
        cmd_review(store, AppSettings(session_limit=2))
    assert len(store.due(now)) == 1


def test_cmd_review_stops_cleanly_on_q(store):
    store.add(entry("一"))
    with patch("vocab_srs.app.Prompt.ask", return_value="q"):
        cmd_review(store, AppSettings())
    assert len(store.due()) == 1


def test_cmd_add_records_history_and_card(store, storage):
    with patch("vocab_srs.app.Prompt.ask", side_effect=["猫", "māo", "cat"]):
        cmd_add(store, storage, AppSettings())
    cards = store.list()
    assert len(cards) == 1
    assert cards[0].item["definitions"] == ["cat"]
    assert get_history(storage)[0].query == "猫"


def test_cmd_add_existing_word_keeps_card(store, storage):
    existing = store.add(entry("猫", "cat"))
    with patch("vocab_srs.app.Prompt.ask", side_effect=["猫", "", "kitty"]):
        cmd_add(store, storage, AppSettings())
    assert store.list() == [existing]


def test_cmd_add_asks_when_auto_add_disabled(store, storage):
    with patch("vocab_srs.app.Prompt.ask", side_effect=["猫", "", "cat"]), \
            patch("vocab_srs.app.Confirm.ask", return_value=False):
        cmd_add(store, storage, AppSettings(auto_add_to_flashcards=False))
    assert store.list() == []
    assert len(get_history(storage)) == 1


def test_cmd_remove(store):
    store.add(entry("猫"))
    with patch("vocab_srs.app.Prompt.ask", return_value="猫"), \
            patch("vocab_srs.app.Confirm.ask", return_value=True):
        cmd_remove(store)
    assert store.list() == []


def test_cmd_settings_updates_value(storage):
    with patch("vocab_srs.app.Prompt.ask", side_effect=["session_limit", "5"]):
        settings = cmd_settings(storage)
    assert settings.session_limit == 5
    assert load_settings(storage).session_limit == 5

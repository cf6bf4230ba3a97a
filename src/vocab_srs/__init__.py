"""Spaced-repetition flashcard engine for vocabulary study."""

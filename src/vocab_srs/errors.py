"""Exception types raised by the deck and scheduler."""


class VocabSrsError(Exception):
    """Base class for all errors raised by vocab_srs."""


class CardNotFoundError(VocabSrsError, KeyError):
    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class InvalidGradeError(VocabSrsError, ValueError):
    pass


class InvalidCardError(VocabSrsError, ValueError):
    pass


class StorageError(VocabSrsError):
    pass

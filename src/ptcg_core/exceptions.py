"""Custom exceptions for the deck analysis engine."""


class PTCGError(Exception):
    """Base exception for deck analysis errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DeckInputError(PTCGError):
    """Raised when a deck payload cannot be turned into deck entries."""

    def __init__(self, message: str, issues: list[str] | None = None):
        super().__init__(message)
        self.issues = issues or []


class ClassificationError(PTCGError):
    """Raised when a card has a shape the classifier does not recognise."""

    def __init__(self, card_id: str, reason: str):
        super().__init__(f"Cannot classify card {card_id}: {reason}")
        self.card_id = card_id
        self.reason = reason


class ComputationError(PTCGError):
    """Raised when an analysis stage cannot produce a value."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class MetaSnapshotError(PTCGError):
    """Raised when the reference meta snapshot is missing or invalid."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Meta snapshot {source} unusable: {reason}")
        self.source = source

"""Deck input normalisation.

Turns whatever the catalog collaborator hands over into an immutable
:class:`Deck`, separating entries that can be analysed from ones that
cannot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ptcg_core.data.models.card import CardFace, Deck, DeckEntry
from ptcg_core.exceptions import DeckInputError

logger = logging.getLogger(__name__)


class AnalyzeDeckInput(BaseModel):
    """Input parameters for a deck analysis request."""

    entries: list[DeckEntry] = Field(default_factory=list, description="Deck list")


class NormalizedDeck(BaseModel):
    """Result of input normalisation."""

    deck: Deck
    issues: list[str] = Field(default_factory=list)
    dropped_zero_quantity: list[str] = Field(default_factory=list)


def _entry_label(raw: Any, index: int) -> str:
    if isinstance(raw, DeckEntry):
        return raw.card.name
    if isinstance(raw, Mapping):
        card = raw.get("card")
        if isinstance(card, CardFace):
            return card.name
        if isinstance(card, Mapping) and card.get("name"):
            return str(card["name"])
    if isinstance(raw, tuple) and raw and isinstance(raw[0], CardFace):
        return raw[0].name
    return f"entry #{index + 1}"


def _raw_quantity(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return raw.get("quantity")
    if isinstance(raw, tuple) and len(raw) == 2:
        return raw[1]
    return None


def _coerce_entry(raw: Any) -> DeckEntry:
    if isinstance(raw, DeckEntry):
        return raw
    if isinstance(raw, tuple) and len(raw) == 2:
        card, quantity = raw
        return DeckEntry.model_validate({"card": card, "quantity": quantity})
    if isinstance(raw, Mapping):
        return DeckEntry.model_validate(raw)
    raise DeckInputError(f"Unsupported deck entry type: {type(raw).__name__}")


def normalize_deck(payload: Any) -> NormalizedDeck:
    """Build a :class:`Deck` from a deck, a sequence of entries, pairs or mappings.

    Zero-quantity entries are dropped silently (with a debug log); entries
    that fail validation are dropped and reported in ``issues``.

    Raises:
        DeckInputError: If the payload is not a deck or a sequence at all.
    """
    if isinstance(payload, Deck):
        return NormalizedDeck(deck=payload)
    if isinstance(payload, AnalyzeDeckInput):
        return NormalizedDeck(deck=Deck(entries=tuple(payload.entries)))
    if payload is None or isinstance(payload, (str, bytes, Mapping)) or not isinstance(
        payload, Sequence
    ):
        raise DeckInputError(
            "Deck payload must be a sequence of entries",
            issues=[f"Received {type(payload).__name__}"],
        )

    entries: list[DeckEntry] = []
    issues: list[str] = []
    dropped: list[str] = []

    for index, raw in enumerate(payload):
        label = _entry_label(raw, index)
        quantity = _raw_quantity(raw)
        if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity == 0:
            dropped.append(label)
            logger.debug("Dropping zero-quantity entry: %s", label)
            continue
        try:
            entries.append(_coerce_entry(raw))
        except (PydanticValidationError, DeckInputError, TypeError, ValueError) as e:
            if isinstance(quantity, int) and quantity < 0:
                issues.append(f"{label}: quantity {quantity} is negative")
            else:
                issues.append(f"{label}: {_short_error(e)}")
            logger.warning("Rejected deck entry %s: %s", label, _short_error(e))

    return NormalizedDeck(deck=Deck(entries=tuple(entries)), issues=issues, dropped_zero_quantity=dropped)


def _short_error(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        first = error.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        return f"{location} {first.get('msg', 'invalid')}".strip()
    return str(error)

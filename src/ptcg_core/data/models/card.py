"""Card and deck models.

Attack and ability blobs from the catalog are validated once here into
explicit records so the analysis stages never re-parse them.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Subtypes that make a Pokemon give up more than one prize
THREE_PRIZE_SUBTYPES = frozenset({"VMAX", "VSTAR"})
TWO_PRIZE_SUBTYPES = frozenset({"V", "ex", "EX", "GX", "V-UNION", "BREAK"})

_SUPERTYPE_ALIASES = {
    "pokemon": "Pokemon",
    "pokémon": "Pokemon",
    "trainer": "Trainer",
    "energy": "Energy",
}

_LEADING_INT = re.compile(r"\d+")


class AttackSpec(BaseModel):
    """A Pokemon attack."""

    model_config = ConfigDict(frozen=True)

    name: str
    cost: tuple[str, ...] = ()
    damage: int = Field(default=0, ge=0)
    text: str = ""

    @field_validator("damage", mode="before")
    @classmethod
    def _parse_damage(cls, value: object) -> int:
        # "120+", "30×", "" all appear in catalog data
        if value is None:
            return 0
        if isinstance(value, bool):
            return 0
        if isinstance(value, (int, float)):
            return max(0, int(value))
        match = _LEADING_INT.search(str(value))
        return int(match.group()) if match else 0

    @field_validator("text", mode="before")
    @classmethod
    def _none_text(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def energy_cost(self) -> int:
        return len(self.cost)


class AbilitySpec(BaseModel):
    """A Pokemon ability."""

    model_config = ConfigDict(frozen=True)

    name: str
    text: str = ""

    @field_validator("text", mode="before")
    @classmethod
    def _none_text(cls, value: object) -> object:
        return "" if value is None else value


class CardFace(BaseModel):
    """A Pokemon TCG card as supplied by the card catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Core identifiers
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    supertype: str

    # Card characteristics
    subtypes: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    hp: int | None = Field(default=None, ge=0)
    evolves_from: str | None = Field(default=None, alias="evolvesFrom")
    attacks: tuple[AttackSpec, ...] = ()
    abilities: tuple[AbilitySpec, ...] = ()
    retreat_cost: tuple[str, ...] = Field(default=(), alias="retreatCost")

    # Trainer/Energy rules text
    rules: tuple[str, ...] = ()

    # Format info
    is_legal_standard: bool = Field(default=True, alias="isLegalStandard")
    is_legal_expanded: bool = Field(default=True, alias="isLegalExpanded")
    release_date: str | None = Field(default=None, alias="releaseDate")

    @field_validator("supertype", mode="before")
    @classmethod
    def _normalize_supertype(cls, value: object) -> object:
        if isinstance(value, str):
            return _SUPERTYPE_ALIASES.get(value.strip().lower(), value)
        return value

    @field_validator("hp", mode="before")
    @classmethod
    def _parse_hp(cls, value: object) -> object:
        if isinstance(value, str):
            match = _LEADING_INT.search(value)
            return int(match.group()) if match else None
        return value

    @field_validator("evolves_from", mode="before")
    @classmethod
    def _blank_evolves_from(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_pokemon(self) -> bool:
        return self.supertype == "Pokemon"

    @property
    def is_trainer(self) -> bool:
        return self.supertype == "Trainer"

    @property
    def is_energy(self) -> bool:
        return self.supertype == "Energy"

    @property
    def is_basic_pokemon(self) -> bool:
        if not self.is_pokemon:
            return False
        return self.evolves_from is None or "Basic" in self.subtypes

    @property
    def stage(self) -> int:
        """Evolution stage: 0 for Basic, 1 for Stage 1, 2 for Stage 2."""
        if "Stage 2" in self.subtypes:
            return 2
        if "Stage 1" in self.subtypes:
            return 1
        if self.evolves_from is not None and "Basic" not in self.subtypes:
            # VMAX/VSTAR evolve from a Basic V
            return 1
        return 0

    @property
    def max_damage(self) -> int:
        return max((attack.damage for attack in self.attacks), default=0)

    @property
    def min_attack_cost(self) -> int | None:
        if not self.attacks:
            return None
        return min(attack.energy_cost for attack in self.attacks)

    @property
    def retreat(self) -> int:
        return len(self.retreat_cost)

    @property
    def has_rule_box(self) -> bool:
        return any(st in THREE_PRIZE_SUBTYPES or st in TWO_PRIZE_SUBTYPES for st in self.subtypes)

    @property
    def prize_value(self) -> int:
        """Prizes the opponent takes when this Pokemon is knocked out."""
        if any(st in THREE_PRIZE_SUBTYPES for st in self.subtypes):
            return 3
        if any(st in TWO_PRIZE_SUBTYPES for st in self.subtypes):
            return 2
        padded = f" {self.name} "
        if " VSTAR " in padded or " VMAX " in padded:
            return 3
        if " ex " in padded or " V " in padded or "-GX " in padded or " GX " in padded:
            return 2
        return 1

    @property
    def text_blob(self) -> str:
        """All rules, attack and ability text, lowercased."""
        parts = list(self.rules)
        parts.extend(f"{a.name} {a.text}" for a in self.attacks)
        parts.extend(f"{a.name} {a.text}" for a in self.abilities)
        return " ".join(parts).lower()

    @property
    def ability_text(self) -> str:
        return " ".join(a.text for a in self.abilities).lower()


class DeckEntry(BaseModel):
    """A card and how many copies of it the deck runs."""

    model_config = ConfigDict(frozen=True)

    card: CardFace
    quantity: int = Field(..., ge=1)


class Deck(BaseModel):
    """Immutable snapshot of a deck list."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[DeckEntry, ...] = ()

    @property
    def total_cards(self) -> int:
        return sum(entry.quantity for entry in self.entries)

    @property
    def cards(self) -> list[CardFace]:
        return [entry.card for entry in self.entries]

    @property
    def names(self) -> set[str]:
        return {entry.card.name for entry in self.entries}

    @property
    def lower_names(self) -> set[str]:
        return {entry.card.name.lower() for entry in self.entries}

    def count(self, predicate: Callable[[CardFace], bool]) -> int:
        """Total copies of cards matching ``predicate``."""
        return sum(entry.quantity for entry in self.entries if predicate(entry.card))

    def entries_where(self, predicate: Callable[[CardFace], bool]) -> list[DeckEntry]:
        return [entry for entry in self.entries if predicate(entry.card)]

    def has_card(self, name: str) -> bool:
        """True when any card name contains ``name`` (case-insensitive)."""
        needle = name.lower()
        return any(needle in entry.card.name.lower() for entry in self.entries)

    def quantity_by_name(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for entry in self.entries:
            totals[entry.card.name] = totals.get(entry.card.name, 0) + entry.quantity
        return totals

    @property
    def pokemon_types(self) -> set[str]:
        return {t for entry in self.entries if entry.card.is_pokemon for t in entry.card.types}

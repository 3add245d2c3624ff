"""Versioned reference metagame snapshot.

The snapshot is plain JSON shipped inside the package so that metagame
updates are data changes only. ``PTCG_META_SNAPSHOT_PATH`` points the
loader at a different file.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ptcg_core.config import get_settings
from ptcg_core.exceptions import MetaSnapshotError

logger = logging.getLogger(__name__)

MetaTier = Literal["tier1", "tier2", "tier3", "rogue"]

BUNDLED_SNAPSHOT = Path(__file__).parent / "resources" / "meta_snapshot.json"


class MetaArchetype(BaseModel):
    """A known competitive deck in the reference metagame."""

    model_config = ConfigDict(frozen=True)

    name: str
    tier: MetaTier
    style: str
    popularity: float = Field(ge=0, le=100, description="Share of the field in percent")
    key_cards: tuple[str, ...]
    primary_types: tuple[str, ...] = ()
    avg_setup_turn: float = Field(default=2.5, gt=0)
    avg_prizes_per_turn: float = Field(default=1.5, gt=0)
    weaknesses: tuple[str, ...] = ()
    strengths: tuple[str, ...] = ()
    tech_options: tuple[str, ...] = ()


class CounterCard(BaseModel):
    """A card known to swing specific matchups."""

    model_config = ConfigDict(frozen=True)

    name: str
    counters: tuple[str, ...]
    bonus: int = Field(default=10, ge=0, le=20)
    reason: str = ""


class MetaSnapshot(BaseModel):
    """The curated metagame the matchup and meta stages compare against."""

    model_config = ConfigDict(frozen=True)

    version: str
    updated: str
    format: str = "standard"
    format_speed: str = "medium"
    average_setup_turn: float = Field(default=2.5, gt=0)
    average_game_length: float = 7.0
    rotation_cutoff: str = ""
    key_trainers: tuple[str, ...] = ()
    key_pokemon: tuple[str, ...] = ()
    archetype_cycle: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    counter_cards: tuple[CounterCard, ...] = ()
    banned_cards: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    archetypes: tuple[MetaArchetype, ...] = ()

    def banned_in(self, format_name: str) -> tuple[str, ...]:
        return self.banned_cards.get(format_name.lower(), ())

    def beats(self, style: str, other: str) -> bool:
        """True when ``style`` is favoured against ``other`` in the archetype cycle."""
        return other in self.archetype_cycle.get(style, ())

    @property
    def by_popularity(self) -> list[MetaArchetype]:
        return sorted(self.archetypes, key=lambda a: (-a.popularity, a.name))


def load_meta_snapshot(path: Path) -> MetaSnapshot:
    """Read and validate a snapshot file.

    Raises:
        MetaSnapshotError: If the file is missing or does not validate.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MetaSnapshotError(str(path), str(e)) from e
    try:
        snapshot = MetaSnapshot.model_validate_json(raw)
    except PydanticValidationError as e:
        raise MetaSnapshotError(str(path), f"{e.error_count()} validation errors") from e
    logger.debug("Loaded meta snapshot %s (%d archetypes)", snapshot.version, len(snapshot.archetypes))
    return snapshot


@lru_cache(maxsize=1)
def get_meta_snapshot() -> MetaSnapshot:
    """Get the process-wide meta snapshot (loaded once)."""
    override = get_settings().meta_snapshot_path
    return load_meta_snapshot(override or BUNDLED_SNAPSHOT)

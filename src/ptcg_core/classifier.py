"""Card role classification.

``classify`` is a pure function of the card and the static tables in
:mod:`ptcg_core.data.knowledge`, so results are cached per card.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from functools import lru_cache

from ptcg_core.data.knowledge import (
    ACCELERATION_KEYWORDS,
    BASIC_ENERGY_QUALITY,
    CARD_QUALITY,
    DISCARD_ENABLER_NAMES,
    DISCARD_PAYOFF_NAMES,
    ENERGY_ACCELERATION_BY_TYPE,
    ENERGY_TYPES,
    GUST_KEYWORDS,
    RECOVERY_KEYWORDS,
    SEARCH_KEYWORDS,
    SWITCH_KEYWORDS,
    SYNERGY_TAG_NAMES,
    TECH_CARD_NAMES,
    TRAINER_TABLES,
    name_in,
)
from ptcg_core.data.models.card import CardFace, Deck
from ptcg_core.data.models.responses import (
    CardCategory,
    CardClassification,
    PokemonRole,
    SetupSpeed,
    TrainerCategory,
    TrainerType,
)
from ptcg_core.exceptions import ClassificationError

logger = logging.getLogger(__name__)

_BASIC_ENERGY_NAME = re.compile(
    r"^(basic )?(" + "|".join(t.lower() for t in ENERGY_TYPES) + r") energy$"
)
_TECH_PATTERNS = [re.compile(rf"\b{re.escape(name)}\b") for name in TECH_CARD_NAMES]

_DRAW_ABILITY = ("draw", "search your deck")
_WALL_ABILITY = ("prevent", "reduce damage", "damage done to this pokémon", "damage done to this pokemon")
_MULTI_COLORLESS = {"double": 2, "twin": 2, "triple": 3}


def _clamp_level(value: int) -> int:
    return min(10, max(1, value))


# =============================================================================
# Pokemon
# =============================================================================


def _pokemon_role(card: CardFace) -> PokemonRole:
    max_damage = card.max_damage
    if max_damage >= 200 or (max_damage >= 120 and card.prize_value == 1):
        return "main_attacker"

    ability_text = card.ability_text
    if ability_text:
        if any(keyword in ability_text for keyword in _DRAW_ABILITY):
            return "ability_support"
        if "attach" in ability_text and "energy" in ability_text:
            return "ability_support"
        if any(keyword in ability_text for keyword in _WALL_ABILITY):
            return "wall"

    if card.stage == 0 and (card.hp or 0) <= 70 and not card.abilities:
        return "starter"
    return "support_attacker"


def _setup_speed(card: CardFace) -> SetupSpeed:
    if card.stage == 2:
        return "slow"
    if card.stage == 1:
        return "fast"
    cost = card.min_attack_cost
    if cost is None:
        return "moderate"
    if cost <= 1:
        return "immediate"
    if cost == 2:
        return "fast"
    return "moderate"


def _pokemon_power(card: CardFace) -> int:
    level = 5
    if card.max_damage >= 200:
        level += 2
    elif card.max_damage >= 120:
        level += 1
    elif card.max_damage < 30 and not card.abilities:
        level -= 2
    if card.abilities:
        level += 1
    if card.has_rule_box:
        level += 1
    if (card.hp or 0) >= 200:
        level += 1
    return _clamp_level(level)


def _pokemon_tags(card: CardFace) -> list[str]:
    tags: set[str] = set()
    for pokemon_type in card.types:
        if pokemon_type in ENERGY_ACCELERATION_BY_TYPE:
            tags.add(f"{pokemon_type.lower()}_support")
    if "lost zone" in card.text_blob:
        tags.add("lost_zone")
    if card.evolves_from is not None:
        tags.add("evolution")
    if card.has_rule_box:
        tags.add("rule_box")
    if card.abilities:
        tags.add("ability")
    if any(keyword in card.ability_text for keyword in _DRAW_ABILITY):
        tags.add("draw_engine")
    return sorted(tags)


def _classify_pokemon(card: CardFace) -> CardClassification:
    role = _pokemon_role(card)
    power = _pokemon_power(card)
    return CardClassification(
        card_id=card.id,
        name=card.name,
        category="pokemon",
        role=role,
        setup_speed=_setup_speed(card),
        power_level=power,
        quality=CARD_QUALITY.get(card.name.lower(), power),
        prize_value=card.prize_value,
        is_tech=role != "main_attacker" and _is_tech(card.name),
        synergy_tags=sorted(set(_pokemon_tags(card)) | set(_name_tags(card.name))),
    )


# =============================================================================
# Trainer
# =============================================================================


def _trainer_type(card: CardFace) -> TrainerType:
    subtypes = {s.lower() for s in card.subtypes}
    if "supporter" in subtypes:
        return "supporter"
    if "stadium" in subtypes:
        return "stadium"
    if "pokémon tool" in subtypes or "pokemon tool" in subtypes or "tool" in subtypes:
        return "tool"
    return "item"


def _trainer_category(card: CardFace) -> tuple[TrainerCategory, int]:
    """Curated tables first, then name keywords, then a scan of the card text."""
    lowered = card.name.lower()
    for category, table in TRAINER_TABLES.items():
        if lowered in table:
            return category, table[lowered]  # type: ignore[return-value]

    if name_in(card.name, GUST_KEYWORDS):
        return "disruption", 7
    if name_in(card.name, SEARCH_KEYWORDS):
        return "search", 6
    if name_in(card.name, SWITCH_KEYWORDS):
        return "switching", 6
    if name_in(card.name, RECOVERY_KEYWORDS):
        return "recovery", 6

    text = card.text_blob
    if "draw" in text:
        return "draw", 9 if "draw 7" in text else 6
    if "search your deck" in text:
        return "search", 8 if "any" in text else 6
    if "attach" in text and "energy" in text:
        return "energy_acceleration", 7
    if "opponent" in text and ("discard" in text or "switch" in text):
        return "disruption", 7
    if "switch" in text:
        return "switching", 6
    if "from your discard pile" in text:
        return "recovery", 6

    trainer_type = _trainer_type(card)
    if trainer_type == "tool":
        return "tool", 5
    if trainer_type == "stadium":
        return "stadium", 5
    return "utility", 5


def _classify_trainer(card: CardFace) -> CardClassification:
    category, power = _trainer_category(card)
    tags = set(_name_tags(card.name))
    if "lost zone" in card.text_blob:
        tags.add("lost_zone")
    return CardClassification(
        card_id=card.id,
        name=card.name,
        category="trainer",
        trainer_type=_trainer_type(card),
        trainer_category=category,
        power_level=_clamp_level(power),
        quality=CARD_QUALITY.get(card.name.lower(), _clamp_level(power)),
        is_tech=_is_tech(card.name),
        synergy_tags=sorted(tags),
    )


# =============================================================================
# Energy
# =============================================================================


def is_basic_energy(card: CardFace) -> bool:
    if not card.is_energy:
        return False
    return "Basic" in card.subtypes or bool(_BASIC_ENERGY_NAME.match(card.name.lower()))


def energy_provides(card: CardFace) -> list[str]:
    """Energy types a card provides when attached."""
    lowered = card.name.lower()
    for word, amount in _MULTI_COLORLESS.items():
        if word in lowered.split():
            return ["Colorless"] * amount
    if "every type" in card.text_blob:
        return [t for t in ENERGY_TYPES if t != "Colorless"]
    named = [t for t in ENERGY_TYPES if t.lower() in lowered.split()]
    if named:
        return named
    if card.types:
        return list(card.types)
    return ["Colorless"]


def _classify_energy(card: CardFace) -> CardClassification:
    basic = is_basic_energy(card)
    if basic:
        quality = BASIC_ENERGY_QUALITY
    else:
        quality = CARD_QUALITY.get(card.name.lower(), 5)
    return CardClassification(
        card_id=card.id,
        name=card.name,
        category="energy",
        energy_kind="basic" if basic else "special",
        provides=energy_provides(card),
        power_level=quality,
        quality=quality,
        synergy_tags=_name_tags(card.name),
    )


# =============================================================================
# Public API
# =============================================================================


def _is_tech(name: str) -> bool:
    lowered = name.lower()
    return any(pattern.search(lowered) for pattern in _TECH_PATTERNS)


def _name_tags(name: str) -> list[str]:
    tags = {tag for tag, names in SYNERGY_TAG_NAMES.items() if name_in(name, names)}
    lowered = name.lower()
    if lowered in DISCARD_ENABLER_NAMES:
        tags.add("discard_enabler")
    if lowered in DISCARD_PAYOFF_NAMES:
        tags.add("discard_payoff")
    return sorted(tags)


@lru_cache(maxsize=4096)
def classify(card: CardFace) -> CardClassification:
    """Classify a single card.

    Raises:
        ClassificationError: If the card's supertype is not Pokemon, Trainer or Energy.
    """
    if card.is_pokemon:
        return _classify_pokemon(card)
    if card.is_trainer:
        return _classify_trainer(card)
    if card.is_energy:
        return _classify_energy(card)
    raise ClassificationError(card.id, f"unknown supertype {card.supertype!r}")


def minimal_classification(card: CardFace) -> CardClassification:
    """Fallback classification for cards ``classify`` rejects."""
    supertype = card.supertype.lower()
    category: CardCategory = "unknown"
    if supertype in ("pokemon", "trainer", "energy"):
        category = supertype  # type: ignore[assignment]
    return CardClassification(
        card_id=card.id,
        name=card.name,
        category=category,
        prize_value=card.prize_value if card.is_pokemon else 1,
        degraded=True,
    )


def classify_cards(cards: Iterable[CardFace]) -> dict[str, CardClassification]:
    """Classify a batch of cards keyed by card id; bad cards degrade instead of failing."""
    results: dict[str, CardClassification] = {}
    for card in cards:
        try:
            results[card.id] = classify(card)
        except ClassificationError as e:
            logger.warning("Degraded classification for %s: %s", card.name, e.reason)
            results[card.id] = minimal_classification(card)
    return results


# =============================================================================
# Deck-level helpers
# =============================================================================


def count_classified(
    deck: Deck,
    classifications: dict[str, CardClassification],
    predicate: Callable[[CardClassification], bool],
) -> int:
    """Total copies whose classification matches ``predicate``."""
    return sum(
        entry.quantity
        for entry in deck.entries
        if entry.card.id in classifications and predicate(classifications[entry.card.id])
    )


def is_acceleration(card: CardFace, classification: CardClassification) -> bool:
    """True for cards that put extra Energy into play."""
    if classification.trainer_category == "energy_acceleration":
        return True
    if name_in(card.name, ACCELERATION_KEYWORDS):
        return True
    ability_text = card.ability_text
    return card.is_pokemon and "attach" in ability_text and "energy" in ability_text


def is_draw_support(classification: CardClassification) -> bool:
    return classification.trainer_category == "draw" or "draw_engine" in classification.synergy_tags


def is_attacker(classification: CardClassification) -> bool:
    return classification.role in ("main_attacker", "support_attacker")

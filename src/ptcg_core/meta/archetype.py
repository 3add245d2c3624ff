"""Archetype identification.

A deck is first matched against the snapshot archetypes by key-card
overlap; when nothing matches well enough the style falls back to simple
structural counts. Independently, every deck gets a playstyle score per
style, which provides the secondary style and the confidence.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..classifier import count_classified
from ..data.knowledge import STATUS_KEYWORDS
from ..data.meta_snapshot import MetaArchetype, MetaSnapshot
from ..data.models.card import Deck
from ..data.models.responses import ArchetypeAnalysis, CardClassification, Playstyle

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.60
CONTROL_DISRUPTION = 8
AGGRO_MAIN_ATTACKERS = 4
SECONDARY_STYLE_SCORE = 40

GOOD_ATTACK_DAMAGE = 60
COMBO_PIECES = ("magnezone", "electrode", "coalossal", "archeops")


@dataclass(frozen=True)
class DeckFeatures:
    """Structural counts the playstyle scores read."""

    attackers: int = 0
    average_damage: float = 0.0
    setup_speed: float = 100.0
    disruption: int = 0
    healing: int = 0
    draw_power: int = 0
    acceleration: int = 0
    bench_sitters: int = 0
    average_retreat: float = 0.0
    status_effects: int = 0
    mill: int = 0
    spread: int = 0
    combo_pieces: int = 0
    single_prize_ratio: float = 0.0
    unique_attackers: int = 0
    energy_types: int = 0


def extract_features(deck: Deck) -> DeckFeatures:
    attackers = 0
    damage_total = 0
    damage_count = 0
    disruption = healing = draw_power = acceleration = 0
    bench_sitters = status = mill = spread = combo = 0
    retreat_total = 0
    pokemon = 0
    single_prize = 0
    unique_attackers: set[str] = set()

    for entry in deck.entries:
        card = entry.card
        text = card.text_blob
        if card.is_pokemon:
            pokemon += entry.quantity
            retreat_total += card.retreat * entry.quantity
            if card.prize_value == 1:
                single_prize += entry.quantity
            for attack in card.attacks:
                attack_text = attack.text.lower()
                if attack.damage > 0:
                    damage_total += attack.damage
                    damage_count += 1
                if any(keyword in attack_text for keyword in STATUS_KEYWORDS):
                    status += 1
                if "bench" in attack_text and ("damage" in attack_text or attack.damage > 0):
                    spread += 1
                if "discard" in attack_text and "opponent" in attack_text and "deck" in attack_text:
                    mill += 1
            if card.max_damage >= GOOD_ATTACK_DAMAGE:
                attackers += entry.quantity
                unique_attackers.add(card.name)
            ability_text = card.ability_text
            if "heal" in ability_text or ("prevent" in ability_text and "damage" in ability_text):
                healing += 1
            if card.abilities and not card.attacks:
                bench_sitters += 1
            if any(piece in card.name.lower() for piece in COMBO_PIECES):
                combo += entry.quantity
        elif card.is_trainer:
            if "opponent" in text and ("discard" in text or "shuffle" in text):
                disruption += entry.quantity
            if "draw" in text:
                draw_power += entry.quantity
            if "heal" in text:
                healing += entry.quantity
            if "discard" in text and "opponent" in text and "deck" in text:
                mill += entry.quantity
            if "attach" in text and "energy" in text:
                acceleration += entry.quantity
        elif card.is_energy:
            words = card.name.lower().split()
            if "provides 2" in text or "double" in words or "twin" in words:
                acceleration += entry.quantity

    average_retreat = retreat_total / pokemon if pokemon else 0.0
    stage_two = deck.count(lambda c: c.is_pokemon and c.stage == 2)
    energy_types = {c.types[0] for c in deck.cards if c.is_energy and c.types}
    return DeckFeatures(
        attackers=attackers,
        average_damage=damage_total / damage_count if damage_count else 0.0,
        setup_speed=100 - stage_two * 15 - average_retreat * 10,
        disruption=disruption,
        healing=healing,
        draw_power=draw_power,
        acceleration=acceleration,
        bench_sitters=bench_sitters,
        average_retreat=average_retreat,
        status_effects=status,
        mill=mill,
        spread=spread,
        combo_pieces=combo,
        single_prize_ratio=single_prize / pokemon if pokemon else 0.0,
        unique_attackers=len(unique_attackers),
        energy_types=len(energy_types),
    )


# =============================================================================
# Playstyle scores
# =============================================================================


def _tiered(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    """Points for the first ``(threshold, points)`` tier ``value`` reaches."""
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return 0


def _aggro(f: DeckFeatures) -> int:
    score = _tiered(f.average_damage, ((120, 30), (90, 20), (60, 10)))
    score += _tiered(f.setup_speed, ((80, 20), (60, 10)))
    score += _tiered(f.attackers, ((12, 20), (8, 10)))
    score += 10 if f.average_retreat <= 1.5 else 0
    score += 10 if f.acceleration >= 8 else 0
    score += 10 if f.disruption <= 2 else 0
    return score


def _control(f: DeckFeatures) -> int:
    score = _tiered(f.disruption, ((10, 30), (6, 20), (3, 10)))
    score += _tiered(f.status_effects, ((4, 20), (2, 10)))
    score += _tiered(f.healing, ((6, 15), (3, 8)))
    score += 10 if f.average_damage <= 80 else 0
    score += 10 if f.draw_power >= 12 else 0
    score += 15 if f.single_prize_ratio >= 0.7 else 0
    return score


def _combo(f: DeckFeatures) -> int:
    score = _tiered(f.combo_pieces, ((6, 30), (3, 20)))
    score += _tiered(f.average_damage, ((150, 20), (120, 10)))
    score += _tiered(f.acceleration, ((10, 20), (6, 10)))
    score += _tiered(f.draw_power, ((15, 15), (10, 8)))
    score += 15 if f.bench_sitters >= 4 else 0
    return score


def _midrange(f: DeckFeatures) -> int:
    score = 40
    score += 20 if 70 <= f.average_damage <= 110 else 0
    score += 15 if 50 <= f.setup_speed <= 75 else 0
    score += 10 if 2 <= f.disruption <= 6 else 0
    score += 15 if 6 <= f.attackers <= 10 else 0
    score += 10 if 0.3 <= f.single_prize_ratio <= 0.7 else 0
    return score


def _mill(f: DeckFeatures) -> int:
    score = _tiered(f.mill, ((8, 40), (4, 25), (2, 10)))
    score += _tiered(f.disruption, ((8, 20), (4, 10)))
    score += 15 if f.average_damage <= 50 else 0
    score += 15 if f.healing >= 4 else 0
    score += 10 if f.status_effects >= 2 else 0
    return score


def _stall(f: DeckFeatures) -> int:
    score = _tiered(f.healing, ((10, 30), (6, 20), (3, 10)))
    if f.average_damage <= 30:
        score += 20
    elif f.average_damage <= 50:
        score += 10
    score += 15 if f.disruption >= 8 else 0
    score += 20 if f.single_prize_ratio >= 0.9 else 0
    score += 15 if f.status_effects >= 3 else 0
    score += 10 if f.attackers <= 4 else 0
    return score


def _toolbox(f: DeckFeatures) -> int:
    score = _tiered(f.unique_attackers, ((5, 30), (3, 20)))
    score += 20 if f.single_prize_ratio >= 0.6 else 0
    score += 15 if 60 <= f.average_damage <= 100 else 0
    score += 15 if 2 <= f.disruption <= 6 else 0
    score += 20 if f.energy_types >= 3 else 0
    return score


def _turbo(f: DeckFeatures) -> int:
    score = _tiered(f.acceleration, ((15, 35), (10, 25), (6, 15)))
    score += _tiered(f.average_damage, ((150, 25), (120, 15)))
    score += 20 if f.setup_speed >= 85 else 0
    score += 10 if f.draw_power >= 15 else 0
    score += 10 if 3 <= f.attackers <= 6 else 0
    return score


def _spread(f: DeckFeatures) -> int:
    score = _tiered(f.spread, ((6, 40), (3, 25), (1, 10)))
    score += 20 if 50 <= f.average_damage <= 90 else 0
    score += 10 if f.attackers >= 8 else 0
    return score


# Declaration order breaks ties
PLAYSTYLE_SCORERS: dict[Playstyle, Callable[[DeckFeatures], int]] = {
    "aggro": _aggro,
    "control": _control,
    "combo": _combo,
    "midrange": _midrange,
    "mill": _mill,
    "stall": _stall,
    "toolbox": _toolbox,
    "turbo": _turbo,
    "spread": _spread,
}

CHARACTERISTICS: dict[str, list[str]] = {
    "aggro": ["Fast, aggressive gameplay", "High damage output", "Pressure from turn 1"],
    "control": ["Disrupts the opponent's strategy", "Wins through resource denial", "Longer games"],
    "combo": ["Relies on specific card combinations", "Explosive turns", "Vulnerable to disruption"],
    "midrange": ["Balanced approach", "Flexible game plan", "Adapts to the opponent"],
    "mill": ["Wins by decking out the opponent", "Minimal attacking", "Heavy disruption"],
    "stall": ["Prevents the opponent from taking prizes", "Heavy healing and protection"],
    "toolbox": ["Multiple attackers for different situations", "Good matchup spread"],
    "turbo": ["Extremely fast Energy acceleration", "Powers up one main attacker", "All-in strategy"],
    "spread": ["Damages multiple Pokemon at once", "Sets up multi-prize turns", "Weak to healing"],
}

PLAYSTYLES: dict[str, str] = {
    "aggro": "Apply immediate pressure with fast attackers and win before the opponent sets up.",
    "control": "Disrupt the opponent's strategy while slowly building your win condition.",
    "combo": "Set up specific card combinations for powerful, game-winning turns.",
    "midrange": "Play flexibly, adapting strategy to the matchup and game state.",
    "mill": "Make the opponent run out of cards by discarding from their deck.",
    "stall": "Prevent the opponent from taking prizes and win on time or by deck out.",
    "toolbox": "Pick a different attacker for each matchup.",
    "turbo": "Accelerate Energy as fast as possible to power up big attacks.",
    "spread": "Damage multiple targets to set up multi-prize turns.",
}


def playstyle_scores(deck: Deck) -> dict[str, int]:
    features = extract_features(deck)
    return {style: scorer(features) for style, scorer in PLAYSTYLE_SCORERS.items()}


def _style_confidence(primary: int, secondary: int) -> float:
    confidence = min(100, primary)
    gap = primary - secondary
    if gap >= 30:
        confidence = min(100, confidence + 20)
    elif gap >= 20:
        confidence = min(100, confidence + 10)
    elif gap <= 10:
        confidence = max(50, confidence - 20)
    return float(confidence)


def key_card_match(deck: Deck, archetype: MetaArchetype) -> float:
    """Share of the archetype's key cards present in the deck (by name, case-insensitive)."""
    if not archetype.key_cards:
        return 0.0
    names = deck.lower_names
    present = sum(1 for card in archetype.key_cards if card.lower() in names)
    return present / len(archetype.key_cards)


def best_archetype_match(deck: Deck, snapshot: MetaSnapshot) -> tuple[MetaArchetype | None, float]:
    best: MetaArchetype | None = None
    best_share = 0.0
    for archetype in snapshot.by_popularity:
        share = key_card_match(deck, archetype)
        if share > best_share:
            best, best_share = archetype, share
    return best, best_share


def structural_style(deck: Deck, classifications: dict[str, CardClassification]) -> Playstyle:
    """Style guess for decks that match no known archetype."""
    disruption = count_classified(deck, classifications, lambda c: c.trainer_category == "disruption")
    if disruption >= CONTROL_DISRUPTION:
        return "control"
    main_attackers = count_classified(deck, classifications, lambda c: c.role == "main_attacker")
    if main_attackers >= AGGRO_MAIN_ATTACKERS:
        return "aggro"
    return "midrange"


def classify_archetype(
    deck: Deck,
    classifications: dict[str, CardClassification],
    snapshot: MetaSnapshot,
) -> ArchetypeAnalysis:
    """Identify the known archetype (or generic style) the deck plays as."""
    scores = playstyle_scores(deck)
    ranked = sorted(scores.items(), key=lambda item: -item[1])
    (top_style, top_score), (runner_up, runner_score) = ranked[0], ranked[1]

    best, share = best_archetype_match(deck, snapshot)
    if best is not None and share >= MATCH_THRESHOLD:
        style: Playstyle = best.style if best.style in PLAYSTYLE_SCORERS else top_style  # type: ignore[assignment]
        logger.debug("Archetype: %s (%.0f%% key cards)", best.name, share * 100)
        name = best.name
        tier = best.tier
        matched = True
        confidence = round(share * 100, 1)
    else:
        style = structural_style(deck, classifications)
        name = f"Rogue {style.capitalize()}"
        tier = "rogue"
        matched = False
        confidence = _style_confidence(top_score, runner_score)
        logger.debug("Archetype: no key-card match, structural style %s", style)

    secondary_candidates = [(s, v) for s, v in ranked if s != style]
    secondary, secondary_score = secondary_candidates[0] if secondary_candidates else (runner_up, 0)

    return ArchetypeAnalysis(
        name=name,
        matched=matched,
        match_percentage=round(share * 100, 1),
        tier=tier,
        style=style,
        secondary_style=secondary if secondary_score > SECONDARY_STYLE_SCORE else "none",  # type: ignore[arg-type]
        confidence=confidence,
        style_scores={s: float(v) for s, v in scores.items()},
        characteristics=CHARACTERISTICS[style],
        playstyle=PLAYSTYLES[style],
    )

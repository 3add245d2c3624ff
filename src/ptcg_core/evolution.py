"""Evolution-line reconstruction and consistency."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ptcg_core.config import get_settings
from ptcg_core.data.knowledge import EVOLUTION_HELPERS
from ptcg_core.data.models.card import CardFace, Deck
from ptcg_core.data.models.responses import EvolutionAnalysis, EvolutionLine
from ptcg_core.probability import evolution_line_odds, probability_at_least_one

logger = logging.getLogger(__name__)

MISSING_SUFFIX = " (MISSING)"
MAX_CHAIN_DEPTH = 3
STAGE_OVERFLOW_PENALTY = 0.7

# Below these turn-N odds a line gets an issue
TURN_TWO_STAGE1_THRESHOLD = 0.60
TURN_THREE_STAGE2_THRESHOLD = 0.50


@dataclass
class _LineBuilder:
    root: str
    missing: bool = False
    basic_count: int = 0
    stage1: dict[str, int] = field(default_factory=dict)
    stage2: dict[str, int] = field(default_factory=dict)


def _pokemon_index(deck: Deck) -> tuple[dict[str, CardFace], dict[str, int]]:
    cards: dict[str, CardFace] = {}
    counts: dict[str, int] = {}
    for entry in deck.entries:
        if not entry.card.is_pokemon:
            continue
        cards.setdefault(entry.card.name, entry.card)
        counts[entry.card.name] = counts.get(entry.card.name, 0) + entry.quantity
    return cards, counts


def _find_root(card: CardFace, cards: dict[str, CardFace]) -> tuple[str, bool]:
    """Walk ``evolves_from`` up to the line's Basic; flag a missing pre-evolution."""
    current = card
    for _ in range(MAX_CHAIN_DEPTH):
        parent = current.evolves_from
        if parent is None or current.stage == 0:
            return current.name, False
        if parent not in cards:
            return f"{parent}{MISSING_SUFFIX}", True
        current = cards[parent]
    return current.name, False


def _ideal_counts(basic_count: int, has_stage2: bool) -> tuple[int, int, int]:
    if basic_count <= 2:
        return (2, 1, 1)
    return (4, 3, 2) if has_stage2 else (4, 3, 0)


def _line_consistency(basic: int, stage1: int, stage2: int, has_stage2: bool) -> float:
    ideal_basic, ideal_stage1, ideal_stage2 = _ideal_counts(basic, has_stage2)
    ratios = [min(1.0, basic / ideal_basic), min(1.0, stage1 / ideal_stage1)]
    if has_stage2:
        ratios.append(min(1.0, stage2 / ideal_stage2))
    score = sum(ratios) / len(ratios)
    if stage1 > basic:
        score *= STAGE_OVERFLOW_PENALTY
    if has_stage2 and stage2 > stage1:
        score *= STAGE_OVERFLOW_PENALTY
    return round(score * 100, 1)


def _build_line(builder: _LineBuilder, deck_size: int, rare_candy: int) -> EvolutionLine:
    stage1_count = sum(builder.stage1.values())
    stage2_count = sum(builder.stage2.values())
    has_stage2 = stage2_count > 0

    stage_counts = [builder.basic_count, stage1_count]
    if has_stage2:
        stage_counts.append(stage2_count)
    structure = "-".join(str(n) for n in stage_counts)

    if builder.missing:
        return EvolutionLine(
            base_pokemon=builder.root,
            basic_count=0,
            stage1=sorted(builder.stage1),
            stage1_count=stage1_count,
            stage2=sorted(builder.stage2),
            stage2_count=stage2_count,
            structure=structure,
            completeness=0.0,
            consistency=0.0,
            bottleneck="basic",
            issues=[f"{builder.root.removesuffix(MISSING_SUFFIX)} is missing, its evolutions can never be played"],
        )

    required = 3 if has_stage2 else 2
    present = 1 + (stage1_count > 0) + (stage2_count > 0 if has_stage2 else 0)

    odds = evolution_line_odds(builder.basic_count, stage1_count, stage2_count, deck_size)
    turn_three = odds.turn_three_stage2
    if has_stage2 and rare_candy > 0:
        settings = get_settings()
        candy_route = (
            probability_at_least_one(deck_size, builder.basic_count, settings.cards_seen_turn_one)
            * probability_at_least_one(deck_size, stage2_count, settings.cards_seen_turn_three)
            * probability_at_least_one(deck_size, rare_candy, settings.cards_seen_turn_three)
        )
        turn_three = max(turn_three, candy_route)

    issues: list[str] = []
    if stage1_count > 0 and odds.turn_two_stage1 < TURN_TWO_STAGE1_THRESHOLD:
        issues.append(
            f"{builder.root} line: only {odds.turn_two_stage1:.0%} to have the Stage 1 by turn 2"
        )
    if has_stage2 and turn_three < TURN_THREE_STAGE2_THRESHOLD:
        issues.append(f"{builder.root} line: only {turn_three:.0%} to have the Stage 2 by turn 3")
    if odds.bottleneck != "none":
        issues.append(f"Evolution bottleneck in {builder.root} line ({structure})")

    return EvolutionLine(
        base_pokemon=builder.root,
        basic_count=builder.basic_count,
        stage1=sorted(builder.stage1),
        stage1_count=stage1_count,
        stage2=sorted(builder.stage2),
        stage2_count=stage2_count,
        structure=structure,
        completeness=round(100.0 * present / required, 1),
        consistency=_line_consistency(builder.basic_count, stage1_count, stage2_count, has_stage2),
        turn_two_stage1=odds.turn_two_stage1,
        turn_three_stage2=turn_three,
        bottleneck=odds.bottleneck,  # type: ignore[arg-type]
        issues=issues,
    )


def analyze_evolution(deck: Deck) -> EvolutionAnalysis:
    """Group basics with their in-deck evolutions and rate each line."""
    deck_size = deck.total_cards or get_settings().deck_size
    cards, counts = _pokemon_index(deck)
    rare_candy = deck.count(lambda c: c.name.lower() == "rare candy")

    builders: dict[str, _LineBuilder] = {}
    for name in sorted(cards):
        card = cards[name]
        if card.evolves_from is None or card.stage == 0:
            continue
        root, missing = _find_root(card, cards)
        builder = builders.setdefault(root, _LineBuilder(root=root, missing=missing))
        if not missing:
            builder.basic_count = counts.get(root, 0)
        target = builder.stage2 if card.stage >= 2 else builder.stage1
        target[name] = counts[name]

    lines = [_build_line(builders[root], deck_size, rare_candy) for root in sorted(builders)]
    issues = [issue for line in lines for issue in line.issues]

    recommendations: list[str] = []
    for line in lines:
        if line.completeness == 0:
            recommendations.append(f"Add {line.base_pokemon.removesuffix(MISSING_SUFFIX)} or remove its evolutions")
        elif line.bottleneck == "basic":
            recommendations.append(f"Run more {line.base_pokemon} to support the {line.structure} line")
        elif line.bottleneck == "stage1":
            recommendations.append(f"Run more Stage 1 Pokemon in the {line.base_pokemon} line")
    if any(line.stage2_count > 0 for line in lines) and rare_candy == 0:
        recommendations.append("Add Rare Candy to support Stage 2 lines")
    if issues and not any(deck.has_card(helper) for helper in EVOLUTION_HELPERS):
        recommendations.append("Add evolution search such as Evolution Incense")

    overall = sum(line.consistency for line in lines) / len(lines) if lines else 100.0
    logger.debug("Evolution analysis: %d lines, score %.1f", len(lines), overall)

    return EvolutionAnalysis(
        lines=lines,
        overall_score=round(overall, 1),
        has_rare_candy=rare_candy > 0,
        issues=issues,
        recommendations=recommendations,
    )

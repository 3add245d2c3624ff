"""Concrete deck changes derived from warnings, evolution and meta signals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ptcg_core.classifier import is_basic_energy
from ptcg_core.config import get_settings
from ptcg_core.data.knowledge import BASIC_ENERGY_QUALITY
from ptcg_core.data.models.card import CardFace, Deck
from ptcg_core.data.models.responses import (
    CardClassification,
    CardCut,
    DeckWarning,
    EvolutionAnalysis,
    MetaAnalysis,
    Recommendation,
    RecommendationPriority,
    SynergyAnalysis,
)
from ptcg_core.evolution import MISSING_SUFFIX

logger = logging.getLogger(__name__)

PRIORITY_ORDER: dict[str, int] = {"essential": 0, "high": 1, "medium": 2, "low": 3}

SEVERITY_PRIORITY: dict[str, RecommendationPriority] = {
    "critical": "essential",
    "high": "high",
    "medium": "medium",
    "low": "low",
    "info": "low",
}

# Basics in the deck at or below which no Basic Pokemon is cut
PROTECTED_BASICS = 10
MISSING_BASIC_COPIES = 3

# Type -> the acceleration card to suggest for it
ACCELERATION_BY_TYPE: dict[str, str] = {
    "Lightning": "Elesa's Sparkle",
    "Fire": "Magma Basin",
    "Water": "Melony",
    "Darkness": "Dark Patch",
    "Metal": "Metal Saucer",
    "Fighting": "Gutsy Pickaxe",
}
DEFAULT_ACCELERATION = "Twin Energy"


@dataclass(frozen=True)
class _Suggestion:
    card: str
    quantity: int
    reasoning: str
    improvement: float
    alternatives: tuple[str, ...] = ()


# Warning id -> cards that address it
WARNING_SUGGESTIONS: dict[str, tuple[_Suggestion, ...]] = {
    "consistency-draw-support": (
        _Suggestion(
            "Professor's Research", 4, "Draw power to find key pieces", 8.0, ("Iono", "Colress's Experiment")
        ),
        _Suggestion("Marnie", 2, "Draw plus hand disruption", 4.0, ("Iono", "Judge")),
        _Suggestion("Lumineon V", 1, "Finds a Supporter when benched", 3.0),
    ),
    "consistency-low-basics": (
        _Suggestion("Quick Ball", 4, "Finds Basic Pokemon for the opening turns", 6.0, ("Nest Ball",)),
    ),
    "consistency-mulligan": (
        _Suggestion("Quick Ball", 4, "Reduces missed setups", 4.0, ("Nest Ball",)),
    ),
    "power-no-gust": (
        _Suggestion("Boss's Orders", 2, "Gust effect to take key knockouts", 7.0, ("Counter Catcher",)),
        _Suggestion("Cross Switcher", 2, "Item-based gust effect", 3.0),
    ),
}

SPEED_WARNINGS = ("speed-glacial", "speed-slow", "speed-no-acceleration")


@dataclass
class _Merged:
    items: dict[str, Recommendation] = field(default_factory=dict)

    def add(self, recommendation: Recommendation) -> None:
        """Merge by card name: the stronger priority and the larger quantity win."""
        current = self.items.get(recommendation.card)
        if current is None:
            self.items[recommendation.card] = recommendation
            return
        reasoning = current.reasoning + [r for r in recommendation.reasoning if r not in current.reasoning]
        priority = min(current.priority, recommendation.priority, key=PRIORITY_ORDER.__getitem__)
        self.items[recommendation.card] = current.model_copy(
            update={
                "priority": priority,
                "quantity": max(current.quantity, recommendation.quantity),
                "reasoning": reasoning,
                "estimated_improvement": max(current.estimated_improvement, recommendation.estimated_improvement),
            }
        )

    def ordered(self) -> list[Recommendation]:
        return sorted(
            self.items.values(),
            key=lambda r: (PRIORITY_ORDER[r.priority], -r.estimated_improvement, r.card),
        )


def _main_type(deck: Deck) -> str | None:
    totals: dict[str, int] = {}
    for entry in deck.entries_where(lambda c: c.is_pokemon and c.max_damage > 0):
        for pokemon_type in entry.card.types:
            totals[pokemon_type] = totals.get(pokemon_type, 0) + entry.quantity
    if not totals:
        return None
    return min(totals, key=lambda t: (-totals[t], t))


def size_adjustment(deck: Deck) -> Recommendation | None:
    deck_size = get_settings().deck_size
    difference = deck_size - deck.total_cards
    if difference == 0:
        return None
    if difference > 0:
        reason = f"Add {difference} more cards to reach {deck_size}"
    else:
        reason = f"Remove {-difference} cards to reach {deck_size}"
    return Recommendation(
        type="adjust",
        priority="essential",
        card="Deck size",
        quantity=abs(difference),
        reasoning=[reason],
        estimated_improvement=100.0,
    )


def _room(deck: Deck, card: str, quantity: int) -> int:
    """Copies of ``card`` that can still be added under the copy limit."""
    current = deck.quantity_by_name().get(card, 0)
    return max(0, min(quantity, get_settings().max_copies - current) if current else quantity)


def _from_warnings(deck: Deck, warnings: list[DeckWarning]) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    for warning in warnings:
        suggestions = list(WARNING_SUGGESTIONS.get(warning.id, ()))
        if warning.id in SPEED_WARNINGS:
            main_type = _main_type(deck)
            card = ACCELERATION_BY_TYPE.get(main_type or "", DEFAULT_ACCELERATION)
            suggestions.append(_Suggestion(card, 2, f"Energy acceleration for {main_type or 'your'} attackers", 6.0))
        for suggestion in suggestions:
            quantity = _room(deck, suggestion.card, suggestion.quantity)
            if quantity == 0:
                continue
            recommendations.append(
                Recommendation(
                    type="add",
                    priority=SEVERITY_PRIORITY[warning.severity],
                    card=suggestion.card,
                    quantity=quantity,
                    reasoning=[suggestion.reasoning, warning.title],
                    estimated_improvement=suggestion.improvement,
                    alternatives=list(suggestion.alternatives),
                )
            )
    return recommendations


def _from_evolution(evolution: EvolutionAnalysis) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    for line in evolution.lines:
        if not line.base_pokemon.endswith(MISSING_SUFFIX):
            continue
        basic = line.base_pokemon.removesuffix(MISSING_SUFFIX)
        recommendations.append(
            Recommendation(
                type="add",
                priority="essential",
                card=basic,
                quantity=MISSING_BASIC_COPIES,
                reasoning=[f"{', '.join(line.stage1 or line.stage2)} cannot be played without {basic}"],
                estimated_improvement=10.0,
                synergies=line.stage1 + line.stage2,
            )
        )
    return recommendations


def _from_meta(deck: Deck, meta: MetaAnalysis) -> list[Recommendation]:
    return [
        Recommendation(
            type="add",
            priority="low",
            card=tech,
            quantity=1,
            reasoning=["Tech for difficult meta matchups"],
            estimated_improvement=2.0,
        )
        for tech in meta.tech_recommendations
        if _room(deck, tech, 1)
    ]


def _from_synergy(synergy: SynergyAnalysis, deck: Deck) -> list[Recommendation]:
    by_id = {card.id: card.name for card in deck.cards}
    recommendations: list[Recommendation] = []
    for edge in synergy.edges:
        if edge.relation != "anti-synergy":
            continue
        target = by_id.get(edge.target, edge.target)
        recommendations.append(
            Recommendation(
                type="replace",
                priority="medium",
                card=target,
                quantity=1,
                target_card=by_id.get(edge.source, edge.source),
                reasoning=[edge.description or f"{target} works against the rest of the deck"],
                estimated_improvement=3.0,
            )
        )
    return recommendations


def generate_recommendations(
    deck: Deck,
    warnings: list[DeckWarning],
    evolution: EvolutionAnalysis,
    synergy: SynergyAnalysis,
    meta: MetaAnalysis,
) -> list[Recommendation]:
    """Recommendations ordered by priority, the deck-size fix always first."""
    merged = _Merged()
    for recommendation in (
        _from_evolution(evolution)
        + _from_warnings(deck, warnings)
        + _from_synergy(synergy, deck)
        + _from_meta(deck, meta)
    ):
        merged.add(recommendation)

    recommendations = merged.ordered()
    adjustment = size_adjustment(deck)
    if adjustment is not None:
        recommendations.insert(0, adjustment)
    logger.debug("Generated %d recommendations", len(recommendations))
    return recommendations


# =============================================================================
# Cuts
# =============================================================================


def _cut_category(card: CardFace, classification: CardClassification | None) -> str:
    if classification is None:
        return "unknown"
    if card.is_pokemon:
        return classification.role
    if card.is_trainer:
        return classification.trainer_category
    return f"{classification.energy_kind}_energy"


def suggest_cuts(
    deck: Deck,
    classifications: dict[str, CardClassification],
    recommendations: list[Recommendation],
    core_engine: list[str],
) -> list[CardCut]:
    """Cards to remove so the recommended additions fit in the deck.

    Lowest quality goes first; among equals, the card whose functional
    category is most crowded goes first.
    """
    additions = sum(r.quantity for r in recommendations if r.type == "add")
    needed = deck.total_cards + additions - get_settings().deck_size
    if needed <= 0:
        return []

    added = {r.card for r in recommendations if r.type == "add"}
    protect_basics = deck.count(lambda c: c.is_basic_pokemon) <= PROTECTED_BASICS

    categories: dict[str, int] = {}
    candidates: list[tuple[int, str, CardFace, int]] = []
    for entry in deck.entries:
        classification = classifications.get(entry.card.id)
        category = _cut_category(entry.card, classification)
        categories[category] = categories.get(category, 0) + entry.quantity
        if entry.card.name in core_engine or entry.card.name in added:
            continue
        if protect_basics and entry.card.is_basic_pokemon:
            continue
        if is_basic_energy(entry.card):
            quality = BASIC_ENERGY_QUALITY
        else:
            quality = classification.quality if classification else 5
        candidates.append((quality, category, entry.card, entry.quantity))

    candidates.sort(key=lambda c: (c[0], -categories[c[1]], c[2].name))

    cuts: list[CardCut] = []
    for quality, category, card, quantity in candidates:
        if needed <= 0:
            break
        count = min(needed, quantity)
        needed -= count
        cuts.append(
            CardCut(
                card=card.name,
                quantity=count,
                quality=quality,
                category=category,
                reason=f"Lowest quality {category.replace('_', ' ')} card ({quality}/10)",
            )
        )
    return cuts

"""Draw-consistency summary of a deck."""

from __future__ import annotations

import logging

from ptcg_core.classifier import count_classified, is_attacker, is_basic_energy
from ptcg_core.config import get_settings
from ptcg_core.data.knowledge import RECOMMENDED_ENERGY_PERCENT, RECOMMENDED_RATIOS
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    CardClassification,
    ConsistencyAnalysis,
    EnergyCurve,
    EnergyRatio,
    EvolutionAnalysis,
    PokemonRatio,
    PrizeImpact,
    SetupProbabilities,
    TrainerDistribution,
)
from ptcg_core.probability import (
    dead_draw_probability,
    mulligan_probability,
    prize_probability,
    prize_probability_at_least_one,
    probability_at_least,
    probability_at_least_one,
)

logger = logging.getLogger(__name__)

# Component weights for the overall consistency number
CONSISTENCY_WEIGHTS = {
    "energy": 0.15,
    "trainers": 0.20,
    "pokemon": 0.15,
    "curve": 0.10,
    "mulligan": 0.15,
    "dead_draw": 0.15,
    "prizes": 0.10,
}

# Minimum copies per trainer role for a "balanced" trainer suite
TRAINER_BALANCE_MINIMUMS = {
    "draw": 8,
    "search": 4,
    "disruption": 2,
    "switching": 2,
    "recovery": 1,
}

IMPORTANT_QUALITY = 8


def count_basics(deck: Deck) -> int:
    return deck.count(lambda c: c.is_basic_pokemon)


def count_draw_supporters(deck: Deck, classifications: dict[str, CardClassification]) -> int:
    return count_classified(
        deck,
        classifications,
        lambda c: c.trainer_category == "draw" and c.trainer_type == "supporter",
    )


def energy_ratio(deck: Deck) -> EnergyRatio:
    total_cards = deck.total_cards
    energy = deck.count(lambda c: c.is_energy)
    basic = deck.count(is_basic_energy)
    search = deck.count(
        lambda c: c.is_trainer and ("energy" in c.name.lower() or "vessel" in c.name.lower())
    )
    percentage = 100.0 * energy / total_cards if total_cards else 0.0
    low, high = RECOMMENDED_ENERGY_PERCENT
    return EnergyRatio(
        basic=basic,
        special=energy - basic,
        search=search,
        total=energy,
        percentage=round(percentage, 1),
        recommended_min=low,
        recommended_max=high,
        is_optimal=low <= percentage <= high,
    )


def trainer_distribution(deck: Deck, classifications: dict[str, CardClassification]) -> TrainerDistribution:
    counts: dict[str, int] = {}
    types: dict[str, int] = {}
    for entry in deck.entries:
        classification = classifications.get(entry.card.id)
        if classification is None or classification.category != "trainer":
            continue
        counts[classification.trainer_category] = counts.get(classification.trainer_category, 0) + entry.quantity
        types[classification.trainer_type] = types.get(classification.trainer_type, 0) + entry.quantity
    return TrainerDistribution(
        draw=counts.get("draw", 0),
        search=counts.get("search", 0),
        energy_acceleration=counts.get("energy_acceleration", 0),
        disruption=counts.get("disruption", 0),
        switching=counts.get("switching", 0),
        recovery=counts.get("recovery", 0),
        utility=counts.get("utility", 0) + counts.get("tool", 0) + counts.get("stadium", 0),
        stadiums=types.get("stadium", 0),
        tools=types.get("tool", 0),
        supporters=types.get("supporter", 0),
        items=types.get("item", 0),
        total=sum(counts.values()),
    )


def pokemon_ratio(
    deck: Deck,
    classifications: dict[str, CardClassification],
    evolution: EvolutionAnalysis,
) -> PokemonRatio:
    return PokemonRatio(
        basics=count_basics(deck),
        evolutions=deck.count(lambda c: c.is_pokemon and c.stage > 0),
        attackers=count_classified(deck, classifications, is_attacker),
        support=count_classified(
            deck,
            classifications,
            lambda c: c.role in ("ability_support", "wall", "starter"),
        ),
        total=deck.count(lambda c: c.is_pokemon),
        evolution_lines=len(evolution.lines),
    )


def energy_curve(deck: Deck) -> EnergyCurve:
    """Attack-cost distribution weighted by copies."""
    distribution = [0] * 6
    total_cost = 0
    attacks = 0
    peak = 0
    for entry in deck.entries_where(lambda c: c.is_pokemon):
        for attack in entry.card.attacks:
            cost = attack.energy_cost
            if cost <= 0:
                continue
            distribution[min(cost, 5)] += entry.quantity
            total_cost += cost * entry.quantity
            attacks += entry.quantity
            peak = max(peak, cost)

    average = total_cost / attacks if attacks else 0.0
    if average < 2:
        curve = "low"
    elif average > 3:
        curve = "high"
    else:
        curve = "balanced"
    return EnergyCurve(average_cost=round(average, 2), peak_cost=peak, distribution=distribution, curve=curve)


def curve_efficiency(curve: EnergyCurve) -> float:
    if curve.average_cost == 0:
        return 50.0
    if curve.average_cost <= 2:
        return 100.0
    if curve.average_cost <= 2.5:
        return 85.0
    if curve.average_cost <= 3:
        return 70.0
    return 50.0


def setup_probabilities(
    deck: Deck,
    classifications: dict[str, CardClassification],
) -> SetupProbabilities:
    settings = get_settings()
    deck_size = deck.total_cards
    if deck_size <= 0:
        return SetupProbabilities()

    basics = count_basics(deck)
    energy = deck.count(lambda c: c.is_energy)
    helpers = count_classified(deck, classifications, lambda c: c.trainer_category in ("draw", "search"))
    attackers = count_classified(deck, classifications, is_attacker)

    # Opening hand plus the first draw
    turn_one = probability_at_least_one(deck_size, basics, settings.hand_size) * probability_at_least_one(
        deck_size, energy, settings.hand_size + 1
    )
    turn_two = turn_one * probability_at_least_one(deck_size, helpers, settings.cards_seen_turn_two)
    turn_three = probability_at_least_one(deck_size, attackers, settings.cards_seen_turn_three) * probability_at_least(
        2, deck_size, energy, settings.cards_seen_turn_three
    )
    return SetupProbabilities(turn_one=turn_one, turn_two=turn_two, turn_three=turn_three)


def prize_impact(deck: Deck, classifications: dict[str, CardClassification]) -> PrizeImpact:
    """How exposed the deck is to prizing its thin lines."""
    deck_size = deck.total_cards
    if deck_size <= 0:
        return PrizeImpact()

    critical: list[str] = []
    vulnerability = 0.0
    for name, quantity in sorted(deck.quantity_by_name().items()):
        entry = next(e for e in deck.entries if e.card.name == name)
        if is_basic_energy(entry.card):
            continue
        classification = classifications.get(entry.card.id)
        if quantity == 1:
            critical.append(name)
            vulnerability += prize_probability_at_least_one(1, deck_size)
        elif quantity == 2 and classification is not None and classification.quality >= IMPORTANT_QUALITY:
            vulnerability += prize_probability(2, deck_size)

    vulnerability = min(1.0, vulnerability)
    return PrizeImpact(
        key_card_vulnerability=round(vulnerability, 4),
        critical_cards=critical,
        resilience=max(0, min(100, round(100 - vulnerability * 100))),
    )


def analyze_consistency(
    deck: Deck,
    classifications: dict[str, CardClassification],
    evolution: EvolutionAnalysis,
) -> ConsistencyAnalysis:
    """Summarise how reliably the deck finds its pieces."""
    deck_size = deck.total_cards
    ratio = energy_ratio(deck)
    trainers = trainer_distribution(deck, classifications)
    pokemon = pokemon_ratio(deck, classifications, evolution)
    curve = energy_curve(deck)
    mulligan = mulligan_probability(pokemon.basics, deck_size) if deck_size else 1.0
    dead_draw = (
        dead_draw_probability(count_draw_supporters(deck, classifications), deck_size) if deck_size else 1.0
    )
    prizes = prize_impact(deck, classifications)

    balance_checks = [getattr(trainers, field) >= minimum for field, minimum in TRAINER_BALANCE_MINIMUMS.items()]
    trainer_score = 100.0 * sum(balance_checks) / len(balance_checks)
    pokemon_min, pokemon_max, _ = RECOMMENDED_RATIOS["pokemon"]
    pokemon_score = 100.0 if pokemon_min <= pokemon.total <= pokemon_max else 60.0

    weights = CONSISTENCY_WEIGHTS
    overall = (
        weights["energy"] * (100.0 if ratio.is_optimal else 70.0)
        + weights["trainers"] * trainer_score
        + weights["pokemon"] * pokemon_score
        + weights["curve"] * curve_efficiency(curve)
        + weights["mulligan"] * (100.0 - mulligan * 100.0)
        + weights["dead_draw"] * (100.0 - dead_draw * 100.0)
        + weights["prizes"] * prizes.resilience
    )
    if deck_size == 0:
        overall = 0.0

    logger.debug("Consistency: mulligan %.3f, dead draw %.3f, overall %.1f", mulligan, dead_draw, overall)
    return ConsistencyAnalysis(
        energy_ratio=ratio,
        trainer_distribution=trainers,
        pokemon_ratio=pokemon,
        energy_curve=curve,
        mulligan_probability=mulligan,
        setup_probabilities=setup_probabilities(deck, classifications),
        dead_draw_probability=dead_draw,
        prize_impact=prizes,
        evolution=evolution,
        overall_consistency=max(0, min(100, round(overall))),
    )

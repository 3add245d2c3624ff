"""Individual scoring factors.

Each factor is a pure function of a :class:`ScoringContext`; confidence is
1.0 for the purely mathematical ones and lower for name and text
heuristics.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ..classifier import count_classified, is_acceleration, is_draw_support
from ..data.knowledge import (
    RECOMMENDED_ENERGY_PERCENT,
    RECOVERY_KEYWORDS,
    SEARCH_KEYWORDS,
    STATUS_KEYWORDS,
    SWITCH_KEYWORDS,
    name_in,
)
from ..data.models.card import Deck
from ..data.models.responses import (
    CardClassification,
    ConsistencyAnalysis,
    FactorCategory,
    MatchupPrediction,
    MetaAnalysis,
    ScoringFactor,
    SpeedAnalysis,
    SynergyAnalysis,
)

# Damage per Energy assumed when the deck has no costed attacks
DEFAULT_DAMAGE_PER_ENERGY = 30.0
FAVORABLE_WIN_RATE = 55.0


@dataclass(frozen=True)
class ScoringContext:
    """Everything the factors read; built once per analysis."""

    deck: Deck
    classifications: dict[str, CardClassification]
    consistency: ConsistencyAnalysis
    synergy: SynergyAnalysis
    speed: SpeedAnalysis
    meta: MetaAnalysis
    matchups: list[MatchupPrediction] = field(default_factory=list)


def _factor(
    name: str,
    category: FactorCategory,
    raw_score: float,
    weight: float,
    confidence: float,
    details: list[str],
) -> ScoringFactor:
    return ScoringFactor(
        name=name,
        category=category,
        raw_score=round(max(0.0, min(100.0, raw_score)), 2),
        weight=weight,
        confidence=confidence,
        details=details,
    )


# =============================================================================
# Consistency
# =============================================================================


def mulligan_rate(ctx: ScoringContext) -> ScoringFactor:
    mulligan = ctx.consistency.mulligan_probability
    basics = ctx.consistency.pokemon_ratio.basics
    return _factor(
        "Mulligan Rate",
        "consistency",
        100 - mulligan * 200,
        0.25,
        1.0,
        [f"{mulligan:.1%} mulligan chance", f"{basics} Basic Pokemon in deck"],
    )


def draw_power(ctx: ScoringContext) -> ScoringFactor:
    copies = 0
    quality = 0
    for entry in ctx.deck.entries:
        classification = ctx.classifications.get(entry.card.id)
        if classification is None or not is_draw_support(classification):
            continue
        copies += entry.quantity
        quality += classification.quality * entry.quantity
    average_quality = quality / copies if copies else 0.0
    score = average_quality * 10 * min(10, copies) / 10
    return _factor(
        "Draw Power",
        "consistency",
        score,
        0.30,
        0.9,
        [f"{copies} draw cards", f"Average quality: {average_quality:.1f}/10"],
    )


def evolution_consistency(ctx: ScoringContext) -> ScoringFactor:
    evolution = ctx.consistency.evolution
    details = [
        f"{line.base_pokemon}: {line.structure} ({line.turn_two_stage1:.0%} T2)" for line in evolution.lines
    ]
    return _factor(
        "Evolution Consistency",
        "consistency",
        evolution.overall_score,
        0.20,
        0.85,
        details or ["No evolution lines"],
    )


def energy_balance(ctx: ScoringContext) -> ScoringFactor:
    ratio = ctx.consistency.energy_ratio
    share = ratio.percentage / 100
    low, high = RECOMMENDED_ENERGY_PERCENT
    if low / 100 <= share <= high / 100:
        score = 100
    elif 0.10 <= share <= 0.30:
        score = 80
    elif 0.08 <= share <= 0.35:
        score = 60
    else:
        score = 40
    return _factor(
        "Energy Balance",
        "consistency",
        score,
        0.15,
        0.8,
        [
            f"{ratio.total} Energy ({ratio.percentage:.0f}% of deck)",
            "Optimal ratio" if score >= 80 else "Suboptimal ratio",
        ],
    )


def search_options(ctx: ScoringContext) -> ScoringFactor:
    copies = ctx.deck.count(lambda c: c.is_trainer and name_in(c.name, SEARCH_KEYWORDS))
    copies = max(
        copies,
        count_classified(ctx.deck, ctx.classifications, lambda c: c.trainer_category == "search"),
    )
    return _factor(
        "Search Options",
        "consistency",
        copies * 12.5,
        0.10,
        0.9,
        [f"{copies} search cards", "Good search engine" if copies >= 6 else "Limited search"],
    )


# =============================================================================
# Power
# =============================================================================


def damage_output(ctx: ScoringContext) -> ScoringFactor:
    peak = max((entry.card.max_damage for entry in ctx.deck.entries_where(lambda c: c.is_pokemon)), default=0)
    if peak >= 300:
        score = 100
    elif peak >= 250:
        score = 90
    elif peak >= 200:
        score = 80
    elif peak >= 150:
        score = 70
    elif peak >= 100:
        score = 60
    else:
        score = 40
    return _factor(
        "Damage Output",
        "power",
        score,
        0.35,
        0.9,
        [f"Max damage: {peak}", "One-hit KO potential" if score >= 80 else "Two-hit KO deck"],
    )


def energy_efficiency(ctx: ScoringContext) -> ScoringFactor:
    damage = 0
    cost = 0
    for entry in ctx.deck.entries_where(lambda c: c.is_pokemon):
        for attack in entry.card.attacks:
            damage += attack.damage
            cost += max(1, attack.energy_cost)
    per_energy = damage / cost if cost else DEFAULT_DAMAGE_PER_ENERGY
    return _factor(
        "Energy Efficiency",
        "power",
        per_energy * 2,
        0.25,
        0.85,
        [f"{per_energy:.0f} damage per Energy", "Highly efficient" if per_energy >= 40 else "Energy hungry"],
    )


def attack_options(ctx: ScoringContext) -> ScoringFactor:
    unique = {
        attack.name for entry in ctx.deck.entries_where(lambda c: c.is_pokemon) for attack in entry.card.attacks
    }
    return _factor(
        "Attack Options",
        "power",
        len(unique) * 10,
        0.20,
        0.8,
        [f"{len(unique)} unique attacks", "Versatile" if len(unique) >= 8 else "Limited options"],
    )


def disruption_effects(ctx: ScoringContext) -> ScoringFactor:
    status = {
        entry.card.name
        for entry in ctx.deck.entries_where(lambda c: c.is_pokemon)
        if any(keyword in attack.text.lower() for attack in entry.card.attacks for keyword in STATUS_KEYWORDS)
    }
    return _factor(
        "Disruption Effects",
        "power",
        len(status) * 25,
        0.20,
        0.7,
        [f"{len(status)} Pokemon with status effects", "Has disruption" if status else "No status effects"],
    )


# =============================================================================
# Speed
# =============================================================================


def energy_acceleration(ctx: ScoringContext) -> ScoringFactor:
    copies = sum(
        entry.quantity
        for entry in ctx.deck.entries
        if entry.card.id in ctx.classifications and is_acceleration(entry.card, ctx.classifications[entry.card.id])
    )
    return _factor(
        "Energy Acceleration",
        "speed",
        copies * 15,
        0.40,
        0.9,
        [f"{copies} acceleration cards", "Fast Energy" if copies * 15 >= 60 else "Manual attachments only"],
    )


def setup_speed(ctx: ScoringContext) -> ScoringFactor:
    immediate = {
        entry.card.name
        for entry in ctx.deck.entries_where(lambda c: c.is_basic_pokemon)
        if any(attack.damage >= 50 for attack in entry.card.attacks)
    }
    return _factor(
        "Setup Speed",
        "speed",
        len(immediate) * 25,
        0.30,
        0.85,
        [f"{len(immediate)} immediate attackers", "Fast setup" if len(immediate) >= 2 else "Needs evolution"],
    )


def mobility(ctx: ScoringContext) -> ScoringFactor:
    copies = ctx.deck.count(lambda c: not c.is_pokemon and name_in(c.name, SWITCH_KEYWORDS))
    return _factor(
        "Mobility",
        "speed",
        copies * 20,
        0.20,
        0.9,
        [f"{copies} switch effects", "High mobility" if copies >= 3 else "Limited switching"],
    )


def prize_race(ctx: ScoringContext) -> ScoringFactor:
    rating = ctx.meta.speed_rating
    score = {"fast": 90, "competitive": 70}.get(rating, 40)
    return _factor(
        "Prize Race",
        "speed",
        score,
        0.10,
        0.7,
        [f"{rating} speed rating", "Compared to current meta"],
    )


# =============================================================================
# Versatility
# =============================================================================


def type_coverage(ctx: ScoringContext) -> ScoringFactor:
    types = sorted(ctx.deck.pokemon_types)
    return _factor(
        "Type Coverage",
        "versatility",
        len(types) * 30,
        0.30,
        0.9,
        [f"{len(types)} different types", ", ".join(types) or "No Pokemon types"],
    )


def win_conditions(ctx: ScoringContext) -> ScoringFactor:
    strategies = sum(1 for cluster in ctx.synergy.clusters if cluster.high_importance)
    return _factor(
        "Win Conditions",
        "versatility",
        strategies * 35,
        0.35,
        0.8,
        [f"{strategies} viable strategies", "Multiple paths" if strategies >= 2 else "Single strategy"],
    )


def tech_flexibility(ctx: ScoringContext) -> ScoringFactor:
    techs = sorted({c.name for c in ctx.classifications.values() if c.is_tech})
    singletons = sum(
        1
        for name, quantity in ctx.deck.quantity_by_name().items()
        if quantity == 1 and name not in techs
    )
    return _factor(
        "Tech Flexibility",
        "versatility",
        25 * len(techs) + 5 * singletons,
        0.20,
        0.7,
        [f"{len(techs)} tech cards", "Room for tech" if techs else "No dedicated tech cards"],
    )


def recovery(ctx: ScoringContext) -> ScoringFactor:
    copies = ctx.deck.count(lambda c: c.is_trainer and name_in(c.name, RECOVERY_KEYWORDS))
    return _factor(
        "Recovery",
        "versatility",
        copies * 25,
        0.15,
        0.85,
        [f"{copies} recovery cards", "Can recover resources" if copies else "No recovery"],
    )


# =============================================================================
# Meta
# =============================================================================


def meta_position(ctx: ScoringContext) -> ScoringFactor:
    return _factor(
        "Meta Position",
        "meta",
        ctx.meta.meta_score,
        0.40,
        0.75,
        [f"{ctx.meta.meta_score}/100 meta score", f"Speed: {ctx.meta.speed_rating}"],
    )


def matchup_spread(ctx: ScoringContext) -> ScoringFactor:
    if not ctx.matchups:
        return _factor("Matchup Spread", "meta", 50, 0.35, 0.5, ["No reference matchups"])
    favorable = sum(1 for m in ctx.matchups if m.win_rate >= FAVORABLE_WIN_RATE)
    return _factor(
        "Matchup Spread",
        "meta",
        100 * favorable / len(ctx.matchups),
        0.35,
        0.7,
        [f"{favorable}/{len(ctx.matchups)} favorable", "Against top meta decks"],
    )


def counter_resistance(ctx: ScoringContext) -> ScoringFactor:
    vulnerable = any(c.has_rule_box and bool(c.abilities) for c in ctx.deck.cards if c.is_pokemon)
    return _factor(
        "Counter Resistance",
        "meta",
        60 if vulnerable else 90,
        0.25,
        0.8,
        ["Vulnerable to Path to the Peak" if vulnerable else "Resistant to ability lock", "Meta tech consideration"],
    )


FACTORS: tuple[Callable[[ScoringContext], ScoringFactor], ...] = (
    mulligan_rate,
    draw_power,
    evolution_consistency,
    energy_balance,
    search_options,
    damage_output,
    energy_efficiency,
    attack_options,
    disruption_effects,
    energy_acceleration,
    setup_speed,
    mobility,
    prize_race,
    type_coverage,
    win_conditions,
    tech_flexibility,
    recovery,
    meta_position,
    matchup_spread,
    counter_resistance,
)


def compute_factors(ctx: ScoringContext) -> list[ScoringFactor]:
    return [factor(ctx) for factor in FACTORS]

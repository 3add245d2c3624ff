"""Fit of a deck against the reference metagame."""

from __future__ import annotations

import logging

from ..classifier import is_acceleration, is_basic_energy
from ..data.meta_snapshot import MetaSnapshot
from ..data.models.card import CardFace, Deck
from ..data.models.responses import (
    ArchetypeAnalysis,
    CardClassification,
    CounterStrategy,
    FormatEvaluation,
    MatchupPrediction,
    MetaAnalysis,
    MetaTierName,
    RotationImpact,
)
from .matchups import type_matchup

logger = logging.getLogger(__name__)

BASE_META_SCORE = 50
KEY_TRAINER_POINTS = 5
KEY_POKEMON_POINTS = 8
TOO_SLOW_PENALTY = 20
FAST_BONUS = 10

# Average attack cost above which an unaccelerated deck cannot keep up
SLOW_ATTACK_COST = 2.5
# Below this average, or with any acceleration, the deck rates fast
FAST_ATTACK_COST = 2.0

POPULAR_MATCHUPS = 5
MAX_TECH_RECOMMENDATIONS = 5
BAD_MATCHUP_WIN_RATE = 40.0
MAJOR_ROTATION_COPIES = 5

TIER_THRESHOLDS: tuple[tuple[int, MetaTierName], ...] = (
    (80, "tier1"),
    (65, "tier2"),
    (50, "tier3"),
)

# Techs that shore up each meta weakness
WEAKNESS_TECHS: dict[str, tuple[str, ...]] = {
    "Path to the Peak vulnerability": ("Lost Vacuum", "Canceling Cologne"),
    "Special Energy reliance": ("Energy Retrieval", "Lost Vacuum"),
    "Bench space dependency": ("Manaphy", "Collapsed Stadium"),
    "Slow setup": ("Battle VIP Pass", "Irida"),
    "Low HP Pokemon": ("Manaphy", "Bravery Charm"),
}


def meta_tier(score: int) -> MetaTierName:
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return "rogue"


def _present(deck: Deck, names: tuple[str, ...]) -> list[str]:
    return [name for name in names if deck.has_card(name)]


def average_attack_cost(deck: Deck) -> float:
    costs = [attack.energy_cost for c in deck.cards if c.is_pokemon for attack in c.attacks]
    return sum(costs) / len(costs) if costs else 0.0


def speed_rating(deck: Deck, classifications: dict[str, CardClassification]) -> str:
    accelerated = any(
        card.id in classifications and is_acceleration(card, classifications[card.id]) for card in deck.cards
    )
    cost = average_attack_cost(deck)
    if cost > SLOW_ATTACK_COST and not accelerated:
        return "too slow"
    if cost < FAST_ATTACK_COST or accelerated:
        return "fast"
    return "competitive"


def _counter_strategies(deck: Deck, snapshot: MetaSnapshot) -> list[CounterStrategy]:
    strategies: list[CounterStrategy] = []
    for counter in snapshot.counter_cards:
        if not deck.has_card(counter.name):
            continue
        for target in counter.counters:
            strategies.append(CounterStrategy(archetype=target, strategy=counter.reason, cards=[counter.name]))

    for opponent in snapshot.by_popularity:
        attackers = sorted(
            {
                c.name
                for c in deck.cards
                if c.is_pokemon and c.max_damage > 0 and type_matchup(set(c.types), opponent) > 0
            }
        )
        if attackers:
            strategies.append(
                CounterStrategy(
                    archetype=opponent.name,
                    strategy=f"Hit {'/'.join(opponent.primary_types)} weakness",
                    cards=attackers,
                )
            )
    return strategies


def meta_weaknesses(deck: Deck) -> list[str]:
    ability_pokemon = deck.count(lambda c: c.is_pokemon and bool(c.abilities))
    special_energy = deck.count(lambda c: c.is_energy and not is_basic_energy(c))
    bench_sitters = deck.count(lambda c: c.is_pokemon and bool(c.abilities) and not c.attacks)
    stage_two = deck.count(lambda c: c.is_pokemon and c.stage == 2)
    low_hp = deck.count(lambda c: c.is_pokemon and c.hp is not None and c.hp <= 90)

    weaknesses: list[str] = []
    if ability_pokemon >= 10:
        weaknesses.append("Path to the Peak vulnerability")
    if special_energy >= 8:
        weaknesses.append("Special Energy reliance")
    if bench_sitters >= 6:
        weaknesses.append("Bench space dependency")
    if stage_two >= 4:
        weaknesses.append("Slow setup")
    if low_hp >= 8:
        weaknesses.append("Low HP Pokemon")
    return weaknesses


def _is_format_legal(card: CardFace, format_name: str) -> bool:
    if format_name == "expanded":
        return card.is_legal_expanded
    return card.is_legal_standard


def evaluate_format(deck: Deck, snapshot: MetaSnapshot, format_name: str = "standard") -> FormatEvaluation:
    banned = {name.lower() for name in snapshot.banned_in(format_name)}
    illegal = sorted(
        {c.name for c in deck.cards if not _is_format_legal(c, format_name) or c.name.lower() in banned}
    )
    return FormatEvaluation(format=format_name, is_legal=not illegal, illegal_cards=illegal)


def _release_key(date: str) -> str:
    return date.strip().replace("/", "-")


def rotation_impact(deck: Deck, snapshot: MetaSnapshot) -> RotationImpact:
    cutoff = snapshot.rotation_cutoff
    if not cutoff:
        return RotationImpact()
    rotating = [
        entry
        for entry in deck.entries
        if entry.card.release_date and _release_key(entry.card.release_date) < _release_key(cutoff)
    ]
    copies = sum(entry.quantity for entry in rotating)
    if copies == 0:
        impact = "none"
    elif copies < MAJOR_ROTATION_COPIES:
        impact = "minor"
    else:
        impact = "major"
    return RotationImpact(
        cutoff=cutoff,
        rotating_cards=sorted({entry.card.name for entry in rotating}),
        impact=impact,  # type: ignore[arg-type]
    )


def _tech_recommendations(
    deck: Deck,
    matchups: list[MatchupPrediction],
    weaknesses: list[str],
) -> list[str]:
    names = deck.lower_names
    techs: list[str] = []
    for matchup in matchups:
        if matchup.win_rate >= BAD_MATCHUP_WIN_RATE:
            continue
        for tech in matchup.tech_options:
            if tech not in techs:
                techs.append(tech)
    for weakness in weaknesses:
        for tech in WEAKNESS_TECHS.get(weakness, ()):
            if tech.lower() not in names and tech not in techs:
                techs.append(tech)
    return techs[:MAX_TECH_RECOMMENDATIONS]


def _recommendations(
    snapshot: MetaSnapshot,
    deck: Deck,
    rating: str,
    matchups: list[MatchupPrediction],
) -> list[str]:
    recommendations: list[str] = []
    if rating == "too slow":
        recommendations.append("Add Energy acceleration or cheaper attackers to keep up with the meta")
    missing_trainers = [t for t in snapshot.key_trainers if not deck.has_card(t)]
    if len(snapshot.key_trainers) - len(missing_trainers) < 4 and missing_trainers:
        recommendations.append(f"Consider meta staples such as {', '.join(missing_trainers[:3])}")
    if not _present(deck, snapshot.key_pokemon):
        recommendations.append("No proven meta Pokemon; expect an uphill climb against established decks")
    worst = [m for m in matchups if m.win_rate < BAD_MATCHUP_WIN_RATE]
    if worst:
        recommendations.append(f"Tech for difficult matchups: {', '.join(m.opponent for m in worst[-3:])}")
    return recommendations


def evaluate_meta(
    deck: Deck,
    classifications: dict[str, CardClassification],
    archetype: ArchetypeAnalysis,
    matchups: list[MatchupPrediction],
    snapshot: MetaSnapshot,
    format_name: str = "standard",
) -> MetaAnalysis:
    """Score the deck's position in the reference metagame."""
    trainers = _present(deck, snapshot.key_trainers)
    pokemon = _present(deck, snapshot.key_pokemon)
    rating = speed_rating(deck, classifications)

    score = BASE_META_SCORE + KEY_TRAINER_POINTS * len(trainers) + KEY_POKEMON_POINTS * len(pokemon)
    if rating == "too slow":
        score -= TOO_SLOW_PENALTY
    elif rating == "fast":
        score += FAST_BONUS
    score = max(0, min(100, score))

    tier = archetype.tier if archetype.matched else meta_tier(score)

    by_opponent = {m.opponent: m for m in matchups}
    popular = [
        f"{a.name}: {by_opponent[a.name].win_rate:.0f}% ({by_opponent[a.name].favorability})"
        for a in snapshot.by_popularity[:POPULAR_MATCHUPS]
        if a.name in by_opponent
    ]
    weaknesses = meta_weaknesses(deck)

    logger.debug("Meta: score %d, tier %s, speed %s", score, tier, rating)
    return MetaAnalysis(
        meta_score=score,
        tier=tier,
        meta_trainers=len(trainers),
        meta_pokemon=len(pokemon),
        speed_rating=rating,  # type: ignore[arg-type]
        popular_matchups=popular,
        counter_strategies=_counter_strategies(deck, snapshot),
        meta_weaknesses=weaknesses,
        format_evaluation=evaluate_format(deck, snapshot, format_name),
        rotation=rotation_impact(deck, snapshot),
        tech_recommendations=_tech_recommendations(deck, matchups, weaknesses),
        recommendations=_recommendations(snapshot, deck, rating, matchups),
        snapshot_version=snapshot.version,
    )

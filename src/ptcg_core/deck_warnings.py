"""Deterministic deck warnings.

Each rule looks at one signal from the earlier stages and emits at most a
handful of :class:`DeckWarning` records with an estimated impact and at
least one suggestion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ptcg_core.classifier import count_classified, is_acceleration, is_draw_support
from ptcg_core.data.knowledge import GUST_KEYWORDS, name_in
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    SEVERITY_ORDER,
    CardClassification,
    ConsistencyAnalysis,
    DeckLegality,
    DeckWarning,
    MatchupPrediction,
    PrizeEconomy,
    Severity,
    SpeedAnalysis,
    SynergyAnalysis,
    WarningCategory,
    WarningImpact,
    WarningSummary,
)
from ptcg_core.evolution import MISSING_SUFFIX

logger = logging.getLogger(__name__)

MIN_BASICS = 8
MAX_MULLIGAN = 0.25
LOW_DRAW_SUPPORT = 4
DRAW_SUPPORT_TARGET = 8
STAGE2_TURN_THREE_ODDS = 0.40
LOW_PEAK_DAMAGE = 150
MEDIUM_PEAK_DAMAGE = 200
BAD_MATCHUP = 30.0
LOW_PRIZE_EFFICIENCY = 60
MAX_LIABILITIES = 2
LOW_SYNERGY = 40
SUMMARY_THRESHOLD = 5

DIMINISHING_RETURNS = 0.8
WIN_RATE_IMPACT_FLOOR = -90.0


@dataclass(frozen=True)
class WarningContext:
    """Stage outputs the warning rules read."""

    deck: Deck
    legality: DeckLegality
    classifications: dict[str, CardClassification]
    consistency: ConsistencyAnalysis
    synergy: SynergyAnalysis
    speed: SpeedAnalysis
    prizes: PrizeEconomy
    matchups: list[MatchupPrediction] = field(default_factory=list)
    degraded_stages: tuple[str, ...] = ()


def _warning(
    id: str,
    severity: Severity,
    category: WarningCategory,
    title: str,
    description: str,
    suggestions: list[str],
    priority: int,
    impact: str = "",
    win_rate: float = 0.0,
    consistency: float = 0.0,
    speed: float = 0.0,
    auto_fixable: bool = False,
) -> DeckWarning:
    return DeckWarning(
        id=id,
        severity=severity,
        category=category,
        title=title,
        description=description,
        impact=impact,
        suggestions=suggestions,
        priority=priority,
        auto_fixable=auto_fixable,
        estimated_impact=WarningImpact(win_rate=win_rate, consistency=consistency, speed=speed),
    )


# =============================================================================
# Rules
# =============================================================================


def _legality(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    for index, issue in enumerate(ctx.legality.issues):
        suggestion = issue.suggestion or "Fix the deck list"
        if issue.kind == "deck_size":
            warnings.append(
                _warning(
                    "legality-deck-size",
                    "critical",
                    "legality",
                    "Illegal deck size",
                    issue.message,
                    [suggestion],
                    10,
                    impact="The deck cannot be played in sanctioned events",
                    win_rate=-100,
                    auto_fixable=True,
                )
            )
        elif issue.kind == "no_basic":
            warnings.append(
                _warning(
                    "legality-no-basic",
                    "critical",
                    "legality",
                    "No Basic Pokemon",
                    issue.message,
                    [suggestion],
                    10,
                    impact="Every game is an automatic loss",
                    win_rate=-100,
                )
            )
        else:
            key = issue.card.lower().replace(" ", "-") or str(index)
            warnings.append(
                _warning(
                    f"legality-{issue.kind}-{key}",
                    "critical",
                    "legality",
                    f"Illegal card: {issue.card}" if issue.card else "Malformed deck entry",
                    issue.message,
                    [suggestion],
                    9,
                    win_rate=-100,
                    auto_fixable=issue.kind == "copy_limit",
                )
            )
    return warnings


def _consistency(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    consistency = ctx.consistency
    basics = consistency.pokemon_ratio.basics
    if 0 < basics < MIN_BASICS:
        warnings.append(
            _warning(
                "consistency-low-basics",
                "high",
                "consistency",
                "Too few Basic Pokemon",
                f"Only {basics} Basic Pokemon; opening hands will often miss a setup",
                [f"Add {MIN_BASICS - basics} more Basic Pokemon", "Add Nest Ball or Buddy-Buddy Poffin"],
                8,
                impact=f"{consistency.mulligan_probability:.0%} chance to mulligan",
                win_rate=-10,
                consistency=-15,
            )
        )
    if consistency.mulligan_probability > MAX_MULLIGAN:
        warnings.append(
            _warning(
                "consistency-mulligan",
                "medium",
                "consistency",
                "High mulligan rate",
                f"{consistency.mulligan_probability:.1%} of opening hands contain no Basic Pokemon",
                ["Add more Basic Pokemon"],
                6,
                win_rate=-5,
                consistency=-10,
            )
        )

    draw_support = count_classified(ctx.deck, ctx.classifications, is_draw_support)
    if draw_support < LOW_DRAW_SUPPORT:
        warnings.append(
            _warning(
                "consistency-draw-support",
                "high",
                "consistency",
                "Very little draw support",
                f"Only {draw_support} draw Supporters or draw engines",
                ["Add Professor's Research", "Add Iono or Marnie", "Consider a draw engine such as Bibarel"],
                8,
                impact=f"{consistency.dead_draw_probability:.0%} chance of no Supporter in the first cards",
                win_rate=-12,
                consistency=-20,
            )
        )
    elif draw_support < DRAW_SUPPORT_TARGET:
        warnings.append(
            _warning(
                "consistency-draw-support",
                "medium",
                "consistency",
                "Light draw support",
                f"{draw_support} draw cards; most decks run at least {DRAW_SUPPORT_TARGET}",
                [f"Add {DRAW_SUPPORT_TARGET - draw_support} more draw Supporters"],
                6,
                win_rate=-5,
                consistency=-10,
            )
        )

    for line in consistency.evolution.lines:
        key = line.base_pokemon.removesuffix(MISSING_SUFFIX).lower().replace(" ", "-")
        if line.bottleneck != "none":
            warnings.append(
                _warning(
                    f"consistency-evolution-{key}",
                    "medium",
                    "consistency",
                    f"Evolution bottleneck in {line.base_pokemon} line",
                    f"The {line.structure} line is limited by its {line.bottleneck} count",
                    line.issues[:2] or [f"Adjust the {line.base_pokemon} line counts"],
                    5,
                    win_rate=-4,
                    consistency=-8,
                )
            )
        if line.stage2 and line.turn_three_stage2 < STAGE2_TURN_THREE_ODDS:
            warnings.append(
                _warning(
                    f"consistency-stage2-{key}",
                    "medium",
                    "consistency",
                    f"Unreliable Stage 2 in {line.base_pokemon} line",
                    f"Only {line.turn_three_stage2:.0%} to have the Stage 2 by turn 3",
                    ["Add Rare Candy", "Run more copies of the line"],
                    5,
                    win_rate=-5,
                    speed=-10,
                )
            )

    ratio = consistency.energy_ratio
    attackers = ctx.deck.count(lambda c: c.is_pokemon and c.max_damage > 0)
    if attackers and ratio.percentage < ratio.recommended_min:
        warnings.append(
            _warning(
                "consistency-low-energy",
                "medium",
                "consistency",
                "Low Energy count",
                f"{ratio.total} Energy ({ratio.percentage:.0f}% of the deck)",
                [f"Aim for {ratio.recommended_min:.0f}-{ratio.recommended_max:.0f}% Energy"],
                5,
                win_rate=-4,
                consistency=-8,
            )
        )
    return warnings


def _power(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    peak = max((c.max_damage for c in ctx.deck.cards if c.is_pokemon), default=0)
    if peak < LOW_PEAK_DAMAGE:
        warnings.append(
            _warning(
                "power-low-damage",
                "high",
                "power",
                "Low damage output",
                f"Highest printed damage is {peak}",
                ["Add an attacker that can hit 200 or more", "Include damage modifiers"],
                7,
                win_rate=-10,
            )
        )
    elif peak < MEDIUM_PEAK_DAMAGE:
        warnings.append(
            _warning(
                "power-medium-damage",
                "medium",
                "power",
                "Limited knockout power",
                f"Highest printed damage is {peak}; multi-prize Pokemon will take two hits",
                ["Add a heavier hitter for big targets"],
                5,
                win_rate=-5,
            )
        )
    if not ctx.deck.count(lambda c: c.is_trainer and name_in(c.name, GUST_KEYWORDS)):
        warnings.append(
            _warning(
                "power-no-gust",
                "high",
                "power",
                "No gust effects",
                "The deck cannot pull up Benched Pokemon to knock out",
                ["Add 2-3 Boss's Orders", "Consider Counter Catcher or Cross Switcher"],
                7,
                win_rate=-8,
            )
        )
    return warnings


def _speed(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    speed = ctx.speed
    if speed.classification == "glacial":
        warnings.append(
            _warning(
                "speed-glacial",
                "critical",
                "speed",
                "Extremely slow setup",
                f"First attack around turn {speed.first_attack_turn:.0f}; full setup around turn "
                f"{speed.full_setup_turn:.1f}",
                speed.recommendations[:2] or ["Add Energy acceleration"],
                9,
                win_rate=-20,
                speed=-30,
            )
        )
    elif speed.classification == "slow":
        warnings.append(
            _warning(
                "speed-slow",
                "high",
                "speed",
                "Slow setup",
                f"Full setup around turn {speed.full_setup_turn:.1f}",
                speed.recommendations[:2] or ["Add Energy acceleration"],
                7,
                win_rate=-10,
                speed=-20,
            )
        )

    accelerated = any(
        card.id in ctx.classifications and is_acceleration(card, ctx.classifications[card.id])
        for card in ctx.deck.cards
    )
    if not accelerated and speed.first_attack_turn > 2:
        warnings.append(
            _warning(
                "speed-no-acceleration",
                "medium",
                "speed",
                "No Energy acceleration",
                "Every attacker is powered up one manual attachment at a time",
                ["Add Energy acceleration for your type", "Add cheaper attackers"],
                5,
                win_rate=-5,
                speed=-10,
            )
        )
    return warnings


def _meta(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    for matchup in ctx.matchups:
        if matchup.win_rate >= BAD_MATCHUP:
            continue
        key = matchup.opponent.lower().replace(" ", "-")
        warnings.append(
            _warning(
                f"meta-matchup-{key}",
                "medium",
                "meta",
                f"Poor matchup against {matchup.opponent}",
                f"Estimated {matchup.win_rate:.0f}% win rate",
                matchup.tech_options[:2] or ["Add tech cards for this matchup"],
                4,
                win_rate=-(matchup.popularity / 10),
            )
        )
    types = ctx.deck.pokemon_types
    if len(types) == 1:
        (only,) = types
        warnings.append(
            _warning(
                "meta-mono-type",
                "medium",
                "meta",
                "Single attacking type",
                f"Every Pokemon is {only} type; one weakness covers the whole deck",
                ["Add a secondary attacker of another type"],
                3,
                win_rate=-3,
            )
        )
    return warnings


def _optimization(ctx: WarningContext) -> list[DeckWarning]:
    warnings: list[DeckWarning] = []
    prizes = ctx.prizes
    has_pokemon = bool(ctx.deck.count(lambda c: c.is_pokemon))
    if has_pokemon and prizes.efficiency < LOW_PRIZE_EFFICIENCY:
        warnings.append(
            _warning(
                "optimization-prize-trade",
                "medium",
                "optimization",
                "Poor prize trades",
                f"Prize trade efficiency {prizes.efficiency}/100",
                prizes.recommendations[:2] or ["Add single-prize attackers"],
                4,
                win_rate=-5,
            )
        )
    if len(prizes.worst_liabilities) > MAX_LIABILITIES:
        names = ", ".join(sorted({item.name for item in prizes.worst_liabilities}))
        warnings.append(
            _warning(
                "optimization-prize-liabilities",
                "medium",
                "optimization",
                "Several prize liabilities",
                f"Fragile multi-prize Pokemon: {names}",
                ["Replace fragile multi-prize Pokemon with single-prize alternatives"],
                4,
                win_rate=-4,
            )
        )
    for index, advisory in enumerate(ctx.legality.advisories):
        warnings.append(
            _warning(
                f"optimization-composition-{index}",
                "low",
                "optimization",
                "Unusual deck composition",
                advisory,
                ["Compare the deck's ratios with established lists"],
                2,
                win_rate=-2,
            )
        )
    anti = ctx.synergy.anti_synergy_count
    if anti:
        warnings.append(
            _warning(
                "optimization-anti-synergy",
                "medium",
                "optimization",
                "Conflicting cards",
                f"{anti} card pairs work against each other",
                [r for r in ctx.synergy.recommendations if r.startswith("Reconsider")][:2]
                or ["Remove one side of each conflicting pair"],
                4,
                win_rate=-3 * anti,
            )
        )
    if ctx.synergy.nodes and ctx.synergy.overall_score < LOW_SYNERGY:
        warnings.append(
            _warning(
                "optimization-low-synergy",
                "low",
                "optimization",
                "Low card synergy",
                f"Synergy score {ctx.synergy.overall_score}/100",
                ["Build around a clearer core engine"],
                3,
                win_rate=-3,
            )
        )
    for stage in ctx.degraded_stages:
        warnings.append(
            _warning(
                f"optimization-degraded-{stage}",
                "info",
                "optimization",
                f"Partial analysis: {stage}",
                f"The {stage} stage fell back to neutral defaults",
                ["Check the deck list for unusual card data"],
                1,
            )
        )
    return warnings


RULES = (_legality, _consistency, _power, _speed, _meta, _optimization)


def sort_warnings(warnings: list[DeckWarning]) -> list[DeckWarning]:
    return sorted(warnings, key=lambda w: (SEVERITY_ORDER[w.severity], -w.priority, w.id))


def generate_warnings(ctx: WarningContext) -> list[DeckWarning]:
    """Run every rule and return the warnings most severe first."""
    warnings: list[DeckWarning] = []
    for rule in RULES:
        warnings.extend(rule(ctx))
    warnings = sort_warnings(warnings)

    if len(warnings) > SUMMARY_THRESHOLD:
        counts = summarize_warnings(warnings)
        warnings.append(
            _warning(
                "summary",
                "info",
                "optimization",
                f"{len(warnings)} issues found",
                f"{counts.critical} critical, {counts.high} high and {counts.medium} medium severity issues",
                ["Fix the critical and high severity issues first"],
                1,
                impact=f"Combined estimated win-rate impact {counts.estimated_win_rate_impact:+.1f} points",
            )
        )
        warnings = sort_warnings(warnings)
    logger.debug("Generated %d warnings", len(warnings))
    return warnings


def summarize_warnings(warnings: list[DeckWarning]) -> WarningSummary:
    """Counts per severity plus the combined win-rate impact.

    Each further warning counts for less (x0.8 per rank), and the total is
    floored so a long list cannot claim more than a -90 point swing.
    """
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    impact = 0.0
    scale = 1.0
    for warning in sorted(warnings, key=lambda w: w.estimated_impact.win_rate):
        counts[warning.severity] += 1
        impact += warning.estimated_impact.win_rate * scale
        scale *= DIMINISHING_RETURNS
    return WarningSummary(
        total=len(warnings),
        critical=counts["critical"],
        high=counts["high"],
        medium=counts["medium"],
        low=counts["low"],
        info=counts["info"],
        estimated_win_rate_impact=round(max(WIN_RATE_IMPACT_FLOOR, impact), 1),
    )

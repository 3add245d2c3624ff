"""Prize-trade economy.

Rates how many prizes the deck hands over per knockout it takes, using
each attacker's best printed damage against a fixed set of common targets.
"""

from __future__ import annotations

import logging
import math
from typing import Literal

from ptcg_core.config import get_settings
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    PrizeEconomy,
    PrizeLiability,
    PrizeTrader,
    TradeScenario,
)

logger = logging.getLogger(__name__)

# (name, prizes taken on knockout, HP)
PRIZE_TARGETS: tuple[tuple[str, int, int], ...] = (
    ("Lugia VSTAR", 3, 280),
    ("Giratina VSTAR", 3, 280),
    ("Arceus VSTAR", 3, 280),
    ("Mew VMAX", 3, 310),
    ("Charizard ex", 2, 260),
    ("Lost Box attackers", 1, 110),
)

MAX_TRADERS = 5
MAX_LIABILITIES = 5
MAX_SCENARIOS = 10
MAX_TURNS_TO_KNOCK_OUT = 3

Verdict = Literal["excellent", "favorable", "even", "unfavorable", "terrible"]
Strategy = Literal["single-prize", "multi-prize", "mixed"]


def evaluate_trade(ratio: float, turns_to_knock_out: int) -> Verdict:
    """Grade a trade by prizes taken per prize given up, per turn spent."""
    adjusted = ratio / max(1, turns_to_knock_out)
    if adjusted >= 2:
        return "excellent"
    if adjusted >= 1.5:
        return "favorable"
    if adjusted >= 0.8:
        return "even"
    if adjusted >= 0.5:
        return "unfavorable"
    return "terrible"


def _prize_counts(deck: Deck) -> dict[int, int]:
    counts: dict[int, int] = {}
    for entry in deck.entries_where(lambda c: c.is_pokemon):
        value = entry.card.prize_value
        counts[value] = counts.get(value, 0) + entry.quantity
    return counts


def _best_traders(deck: Deck) -> list[PrizeTrader]:
    traders: dict[str, PrizeTrader] = {}
    for entry in deck.entries_where(lambda c: c.is_pokemon and bool(c.attacks)):
        card = entry.card
        trader = PrizeTrader(
            name=card.name,
            prize_value=card.prize_value,
            damage_per_prize=round(card.max_damage / card.prize_value, 1),
        )
        current = traders.get(card.name)
        if current is None or trader.damage_per_prize > current.damage_per_prize:
            traders[card.name] = trader
    ranked = sorted(traders.values(), key=lambda t: (-t.damage_per_prize, t.name))
    return ranked[:MAX_TRADERS]


def _worst_liabilities(deck: Deck) -> list[PrizeLiability]:
    liabilities: list[PrizeLiability] = []
    seen: set[tuple[str, str]] = set()
    for entry in deck.entries_where(lambda c: c.is_pokemon and c.prize_value >= 2):
        card = entry.card
        hp = card.hp or 0
        reasons: list[str] = []
        if hp < 250:
            if card.prize_value == 3 and hp < 300:
                reasons.append("VMAX/VSTAR with low HP")
            elif hp < 200:
                reasons.append("Extremely fragile for its prize value")
            else:
                reasons.append("Fragile multi-prize Pokemon")
        if not card.attacks:
            reasons.append("Multi-prize support Pokemon")
        for reason in reasons:
            if (card.name, reason) in seen:
                continue
            seen.add((card.name, reason))
            liabilities.append(PrizeLiability(name=card.name, prize_value=card.prize_value, hp=hp, reason=reason))

    # Most prizes per point of HP first
    liabilities.sort(key=lambda item: (-item.prize_value / max(1, item.hp), item.name, item.reason))
    return liabilities[:MAX_LIABILITIES]


def _scenarios(deck: Deck) -> list[TradeScenario]:
    scenarios: list[TradeScenario] = []
    seen: set[str] = set()
    for entry in deck.entries_where(lambda c: c.is_pokemon and bool(c.attacks)):
        card = entry.card
        if card.name in seen:
            continue
        seen.add(card.name)
        for target, prizes, hp in PRIZE_TARGETS:
            turns = math.ceil(hp / max(1, card.max_damage))
            if turns > MAX_TURNS_TO_KNOCK_OUT:
                continue
            ratio = prizes / card.prize_value
            scenarios.append(
                TradeScenario(
                    attacker=card.name,
                    opponent=target,
                    opponent_hp=hp,
                    prizes_given_up=card.prize_value,
                    prizes_taken=prizes,
                    turns_to_knock_out=turns,
                    trade_ratio=round(ratio, 2),
                    verdict=evaluate_trade(ratio, turns),
                )
            )
    scenarios.sort(key=lambda s: (-s.trade_ratio, s.turns_to_knock_out, s.attacker, s.opponent))
    return scenarios[:MAX_SCENARIOS]


def _strategy(counts: dict[int, int]) -> Strategy:
    single = counts.get(1, 0)
    multi = counts.get(2, 0) + counts.get(3, 0)
    if single > multi * 2:
        return "single-prize"
    if multi > single * 2:
        return "multi-prize"
    return "mixed"


GAMEPLANS: dict[str, str] = {
    "single-prize": "Force unfavorable prize trades with single-prize attackers",
    "multi-prize": "Race to take prizes quickly with powerful multi-prize Pokemon",
    "mixed": "Adapt prize trades to the matchup, using both approaches",
}


def _efficiency(average: float, traders: list[PrizeTrader], scenarios: list[TradeScenario]) -> int:
    score = 50
    if average <= 1.3:
        score += 20
    elif average <= 1.6:
        score += 10
    elif average >= 2.0:
        score -= 10

    mean_efficiency = sum(t.damage_per_prize for t in traders) / max(1, len(traders))
    if mean_efficiency >= 150:
        score += 20
    elif mean_efficiency >= 100:
        score += 10
    elif mean_efficiency < 50:
        score -= 10

    good = sum(1 for s in scenarios if s.verdict in ("excellent", "favorable"))
    score += min(20, good * 4)
    return max(0, min(100, score))


def _recommendations(efficiency: int, average: float, strategy: Strategy) -> list[str]:
    recommendations: list[str] = []
    if efficiency < 60:
        recommendations.append("Poor prize trade efficiency; the deck gives up too many prizes")
        if average > 1.7:
            recommendations.append("Add more single-prize attackers to improve trades")
        if strategy == "multi-prize":
            recommendations.append("Add gust effects such as Boss's Orders to target opposing liabilities")
    if strategy == "single-prize":
        recommendations.append("Keep the single-prize plan and force 2-for-1 or 3-for-1 trades")
        recommendations.append("Add recovery cards to sustain single-prize attackers")
    elif strategy == "multi-prize":
        recommendations.append("Focus on speed and take prizes before the opponent sets up")
        recommendations.append("Include gust effects to target weak Benched Pokemon")
    if efficiency >= 80:
        recommendations.append("Excellent prize trading; keep the current approach")
    return recommendations


def analyze_prize_economy(deck: Deck) -> PrizeEconomy:
    """Summarise how efficiently the deck trades prizes."""
    counts = _prize_counts(deck)
    pokemon = sum(counts.values())
    if pokemon == 0:
        return PrizeEconomy(
            efficiency=0,
            gameplan=GAMEPLANS["mixed"],
            recommendations=["Add Pokemon to the deck"],
        )

    average = sum(value * copies for value, copies in counts.items()) / pokemon
    liability = min(sum(value * copies for value, copies in counts.items()), get_settings().prize_count)
    traders = _best_traders(deck)
    scenarios = _scenarios(deck)
    strategy = _strategy(counts)
    efficiency = _efficiency(average, traders, scenarios)

    logger.debug("Prize economy: average %.2f, strategy %s, efficiency %d", average, strategy, efficiency)
    return PrizeEconomy(
        average_prize_value=round(average, 2),
        prize_liability=liability,
        best_traders=traders,
        worst_liabilities=_worst_liabilities(deck),
        scenarios=scenarios,
        strategy=strategy,
        gameplan=GAMEPLANS[strategy],
        critical_turns=[2, 3, 4] if strategy == "multi-prize" else [3, 4, 5],
        efficiency=efficiency,
        recommendations=_recommendations(efficiency, average, strategy),
    )

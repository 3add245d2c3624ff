"""Synergy graph construction.

Nodes are the distinct card ids in the deck; edges come from the relation
catalog in :mod:`.constants` plus generic type, energy and discard rules.
The graph is rebuilt for every call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..classifier import energy_provides, is_acceleration, is_attacker, is_basic_energy
from ..data.knowledge import ENERGY_ACCELERATION_BY_TYPE, STAPLE_IMPORTANCE
from ..data.models.card import CardFace, Deck
from ..data.models.responses import CardClassification, Relation, SynergyEdge, SynergyNode
from .constants import (
    ANTI_SYNERGIES,
    BASIC_ENERGY_STRENGTH,
    COLORLESS_ACCELERATION_STRENGTH,
    DISCARD_STRENGTH,
    DRAW_ABILITY_STRENGTH,
    EVOLUTION_STRENGTH,
    HEAVY_RETREAT,
    KNOWN_COMBOS,
    RARE_CANDY_STRENGTH,
    SEARCH_TARGETS,
    SWITCH_STRENGTH,
    TYPE_ACCELERATION_STRENGTH,
)

logger = logging.getLogger(__name__)


@dataclass
class SynergyGraph:
    """Weighted directed graph over a deck's cards."""

    nodes: dict[str, SynergyNode] = field(default_factory=dict)
    edges: list[SynergyEdge] = field(default_factory=list)

    def neighbours(self, card_id: str, *, positive_only: bool = True) -> set[str]:
        result: set[str] = set()
        for edge in self.edges:
            if positive_only and edge.relation == "anti-synergy":
                continue
            if edge.source == card_id:
                result.add(edge.target)
            elif edge.target == card_id:
                result.add(edge.source)
        return result

    def positive_edges(self) -> list[SynergyEdge]:
        return [edge for edge in self.edges if edge.relation != "anti-synergy"]

    def anti_edges(self) -> list[SynergyEdge]:
        return [edge for edge in self.edges if edge.relation == "anti-synergy"]


class _EdgeSet:
    """Collects edges, keeping the strongest per (source, target, relation)."""

    def __init__(self) -> None:
        self._edges: dict[tuple[str, str, str], SynergyEdge] = {}

    def add(self, source: CardFace, target: CardFace, strength: int, relation: Relation, description: str) -> None:
        if source.id == target.id:
            return
        key = (source.id, target.id, relation)
        existing = self._edges.get(key)
        if existing is not None and existing.strength >= strength:
            return
        self._edges[key] = SynergyEdge(
            source=source.id,
            target=target.id,
            strength=max(0, min(100, strength)),
            relation=relation,
            description=description,
        )

    def sorted(self) -> list[SynergyEdge]:
        return [self._edges[key] for key in sorted(self._edges)]


def card_importance(card: CardFace, deck_names: set[str]) -> int:
    """How central a card is to the deck, 0-100."""
    lowered = card.name.lower()
    if lowered in STAPLE_IMPORTANCE:
        return STAPLE_IMPORTANCE[lowered]
    importance = 50
    if (card.hp or 0) >= 200:
        importance += 20
    if card.abilities:
        importance += 15
    if card.evolves_from is not None and card.evolves_from in deck_names:
        importance += 10
    if card.is_energy:
        importance = max(importance, 70)
    return min(100, importance)


def _matches_search_filter(card: CardFace, target_filter: str) -> bool:
    if not card.is_pokemon:
        return False
    if target_filter == "basic":
        return card.is_basic_pokemon
    if target_filter == "hp70":
        return card.is_basic_pokemon and (card.hp or 0) <= 70
    if target_filter == "hp90":
        return (card.hp or 0) <= 90
    if target_filter == "evolution":
        return card.stage > 0
    if target_filter == "water":
        return "Water" in card.types
    return True


def _matches_anti_filter(card: CardFace, classification: CardClassification, target_filter: str) -> bool:
    if not card.is_pokemon:
        return False
    if target_filter == "rule_box_ability":
        return card.has_rule_box and bool(card.abilities)
    if target_filter == "bench_sitter":
        return classification.role == "ability_support"
    if target_filter == "basic_v_ability":
        return card.is_basic_pokemon and "V" in card.subtypes and bool(card.abilities)
    return False


def build_synergy_graph(deck: Deck, classifications: dict[str, CardClassification]) -> SynergyGraph:
    """Build the synergy graph for a deck."""
    cards: dict[str, CardFace] = {}
    quantities: dict[str, int] = {}
    for entry in deck.entries:
        cards.setdefault(entry.card.id, entry.card)
        quantities[entry.card.id] = quantities.get(entry.card.id, 0) + entry.quantity

    deck_names = {card.name for card in cards.values()}
    nodes = {
        card_id: SynergyNode(
            card_id=card_id,
            name=card.name,
            quantity=quantities[card_id],
            importance=card_importance(card, deck_names),
        )
        for card_id, card in sorted(cards.items())
    }

    def classification(card: CardFace) -> CardClassification:
        return classifications.get(card.id) or CardClassification(card_id=card.id, name=card.name)

    ordered = [cards[card_id] for card_id in sorted(cards)]
    pokemon = [card for card in ordered if card.is_pokemon]
    edges = _EdgeSet()

    def link_all(
        source: CardFace,
        targets: list[CardFace],
        predicate: Callable[[CardFace], bool],
        strength: int,
        relation: Relation,
        description: str,
    ) -> None:
        for target in targets:
            if predicate(target):
                edges.add(source, target, strength, relation, description)

    for card in ordered:
        lowered = card.name.lower()
        info = classification(card)

        # Evolution: pre-evolution feeds its evolutions
        if card.is_pokemon:
            link_all(
                card,
                pokemon,
                lambda t, name=card.name: t.evolves_from == name,
                EVOLUTION_STRENGTH,
                "combos-with",
                f"{card.name} evolves into this card",
            )

        if lowered == "rare candy":
            link_all(card, pokemon, lambda t: t.stage == 2, RARE_CANDY_STRENGTH, "accelerates",
                     "Rare Candy skips the Stage 1")

        for item_name, target_filter, strength, description in SEARCH_TARGETS:
            if lowered == item_name:
                link_all(card, pokemon, lambda t, f=target_filter: _matches_search_filter(t, f), strength,
                         "searches", description)

        # Type-specific acceleration
        for energy_type, accelerators in ENERGY_ACCELERATION_BY_TYPE.items():
            if not any(name in lowered for name in accelerators):
                continue
            if energy_type == "Colorless":
                link_all(card, pokemon, lambda t: is_attacker(classification(t)), COLORLESS_ACCELERATION_STRENGTH,
                         "accelerates", f"{card.name} provides extra Energy")
            else:
                link_all(card, pokemon, lambda t, et=energy_type: et in t.types and t.attacks != (),
                         TYPE_ACCELERATION_STRENGTH, "accelerates", f"{card.name} accelerates {energy_type} Energy")

        if is_basic_energy(card):
            provided = set(energy_provides(card))
            link_all(card, pokemon, lambda t, p=provided: bool(p & set(t.types)) and t.attacks != (),
                     BASIC_ENERGY_STRENGTH, "combos-with", f"{card.name} powers same-type attackers")

        if card.is_pokemon and "draw_engine" in info.synergy_tags:
            link_all(card, pokemon, lambda t: classification(t).role == "main_attacker", DRAW_ABILITY_STRENGTH,
                     "searches", f"{card.name} draws into attackers")

        if "discard_enabler" in info.synergy_tags:
            link_all(card, ordered, lambda t: "discard_payoff" in classification(t).synergy_tags, DISCARD_STRENGTH,
                     "combos-with", "Discarding fuels a discard-pile payoff")

        if info.trainer_category == "switching":
            link_all(card, pokemon, lambda t: t.retreat >= HEAVY_RETREAT, SWITCH_STRENGTH, "counters",
                     f"{card.name} offsets a heavy Retreat Cost")

        for anti_name, target_filter, strength, description in ANTI_SYNERGIES:
            if anti_name in lowered:
                link_all(card, pokemon, lambda t, f=target_filter: _matches_anti_filter(t, classification(t), f),
                         strength, "anti-synergy", description)

    for combo in KNOWN_COMBOS:
        sources = [card for card in ordered if combo["source"] in card.name.lower()]
        targets = [card for card in ordered if combo["target"] in card.name.lower()]
        for source in sources:
            for target in targets:
                edges.add(source, target, combo["strength"], combo["relation"], combo["desc"])

    graph = SynergyGraph(nodes=nodes, edges=edges.sorted())
    logger.debug("Synergy graph: %d nodes, %d edges", len(graph.nodes), len(graph.edges))
    return graph


def acceleration_cards(deck: Deck, classifications: dict[str, CardClassification]) -> list[str]:
    """Names of the deck's Energy acceleration cards, sorted."""
    names = {
        entry.card.name
        for entry in deck.entries
        if entry.card.id in classifications and is_acceleration(entry.card, classifications[entry.card.id])
    }
    return sorted(names)

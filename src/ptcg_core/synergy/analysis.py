"""Synergy summaries derived from the graph."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..classifier import is_basic_energy, is_draw_support
from ..data.knowledge import EVOLUTION_HELPERS, RECOVERY_KEYWORDS, TYPE_WEAKNESSES, name_in
from ..data.models.card import Deck
from ..data.models.responses import (
    CardClassification,
    EnergySynergy,
    EvolutionAnalysis,
    EvolutionSynergy,
    SynergyAnalysis,
    SynergyCluster,
    TypeSynergy,
)
from .constants import (
    CLUSTER_EDGE,
    HIGH_IMPORTANCE_CLUSTER,
    MAX_CORE_ENGINE,
    STRONG_EDGE,
)
from .graph import SynergyGraph, acceleration_cards, build_synergy_graph

logger = logging.getLogger(__name__)

# Cards at or above this importance anchor the core engine
CORE_IMPORTANCE = 80
CORE_EDGE = 70
KEY_CARD_IMPORTANCE = 70

# Share of the deck's Pokemon that must share a weakness to call it a vulnerability
VULNERABILITY_SHARE = 0.5

TYPE_BALANCE = {0: 0, 1: 90, 2: 100, 3: 80}
SPREAD_TYPE_BALANCE = 60


# =============================================================================
# Clusters
# =============================================================================


def _find(parents: dict[str, str], card_id: str) -> str:
    while parents[card_id] != card_id:
        parents[card_id] = parents[parents[card_id]]
        card_id = parents[card_id]
    return card_id


def _connected_clusters(graph: SynergyGraph) -> list[SynergyCluster]:
    parents = {card_id: card_id for card_id in graph.nodes}
    for edge in graph.positive_edges():
        if edge.strength < CLUSTER_EDGE:
            continue
        left, right = _find(parents, edge.source), _find(parents, edge.target)
        if left != right:
            parents[max(left, right)] = min(left, right)

    groups: dict[str, list[str]] = {}
    for card_id in sorted(graph.nodes):
        groups.setdefault(_find(parents, card_id), []).append(card_id)

    clusters: list[SynergyCluster] = []
    for members in groups.values():
        if len(members) < 2:
            continue
        anchor = max(members, key=lambda m: (graph.nodes[m].importance, graph.nodes[m].name))
        impact = sum(graph.nodes[m].importance for m in members) / 100
        clusters.append(
            SynergyCluster(
                name=f"{graph.nodes[anchor].name} Engine",
                kind="connected",
                card_ids=members,
                impact=round(impact, 2),
                high_importance=impact >= HIGH_IMPORTANCE_CLUSTER,
            )
        )
    return clusters


def _functional_cluster(
    name: str,
    graph: SynergyGraph,
    classifications: dict[str, CardClassification],
    predicate: Callable[[CardClassification], bool],
) -> SynergyCluster | None:
    members = sorted(
        card_id
        for card_id in graph.nodes
        if card_id in classifications and predicate(classifications[card_id])
    )
    if len({graph.nodes[m].name for m in members}) < 2:
        return None
    impact = sum(graph.nodes[m].importance for m in members) / 100
    return SynergyCluster(
        name=name,
        kind="functional",
        card_ids=members,
        impact=round(impact, 2),
        high_importance=impact >= HIGH_IMPORTANCE_CLUSTER,
    )


def find_clusters(graph: SynergyGraph, classifications: dict[str, CardClassification]) -> list[SynergyCluster]:
    """Connected sub-graphs over strong edges plus the draw and search packages."""
    clusters = _connected_clusters(graph)
    draw = _functional_cluster("Draw Engine", graph, classifications, is_draw_support)
    search = _functional_cluster(
        "Search Package", graph, classifications, lambda c: c.trainer_category == "search"
    )
    clusters.extend(cluster for cluster in (draw, search) if cluster is not None)
    return sorted(clusters, key=lambda c: (-c.impact, c.name))


def core_engine(graph: SynergyGraph) -> list[str]:
    """The few cards the deck's plan hinges on, most important first."""
    by_importance = sorted(graph.nodes.values(), key=lambda n: (-n.importance, n.name))
    engine = [node.name for node in by_importance if node.importance >= CORE_IMPORTANCE][:3]

    connections: dict[str, int] = {}
    for edge in graph.positive_edges():
        if edge.strength < CORE_EDGE:
            continue
        for card_id in (edge.source, edge.target):
            connections[card_id] = connections.get(card_id, 0) + 1
    hubs = sorted(connections, key=lambda c: (-connections[c], graph.nodes[c].name))
    added = 0
    for card_id in hubs:
        name = graph.nodes[card_id].name
        if added >= 2 or len(engine) >= MAX_CORE_ENGINE:
            break
        if name not in engine:
            engine.append(name)
            added += 1
    return engine[:MAX_CORE_ENGINE]


# =============================================================================
# Score
# =============================================================================


def synergy_score(graph: SynergyGraph, clusters: list[SynergyCluster]) -> int:
    """Normalised synergy score from edge count, mean strength and clusters."""
    if not graph.nodes:
        return 0
    positive = graph.positive_edges()
    score = 50.0
    score += min(20, 2 * sum(1 for edge in positive if edge.strength >= STRONG_EDGE))
    if positive:
        mean_strength = sum(edge.strength for edge in positive) / len(positive)
        score += max(-10.0, min(10.0, (mean_strength - 50) / 5))
    score -= 5 * len(graph.anti_edges())
    score += min(30, 10 * sum(1 for cluster in clusters if cluster.high_importance))

    key_links = sum(
        1
        for edge in positive
        if edge.strength >= STRONG_EDGE
        and graph.nodes[edge.source].importance >= KEY_CARD_IMPORTANCE
        and graph.nodes[edge.target].importance >= KEY_CARD_IMPORTANCE
    )
    score += min(15, 3 * key_links)
    return max(0, min(100, round(score)))


# =============================================================================
# Type / energy / evolution
# =============================================================================


def type_synergy(deck: Deck) -> TypeSynergy:
    types = sorted(deck.pokemon_types - {"Colorless"}) or sorted(deck.pokemon_types)
    coverage = sorted(
        defender
        for defender, attackers in TYPE_WEAKNESSES.items()
        if any(attacker in types for attacker in attackers)
    )

    pokemon = deck.entries_where(lambda c: c.is_pokemon)
    total = sum(entry.quantity for entry in pokemon)
    exposure: dict[str, int] = {}
    for entry in pokemon:
        weak_to = {w for t in entry.card.types for w in TYPE_WEAKNESSES.get(t, ())}
        for weakness in weak_to:
            exposure[weakness] = exposure.get(weakness, 0) + entry.quantity
    vulnerabilities = sorted(
        weakness for weakness, copies in exposure.items() if total and copies / total >= VULNERABILITY_SHARE
    )

    balance = TYPE_BALANCE.get(len(types), SPREAD_TYPE_BALANCE)
    return TypeSynergy(
        types=types,
        weakness_coverage=coverage,
        vulnerabilities=vulnerabilities,
        type_balance=balance,
    )


def energy_synergy(deck: Deck, classifications: dict[str, CardClassification]) -> EnergySynergy:
    methods = acceleration_cards(deck, classifications)
    recycling = sorted(
        {
            entry.card.name
            for entry in deck.entries
            if entry.card.is_trainer and name_in(entry.card.name, RECOVERY_KEYWORDS)
        }
    )

    attacker_types = {
        t for entry in deck.entries_where(lambda c: c.is_pokemon and bool(c.attacks)) for t in entry.card.types
    }
    energy_types = {t for entry in deck.entries_where(is_basic_energy) for t in entry.card.types}
    energy_types |= {
        t
        for entry in deck.entries_where(is_basic_energy)
        for t in classifications.get(entry.card.id, CardClassification()).provides
    }
    if attacker_types:
        type_match = len(attacker_types & (energy_types | {"Colorless"})) / len(attacker_types)
    else:
        type_match = 0.0

    accel_copies = deck.count(lambda c: c.name in methods)
    efficiency = round(60 * type_match + min(40, 10 * accel_copies))
    return EnergySynergy(
        acceleration_methods=methods,
        recycling_cards=recycling,
        efficiency=max(0, min(100, efficiency)),
    )


def evolution_synergy(deck: Deck, evolution: EvolutionAnalysis) -> EvolutionSynergy:
    support = sorted(
        {entry.card.name for entry in deck.entries if name_in(entry.card.name, EVOLUTION_HELPERS)}
    )
    reliability = evolution.overall_score if evolution.lines else 100.0
    return EvolutionSynergy(support_cards=support, reliability=max(0, min(100, round(reliability))))


# =============================================================================
# Recommendations
# =============================================================================


def _recommendations(
    graph: SynergyGraph,
    clusters: list[SynergyCluster],
    score: int,
    classifications: dict[str, CardClassification],
    types: TypeSynergy,
) -> list[str]:
    recommendations: list[str] = []

    for card_id, node in sorted(graph.nodes.items(), key=lambda item: item[1].name):
        if node.importance >= KEY_CARD_IMPORTANCE and not graph.neighbours(card_id):
            recommendations.append(f"{node.name} has no supporting cards; add cards that work with it")

    if not any(c.trainer_category == "search" for c in classifications.values()):
        recommendations.append("Add Pokemon search such as Quick Ball or Ultra Ball")

    for edge in graph.anti_edges():
        recommendations.append(
            f"Reconsider {graph.nodes[edge.source].name} alongside {graph.nodes[edge.target].name}: "
            f"{edge.description}"
        )

    if score < 50:
        recommendations.append("Low overall synergy; focus the list on one main strategy")

    if not any(cluster.name == "Draw Engine" for cluster in clusters):
        recommendations.append("No draw engine; add draw Supporters or a draw ability Pokemon")

    for weakness in types.vulnerabilities:
        recommendations.append(f"Most of your Pokemon are weak to {weakness}; consider a tech to cover it")

    return recommendations


def analyze_synergy(
    deck: Deck,
    classifications: dict[str, CardClassification],
    evolution: EvolutionAnalysis,
) -> SynergyAnalysis:
    """Build the synergy graph and summarise it."""
    graph = build_synergy_graph(deck, classifications)
    clusters = find_clusters(graph, classifications)
    score = synergy_score(graph, clusters)
    types = type_synergy(deck)

    logger.debug("Synergy: %d clusters, score %d", len(clusters), score)
    return SynergyAnalysis(
        nodes=[graph.nodes[card_id] for card_id in sorted(graph.nodes)],
        edges=graph.edges,
        clusters=clusters,
        core_engine=core_engine(graph),
        overall_score=score,
        type_synergy=types,
        energy_synergy=energy_synergy(deck, classifications),
        evolution_synergy=evolution_synergy(deck, evolution),
        recommendations=_recommendations(graph, clusters, score, classifications, types),
    )

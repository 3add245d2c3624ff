"""Tests for the synergy graph and its summaries."""

from __future__ import annotations

from factories import charizard_deck, energy, fast_deck, make_deck, no_draw_deck, pokemon, trainer

from ptcg_core.classifier import classify_cards
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import SynergyAnalysis
from ptcg_core.evolution import analyze_evolution
from ptcg_core.synergy import analyze_synergy, build_synergy_graph, core_engine


def synergy_for(deck: Deck) -> SynergyAnalysis:
    return analyze_synergy(deck, classify_cards(deck.cards), analyze_evolution(deck))


def edge_map(analysis: SynergyAnalysis) -> dict[tuple[str, str, str], int]:
    return {(edge.source, edge.target, edge.relation): edge.strength for edge in analysis.edges}


# =============================================================================
# Graph
# =============================================================================


class TestSynergyGraph:
    """Tests for graph construction."""

    def test_edges_reference_nodes(self) -> None:
        """Every edge endpoint is a card in the deck."""
        analysis = synergy_for(charizard_deck())
        node_ids = {node.card_id for node in analysis.nodes}
        assert analysis.edges
        for edge in analysis.edges:
            assert edge.source in node_ids
            assert edge.target in node_ids
            assert 0 <= edge.strength <= 100

    def test_evolution_edge(self) -> None:
        edges = edge_map(synergy_for(charizard_deck()))
        assert edges[("charmander", "charmeleon", "combos-with")] == 100

    def test_rare_candy_accelerates_stage2(self) -> None:
        edges = edge_map(synergy_for(charizard_deck()))
        assert edges[("rare-candy", "charizard-ex", "accelerates")] == 80
        assert ("rare-candy", "charmeleon", "accelerates") not in edges

    def test_search_item_finds_basics(self) -> None:
        edges = edge_map(synergy_for(no_draw_deck()))
        assert edges[("quick-ball", "pikachu", "searches")] == 70
        assert ("level-ball", "pikachu", "searches") in edges
        assert ("level-ball", "zapdos", "searches") not in edges

    def test_known_combo(self) -> None:
        edges = edge_map(synergy_for(charizard_deck()))
        assert edges[("pidgeot-ex", "charizard-ex", "searches")] == 75

    def test_basic_energy_powers_matching_attackers(self) -> None:
        edges = edge_map(synergy_for(no_draw_deck()))
        assert edges[("lightning-energy", "zapdos", "combos-with")] == 50

    def test_node_quantities(self) -> None:
        graph = build_synergy_graph(charizard_deck(), {})
        assert graph.nodes["fire-energy"].quantity == 16
        assert graph.nodes["rare-candy"].importance == 85

    def test_rebuilt_graphs_are_equal(self) -> None:
        deck = charizard_deck()
        classifications = classify_cards(deck.cards)
        first = build_synergy_graph(deck, classifications)
        second = build_synergy_graph(deck, classifications)
        assert first.edges == second.edges
        assert first.nodes == second.nodes


class TestAntiSynergy:
    """Tests for cards that work against their own deck."""

    def test_path_to_the_peak_with_rule_box_ability(self) -> None:
        deck = make_deck(
            (pokemon("Zapdos ex", hp=200, subtypes=("Basic", "ex"), attacks=((3, 180),), ability="Draw a card."), 3),
            (trainer("Path to the Peak", "Stadium"), 2),
            (energy(), 10),
        )
        analysis = synergy_for(deck)
        anti = [edge for edge in analysis.edges if edge.relation == "anti-synergy"]
        assert [(edge.source, edge.target) for edge in anti] == [("path-to-the-peak", "zapdos-ex")]
        expected = "Reconsider Path to the Peak alongside Zapdos ex"
        assert any(rec.startswith(expected) for rec in analysis.recommendations)

    def test_path_to_the_peak_without_abilities(self) -> None:
        deck = make_deck((pokemon("Pikachu"), 4), (trainer("Path to the Peak", "Stadium"), 2))
        assert all(edge.relation != "anti-synergy" for edge in synergy_for(deck).edges)


# =============================================================================
# Summaries
# =============================================================================


class TestSynergySummary:
    """Tests for clusters, score and recommendations."""

    def test_empty_deck(self) -> None:
        analysis = synergy_for(Deck())
        assert analysis.overall_score == 0
        assert analysis.nodes == []
        assert analysis.edges == []

    def test_score_in_range(self) -> None:
        for deck in (no_draw_deck(), fast_deck(), charizard_deck()):
            assert 0 <= synergy_for(deck).overall_score <= 100

    def test_draw_engine_cluster(self) -> None:
        analysis = synergy_for(fast_deck())
        assert any(cluster.name == "Draw Engine" for cluster in analysis.clusters)

    def test_missing_draw_engine_recommendation(self) -> None:
        analysis = synergy_for(no_draw_deck())
        assert all(cluster.name != "Draw Engine" for cluster in analysis.clusters)
        assert "No draw engine; add draw Supporters or a draw ability Pokemon" in analysis.recommendations

    def test_missing_search_recommendation(self) -> None:
        deck = make_deck((pokemon("Pikachu"), 4), (energy(), 8))
        assert "Add Pokemon search such as Quick Ball or Ultra Ball" in synergy_for(deck).recommendations

    def test_core_engine(self) -> None:
        deck = charizard_deck()
        engine = core_engine(build_synergy_graph(deck, classify_cards(deck.cards)))
        assert "Charizard ex" in engine
        assert len(engine) <= 5
        assert len(engine) == len(set(engine))

    def test_type_synergy(self) -> None:
        types = synergy_for(no_draw_deck()).type_synergy
        assert types.types == ["Lightning"]
        assert types.type_balance == 90
        assert types.vulnerabilities == ["Fighting"]
        assert "Water" in types.weakness_coverage

    def test_energy_synergy_lists_acceleration(self) -> None:
        energy_info = synergy_for(fast_deck()).energy_synergy
        assert "Elesa's Sparkle" in energy_info.acceleration_methods
        assert 0 <= energy_info.efficiency <= 100

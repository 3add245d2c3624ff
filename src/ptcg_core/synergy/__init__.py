"""Synergy graph over a deck's cards."""

from .analysis import analyze_synergy, core_engine, find_clusters, synergy_score
from .graph import SynergyGraph, acceleration_cards, build_synergy_graph, card_importance

__all__ = [
    "SynergyGraph",
    "acceleration_cards",
    "analyze_synergy",
    "build_synergy_graph",
    "card_importance",
    "core_engine",
    "find_clusters",
    "synergy_score",
]

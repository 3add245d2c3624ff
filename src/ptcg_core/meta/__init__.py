"""Archetype, metagame and matchup evaluation."""

from .archetype import classify_archetype, key_card_match, playstyle_scores, structural_style
from .evaluator import evaluate_meta, meta_tier, meta_weaknesses, rotation_impact, speed_rating
from .matchups import favorability, predict_matchup, predict_matchups, type_matchup

__all__ = [
    "classify_archetype",
    "evaluate_meta",
    "favorability",
    "key_card_match",
    "meta_tier",
    "meta_weaknesses",
    "playstyle_scores",
    "predict_matchup",
    "predict_matchups",
    "rotation_impact",
    "speed_rating",
    "structural_style",
]

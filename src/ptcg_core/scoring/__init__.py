"""Multi-factor deck scoring."""

from .factors import FACTORS, ScoringContext, compute_factors
from .scorer import category_score, performance_summary, score_breakdown, score_deck
from .weights import AGGRO, BALANCED, CONTROL, PROFILES, WeightProfile, select_weight_profile

__all__ = [
    "AGGRO",
    "BALANCED",
    "CONTROL",
    "FACTORS",
    "PROFILES",
    "ScoringContext",
    "WeightProfile",
    "category_score",
    "compute_factors",
    "performance_summary",
    "score_breakdown",
    "score_deck",
    "select_weight_profile",
]

"""Pokemon TCG deck analysis engine."""

from ptcg_core.analyzer import ENGINE_VERSION as __version__
from ptcg_core.analyzer import analyze
from ptcg_core.data.models.card import CardFace, Deck, DeckEntry
from ptcg_core.data.models.responses import AnalysisResult

__all__ = [
    "AnalysisResult",
    "CardFace",
    "Deck",
    "DeckEntry",
    "__version__",
    "analyze",
]

"""Deck analysis entry point.

``analyze`` runs every stage in a fixed order, each inside its own failure
boundary, and always returns a complete :class:`AnalysisResult`. If the
input cannot be read as a deck at all, or the pipeline itself breaks, a
fixed emergency result is returned instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from ptcg_core.classifier import classify_cards, minimal_classification
from ptcg_core.config import get_settings
from ptcg_core.consistency import analyze_consistency
from ptcg_core.data.meta_snapshot import MetaSnapshot, get_meta_snapshot
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.inputs import normalize_deck
from ptcg_core.data.models.responses import (
    AnalysisMetadata,
    AnalysisResult,
    AnalysisState,
    ArchetypeAnalysis,
    ConsistencyAnalysis,
    DeckLegality,
    DeckScores,
    DeckWarning,
    EvolutionAnalysis,
    MetaAnalysis,
    PerformanceSummary,
    PrizeEconomy,
    Recommendation,
    ScoreBreakdown,
    SpeedAnalysis,
    SynergyAnalysis,
    WarningImpact,
    WarningSummary,
)
from ptcg_core.deck_warnings import WarningContext, generate_warnings, summarize_warnings
from ptcg_core.evolution import analyze_evolution
from ptcg_core.exceptions import DeckInputError
from ptcg_core.meta import classify_archetype, evaluate_meta, predict_matchups
from ptcg_core.outcome import Degraded, Ok, run_stage
from ptcg_core.prizes import analyze_prize_economy
from ptcg_core.recommendations import generate_recommendations, suggest_cuts
from ptcg_core.scoring import BALANCED, ScoringContext, performance_summary, score_deck
from ptcg_core.speed import analyze_speed
from ptcg_core.synergy import analyze_synergy
from ptcg_core.validation import validate_deck

logger = logging.getLogger(__name__)

ENGINE_VERSION = "0.1.0"

T = TypeVar("T")

EMPTY_SNAPSHOT = MetaSnapshot(version="none", updated="")


# =============================================================================
# Emergency result
# =============================================================================


def emergency_result(reason: str = "Unexpected error during analysis") -> AnalysisResult:
    """The fixed result returned when no stage output can be trusted."""
    settings = get_settings()
    return AnalysisResult(
        consistency=ConsistencyAnalysis(mulligan_probability=1.0, dead_draw_probability=1.0),
        speed=SpeedAnalysis(first_attack_turn=99.0, full_setup_turn=99.0, classification="slow"),
        archetype=ArchetypeAnalysis(name="Unknown", style="midrange", tier="rogue", confidence=0.0),
        scores=DeckScores(
            confidence=0.0,
            breakdown=ScoreBreakdown(weights=BALANCED.as_scores(), profile=BALANCED.name, confidence=0.0),
        ),
        warnings=[
            DeckWarning(
                id="analysis-failed",
                severity="critical",
                category="legality",
                title="Unable to analyze deck",
                description=reason,
                suggestions=["Check the deck list and try again"],
                priority=10,
                estimated_impact=WarningImpact(),
            )
        ],
        warning_summary=WarningSummary(total=1, critical=1),
        recommendations=[
            Recommendation(
                type="adjust",
                priority="essential",
                card="Deck list",
                quantity=0,
                reasoning=["Unable to analyze deck; verify every entry has a card and a positive quantity"],
            )
        ],
        metadata=AnalysisMetadata(
            engine_version=f"{ENGINE_VERSION}+emergency.{settings.emergency_result_version}",
            state="emergency_fallback",
            emergency=True,
        ),
    )


# =============================================================================
# Pipeline
# =============================================================================


class _Pipeline:
    """One analysis run: tracks the state and which stages degraded."""

    def __init__(self, format_name: str, snapshot: MetaSnapshot | None) -> None:
        self.format_name = format_name
        self.snapshot = snapshot
        self.state: AnalysisState = "idle"
        self.degraded: list[str] = []

    def stage(self, name: str, compute: Callable[[], T], default: Callable[[], T]) -> T:
        match run_stage(name, compute, default):
            case Ok(value=value):
                return value
            case Degraded(value=value, stage=stage):
                self.degraded.append(stage)
                return value
        raise AssertionError(f"unreachable outcome for stage {name}")

    def run(self, payload: Any) -> AnalysisResult:
        self.state = "validating"
        normalized = normalize_deck(payload)
        deck = normalized.deck
        snapshot = self.snapshot or self.stage("snapshot", get_meta_snapshot, lambda: EMPTY_SNAPSHOT)
        legality = self.stage(
            "validation",
            lambda: validate_deck(deck, snapshot, self.format_name, normalized.issues),
            lambda: DeckLegality(total_cards=deck.total_cards),
        )

        self.state = "computing"
        logger.debug("Analyzing deck of %d cards", deck.total_cards)
        classifications = self.stage(
            "classification",
            lambda: classify_cards(deck.cards),
            lambda: {card.id: minimal_classification(card) for card in deck.cards},
        )
        evolution = self.stage("evolution", lambda: analyze_evolution(deck), EvolutionAnalysis)
        consistency = self.stage(
            "consistency",
            lambda: analyze_consistency(deck, classifications, evolution),
            lambda: ConsistencyAnalysis(evolution=evolution),
        )
        synergy = self.stage("synergy", lambda: analyze_synergy(deck, classifications, evolution), SynergyAnalysis)
        prizes = self.stage("prizes", lambda: analyze_prize_economy(deck), PrizeEconomy)
        speed = self.stage("speed", lambda: analyze_speed(deck, classifications, consistency, snapshot), SpeedAnalysis)
        archetype = self.stage(
            "archetype", lambda: classify_archetype(deck, classifications, snapshot), ArchetypeAnalysis
        )
        matchups = self.stage("matchups", lambda: predict_matchups(deck, archetype, speed, snapshot), list)
        meta = self.stage(
            "meta",
            lambda: evaluate_meta(deck, classifications, archetype, matchups, snapshot, self.format_name),
            lambda: MetaAnalysis(snapshot_version=snapshot.version),
        )

        scoring = ScoringContext(deck, classifications, consistency, synergy, speed, meta, matchups)
        scores = self.stage("scoring", lambda: score_deck(scoring, prizes), DeckScores)
        performance = self.stage("performance", lambda: performance_summary(scoring, scores), PerformanceSummary)

        self.state = "finalizing"
        warnings = self.stage(
            "warnings",
            lambda: generate_warnings(
                WarningContext(
                    deck=deck,
                    legality=legality,
                    classifications=classifications,
                    consistency=consistency,
                    synergy=synergy,
                    speed=speed,
                    prizes=prizes,
                    matchups=matchups,
                    degraded_stages=tuple(self.degraded),
                )
            ),
            list,
        )
        recommendations = self.stage(
            "recommendations",
            lambda: generate_recommendations(deck, warnings, evolution, synergy, meta),
            list,
        )
        cuts = self.stage(
            "cuts",
            lambda: suggest_cuts(deck, classifications, recommendations, synergy.core_engine),
            list,
        )

        self.state = "done"
        if self.degraded:
            logger.warning("Analysis finished with degraded stages: %s", ", ".join(self.degraded))
        return AnalysisResult(
            consistency=consistency,
            synergy=synergy,
            meta=meta,
            speed=speed,
            matchups=matchups,
            archetype=archetype,
            performance=performance,
            scores=scores,
            prize_economy=prizes,
            legality=legality,
            recommendations=recommendations,
            cuts=cuts,
            warnings=warnings,
            warning_summary=summarize_warnings(warnings),
            metadata=AnalysisMetadata(
                engine_version=ENGINE_VERSION,
                snapshot_version=snapshot.version,
                state=self.state,
                degraded_stages=list(self.degraded),
                total_cards=deck.total_cards,
            ),
        )


def analyze(deck: Deck | Any, format_name: str = "standard", snapshot: MetaSnapshot | None = None) -> AnalysisResult:
    """Analyze a deck; never raises.

    Args:
        deck: A :class:`Deck`, or a sequence of deck entries, ``(card, quantity)``
            pairs or ``{"card": ..., "quantity": ...}`` mappings.
        format_name: Format to check legality against ("standard" or "expanded").
        snapshot: Meta snapshot to compare against; defaults to the bundled one.
    """
    pipeline = _Pipeline(str(format_name or "standard").lower(), snapshot)
    try:
        return pipeline.run(deck)
    except DeckInputError as e:
        logger.warning("Deck input rejected: %s", e.message)
        return emergency_result(e.message)
    except Exception:
        logger.exception("Deck analysis failed in state %s", pipeline.state)
        return emergency_result()

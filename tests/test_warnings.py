"""Tests for deck warnings."""

from __future__ import annotations

from factories import fast_deck, no_draw_deck, short_deck

from ptcg_core.analyzer import analyze
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    SEVERITY_ORDER,
    ConsistencyAnalysis,
    DeckLegality,
    DeckWarning,
    LegalityIssue,
    PrizeEconomy,
    SpeedAnalysis,
    SynergyAnalysis,
    WarningImpact,
)
from ptcg_core.deck_warnings import WarningContext, generate_warnings, sort_warnings, summarize_warnings


def make_warning(id: str, severity: str = "medium", priority: int = 5, win_rate: float = 0.0) -> DeckWarning:
    return DeckWarning.model_validate(
        {
            "id": id,
            "severity": severity,
            "category": "optimization",
            "title": id,
            "description": id,
            "suggestions": ["Fix it"],
            "priority": priority,
            "estimated_impact": WarningImpact(win_rate=win_rate),
        }
    )


def empty_context(**overrides: object) -> WarningContext:
    values: dict[str, object] = {
        "deck": Deck(),
        "legality": DeckLegality(),
        "classifications": {},
        "consistency": ConsistencyAnalysis(),
        "synergy": SynergyAnalysis(),
        "speed": SpeedAnalysis(),
        "prizes": PrizeEconomy(),
    }
    values.update(overrides)
    return WarningContext(**values)  # type: ignore[arg-type]


class TestDeckScenarios:
    """Warnings for complete decks."""

    def test_no_draw_support_warns(self) -> None:
        result = analyze(no_draw_deck())
        assert result.is_legal
        draw = [w for w in result.warnings if w.id == "consistency-draw-support"]
        assert len(draw) == 1
        assert draw[0].severity == "high"
        assert draw[0].category == "consistency"
        assert "Add Professor's Research" in draw[0].suggestions

    def test_short_deck_has_one_critical_warning(self) -> None:
        result = analyze(short_deck())
        critical = [w for w in result.warnings if w.severity == "critical"]
        assert len(critical) == 1
        assert critical[0].category == "legality"
        assert critical[0].suggestions == ["Add 2 more cards"]
        assert result.warnings[0] == critical[0]
        assert result.warning_summary.critical == 1

    def test_every_warning_has_a_suggestion(self) -> None:
        for deck in (no_draw_deck(), short_deck(), fast_deck()):
            for warning in analyze(deck).warnings:
                assert warning.suggestions
                assert 1 <= warning.priority <= 10

    def test_mono_type_warning(self) -> None:
        ids = [w.id for w in analyze(fast_deck()).warnings]
        assert "meta-mono-type" in ids


class TestGenerateWarnings:
    """Tests for generate_warnings."""

    def test_sorted_most_severe_first(self) -> None:
        issues = [LegalityIssue(kind="deck_size", message="Deck has 0 cards", suggestion="Add 60 more cards")]
        warnings = generate_warnings(empty_context(legality=DeckLegality(issues=issues)))
        ranks = [SEVERITY_ORDER[w.severity] for w in warnings]
        assert ranks == sorted(ranks)
        assert warnings[0].id == "legality-deck-size"
        assert warnings[0].auto_fixable

    def test_summary_warning_when_many(self) -> None:
        issues = [
            LegalityIssue(kind="malformed", message=f"Bad entry {i}", suggestion="Fix or remove the entry")
            for i in range(6)
        ]
        warnings = generate_warnings(empty_context(legality=DeckLegality(issues=issues)))
        summary = [w for w in warnings if w.id == "summary"]
        assert len(summary) == 1
        assert summary[0].severity == "info"
        assert summary[0].estimated_impact.win_rate == 0.0
        assert summary[0].impact.startswith("Combined estimated win-rate impact")

    def test_no_summary_for_few_warnings(self) -> None:
        warnings = generate_warnings(
            empty_context(
                speed=SpeedAnalysis(classification="fast", first_attack_turn=1.0),
                consistency=ConsistencyAnalysis(mulligan_probability=0.1),
            )
        )
        assert len(warnings) <= 5
        assert all(w.id != "summary" for w in warnings)

    def test_degraded_stage_warning(self) -> None:
        warnings = generate_warnings(empty_context(degraded_stages=("synergy",)))
        degraded = [w for w in warnings if w.id == "optimization-degraded-synergy"]
        assert len(degraded) == 1
        assert degraded[0].severity == "info"


class TestSummarizeWarnings:
    """Tests for the warning summary."""

    def test_counts(self) -> None:
        warnings = [make_warning("a", "critical"), make_warning("b", "high"), make_warning("c", "high")]
        summary = summarize_warnings(warnings)
        assert summary.total == 3
        assert summary.critical == 1
        assert summary.high == 2
        assert summary.medium == 0

    def test_diminishing_returns(self) -> None:
        warnings = [make_warning("a", win_rate=-10), make_warning("b", win_rate=-10)]
        assert summarize_warnings(warnings).estimated_win_rate_impact == -18.0

    def test_impact_floor(self) -> None:
        warnings = [make_warning(str(i), "critical", win_rate=-100) for i in range(3)]
        assert summarize_warnings(warnings).estimated_win_rate_impact == -90.0

    def test_empty(self) -> None:
        summary = summarize_warnings([])
        assert summary.total == 0
        assert summary.estimated_win_rate_impact == 0.0

    def test_sort_ties_by_priority_then_id(self) -> None:
        warnings = [make_warning("b", priority=5), make_warning("a", priority=5), make_warning("c", priority=8)]
        assert [w.id for w in sort_warnings(warnings)] == ["c", "a", "b"]

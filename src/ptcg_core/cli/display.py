"""Rich rendering for analysis results."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ptcg_core.data.meta_snapshot import MetaSnapshot
from ptcg_core.data.models.responses import AnalysisResult, MatchupPrediction

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
    "info": "dim",
}

FAVORABILITY_STYLES = {
    "heavily favored": "bold green",
    "favored": "green",
    "even": "white",
    "unfavored": "yellow",
    "heavily unfavored": "red",
}


def _score_style(score: float) -> str:
    if score >= 70:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def render_summary(console: Console, result: AnalysisResult) -> None:
    status = "[green]LEGAL[/]" if result.is_legal else "[red]NOT LEGAL[/]"
    archetype = result.archetype
    lines = [
        f"Legality: {status} ({result.legality.total_cards} cards, {result.legality.format})",
        f"Archetype: [cyan]{archetype.name}[/] ({archetype.style}, {archetype.tier}, "
        f"{archetype.confidence:.0f}% confidence)",
        f"Strategy: {result.scores.core_strategy}",
        f"Speed: {result.speed.classification} (first attack turn {result.speed.first_attack_turn:g})",
        f"Mulligan: {result.consistency.mulligan_probability:.1%}",
    ]
    if result.metadata.emergency:
        lines.append("[bold red]Analysis failed; showing fallback result[/]")
    elif result.metadata.degraded_stages:
        lines.append(f"[yellow]Degraded stages: {', '.join(result.metadata.degraded_stages)}[/]")
    console.print(Panel("\n".join(lines), title="Deck Analysis", expand=False))


def render_scores(console: Console, result: AnalysisResult) -> None:
    scores = result.scores
    table = Table(title=f"Scores ({scores.breakdown.profile} weights)")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")

    for label, value in (
        ("Overall", scores.overall),
        ("Consistency", scores.consistency),
        ("Power", scores.power),
        ("Speed", scores.speed),
        ("Versatility", scores.versatility),
        ("Meta relevance", scores.meta_relevance),
        ("Innovation", scores.innovation),
        ("Difficulty", scores.difficulty),
    ):
        table.add_row(label, f"[{_score_style(value)}]{value}[/]")
    console.print(table)


def render_warnings(console: Console, result: AnalysisResult) -> None:
    if not result.warnings:
        console.print("\n[green]No warnings[/]")
        return
    table = Table(title="Warnings")
    table.add_column("Severity")
    table.add_column("Warning", style="bold")
    table.add_column("Suggestion")

    for warning in result.warnings:
        style = SEVERITY_STYLES.get(warning.severity, "white")
        table.add_row(f"[{style}]{warning.severity}[/]", warning.title, warning.suggestions[0])
    console.print(table)


def render_recommendations(console: Console, result: AnalysisResult) -> None:
    if not result.recommendations:
        return
    table = Table(title="Recommendations")
    table.add_column("Priority")
    table.add_column("Change")
    table.add_column("Reason", style="dim")

    for rec in result.recommendations:
        change = f"{rec.type} {rec.quantity}x {rec.card}"
        if rec.target_card:
            change += f" (for {rec.target_card})"
        table.add_row(rec.priority, change, "; ".join(rec.reasoning))
    console.print(table)

    if result.cuts:
        console.print("\n[bold]Suggested cuts:[/]")
        for cut in result.cuts:
            console.print(f"  • {cut.quantity}x {cut.card} [dim]{cut.reason}[/dim]")


def matchup_table(matchups: list[MatchupPrediction]) -> Table:
    table = Table(title="Matchups")
    table.add_column("Opponent", style="cyan")
    table.add_column("Tier")
    table.add_column("Win rate", justify="right")
    table.add_column("Outlook")

    for matchup in matchups:
        style = FAVORABILITY_STYLES.get(matchup.favorability, "white")
        table.add_row(
            matchup.opponent,
            matchup.opponent_tier,
            f"{matchup.win_rate:.0f}%",
            f"[{style}]{matchup.favorability}[/]",
        )
    return table


def render_analysis(console: Console, result: AnalysisResult) -> None:
    """Full human-readable report."""
    render_summary(console, result)
    render_scores(console, result)
    if result.matchups:
        console.print(matchup_table(result.matchups))
    render_warnings(console, result)
    render_recommendations(console, result)


def render_snapshot(console: Console, snapshot: MetaSnapshot) -> None:
    table = Table(title=f"Meta snapshot {snapshot.version} ({snapshot.updated})")
    table.add_column("Archetype", style="cyan")
    table.add_column("Tier")
    table.add_column("Style")
    table.add_column("Popularity", justify="right")
    table.add_column("Setup turn", justify="right")

    for archetype in snapshot.by_popularity:
        table.add_row(
            archetype.name,
            archetype.tier,
            archetype.style,
            f"{archetype.popularity:.1f}%",
            f"{archetype.avg_setup_turn:g}",
        )
    console.print(table)

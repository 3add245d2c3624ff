"""Result models for deck analysis outputs.

Every model carries neutral defaults so a stage that degrades can hand back
``Model()`` instead of a partially filled record. Leaf fields are never
optional: "none", 0 and empty lists stand in for absent values.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Card classification
CardCategory = Literal["pokemon", "trainer", "energy", "unknown"]
PokemonRole = Literal[
    "main_attacker",
    "support_attacker",
    "ability_support",
    "wall",
    "starter",
    "none",
]
TrainerType = Literal["supporter", "item", "tool", "stadium", "none"]
TrainerCategory = Literal[
    "draw",
    "search",
    "energy_acceleration",
    "disruption",
    "switching",
    "recovery",
    "stadium",
    "tool",
    "utility",
    "none",
]
SetupSpeed = Literal["immediate", "fast", "moderate", "slow", "none"]
EnergyKind = Literal["basic", "special", "none"]

# Graph
Relation = Literal["searches", "accelerates", "combos-with", "counters", "anti-synergy"]
ClusterKind = Literal["connected", "functional"]

# Scoring
FactorCategory = Literal["consistency", "power", "speed", "versatility", "meta"]
WeightProfileName = Literal["balanced", "aggro", "control"]

# Speed / meta
SpeedClass = Literal["turbo", "fast", "medium", "slow", "glacial"]
MetaComparison = Literal["faster", "comparable", "slower"]
MetaTierName = Literal["tier1", "tier2", "tier3", "rogue"]
Playstyle = Literal[
    "aggro",
    "control",
    "combo",
    "midrange",
    "mill",
    "stall",
    "toolbox",
    "turbo",
    "spread",
]
Favorability = Literal["heavily unfavored", "unfavored", "even", "favored", "heavily favored"]

# Warnings / recommendations
Severity = Literal["critical", "high", "medium", "low", "info"]
WarningCategory = Literal["legality", "consistency", "power", "speed", "meta", "optimization"]
RecommendationType = Literal["add", "remove", "replace", "adjust"]
RecommendationPriority = Literal["essential", "high", "medium", "low"]

# Aggregator
AnalysisState = Literal["idle", "validating", "computing", "finalizing", "done", "emergency_fallback"]

SEVERITY_ORDER: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3, "info": 4}


class ResultModel(BaseModel):
    """Base for immutable result records."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Classification
# =============================================================================


class CardClassification(ResultModel):
    """Derived semantic role of a single card."""

    card_id: str = ""
    name: str = ""
    category: CardCategory = "unknown"
    role: PokemonRole = "none"
    trainer_type: TrainerType = "none"
    trainer_category: TrainerCategory = "none"
    setup_speed: SetupSpeed = "none"
    energy_kind: EnergyKind = "none"
    provides: list[str] = Field(default_factory=list)
    power_level: int = Field(default=5, ge=1, le=10)
    quality: int = Field(default=5, ge=1, le=10)
    prize_value: int = Field(default=1, ge=1, le=3)
    is_tech: bool = False
    synergy_tags: list[str] = Field(default_factory=list)
    degraded: bool = False


# =============================================================================
# Legality
# =============================================================================


class LegalityIssue(ResultModel):
    """A rule the deck list breaks."""

    kind: Literal["deck_size", "no_basic", "copy_limit", "banned", "malformed", "format"]
    message: str
    suggestion: str = ""
    card: str = ""


class DeckLegality(ResultModel):
    """Shallow legality check result."""

    is_legal: bool = False
    format: str = "standard"
    total_cards: int = 0
    issues: list[LegalityIssue] = Field(default_factory=list)
    advisories: list[str] = Field(default_factory=list)


# =============================================================================
# Evolution / consistency
# =============================================================================


class EvolutionLine(ResultModel):
    """One Basic -> Stage 1 -> Stage 2 chain present in the deck."""

    base_pokemon: str
    basic_count: int = 0
    stage1: list[str] = Field(default_factory=list)
    stage1_count: int = 0
    stage2: list[str] = Field(default_factory=list)
    stage2_count: int = 0
    structure: str = ""
    completeness: float = Field(default=0.0, ge=0, le=100)
    consistency: float = Field(default=0.0, ge=0, le=100)
    turn_two_stage1: float = Field(default=0.0, ge=0, le=1)
    turn_three_stage2: float = Field(default=0.0, ge=0, le=1)
    bottleneck: Literal["none", "basic", "stage1"] = "none"
    issues: list[str] = Field(default_factory=list)


class EvolutionAnalysis(ResultModel):
    lines: list[EvolutionLine] = Field(default_factory=list)
    overall_score: float = Field(default=0.0, ge=0, le=100)
    has_rare_candy: bool = False
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class EnergyRatio(ResultModel):
    basic: int = 0
    special: int = 0
    search: int = 0
    total: int = 0
    percentage: float = 0.0
    recommended_min: float = 15.0
    recommended_max: float = 25.0
    is_optimal: bool = False


class TrainerDistribution(ResultModel):
    draw: int = 0
    search: int = 0
    energy_acceleration: int = 0
    disruption: int = 0
    switching: int = 0
    recovery: int = 0
    utility: int = 0
    stadiums: int = 0
    tools: int = 0
    supporters: int = 0
    items: int = 0
    total: int = 0


class PokemonRatio(ResultModel):
    basics: int = 0
    evolutions: int = 0
    attackers: int = 0
    support: int = 0
    total: int = 0
    evolution_lines: int = 0


class EnergyCurve(ResultModel):
    """Distribution of the cheapest attack cost over the deck's attackers."""

    average_cost: float = 0.0
    peak_cost: int = 0
    # Index is the energy cost; the last bucket holds 5 and above
    distribution: list[int] = Field(default_factory=lambda: [0, 0, 0, 0, 0, 0])
    curve: Literal["low", "balanced", "high"] = "balanced"


class SetupProbabilities(ResultModel):
    """Chance of having the basic setup pieces by each early turn."""

    turn_one: float = Field(default=0.0, ge=0, le=1)
    turn_two: float = Field(default=0.0, ge=0, le=1)
    turn_three: float = Field(default=0.0, ge=0, le=1)


class PrizeImpact(ResultModel):
    key_card_vulnerability: float = Field(default=0.0, ge=0, le=1)
    critical_cards: list[str] = Field(default_factory=list)
    resilience: int = Field(default=0, ge=0, le=100)


class ConsistencyAnalysis(ResultModel):
    """Draw consistency summary."""

    energy_ratio: EnergyRatio = Field(default_factory=EnergyRatio)
    trainer_distribution: TrainerDistribution = Field(default_factory=TrainerDistribution)
    pokemon_ratio: PokemonRatio = Field(default_factory=PokemonRatio)
    energy_curve: EnergyCurve = Field(default_factory=EnergyCurve)
    mulligan_probability: float = Field(default=1.0, ge=0, le=1)
    setup_probabilities: SetupProbabilities = Field(default_factory=SetupProbabilities)
    dead_draw_probability: float = Field(default=1.0, ge=0, le=1)
    prize_impact: PrizeImpact = Field(default_factory=PrizeImpact)
    evolution: EvolutionAnalysis = Field(default_factory=EvolutionAnalysis)
    overall_consistency: int = Field(default=0, ge=0, le=100)


# =============================================================================
# Synergy
# =============================================================================


class SynergyNode(ResultModel):
    card_id: str
    name: str
    quantity: int = 1
    importance: int = Field(default=50, ge=0, le=100)


class SynergyEdge(ResultModel):
    """A directed relation between two cards in the deck."""

    source: str
    target: str
    strength: int = Field(ge=0, le=100)
    relation: Relation
    description: str = ""


class SynergyCluster(ResultModel):
    name: str
    kind: ClusterKind = "connected"
    card_ids: list[str] = Field(default_factory=list)
    impact: float = 0.0
    high_importance: bool = False


class TypeSynergy(ResultModel):
    types: list[str] = Field(default_factory=list)
    weakness_coverage: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    type_balance: int = Field(default=0, ge=0, le=100)


class EnergySynergy(ResultModel):
    acceleration_methods: list[str] = Field(default_factory=list)
    recycling_cards: list[str] = Field(default_factory=list)
    efficiency: int = Field(default=0, ge=0, le=100)


class EvolutionSynergy(ResultModel):
    support_cards: list[str] = Field(default_factory=list)
    reliability: int = Field(default=0, ge=0, le=100)


class SynergyAnalysis(ResultModel):
    """Synergy graph plus the summaries derived from it."""

    nodes: list[SynergyNode] = Field(default_factory=list)
    edges: list[SynergyEdge] = Field(default_factory=list)
    clusters: list[SynergyCluster] = Field(default_factory=list)
    core_engine: list[str] = Field(default_factory=list)
    overall_score: int = Field(default=0, ge=0, le=100)
    type_synergy: TypeSynergy = Field(default_factory=TypeSynergy)
    energy_synergy: EnergySynergy = Field(default_factory=EnergySynergy)
    evolution_synergy: EvolutionSynergy = Field(default_factory=EvolutionSynergy)
    recommendations: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def anti_synergy_count(self) -> int:
        return sum(1 for edge in self.edges if edge.relation == "anti-synergy")


# =============================================================================
# Speed / prizes
# =============================================================================


class TurnPlan(ResultModel):
    """Expected board state on one of the first turns."""

    turn: int
    setup_probability: float = Field(default=0.0, ge=0, le=1)
    energy_attached: int = 0
    damage_output: int = 0
    actions: list[str] = Field(default_factory=list)


class PrizeRaceSpeed(ResultModel):
    average_damage: float = 0.0
    ohko_capable: bool = False
    two_hit_reliable: bool = False
    turns_to_win: float = 0.0
    score: int = Field(default=0, ge=0, le=100)


class SpeedAnalysis(ResultModel):
    """How quickly the deck sets up and starts attacking."""

    first_attack_turn: float = 99.0
    full_setup_turn: float = 99.0
    absolute_speed: int = Field(default=0, ge=0, le=100)
    relative_speed: int = Field(default=0, ge=0, le=100)
    average_speed: int = Field(default=0, ge=0, le=100)
    classification: SpeedClass = "slow"
    meta_comparison: MetaComparison = "slower"
    faster_than: list[str] = Field(default_factory=list)
    slower_than: list[str] = Field(default_factory=list)
    turn_outline: list[TurnPlan] = Field(default_factory=list)
    prize_race: PrizeRaceSpeed = Field(default_factory=PrizeRaceSpeed)
    recovery_speed: int = Field(default=0, ge=0, le=100)
    late_game_sustainability: int = Field(default=0, ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)


class PrizeTrader(ResultModel):
    name: str
    prize_value: int
    damage_per_prize: float


class PrizeLiability(ResultModel):
    name: str
    prize_value: int
    hp: int = 0
    reason: str


class TradeScenario(ResultModel):
    """One of our attackers against a common meta target."""

    attacker: str
    opponent: str
    opponent_hp: int
    prizes_given_up: int
    prizes_taken: int
    turns_to_knock_out: int
    trade_ratio: float
    verdict: Literal["excellent", "favorable", "even", "unfavorable", "terrible"]


class PrizeEconomy(ResultModel):
    """Prize-trade efficiency of the deck's Pokemon."""

    average_prize_value: float = 1.0
    # Capped at the number of prize cards
    prize_liability: int = Field(default=0, ge=0)
    best_traders: list[PrizeTrader] = Field(default_factory=list)
    worst_liabilities: list[PrizeLiability] = Field(default_factory=list)
    scenarios: list[TradeScenario] = Field(default_factory=list)
    strategy: Literal["single-prize", "multi-prize", "mixed"] = "mixed"
    gameplan: str = ""
    critical_turns: list[int] = Field(default_factory=list)
    efficiency: int = Field(default=50, ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)


# =============================================================================
# Scores
# =============================================================================


class ScoringFactor(ResultModel):
    """One independent signal feeding a category score."""

    name: str
    category: FactorCategory
    raw_score: float = Field(ge=0, le=100)
    weight: float = Field(ge=0, le=1)
    confidence: float = Field(ge=0, le=1)
    details: list[str] = Field(default_factory=list)


class CategoryScores(ResultModel):
    consistency: float = 0.0
    power: float = 0.0
    speed: float = 0.0
    versatility: float = 0.0
    meta: float = 0.0


# Default category weights; the scorer's balanced profile is built from these
BALANCED_WEIGHTS = CategoryScores(consistency=0.25, power=0.20, speed=0.20, versatility=0.15, meta=0.20)


class ScoreBreakdown(ResultModel):
    overall: float = Field(default=0.0, ge=0, le=100)
    categories: CategoryScores = Field(default_factory=CategoryScores)
    weights: CategoryScores = BALANCED_WEIGHTS
    profile: WeightProfileName = "balanced"
    factors: list[ScoringFactor] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=lambda: ["No standout strengths identified"])
    weaknesses: list[str] = Field(default_factory=lambda: ["No significant weaknesses identified"])
    confidence: float = Field(default=0.0, ge=0, le=1)


class DeckScores(ResultModel):
    """Headline scores, all 0-100."""

    overall: int = Field(default=0, ge=0, le=100)
    consistency: int = Field(default=0, ge=0, le=100)
    power: int = Field(default=0, ge=0, le=100)
    speed: int = Field(default=0, ge=0, le=100)
    versatility: int = Field(default=0, ge=0, le=100)
    meta_relevance: int = Field(default=0, ge=0, le=100)
    innovation: int = Field(default=0, ge=0, le=100)
    difficulty: int = Field(default=0, ge=0, le=100)
    confidence: float = Field(default=0.0, ge=0, le=1)
    core_strategy: str = "Unknown"
    win_conditions: list[str] = Field(default_factory=list)
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)


class PerformanceSummary(ResultModel):
    """Rough tournament outlook, 0-100 per axis."""

    tournament_performance: int = Field(default=0, ge=0, le=100)
    consistency_rating: int = Field(default=0, ge=0, le=100)
    power_level: int = Field(default=0, ge=0, le=100)
    meta_viability: int = Field(default=0, ge=0, le=100)
    skill_ceiling: int = Field(default=0, ge=0, le=100)
    budget_efficiency: int = Field(default=0, ge=0, le=100)
    future_proofing: int = Field(default=0, ge=0, le=100)
    learning_curve: int = Field(default=0, ge=0, le=100)


# =============================================================================
# Archetype / meta / matchups
# =============================================================================


class ArchetypeAnalysis(ResultModel):
    """Which known deck (or generic style) the list resembles."""

    name: str = "Unknown"
    matched: bool = False
    match_percentage: float = Field(default=0.0, ge=0, le=100)
    tier: MetaTierName = "rogue"
    style: Playstyle = "midrange"
    secondary_style: Playstyle | Literal["none"] = "none"
    confidence: float = Field(default=0.0, ge=0, le=100)
    style_scores: dict[str, float] = Field(default_factory=dict)
    characteristics: list[str] = Field(default_factory=list)
    playstyle: str = ""


class CounterStrategy(ResultModel):
    archetype: str
    strategy: str
    cards: list[str] = Field(default_factory=list)


class FormatEvaluation(ResultModel):
    format: str = "standard"
    is_legal: bool = False
    illegal_cards: list[str] = Field(default_factory=list)


class RotationImpact(ResultModel):
    cutoff: str = ""
    rotating_cards: list[str] = Field(default_factory=list)
    impact: Literal["none", "minor", "major"] = "none"


class MetaAnalysis(ResultModel):
    """Fit against the reference metagame."""

    meta_score: int = Field(default=0, ge=0, le=100)
    tier: MetaTierName = "rogue"
    meta_trainers: int = 0
    meta_pokemon: int = 0
    speed_rating: Literal["too slow", "competitive", "fast"] = "competitive"
    popular_matchups: list[str] = Field(default_factory=list)
    counter_strategies: list[CounterStrategy] = Field(default_factory=list)
    meta_weaknesses: list[str] = Field(default_factory=list)
    format_evaluation: FormatEvaluation = Field(default_factory=FormatEvaluation)
    rotation: RotationImpact = Field(default_factory=RotationImpact)
    tech_recommendations: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    snapshot_version: str = "none"


class MatchupPrediction(ResultModel):
    """Estimated win rate against one reference archetype."""

    opponent: str
    opponent_tier: MetaTierName = "rogue"
    popularity: float = 0.0
    win_rate: float = Field(ge=20, le=80)
    favorability: Favorability = "even"
    type_advantage: Literal["advantage", "neutral", "disadvantage"] = "neutral"
    speed_comparison: Literal["slower", "even", "faster"] = "even"
    strategy: str = ""
    key_factors: list[str] = Field(default_factory=list)
    key_cards: list[str] = Field(default_factory=list)
    tech_options: list[str] = Field(default_factory=list)
    mulligan_priority: list[str] = Field(default_factory=list)


# =============================================================================
# Warnings / recommendations
# =============================================================================


class WarningImpact(ResultModel):
    """Estimated effect of a problem, in percentage points (negative is worse)."""

    win_rate: float = 0.0
    consistency: float = 0.0
    speed: float = 0.0


class DeckWarning(ResultModel):
    id: str
    severity: Severity
    category: WarningCategory
    title: str
    description: str
    impact: str = ""
    suggestions: list[str] = Field(min_length=1)
    priority: int = Field(default=5, ge=1, le=10)
    auto_fixable: bool = False
    estimated_impact: WarningImpact = Field(default_factory=WarningImpact)


class WarningSummary(ResultModel):
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    estimated_win_rate_impact: float = 0.0


class Recommendation(ResultModel):
    """A concrete deck change."""

    type: RecommendationType
    priority: RecommendationPriority
    card: str
    quantity: int = Field(default=1, ge=0)
    target_card: str = ""
    reasoning: list[str] = Field(default_factory=list)
    estimated_improvement: float = 0.0
    synergies: list[str] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)


class CardCut(ResultModel):
    """A card suggested for removal to make room for additions."""

    card: str
    quantity: int = Field(ge=1)
    quality: int = Field(ge=1, le=10)
    category: str
    reason: str


# =============================================================================
# Aggregate
# =============================================================================


class AnalysisMetadata(ResultModel):
    engine_version: str = "0.0.0"
    snapshot_version: str = "none"
    state: AnalysisState = "idle"
    degraded_stages: list[str] = Field(default_factory=list)
    emergency: bool = False
    total_cards: int = 0


class AnalysisResult(ResultModel):
    """Complete deck analysis."""

    consistency: ConsistencyAnalysis = Field(default_factory=ConsistencyAnalysis)
    synergy: SynergyAnalysis = Field(default_factory=SynergyAnalysis)
    meta: MetaAnalysis = Field(default_factory=MetaAnalysis)
    speed: SpeedAnalysis = Field(default_factory=SpeedAnalysis)
    matchups: list[MatchupPrediction] = Field(default_factory=list)
    archetype: ArchetypeAnalysis = Field(default_factory=ArchetypeAnalysis)
    performance: PerformanceSummary = Field(default_factory=PerformanceSummary)
    scores: DeckScores = Field(default_factory=DeckScores)
    prize_economy: PrizeEconomy = Field(default_factory=PrizeEconomy)
    legality: DeckLegality = Field(default_factory=DeckLegality)
    recommendations: list[Recommendation] = Field(default_factory=list)
    cuts: list[CardCut] = Field(default_factory=list)
    warnings: list[DeckWarning] = Field(default_factory=list)
    warning_summary: WarningSummary = Field(default_factory=WarningSummary)
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_legal(self) -> bool:
        return self.legality.is_legal

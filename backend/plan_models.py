"""
PlanCompare - Data Models
=========================
Pydantic models for the 529 vs. IUL comparison.

These models serve as the contract between:
- Whatever collects the household's answers (wizard, API client, notebook)
- The comparison engine
- Whatever renders or stores the result

Field constraints on ComparisonInputs are the input-validation layer; the
engine trusts any record that made it through construction.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plan_constants import (
    DEFAULT_INPUTS,
    ConfidenceLevel,
    IulDesignGoal,
    LiquidityNeed,
    PrimaryRecommendation,
    RiskTolerance,
    SavingsGoal,
    ScenarioWinner,
)


# =============================================================================
# INPUT RECORD
# =============================================================================

class ComparisonInputs(BaseModel):
    """
    One household's comparison request.
    Constructed once per request; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    # Household / time
    child_age: int = Field(ge=0, le=17)
    years_to_goal: int = Field(ge=1, le=25)
    monthly_contribution: float = Field(ge=0)
    initial_lump_sum: float = Field(ge=0)

    # Risk / liquidity preference
    risk_tolerance: RiskTolerance
    liquidity_need: LiquidityNeed

    # Tax context
    federal_tax_bracket: float = Field(ge=0, le=1, description="Decimal, e.g. 0.22")
    state_tax_benefit_enabled: bool
    state_tax_benefit_amount: float = Field(ge=0, description="Annual benefit")
    state_recapture_risk: bool = False

    # Mixed-use assumption
    percent_used_for_education: float = Field(ge=0, le=100)

    # Roth rollover
    consider_roth_rollover: bool
    beneficiary_has_earned_income: bool
    years_account_opened: int = Field(ge=0)
    roth_rollover_limit: float = Field(ge=0, description="Lifetime cap")
    annual_roth_limit: float = Field(ge=0, description="Per-year cap")

    # IUL design
    iul_design_goal: IulDesignGoal
    mec_risk_guard: bool
    max_loan_to_value_ratio: float = Field(gt=0, le=1)
    policy_loan_interest: float = Field(default=0.055, ge=0)

    # Macro
    inflation_assumption: float = Field(gt=-1)

    # Education cost (optional)
    expected_education_cost_today: float = Field(default=0.0, ge=0)
    scholarship_coverage_percent: float = Field(default=0.0, ge=0, le=100)

    # Recommendation-only signals
    education_probability: float = Field(ge=0, le=100)
    non_traditional_path: bool
    scholarship_likely: bool
    goals: Tuple[SavingsGoal, ...] = ()

    @field_validator("goals", mode="before")
    @classmethod
    def normalize_goals(cls, v):
        """Treat goals as a set: drop duplicates, fix the order."""
        if v is None:
            return ()
        order = list(SavingsGoal)
        unique = {SavingsGoal(g) for g in v}
        return tuple(sorted(unique, key=order.index))

    def has_goal(self, goal: SavingsGoal) -> bool:
        return goal in self.goals

    @classmethod
    def with_defaults(cls, **overrides) -> "ComparisonInputs":
        """Default household with selected fields overridden."""
        return cls(**{**DEFAULT_INPUTS, **overrides})


# =============================================================================
# RESULT SUB-RECORDS
# =============================================================================

class InfiniteBankingResult(BaseModel):
    """IUL used as a self-funded income source after the savings phase."""

    model_config = ConfigDict(frozen=True)

    iul_annual_income_available: float
    iul_income_years: int
    iul_total_income_projected: float
    iul_cash_value_after_income: float
    can_529_generate_income: bool = False
    reason_529_cannot_do_ib: str


class RecommendationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary_recommendation: PrimaryRecommendation
    confidence_level: ConfidenceLevel
    why_bullets: Tuple[str, ...] = Field(default=(), max_length=5)
    considerations: Tuple[str, ...] = Field(default=(), max_length=3)
    summary: str


class AssumptionsSnapshot(BaseModel):
    """Every rate actually used, for audit and reproduction."""

    model_config = ConfigDict(frozen=True)

    return_529: float
    return_iul_net: float
    inflation: float
    years: int
    penalty_rate: float
    federal_tax_rate: float

    iul_income_withdrawal_rate: float
    iul_income_years: int
    iul_net_growth_during_income: float
    loan_risk_threshold: float


class NonQualifiedBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    earnings: float
    taxes: float
    penalties: float
    net: float


class MixedUseBreakdown(BaseModel):
    """Pro-rata split of the 529 balance between education and other use."""

    model_config = ConfigDict(frozen=True)

    education_portion: float
    non_qualified_portion: float
    non_qualified_earnings: float
    taxes: float
    penalties: float
    net: float


class EducationFundingProjection(BaseModel):
    model_config = ConfigDict(frozen=True)

    future_education_cost: float
    funding_gap: float
    overfunding: float


class ScenarioResult(BaseModel):
    """One scenario card: 529 net value vs. IUL accessible value."""

    model_config = ConfigDict(frozen=True)

    scenario_name: str
    scenario_description: str
    fv_529_net: float
    fv_iul_accessible: float
    taxes_paid_529: float = 0.0
    penalties_529: float = 0.0
    roth_rollover_amount: float = 0.0
    winner: ScenarioWinner
    summary: str


class ScorecardItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    label_529: str
    label_iul: str
    winner: ScenarioWinner
    tooltip: str = ""


# =============================================================================
# OUTPUT RECORD
# =============================================================================

class ComparisonResult(BaseModel):
    """
    Complete comparison output.
    A snapshot: frozen, and free of timestamps or ids so identical inputs
    give identical records.
    """

    model_config = ConfigDict(frozen=True)

    # Contribution totals
    total_contributed: float
    total_contributed_inflation_adjusted: float

    # 529 projections
    fv_529_gross: float
    fv_529_education_net: float
    fv_529_non_qualified_net: float
    fv_529_mixed_net: float
    earnings_529: float
    state_tax_benefit: float
    non_qualified_taxes: float
    non_qualified_penalties: float
    mixed_use: MixedUseBreakdown

    # IUL projections
    fv_iul_cash_value_gross: float
    fv_iul_accessible: float
    policy_loan_risk_flag: bool

    # Roth rollover
    roth_rollover_possible: float
    remaining_non_qualified: float

    infinite_banking: InfiniteBankingResult
    education_funding: EducationFundingProjection
    scenarios: Tuple[ScenarioResult, ...]
    recommendation: RecommendationResult
    assumptions_used: AssumptionsSnapshot


# =============================================================================
# API REQUEST/RESPONSE MODELS
# =============================================================================

class HeadlineFigures(BaseModel):
    """Display strings for the dashboard's headline cards."""
    total_contributed: str
    fv_529_gross: str
    fv_iul_cash_value_gross: str
    fv_iul_accessible: str
    return_529: str
    return_iul_net: str


class CompareResponse(BaseModel):
    result: ComparisonResult
    headline: HeadlineFigures
    summary_text: str

"""
PlanCompare - Comparison Engine
===============================
Core projection engine for 529 vs. IUL.

This module performs all of the math for a comparison:
1. Monthly-compounded future values for both vehicles
2. 529 tax treatment for qualified, non-qualified and mixed use
3. 529 -> Roth IRA rollover eligibility
4. IUL loan access and the "infinite banking" income projection
5. Scenario cards and the final recommendation

Every function here is pure. No clock, no randomness, no I/O: the same
ComparisonInputs always produce the same ComparisonResult.
"""

import logging
from typing import List, Optional, Tuple

from plan_constants import (
    DEFAULT_CONFIG,
    REASON_529_CANNOT_DO_IB,
    ComparisonConfig,
    ScenarioWinner,
)
from plan_formatting import format_currency
from plan_models import (
    AssumptionsSnapshot,
    ComparisonInputs,
    ComparisonResult,
    EducationFundingProjection,
    InfiniteBankingResult,
    MixedUseBreakdown,
    NonQualifiedBreakdown,
    ScenarioResult,
    ScorecardItem,
)
from plan_recommendation import RecommendationEngine

logger = logging.getLogger(__name__)


# =============================================================================
# ANNUITY MATH
# =============================================================================

def compute_future_value(
    monthly_contribution: float,
    lump_sum: float,
    annual_rate: float,
    years: float
) -> float:
    """
    Future value with monthly compounding (ordinary annuity).

    FV = PMT * [((1 + r)^n - 1) / r] + lump_sum * (1 + r)^n
    with r = annual_rate / 12 and n = years * 12.
    """
    if years <= 0:
        return lump_sum
    if annual_rate == 0:
        return monthly_contribution * 12 * years + lump_sum

    r = annual_rate / 12
    n = years * 12
    growth = (1 + r) ** n
    return monthly_contribution * ((growth - 1) / r) + lump_sum * growth


def compute_total_contributions(
    monthly_contribution: float,
    lump_sum: float,
    years: float
) -> float:
    """Simple sum of everything paid in; the cost basis for earnings."""
    return monthly_contribution * 12 * years + lump_sum


# =============================================================================
# 529 TAX TREATMENT
# =============================================================================

class TaxTreatmentResolver:
    """Net value of a 529 balance under each way it can be spent."""

    @staticmethod
    def earnings(gross_value: float, total_contributed: float) -> float:
        return max(0.0, gross_value - total_contributed)

    @staticmethod
    def state_tax_benefit(enabled: bool, annual_amount: float, years: int) -> float:
        """Annual state deduction value accumulated over the savings period."""
        return annual_amount * years if enabled else 0.0

    @staticmethod
    def education_net(gross_value: float, state_tax_benefit: float) -> float:
        """Qualified use: no tax, no penalty, plus the state benefit."""
        return gross_value + state_tax_benefit

    @staticmethod
    def non_qualified(
        gross_value: float,
        total_contributed: float,
        tax_rate: float,
        penalty_rate: float
    ) -> NonQualifiedBreakdown:
        """Earnings taxed as ordinary income plus the penalty."""
        earnings = TaxTreatmentResolver.earnings(gross_value, total_contributed)
        taxes = earnings * tax_rate
        penalties = earnings * penalty_rate
        return NonQualifiedBreakdown(
            earnings=earnings,
            taxes=taxes,
            penalties=penalties,
            net=max(0.0, gross_value - taxes - penalties),
        )

    @staticmethod
    def mixed_use(
        gross_value: float,
        total_contributed: float,
        percent_education: float,
        tax_rate: float,
        penalty_rate: float
    ) -> MixedUseBreakdown:
        """
        Pro-rata split between qualified and non-qualified use.

        Earnings are spread across both portions in proportion to the
        balance, the way a blended withdrawal realizes gains, so the
        non-qualified portion carries earnings * (portion / gross).
        """
        if gross_value <= 0:
            return MixedUseBreakdown(
                education_portion=0.0,
                non_qualified_portion=0.0,
                non_qualified_earnings=0.0,
                taxes=0.0,
                penalties=0.0,
                net=gross_value,
            )

        earnings = TaxTreatmentResolver.earnings(gross_value, total_contributed)
        education_portion = gross_value * (percent_education / 100)
        non_qual_portion = gross_value - education_portion

        non_qual_earnings = non_qual_portion * (earnings / gross_value)
        taxes = non_qual_earnings * tax_rate
        penalties = non_qual_earnings * penalty_rate

        return MixedUseBreakdown(
            education_portion=education_portion,
            non_qualified_portion=non_qual_portion,
            non_qualified_earnings=non_qual_earnings,
            taxes=taxes,
            penalties=penalties,
            net=max(0.0, gross_value - taxes - penalties),
        )


# =============================================================================
# ROTH ROLLOVER
# =============================================================================

class RothRolloverCalculator:
    """
    529 -> Roth IRA rollover.

    Gates: caller opted in, beneficiary has earned income, account open for
    the holding period. The amount is the smallest of the lifetime cap, the
    available earnings and the annual cap times the tranches available.
    """

    def __init__(self, config: ComparisonConfig = DEFAULT_CONFIG):
        self.config = config

    def is_eligible(self, inputs: ComparisonInputs) -> bool:
        return (inputs.consider_roth_rollover
                and inputs.beneficiary_has_earned_income
                and inputs.years_account_opened >= self.config.rollover_holding_period_years)

    def years_available(self, years_account_opened: int) -> int:
        held_past_minimum = years_account_opened - self.config.rollover_holding_period_years + 1
        return max(0, min(self.config.rollover_max_years, held_past_minimum))

    def compute(self, earnings: float, inputs: ComparisonInputs) -> float:
        if not self.is_eligible(inputs):
            return 0.0

        max_from_annual_limits = self.years_available(inputs.years_account_opened) * inputs.annual_roth_limit
        return max(0.0, min(inputs.roth_rollover_limit, earnings, max_from_annual_limits))

    @staticmethod
    def remaining_non_qualified(
        gross_value: float,
        earnings: float,
        rollover: float,
        tax_rate: float,
        penalty_rate: float
    ) -> float:
        """Net non-qualified value once the rolled-over earnings escape tax."""
        taxable_earnings = max(0.0, earnings - rollover)
        return max(0.0, gross_value - taxable_earnings * tax_rate - taxable_earnings * penalty_rate)


# =============================================================================
# IUL ACCESS
# =============================================================================

class IulAccessModel:
    """Loan capacity against IUL cash value. A static ceiling, not a loan schedule."""

    def __init__(self, config: ComparisonConfig = DEFAULT_CONFIG):
        self.config = config

    def accessible(self, cash_value_gross: float, max_loan_ratio: float) -> float:
        return cash_value_gross * max_loan_ratio

    def risk_flag(self, max_loan_ratio: float) -> bool:
        return max_loan_ratio > self.config.loan_risk_threshold


class InfiniteBankingProjector:
    """IUL cash value as a tax-free income stream via policy loans."""

    def __init__(self, config: ComparisonConfig = DEFAULT_CONFIG):
        self.config = config

    def project(self, cash_value_at_start: float) -> InfiniteBankingResult:
        years = self.config.income_years
        annual_income = cash_value_at_start * self.config.income_withdrawal_rate

        # Crediting and loan interest roughly cancel; what's left compounds yearly
        cash_value_after = cash_value_at_start * (1 + self.config.net_growth_during_income) ** years

        return InfiniteBankingResult(
            iul_annual_income_available=annual_income,
            iul_income_years=years,
            iul_total_income_projected=annual_income * years,
            iul_cash_value_after_income=cash_value_after,
            can_529_generate_income=False,
            reason_529_cannot_do_ib=REASON_529_CANNOT_DO_IB,
        )


# =============================================================================
# EDUCATION FUNDING
# =============================================================================

def project_education_funding(
    inputs: ComparisonInputs,
    fv_529_education_net: float
) -> EducationFundingProjection:
    """Compare the 529's education value to the inflated, scholarship-net cost."""
    if inputs.expected_education_cost_today <= 0:
        return EducationFundingProjection(future_education_cost=0.0, funding_gap=0.0, overfunding=0.0)

    future_cost = (inputs.expected_education_cost_today
                   * (1 + inputs.inflation_assumption) ** inputs.years_to_goal
                   * (1 - inputs.scholarship_coverage_percent / 100))

    return EducationFundingProjection(
        future_education_cost=future_cost,
        funding_gap=max(0.0, future_cost - fv_529_education_net),
        overfunding=max(0.0, fv_529_education_net - future_cost),
    )


# =============================================================================
# SCENARIO CARDS
# =============================================================================

def pick_winner(fv_529_net: float, fv_iul_accessible: float, tie_threshold: float) -> ScenarioWinner:
    difference = fv_529_net - fv_iul_accessible
    if abs(difference) <= tie_threshold:
        return ScenarioWinner.TIE
    return ScenarioWinner.PLAN_529 if difference > 0 else ScenarioWinner.IUL


def _scenario_summary(winner: ScenarioWinner, fv_529_net: float, fv_iul_accessible: float) -> str:
    difference = abs(fv_529_net - fv_iul_accessible)
    if winner == ScenarioWinner.TIE:
        return "The two vehicles finish within a non-material distance of each other."
    leader = "The 529" if winner == ScenarioWinner.PLAN_529 else "The IUL"
    return f"{leader} comes out ahead by {format_currency(difference)}."


def build_scenario_results(
    fv_iul_accessible: float,
    fv_529_education_net: float,
    non_qualified: NonQualifiedBreakdown,
    mixed: MixedUseBreakdown,
    percent_education: float,
    roth_rollover: float,
    config: ComparisonConfig = DEFAULT_CONFIG
) -> Tuple[ScenarioResult, ...]:
    """All Education, Non-Qualified Use and Mixed Use cards, in that order."""
    cards = [
        dict(
            scenario_name="All Education",
            scenario_description="Every dollar pays for qualified education expenses.",
            fv_529_net=fv_529_education_net,
        ),
        dict(
            scenario_name="Non-Qualified Use",
            scenario_description="The funds are withdrawn for something other than qualified education.",
            fv_529_net=non_qualified.net,
            taxes_paid_529=non_qualified.taxes,
            penalties_529=non_qualified.penalties,
            roth_rollover_amount=roth_rollover,
        ),
        dict(
            scenario_name="Mixed Use",
            scenario_description=f"{percent_education:g}% of the balance pays for qualified education; "
                                 f"the rest is withdrawn.",
            fv_529_net=mixed.net,
            taxes_paid_529=mixed.taxes,
            penalties_529=mixed.penalties,
        ),
    ]

    results = []
    for card in cards:
        winner = pick_winner(card["fv_529_net"], fv_iul_accessible, config.scenario_tie_threshold)
        results.append(ScenarioResult(
            fv_iul_accessible=fv_iul_accessible,
            winner=winner,
            summary=_scenario_summary(winner, card["fv_529_net"], fv_iul_accessible),
            **card,
        ))
    return tuple(results)


SCORECARD = [
    ScorecardItem(category="Best for Education", label_529="Tax-free growth + withdrawals",
                  label_iul="Tax-free loans (if designed well)", winner=ScenarioWinner.PLAN_529),
    ScorecardItem(category="Best for Flexibility", label_529="Limited to education use",
                  label_iul="Any purpose via loans", winner=ScenarioWinner.IUL),
    ScorecardItem(category="Penalty Risk", label_529="10% + taxes on earnings",
                  label_iul="None (if loans managed)", winner=ScenarioWinner.IUL),
    ScorecardItem(category="Setup Complexity", label_529="Simple, open online",
                  label_iul="Complex, underwriting required", winner=ScenarioWinner.PLAN_529),
    ScorecardItem(category="Liquidity/Access", label_529="Restricted to education",
                  label_iul="Flexible via policy loans", winner=ScenarioWinner.IUL),
    ScorecardItem(category="Legacy Value", label_529="Account balance only",
                  label_iul="Death benefit included", winner=ScenarioWinner.IUL),
    ScorecardItem(category="State Tax Benefits", label_529="Often available",
                  label_iul="Generally none", winner=ScenarioWinner.PLAN_529),
    ScorecardItem(category="Investment Control", label_529="Limited fund options",
                  label_iul="Index-linked strategies", winner=ScenarioWinner.TIE),
]


def get_scorecard() -> List[ScorecardItem]:
    """Qualitative side-by-side that does not depend on the household."""
    return list(SCORECARD)


# =============================================================================
# COMPARISON ENGINE
# =============================================================================

class ComparisonEngine:
    """
    Run a full 529 vs. IUL comparison.

    Example:
        engine = ComparisonEngine()
        result = engine.compare_scenarios(ComparisonInputs.with_defaults())
    """

    def __init__(self, config: Optional[ComparisonConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.rollover = RothRolloverCalculator(self.config)
        self.iul_access = IulAccessModel(self.config)
        self.infinite_banking = InfiniteBankingProjector(self.config)
        self.recommender = RecommendationEngine()

    def compare_scenarios(self, inputs: ComparisonInputs) -> ComparisonResult:
        cfg = self.config
        years = inputs.years_to_goal
        tax_rate = inputs.federal_tax_bracket
        penalty_rate = cfg.penalty_rate_529

        return_529 = cfg.return_rate_529(inputs.risk_tolerance)
        return_iul_net = cfg.iul_illustrated_rate

        # Step 1: Contributions
        total_contributed = compute_total_contributions(
            inputs.monthly_contribution, inputs.initial_lump_sum, years
        )
        inflation_factor = (1 + inputs.inflation_assumption) ** years
        total_contributed_real = total_contributed / inflation_factor

        # Step 2: 529 growth and tax treatment
        fv_529_gross = compute_future_value(
            inputs.monthly_contribution, inputs.initial_lump_sum, return_529, years
        )
        earnings_529 = TaxTreatmentResolver.earnings(fv_529_gross, total_contributed)

        state_tax_benefit = TaxTreatmentResolver.state_tax_benefit(
            inputs.state_tax_benefit_enabled, inputs.state_tax_benefit_amount, years
        )
        fv_529_education_net = TaxTreatmentResolver.education_net(fv_529_gross, state_tax_benefit)
        non_qualified = TaxTreatmentResolver.non_qualified(
            fv_529_gross, total_contributed, tax_rate, penalty_rate
        )
        mixed = TaxTreatmentResolver.mixed_use(
            fv_529_gross, total_contributed, inputs.percent_used_for_education, tax_rate, penalty_rate
        )

        # Step 3: Roth rollover
        roth_rollover = self.rollover.compute(earnings_529, inputs)
        remaining_non_qualified = self.rollover.remaining_non_qualified(
            fv_529_gross, earnings_529, roth_rollover, tax_rate, penalty_rate
        )

        # Step 4: IUL
        fv_iul_gross = compute_future_value(
            inputs.monthly_contribution, inputs.initial_lump_sum, return_iul_net, years
        )
        fv_iul_accessible = self.iul_access.accessible(fv_iul_gross, inputs.max_loan_to_value_ratio)
        loan_risk = self.iul_access.risk_flag(inputs.max_loan_to_value_ratio)
        infinite_banking = self.infinite_banking.project(fv_iul_gross)

        # Step 5: Scenarios, education funding, recommendation
        scenarios = build_scenario_results(
            fv_iul_accessible, fv_529_education_net, non_qualified, mixed,
            inputs.percent_used_for_education, roth_rollover, cfg
        )
        education_funding = project_education_funding(inputs, fv_529_education_net)
        recommendation = self.recommender.generate_recommendation(inputs, total_contributed)

        logger.debug(
            "Compared %d years: 529 gross %.2f, IUL gross %.2f, recommendation %s",
            years, fv_529_gross, fv_iul_gross, recommendation.primary_recommendation.value
        )

        return ComparisonResult(
            total_contributed=total_contributed,
            total_contributed_inflation_adjusted=total_contributed_real,
            fv_529_gross=fv_529_gross,
            fv_529_education_net=fv_529_education_net,
            fv_529_non_qualified_net=non_qualified.net,
            fv_529_mixed_net=mixed.net,
            earnings_529=earnings_529,
            state_tax_benefit=state_tax_benefit,
            non_qualified_taxes=non_qualified.taxes,
            non_qualified_penalties=non_qualified.penalties,
            mixed_use=mixed,
            fv_iul_cash_value_gross=fv_iul_gross,
            fv_iul_accessible=fv_iul_accessible,
            policy_loan_risk_flag=loan_risk,
            roth_rollover_possible=roth_rollover,
            remaining_non_qualified=remaining_non_qualified,
            infinite_banking=infinite_banking,
            education_funding=education_funding,
            scenarios=scenarios,
            recommendation=recommendation,
            assumptions_used=AssumptionsSnapshot(
                return_529=return_529,
                return_iul_net=return_iul_net,
                inflation=inputs.inflation_assumption,
                years=years,
                penalty_rate=penalty_rate,
                federal_tax_rate=tax_rate,
                iul_income_withdrawal_rate=cfg.income_withdrawal_rate,
                iul_income_years=cfg.income_years,
                iul_net_growth_during_income=cfg.net_growth_during_income,
                loan_risk_threshold=cfg.loan_risk_threshold,
            ),
        )


def compare_scenarios(
    inputs: ComparisonInputs,
    config: Optional[ComparisonConfig] = None
) -> ComparisonResult:
    """Module-level entry point: one comparison under the given config."""
    return ComparisonEngine(config).compare_scenarios(inputs)


# =============================================================================
# DEMO / TESTING
# =============================================================================

def demo():
    """Run the default household through the engine."""
    from plan_formatting import build_comparison_summary

    inputs = ComparisonInputs.with_defaults(
        initial_lump_sum=10000,
        education_probability=60,
        goals=["education", "legacy"],
    )
    print(build_comparison_summary(compare_scenarios(inputs)))


if __name__ == "__main__":
    demo()

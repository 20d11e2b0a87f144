"""
PlanCompare - Plan Constants
============================
Hardcoded rule constants for the 529 vs. IUL comparison engine.

These are the ONLY source of truth for rates and limits used in a comparison.
Every value here ends up in the AssumptionsSnapshot of a result, so a
projection can always be reproduced from its output record.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Tuple

# =============================================================================
# ENUMS
# =============================================================================

class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    GROWTH = "growth"


class LiquidityNeed(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IulDesignGoal(str, Enum):
    CASH_FOCUSED = "cash_focused"
    BALANCED = "balanced"


class SavingsGoal(str, Enum):
    EDUCATION = "education"
    FLEX_SAVINGS = "flex_savings"
    LEGACY = "legacy"
    RETIREMENT_SUPPLEMENT = "retirement_supplement"


class PrimaryRecommendation(str, Enum):
    PLAN_529_FIRST = "529_first"
    IUL_CONSIDERATION = "iul_consideration"
    HYBRID = "hybrid"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ScenarioWinner(str, Enum):
    PLAN_529 = "529"
    IUL = "IUL"
    TIE = "tie"


# =============================================================================
# RETURN ASSUMPTIONS
# Illustrative, not market data. The 529 table is keyed by risk tolerance
# even though every tier currently uses the same rate.
# =============================================================================

RETURN_RATES_529: Dict[RiskTolerance, float] = {
    RiskTolerance.CONSERVATIVE: 0.06,
    RiskTolerance.BALANCED: 0.06,
    RiskTolerance.GROWTH: 0.06,
}

IUL_ILLUSTRATED_RATE = 0.06


# =============================================================================
# 529 TAX TREATMENT
# =============================================================================

PENALTY_RATE_529 = 0.10  # On earnings of non-qualified withdrawals


# =============================================================================
# 529 -> ROTH IRA ROLLOVER RULES
# =============================================================================

ROTH_ROLLOVER_RULES = {
    "lifetime_limit": 35000,
    "annual_limit": 7000,
    "holding_period_years": 15,
    "max_rollover_years": 5,
}


# =============================================================================
# IUL POLICY LOANS / INFINITE BANKING
# =============================================================================

IUL_LOAN_RISK_THRESHOLD = 0.90       # LTV above this is flagged
IUL_INCOME_WITHDRAWAL_RATE = 0.05    # Sustainable income via policy loans
IUL_INCOME_YEARS = 20
IUL_NET_GROWTH_DURING_INCOME = 0.01  # ~6% crediting less ~5% loan interest

REASON_529_CANNOT_DO_IB = (
    "529 funds must be spent on qualified education or face 10% penalty + taxes. "
    "Cannot be used as a family bank for ongoing tax-free income."
)


# =============================================================================
# SCENARIO CARDS
# =============================================================================

SCENARIO_TIE_THRESHOLD = 1000  # Differences at or below this are not material


# =============================================================================
# COMPARISON CONFIG
# =============================================================================

@dataclass(frozen=True)
class ComparisonConfig:
    """
    Every rate and rule constant the engine is allowed to use.

    Pass a modified copy (``dataclasses.replace(DEFAULT_CONFIG, ...)``) to
    run a comparison under different assumptions.
    """

    # (risk tolerance, annual return) pairs
    return_rates_529: Tuple[Tuple[RiskTolerance, float], ...] = tuple(RETURN_RATES_529.items())
    iul_illustrated_rate: float = IUL_ILLUSTRATED_RATE
    penalty_rate_529: float = PENALTY_RATE_529

    rollover_holding_period_years: int = ROTH_ROLLOVER_RULES["holding_period_years"]
    rollover_max_years: int = ROTH_ROLLOVER_RULES["max_rollover_years"]

    loan_risk_threshold: float = IUL_LOAN_RISK_THRESHOLD
    income_withdrawal_rate: float = IUL_INCOME_WITHDRAWAL_RATE
    income_years: int = IUL_INCOME_YEARS
    net_growth_during_income: float = IUL_NET_GROWTH_DURING_INCOME

    scenario_tie_threshold: float = SCENARIO_TIE_THRESHOLD

    def return_rate_529(self, risk_tolerance: RiskTolerance) -> float:
        """Plan A annual return for a risk tolerance."""
        return dict(self.return_rates_529)[RiskTolerance(risk_tolerance)]


DEFAULT_CONFIG = ComparisonConfig()


# =============================================================================
# DEFAULT HOUSEHOLD
# =============================================================================

DEFAULT_INPUTS = {
    "goals": [SavingsGoal.EDUCATION],
    "education_probability": 75,
    "scholarship_likely": False,
    "non_traditional_path": False,
    "child_age": 0,
    "years_to_goal": 18,
    "monthly_contribution": 500,
    "initial_lump_sum": 0,
    "inflation_assumption": 0.03,
    "risk_tolerance": RiskTolerance.BALANCED,
    "liquidity_need": LiquidityNeed.MEDIUM,
    "federal_tax_bracket": 0.22,
    "state_tax_benefit_enabled": False,
    "state_tax_benefit_amount": 0,
    "state_recapture_risk": False,
    "consider_roth_rollover": True,
    "roth_rollover_limit": ROTH_ROLLOVER_RULES["lifetime_limit"],
    "years_account_opened": 18,
    "beneficiary_has_earned_income": True,
    "annual_roth_limit": ROTH_ROLLOVER_RULES["annual_limit"],
    "iul_design_goal": IulDesignGoal.CASH_FOCUSED,
    "mec_risk_guard": True,
    "policy_loan_interest": 0.055,
    "max_loan_to_value_ratio": 0.80,
    "expected_education_cost_today": 100000,
    "scholarship_coverage_percent": 0,
    "percent_used_for_education": 50,
}


# =============================================================================
# EXPORT CONSTANTS FOR REFERENCE ENDPOINTS
# =============================================================================

def get_assumptions_reference(config: ComparisonConfig = DEFAULT_CONFIG) -> dict:
    """Plain-dict view of a config, enum keys flattened to their values."""
    data = asdict(config)
    data["return_rates_529"] = {
        RiskTolerance(k).value: v for k, v in config.return_rates_529
    }
    data["roth_rollover_rules"] = dict(ROTH_ROLLOVER_RULES)
    return data

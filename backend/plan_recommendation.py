"""
PlanCompare - Recommendation Engine
===================================
Rule-based 529 vs. IUL recommendation.

The classifier looks at the household's answers only. Rationale bullets come
from fixed catalogs of (predicate, text) rules evaluated in order; the only
numbers that leak into the text are the state tax benefit percentage and the
Roth rollover cap.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, Union

from plan_constants import (
    ConfidenceLevel,
    LiquidityNeed,
    PrimaryRecommendation,
    SavingsGoal,
)
from plan_models import ComparisonInputs, RecommendationResult

logger = logging.getLogger(__name__)

MAX_WHY_BULLETS = 5
MAX_CONSIDERATIONS = 3


@dataclass(frozen=True)
class RecommendationContext:
    """What a rationale rule is allowed to look at."""
    inputs: ComparisonInputs
    total_contributed: float


@dataclass(frozen=True)
class RationaleRule:
    """A bullet that appears when its predicate holds."""

    predicate: Callable[[RecommendationContext], bool]
    text: Union[str, Callable[[RecommendationContext], str]]

    def render(self, ctx: RecommendationContext) -> str:
        return self.text(ctx) if callable(self.text) else self.text


def _always(ctx: RecommendationContext) -> bool:
    return True


def _state_tax_bullet(ctx: RecommendationContext) -> str:
    pct = ctx.inputs.state_tax_benefit_amount / ctx.total_contributed * 100
    return f"State tax benefit adds {pct:.1f}% effective return"


def _rollover_cap_label(ctx: RecommendationContext) -> str:
    return f"${ctx.inputs.roth_rollover_limit / 1000:,.0f}k"


def evaluate_rules(
    rules: Sequence[RationaleRule],
    ctx: RecommendationContext,
    limit: int
) -> Tuple[str, ...]:
    """Render every rule whose predicate holds, in order, capped at limit."""
    return tuple(rule.render(ctx) for rule in rules if rule.predicate(ctx))[:limit]


# =============================================================================
# RATIONALE CATALOGS
# =============================================================================

PLAN_529_FIRST_WHY = [
    RationaleRule(_always, "High probability of using funds for qualified education"),
    RationaleRule(_always, "529 offers tax-free growth for education expenses"),
    RationaleRule(_always, "Lower flexibility need reduces 529 penalty risk"),
    RationaleRule(
        lambda ctx: ctx.inputs.state_tax_benefit_enabled and ctx.total_contributed > 0,
        _state_tax_bullet,
    ),
]

PLAN_529_FIRST_CONSIDERATIONS = [
    RationaleRule(_always, "Non-qualified withdrawals still face taxes + 10% penalty"),
    RationaleRule(_always, "Limited to education expenses for tax-free treatment"),
]

IUL_CONSIDERATION_WHY = [
    RationaleRule(
        lambda ctx: ctx.inputs.education_probability <= 50,
        "Education probability is uncertain, so flexibility is valuable",
    ),
    RationaleRule(
        lambda ctx: ctx.inputs.non_traditional_path,
        "Non-traditional education path may not qualify for 529 benefits",
    ),
    RationaleRule(
        lambda ctx: ctx.inputs.liquidity_need == LiquidityNeed.HIGH,
        "High liquidity need favors IUL's flexible access via policy loans",
    ),
    RationaleRule(
        lambda ctx: ctx.inputs.scholarship_likely,
        "Scholarship potential reduces need for education-specific savings",
    ),
    RationaleRule(
        lambda ctx: ctx.inputs.has_goal(SavingsGoal.LEGACY),
        "IUL provides death benefit for legacy planning",
    ),
    RationaleRule(
        lambda ctx: ctx.inputs.has_goal(SavingsGoal.FLEX_SAVINGS),
        'IUL can serve as a "family bank" for multiple goals',
    ),
]

IUL_CONSIDERATION_CONSIDERATIONS = [
    RationaleRule(_always, "IUL requires proper design to maximize cash value"),
    RationaleRule(_always, "Policy loans accrue interest and can cause lapse if mismanaged"),
    RationaleRule(_always, "Underwriting required; costs vary by health"),
]

HYBRID_WHY = [
    RationaleRule(_always, "Moderate education certainty suggests diversified approach"),
    RationaleRule(_always, "Fund 529 up to expected education cost for tax efficiency"),
    RationaleRule(_always, "Place excess savings in IUL for flexibility and legacy"),
    RationaleRule(
        lambda ctx: ctx.inputs.consider_roth_rollover,
        lambda ctx: f"Roth rollover can rescue some 529 overfunding (limited to {_rollover_cap_label(ctx)})",
    ),
]

HYBRID_CONSIDERATIONS = [
    RationaleRule(_always, "More complex to manage two accounts"),
    RationaleRule(_always, "Requires monitoring education cost projections"),
]

# Appended after every branch's own considerations
SHARED_CONSIDERATIONS = [
    RationaleRule(
        lambda ctx: ctx.inputs.consider_roth_rollover and ctx.inputs.education_probability < 90,
        lambda ctx: f"Roth rollover cap of {_rollover_cap_label(ctx)} limits rescue of large overfunding",
    ),
]

RULE_CATALOG = {
    PrimaryRecommendation.PLAN_529_FIRST: (PLAN_529_FIRST_WHY, PLAN_529_FIRST_CONSIDERATIONS),
    PrimaryRecommendation.IUL_CONSIDERATION: (IUL_CONSIDERATION_WHY, IUL_CONSIDERATION_CONSIDERATIONS),
    PrimaryRecommendation.HYBRID: (HYBRID_WHY, HYBRID_CONSIDERATIONS),
}

SUMMARY_MAP = {
    PrimaryRecommendation.PLAN_529_FIRST: (
        "Based on your high education certainty and low flexibility needs, a 529 plan "
        "is likely your best primary vehicle for education savings."
    ),
    PrimaryRecommendation.IUL_CONSIDERATION: (
        "Given the uncertainty around education use and/or your need for flexibility, "
        "a properly designed IUL may offer advantages worth considering."
    ),
    PrimaryRecommendation.HYBRID: (
        "A balanced approach, funding a 529 for expected education costs while using "
        "IUL for additional flexibility, may best serve your goals."
    ),
}


# =============================================================================
# RECOMMENDATION ENGINE
# =============================================================================

class RecommendationEngine:
    """
    Three-branch classifier, evaluated in precedence order:

    1. 529 first: probability >= 75, low liquidity need, traditional path.
    2. IUL consideration: probability <= 50, non-traditional path, or high
       liquidity need.
    3. Hybrid: everything else.
    """

    @staticmethod
    def classify(inputs: ComparisonInputs) -> Tuple[PrimaryRecommendation, ConfidenceLevel]:
        """Return (branch, confidence) for a household."""
        probability = inputs.education_probability

        if (probability >= 75
                and inputs.liquidity_need == LiquidityNeed.LOW
                and not inputs.non_traditional_path):
            confidence = ConfidenceLevel.HIGH if probability >= 90 else ConfidenceLevel.MEDIUM
            return PrimaryRecommendation.PLAN_529_FIRST, confidence

        if (probability <= 50
                or inputs.non_traditional_path
                or inputs.liquidity_need == LiquidityNeed.HIGH):
            confidence = (ConfidenceLevel.HIGH if inputs.liquidity_need == LiquidityNeed.HIGH
                          else ConfidenceLevel.MEDIUM)
            return PrimaryRecommendation.IUL_CONSIDERATION, confidence

        return PrimaryRecommendation.HYBRID, ConfidenceLevel.MEDIUM

    def generate_recommendation(
        self,
        inputs: ComparisonInputs,
        total_contributed: float
    ) -> RecommendationResult:
        """Classify the household and assemble the supporting rationale."""
        branch, confidence = self.classify(inputs)
        ctx = RecommendationContext(inputs=inputs, total_contributed=total_contributed)

        why_rules, consideration_rules = RULE_CATALOG[branch]
        why_bullets = evaluate_rules(why_rules, ctx, MAX_WHY_BULLETS)
        considerations = evaluate_rules(
            list(consideration_rules) + SHARED_CONSIDERATIONS, ctx, MAX_CONSIDERATIONS
        )

        logger.debug(
            "Recommendation %s (%s): %d bullets, %d considerations",
            branch.value, confidence.value, len(why_bullets), len(considerations)
        )

        return RecommendationResult(
            primary_recommendation=branch,
            confidence_level=confidence,
            why_bullets=why_bullets,
            considerations=considerations,
            summary=SUMMARY_MAP[branch],
        )

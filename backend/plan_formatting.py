"""
PlanCompare - Formatting
========================
Canonical text representation of comparison results.

Presentation layers should format through these helpers so every surface
shows the same rounding.
"""

from decimal import Decimal, ROUND_HALF_UP

from plan_models import ComparisonResult


def format_currency(value: float) -> str:
    """
    Format as US dollars rounded to whole units.

    Halves round away from zero, matching the en-US currency formatter
    browsers use: 1234.5 -> "$1,235", -1234.5 -> "-$1,235".
    """
    rounded = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "$0"
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a decimal rate as a percentage: 0.06 -> "6.0%"."""
    return f"{value * 100:.{decimals}f}%"


def build_comparison_summary(result: ComparisonResult) -> str:
    """Build a human-readable summary of a comparison result."""
    a = result.assumptions_used
    ib = result.infinite_banking
    rec = result.recommendation

    lines = [
        "=== 529 VS IUL COMPARISON ===",
        f"Years to Goal: {a.years}",
        f"Total Contributed: {format_currency(result.total_contributed)}",
        f"Total Contributed (today's dollars): {format_currency(result.total_contributed_inflation_adjusted)}",
        "",
        f"529 Gross Value: {format_currency(result.fv_529_gross)} ({format_percent(a.return_529)} assumed return)",
        f"  Education Use: {format_currency(result.fv_529_education_net)}",
        f"  Non-Qualified Use: {format_currency(result.fv_529_non_qualified_net)}",
        f"  Mixed Use: {format_currency(result.fv_529_mixed_net)}",
        f"  Earnings: {format_currency(result.earnings_529)}",
        f"  State Tax Benefit: {format_currency(result.state_tax_benefit)}",
        "",
        f"IUL Cash Value: {format_currency(result.fv_iul_cash_value_gross)} ({format_percent(a.return_iul_net)} illustrative net)",
        f"  Accessible via Loans: {format_currency(result.fv_iul_accessible)}",
    ]

    if result.policy_loan_risk_flag:
        lines.append(f"  WARNING: Loan-to-value above {format_percent(a.loan_risk_threshold, 0)} increases lapse risk")

    if result.roth_rollover_possible > 0:
        lines.append(f"Roth Rollover Available: up to {format_currency(result.roth_rollover_possible)}")

    lines.extend([
        "",
        f"IUL Income: {format_currency(ib.iul_annual_income_available)}/yr for {ib.iul_income_years} years "
        f"({format_currency(ib.iul_total_income_projected)} total)",
        f"529 as Income Source: {ib.reason_529_cannot_do_ib}",
        "",
        f"=== RECOMMENDATION: {rec.primary_recommendation.value} ({rec.confidence_level.value} confidence) ===",
        rec.summary,
    ])
    lines.extend(f"  + {bullet}" for bullet in rec.why_bullets)
    lines.extend(f"  ! {item}" for item in rec.considerations)

    return "\n".join(lines)

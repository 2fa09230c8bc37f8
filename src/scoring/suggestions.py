"""Improvement suggestions derived from factor scores."""

import logging
from typing import Dict, Iterable, List, Optional

from model.HealthReport import MissingDataWarning, ScoreFactor, Suggestion

logger = logging.getLogger(__name__)

# Fallback for factors without a tier status: below this share of its weight gets a suggestion
GOOD_THRESHOLD = 0.85

GOOD_STATUSES = ("excellent", "good")
BELOW_GOOD_STATUSES = ("fair", "poor", "critical")

PRIORITY_CUTOFFS = (
    (0.25, "critical"),
    (0.50, "high"),
    (0.70, "medium"),
)


def priority_for(relative_score: float) -> str:
    """Map a factor's score/weight ratio to a suggestion priority."""
    for cutoff, priority in PRIORITY_CUTOFFS:
        if relative_score < cutoff:
            return priority
    return "low"


def needs_suggestion(factor: ScoreFactor, threshold: float = GOOD_THRESHOLD) -> bool:
    """True when a factor sits below the good tier.

    The tier status decides when there is one, so a good factor that lost
    points to a penalty is not flagged. Unknown or errored factors fall back
    to the score ratio.
    """
    if factor.weight <= 0 or factor.status in GOOD_STATUSES:
        return False
    if factor.status in BELOW_GOOD_STATUSES:
        return True
    return factor.relative_score < threshold


def _savings_rate(d):
    rate = d.get("savings_rate", 0)
    if d.get("calculationMethod") == "no_income":
        return ("No monthly income was provided, so the savings rate cannot be measured.",
                "Enter your monthly salary and any additional income.",
                "A measurable savings rate is the single largest input to the score.")
    if rate < 10:
        action = "Try to save at least 10% of your income. Start by reducing discretionary expenses."
    else:
        action = "Aim for a 15-20% savings rate by optimizing your budget."
    return (f"You are saving {rate:.1f}% of your monthly income.",
            action,
            "Each 5% increase in savings rate can reduce retirement age by 3-5 years.")


def _retirement_readiness(d):
    if "readiness_ratio" not in d:
        return ("Retirement readiness could not be measured.",
                "Provide your age, income and current pension savings.",
                "Knowing where you stand shows how much catching up is needed.")
    return (f"Your savings are {d['readiness_ratio']:.0%} of the {d['target_multiple']:.1f}x "
            f"annual income target for your age.",
            "You're behind on age-appropriate savings targets. Consider increasing contributions.",
            "Catching up now will significantly improve your retirement lifestyle.")


def _time_horizon(d):
    years = d.get("years_to_retirement")
    issue = (f"Only {years:g} years remain until retirement." if years is not None
             else "Retirement timing is unknown.")
    return (issue,
            "With limited years until retirement, maximize contributions and consider working longer.",
            "Each additional year of work can increase retirement income by 5-8%.")


def _risk_alignment(d):
    if "equity_percentage" not in d:
        return ("Your investment allocation is unknown.",
                "Enter the equity percentage of your investments and your risk tolerance.",
                "Proper alignment protects wealth while ensuring growth.")
    return (f"Your equity allocation of {d['equity_percentage']:g}% is far from the "
            f"{d['ideal_equity']:g}% suited to your age and {d['risk_profile']} risk profile.",
            "Rebalance toward the target equity range for your age and risk profile.",
            "Proper alignment protects wealth while ensuring growth.")


def _diversification(d):
    count = d.get("asset_class_count", 0)
    return (f"You hold {count} asset class{'es' if count != 1 else ''}.",
            "Add different asset types such as bonds, real estate or cash reserves to spread risk.",
            "Proper diversification can reduce portfolio volatility by 20-30%.")


def _tax_efficiency(d):
    if "efficiency" not in d:
        return ("Tax-advantaged contribution rates are unknown.",
                "Enter your pension and training fund contribution rates.",
                "Tax savings can add 10-20% to your retirement nest egg.")
    issue = (f"Your tax-advantaged contributions reach {d['efficiency']:.0f}% of the optimal "
             f"rate for {d['country']}.")
    if d.get("has_comprehensive_calculation"):
        issue += f" Additional income adds about {d['additional_income_tax']:,.0f} in monthly tax."
    return (issue,
            "Maximize contributions to tax-advantaged accounts like pension and training funds.",
            "Tax savings can add 10-20% to your retirement nest egg.")


def _emergency_fund(d):
    if "months_covered" not in d:
        return ("Your emergency reserves cannot be measured.",
                "Enter your monthly expenses and emergency fund balance.",
                "Adequate emergency fund prevents retirement savings withdrawals during crises.")
    return (f"You have {d['months_covered']:g} months of expenses saved.",
            f"Build reserves toward {d['target_months']:g} months of expenses.",
            "Adequate emergency fund prevents retirement savings withdrawals during crises.")


def _debt_management(d):
    if d.get("has_high_interest_debt"):
        action = "Focus on eliminating high-interest debt first."
    else:
        action = "Work on reducing overall debt to improve cash flow."
    ratio = d.get("debt_to_income_ratio")
    issue = (f"Debt payments take {ratio:.0%} of your monthly income." if ratio is not None
             else "Debt load could not be compared with income.")
    return (issue, action, "Eliminating debt frees up money for retirement savings.")


SUGGESTION_TEXT = {
    "savingsRate": _savings_rate,
    "retirementReadiness": _retirement_readiness,
    "timeHorizon": _time_horizon,
    "riskAlignment": _risk_alignment,
    "diversification": _diversification,
    "taxEfficiency": _tax_efficiency,
    "emergencyFund": _emergency_fund,
    "debtManagement": _debt_management,
}


class SuggestionGenerator:
    """Builds an ordered list of suggestions for factors below the good tier."""

    def __init__(self, threshold: float = GOOD_THRESHOLD):
        self.threshold = threshold

    def generate(self, factors: Dict[str, ScoreFactor],
                 missing_data: Optional[Iterable[MissingDataWarning]] = None) -> List[Suggestion]:
        """Generate suggestions, most impactful first.

        Args:
            factors: Mapping of factor name to its ScoreFactor
            missing_data: Missing-field records; when present a data-quality
                suggestion is added after the factor suggestions

        Returns:
            List of Suggestion ordered by ascending relative score, ties
            broken by higher weight.
        """
        low = [f for f in factors.values() if needs_suggestion(f, self.threshold)]
        low.sort(key=lambda f: (f.relative_score, -f.weight))

        suggestions = []
        for factor in low:
            text = SUGGESTION_TEXT.get(factor.name)
            if text is None:
                issue = f"{factor.name} is below target."
                action = "Focus on improving this aspect of your financial health."
                impact = "This will contribute to your overall financial wellbeing."
            else:
                issue, action, impact = text(factor.details)
            suggestions.append(Suggestion(
                category=factor.name,
                priority=priority_for(factor.relative_score),
                issue=issue,
                action=action,
                impact=impact,
            ))

        missing = list(missing_data or [])
        if missing:
            fields = sorted({m.field for m in missing})
            suggestions.append(Suggestion(
                category="dataQuality",
                priority="medium",
                issue=f"{len(fields)} input field{'s are' if len(fields) != 1 else ' is'} missing: "
                      f"{', '.join(fields)}.",
                action="Complete the missing fields so every factor can be scored.",
                impact="Missing inputs score as zero and understate your financial health.",
            ))

        if not suggestions:
            suggestions.append(Suggestion(
                category="general",
                priority="low",
                issue="Your financial health is in great shape.",
                action="Keep up the excellent work and continue your current habits.",
                impact="Maintaining your current trajectory will ensure long-term financial success.",
            ))
        logger.debug("Generated %d suggestions", len(suggestions))
        return suggestions

"""Scorers for the eight financial health factors.

Every scorer reads the profile through the FieldResolver and returns a
ScoreFactor whose score lies in [0, weight]. Missing inputs never raise:
the factor scores 0 and its details say why (details["calculationMethod"]
and details["reason"]), so a report can always be rendered.

Tier scoring uses the fractions from reference/score-factors.json:
excellent 1.0, good 0.85, fair 0.70 and poor 0.50 of the weight. Below the
poor threshold a higher-is-better factor scales linearly from 0 up to half
its weight; a lower-is-better factor scores 0.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Dict, Optional, Tuple

from calc.field_resolver import FieldResolver, is_couple
from model.field_aliases import CanonicalField
from model.HealthReport import ScoreFactor
from model.ProjectionData import Projection
from scoring.benchmarks import ScoringBenchmarks, TIERS

# An allocation below this percentage does not count as holding the asset class
MIN_ALLOCATION_PCT = 5.0

SAFE_WITHDRAWAL_RATE = 0.04


def tier_score(value: float, tiers: Dict[str, float], weight: float,
               fractions: Dict[str, float]) -> Tuple[float, str]:
    """Score a higher-is-better value against tier thresholds.

    Returns:
        Tuple of (score, status).
    """
    for tier in TIERS:
        if value >= tiers[tier]:
            return fractions[tier] * weight, tier
    poor = tiers["poor"]
    if poor <= 0 or value <= 0:
        return 0.0, "critical"
    return value / poor * fractions["poor"] * weight, "critical"


def inverse_tier_score(value: float, tiers: Dict[str, float], weight: float,
                       fractions: Dict[str, float]) -> Tuple[float, str]:
    """Score a lower-is-better value against tier thresholds."""
    for tier in TIERS:
        if value < tiers[tier]:
            return fractions[tier] * weight, tier
    return 0.0, "critical"


def monthly_income(profile: Mapping, resolver: FieldResolver) -> float:
    """Household monthly income: salary plus additional income."""
    salary = resolver.resolve(profile, CanonicalField.SALARY, combine_partners=True) or 0.0
    additional = resolver.resolve(profile, CanonicalField.ADDITIONAL_INCOME, combine_partners=True) or 0.0
    return max(0.0, salary) + max(0.0, additional)


def combined(profile: Mapping, resolver: FieldResolver, field: CanonicalField) -> float:
    """Household total for a money field, treating a missing value as 0."""
    return resolver.resolve(profile, field, combine_partners=True, allow_zero=True) or 0.0


class FactorScorer(ABC):
    """Base class for a single weighted factor."""

    key: str = ""
    # Fields whose absence makes this factor fall back to a zero score
    required_fields: Tuple[CanonicalField, ...] = ()

    @abstractmethod
    def score(self, profile: Mapping, resolver: FieldResolver, benchmarks: ScoringBenchmarks,
              projection: Optional[Projection] = None) -> ScoreFactor:
        """Compute this factor's score for a profile."""

    def _factor(self, benchmarks: ScoringBenchmarks, score: float, status: str, **details) -> ScoreFactor:
        return ScoreFactor(
            name=self.key,
            weight=benchmarks.weight(self.key),
            score=score,
            status=status,
            details=details,
        )

    def _unknown(self, benchmarks: ScoringBenchmarks, method: str, reason: str, **details) -> ScoreFactor:
        return self._factor(benchmarks, 0.0, "unknown", calculationMethod=method, reason=reason, **details)

    def _tiered(self, benchmarks: ScoringBenchmarks, value: float, tiers: Optional[Dict[str, float]] = None):
        bench = benchmarks.factors[self.key]
        tiers = tiers or bench.tiers
        scorer = tier_score if bench.higher_is_better else inverse_tier_score
        return scorer(value, tiers, bench.weight, benchmarks.tier_fractions)


class SavingsRateScorer(FactorScorer):
    """Monthly long-term savings as a percentage of monthly income."""

    key = "savingsRate"
    required_fields = (CanonicalField.SALARY, CanonicalField.MONTHLY_CONTRIBUTION)

    def score(self, profile, resolver, benchmarks, projection=None):
        income = monthly_income(profile, resolver)
        if income <= 0:
            return self._unknown(benchmarks, "no_income", "No monthly income was provided",
                                 monthly_income=0.0, savings_rate=0.0)

        direct = resolver.resolve(profile, CanonicalField.MONTHLY_CONTRIBUTION, combine_partners=True)
        extra = (combined(profile, resolver, CanonicalField.PERSONAL_SAVINGS_MONTHLY)
                 + combined(profile, resolver, CanonicalField.ADDITIONAL_SAVINGS))
        if direct:
            contributions = (direct
                             + combined(profile, resolver, CanonicalField.TRAINING_FUND_CONTRIBUTION)
                             + extra)
            method = "direct"
        else:
            contributions = self._from_rates(profile, resolver) + extra
            method = "calculated_from_rates" if contributions > 0 else "no_contributions"

        rate = contributions / income * 100
        score, status = self._tiered(benchmarks, rate)
        return self._factor(
            benchmarks, score, status,
            savings_rate=round(rate, 2),
            monthly_contributions=round(contributions, 2),
            monthly_income=round(income, 2),
            calculationMethod=method,
        )

    @staticmethod
    def _from_rates(profile, resolver) -> float:
        """Employee payroll contributions derived from salary and contribution rates."""
        if is_couple(profile):
            savers = (("partner1", True), ("partner2", False))
        else:
            savers = ((None, True),)
        total = 0.0
        for partner, fallback in savers:
            def value(f):
                if partner is None:
                    return resolver.resolve(profile, f, allow_zero=True) or 0.0
                return resolver.resolve_partner(profile, f, partner, allow_zero=True,
                                                fallback_to_base=fallback) or 0.0
            rate = value(CanonicalField.PENSION_EMPLOYEE_RATE) + value(CanonicalField.TRAINING_FUND_EMPLOYEE_RATE)
            total += value(CanonicalField.SALARY) * rate / 100.0
        return total


class RetirementReadinessScorer(FactorScorer):
    """Current savings against an age-based multiple of annual income."""

    key = "retirementReadiness"
    required_fields = (CanonicalField.CURRENT_AGE, CanonicalField.SALARY, CanonicalField.CURRENT_PENSION)

    def score(self, profile, resolver, benchmarks, projection=None):
        age = resolver.resolve(profile, CanonicalField.CURRENT_AGE)
        if age is None:
            return self._unknown(benchmarks, "missing_age", "Current age is required to pick a savings target")
        annual_income = monthly_income(profile, resolver) * 12
        if annual_income <= 0:
            return self._unknown(benchmarks, "no_income", "No income was provided to size a savings target")

        savings = (combined(profile, resolver, CanonicalField.CURRENT_PENSION)
                   + combined(profile, resolver, CanonicalField.CURRENT_TRAINING_FUND)
                   + combined(profile, resolver, CanonicalField.PERSONAL_PORTFOLIO))
        multiple = benchmarks.age_target(age)
        target = annual_income * multiple
        ratio = savings / target if target > 0 else 0.0
        score, status = self._tiered(benchmarks, ratio)

        details = dict(
            current_savings=round(savings, 2),
            target_multiple=round(multiple, 2),
            target_savings=round(target, 2),
            readiness_ratio=round(ratio, 2),
            calculationMethod="age_target",
        )
        final = projection.final_point("combined") if projection is not None else None
        if final is not None:
            details["projected_nominal_at_retirement"] = final.nominal_total
            details["projected_real_at_retirement"] = final.real_total
            details["projected_monthly_income"] = round(final.real_total * SAFE_WITHDRAWAL_RATE / 12, 2)
        return self._factor(benchmarks, score, status, **details)


class TimeHorizonScorer(FactorScorer):
    """Years remaining until retirement."""

    key = "timeHorizon"
    required_fields = (CanonicalField.CURRENT_AGE, CanonicalField.RETIREMENT_AGE)

    def score(self, profile, resolver, benchmarks, projection=None):
        current = resolver.resolve(profile, CanonicalField.CURRENT_AGE)
        retirement = resolver.resolve(profile, CanonicalField.RETIREMENT_AGE)
        if current is None or retirement is None:
            return self._unknown(benchmarks, "missing_age", "Current and retirement ages are both required")
        years = retirement - current
        if years <= 0:
            return self._factor(benchmarks, 0.0, "critical", years_to_retirement=years,
                                calculationMethod="invalid_range",
                                reason="Retirement age is not after the current age")
        score, status = self._tiered(benchmarks, years)
        return self._factor(benchmarks, score, status, years_to_retirement=years,
                            calculationMethod="age_difference")


class RiskAlignmentScorer(FactorScorer):
    """Equity allocation against the age and risk-tolerance ideal."""

    key = "riskAlignment"
    required_fields = (CanonicalField.EQUITY_PERCENTAGE, CanonicalField.RISK_TOLERANCE)

    def score(self, profile, resolver, benchmarks, projection=None):
        equity = resolver.resolve(profile, CanonicalField.EQUITY_PERCENTAGE, allow_zero=True)
        if equity is None:
            return self._unknown(benchmarks, "missing_allocation", "No equity allocation was provided")

        tolerance = resolver.resolve(profile, CanonicalField.RISK_TOLERANCE)
        risk = benchmarks.risk_profile(tolerance)
        age = resolver.resolve(profile, CanonicalField.CURRENT_AGE)
        midpoint = (risk.min_equity + risk.max_equity) / 2
        age_based = 100 - age if age is not None else midpoint
        ideal = max(risk.min_equity, min(risk.max_equity, age_based))

        difference = abs(equity - ideal)
        alignment = max(0.0, 100 - difference * 2)
        score, status = self._tiered(benchmarks, alignment)
        return self._factor(
            benchmarks, score, status,
            equity_percentage=equity,
            risk_profile=risk.key,
            target_range=[risk.min_equity, risk.max_equity],
            ideal_equity=round(ideal, 2),
            alignment=round(alignment, 2),
            calculationMethod="using_defaults" if risk.used_default else "stated_tolerance",
        )


class DiversificationScorer(FactorScorer):
    """Number of distinct asset classes held."""

    key = "diversification"
    required_fields = (CanonicalField.EQUITY_PERCENTAGE, CanonicalField.BOND_PERCENTAGE)

    def score(self, profile, resolver, benchmarks, projection=None):
        def pct(field):
            return resolver.resolve(profile, field, allow_zero=True)

        equity = pct(CanonicalField.EQUITY_PERCENTAGE)
        invested = (combined(profile, resolver, CanonicalField.CURRENT_PENSION)
                    + combined(profile, resolver, CanonicalField.CURRENT_TRAINING_FUND)
                    + combined(profile, resolver, CanonicalField.PERSONAL_PORTFOLIO))

        classes = []
        if (equity is not None and equity > MIN_ALLOCATION_PCT) or (equity is None and invested > 0):
            classes.append("stocks")
        if (pct(CanonicalField.BOND_PERCENTAGE) or 0) > MIN_ALLOCATION_PCT:
            classes.append("bonds")
        if combined(profile, resolver, CanonicalField.REAL_ESTATE) > 0:
            classes.append("real_estate")
        if (pct(CanonicalField.COMMODITIES_PERCENTAGE) or 0) > MIN_ALLOCATION_PCT:
            classes.append("commodities")
        if combined(profile, resolver, CanonicalField.CRYPTO) > 0:
            classes.append("crypto")
        if ((pct(CanonicalField.CASH_PERCENTAGE) or 0) > MIN_ALLOCATION_PCT
                or combined(profile, resolver, CanonicalField.EMERGENCY_FUND) > 0):
            classes.append("cash")
        if (pct(CanonicalField.ALTERNATIVES_PERCENTAGE) or 0) > MIN_ALLOCATION_PCT:
            classes.append("alternatives")

        score, status = self._tiered(benchmarks, len(classes))
        return self._factor(
            benchmarks, score, status,
            asset_classes=classes,
            asset_class_count=len(classes),
            has_international=(pct(CanonicalField.INTERNATIONAL_PERCENTAGE) or 0) > 0,
            calculationMethod="asset_class_count",
        )


class TaxEfficiencyScorer(FactorScorer):
    """Tax-advantaged contribution rate against the country optimum.

    With additional (non-payroll) income the efficiency is diluted by the
    share of income that is not sheltered, and the tax on that income at
    the country's marginal rate is reported.
    """

    key = "taxEfficiency"
    required_fields = (CanonicalField.PENSION_EMPLOYEE_RATE, CanonicalField.TRAINING_FUND_EMPLOYEE_RATE,
                       CanonicalField.COUNTRY)

    def score(self, profile, resolver, benchmarks, projection=None):
        pension_rate = resolver.resolve(profile, CanonicalField.PENSION_EMPLOYEE_RATE, allow_zero=True)
        training_rate = resolver.resolve(profile, CanonicalField.TRAINING_FUND_EMPLOYEE_RATE, allow_zero=True)
        if pension_rate is None and training_rate is None:
            return self._unknown(benchmarks, "missing_rates", "No pension or training fund contribution rates",
                                 has_comprehensive_calculation=False)

        country = benchmarks.country(resolver.resolve(profile, CanonicalField.COUNTRY))
        total_rate = (pension_rate or 0.0) + (training_rate or 0.0)
        efficiency = min(100.0, total_rate / country.optimal_rate * 100) if country.optimal_rate > 0 else 0.0

        salary = resolver.resolve(profile, CanonicalField.SALARY, combine_partners=True) or 0.0
        additional = resolver.resolve(profile, CanonicalField.ADDITIONAL_INCOME, combine_partners=True) or 0.0
        details = dict(
            total_contribution_rate=round(total_rate, 3),
            optimal_rate=country.optimal_rate,
            country=country.key,
            country_defaulted=country.used_default,
        )
        if additional > 0 and salary > 0:
            sheltered_share = salary / (salary + additional)
            efficiency *= sheltered_share
            details.update(
                has_comprehensive_calculation=True,
                sheltered_income_share=round(sheltered_share, 4),
                additional_monthly_income=additional,
                additional_income_tax=round(additional * country.marginal_rate, 2),
                marginal_rate=country.marginal_rate,
                calculationMethod="comprehensive",
            )
        else:
            details.update(has_comprehensive_calculation=False, calculationMethod="payroll_only")

        bench = benchmarks.factors[self.key]
        status = next((t for t in TIERS if efficiency >= bench.tiers[t]), "critical")
        score = efficiency / 100 * bench.weight
        return self._factor(benchmarks, score, status, efficiency=round(efficiency, 2), **details)


class EmergencyFundScorer(FactorScorer):
    """Months of expenses covered by the emergency fund."""

    key = "emergencyFund"
    required_fields = (CanonicalField.EMERGENCY_FUND, CanonicalField.MONTHLY_EXPENSES)

    def score(self, profile, resolver, benchmarks, projection=None):
        expenses = resolver.resolve(profile, CanonicalField.MONTHLY_EXPENSES, combine_partners=True)
        if not expenses or expenses <= 0:
            return self._unknown(benchmarks, "missing_expenses", "Monthly expenses are required to size the fund")

        fund = combined(profile, resolver, CanonicalField.EMERGENCY_FUND)
        months = fund / expenses

        config = benchmarks.emergency_fund
        base_target = config.get("baseTargetMonths", 6)
        target = base_target
        reasons = []
        income = monthly_income(profile, resolver)
        payments = combined(profile, resolver, CanonicalField.MONTHLY_DEBT_PAYMENTS)
        trigger = config.get("debtPaymentRatioTrigger", 0.3)
        if income > 0 and payments / income > trigger:
            target = max(target, config.get("elevatedTargetMonths", 8))
            reasons.append(f"Debt payments exceed {trigger:.0%} of income")
        stability = resolver.resolve(profile, CanonicalField.JOB_STABILITY)
        if stability and stability in config.get("unstableJobValues", []):
            target = max(target, config.get("unstableJobTargetMonths", 9))
            reasons.append(f"Job stability reported as '{stability}'")

        scale = target / base_target
        tiers = {t: v * scale for t, v in benchmarks.factors[self.key].tiers.items()}
        score, status = self._tiered(benchmarks, months, tiers)
        return self._factor(
            benchmarks, score, status,
            months_covered=round(months, 1),
            target_months=target,
            adjustment_reasons=reasons,
            emergency_fund=fund,
            monthly_expenses=expenses,
            calculationMethod="months_of_expenses",
        )


class DebtManagementScorer(FactorScorer):
    """Monthly debt payments as a share of income, penalizing high-interest debt."""

    key = "debtManagement"
    required_fields = (CanonicalField.MONTHLY_DEBT_PAYMENTS,)

    def score(self, profile, resolver, benchmarks, projection=None):
        income = monthly_income(profile, resolver)
        if income <= 0:
            return self._unknown(benchmarks, "no_income", "No income was provided to compare debt against")

        payments = resolver.resolve(profile, CanonicalField.MONTHLY_DEBT_PAYMENTS,
                                    combine_partners=True, allow_zero=True)
        method = "payment_ratio" if payments is not None else "no_debt_reported"
        payments = payments or 0.0
        ratio = payments / income
        score, status = self._tiered(benchmarks, ratio)

        high_interest = combined(profile, resolver, CanonicalField.HIGH_INTEREST_DEBT)
        penalty = 0.0
        if high_interest > 0:
            config = benchmarks.high_interest_penalty
            fraction = min(config.get("maxFraction", 0.3),
                           high_interest / income * config.get("incomeMultiplier", 0.1))
            penalty = fraction * benchmarks.weight(self.key)
            score -= penalty

        return self._factor(
            benchmarks, score, status,
            debt_to_income_ratio=round(ratio, 3),
            monthly_debt_payments=payments,
            high_interest_debt=high_interest,
            has_high_interest_debt=high_interest > 0,
            high_interest_penalty=round(penalty, 2),
            total_debt=combined(profile, resolver, CanonicalField.TOTAL_DEBT),
            calculationMethod=method,
        )


FACTOR_SCORERS = {
    "savingsRate": SavingsRateScorer,
    "retirementReadiness": RetirementReadinessScorer,
    "timeHorizon": TimeHorizonScorer,
    "riskAlignment": RiskAlignmentScorer,
    "diversification": DiversificationScorer,
    "taxEfficiency": TaxEfficiencyScorer,
    "emergencyFund": EmergencyFundScorer,
    "debtManagement": DebtManagementScorer,
}

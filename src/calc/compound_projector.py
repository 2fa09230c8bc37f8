"""Year-by-year compound growth projection of retirement savings.

Each asset bucket (pension, training fund, personal portfolio and, when
held, real estate and crypto) compounds independently from its opening
balance with its own annual return and monthly contribution. One point is
produced per age from the current age to the retirement age inclusive.

In couple mode the primary series reads partner1 values (falling back to
the un-prefixed keys) and the partner series reads partner2 values only.
Both series cover the same years, so the combined household series is the
element-wise sum of the two.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from calc.field_resolver import FieldResolver, is_couple
from model.Assumptions import ProjectionAssumptions, LEGACY
from model.errors import InvalidRangeError
from model.field_aliases import CanonicalField
from model.ProjectionData import AssetBucket, Projection, ProjectionPoint

logger = logging.getLogger(__name__)

MIN_AGE = 18
MAX_AGE = 120


def compound_year(balance: float, monthly_contribution: float, annual_return: float,
                  compounding: str = "monthly") -> float:
    """Grow a balance by one year.

    'monthly' applies 12 steps of balance * (1 + r/12) + contribution.
    'legacy' applies that step once, which understates a year of growth
    and of contributions.
    """
    monthly_rate = annual_return / 12.0
    steps = 1 if compounding == LEGACY else 12
    for _ in range(steps):
        balance = balance * (1 + monthly_rate) + monthly_contribution
    return balance


def future_value(balance: float, monthly_contribution: float, annual_return: float,
                 years: int, compounding: str = "monthly") -> float:
    """Value of a balance after a number of years of contributions and growth."""
    for _ in range(years):
        balance = compound_year(balance, monthly_contribution, annual_return, compounding)
    return balance


def real_value(nominal: float, inflation_rate: float, years: int) -> float:
    """Deflate a nominal amount to today's purchasing power."""
    return nominal / ((1 + inflation_rate) ** years)


@dataclass
class BucketState:
    """Opening state of one bucket for one saver."""
    bucket: AssetBucket
    balance: float
    monthly_contribution: float
    annual_return: float
    ceiling: float


@dataclass
class SaverInputs:
    """Resolved opening balances and contributions for one saver."""
    buckets: List[BucketState] = field(default_factory=list)

    @property
    def monthly_contributions(self) -> float:
        return sum(b.monthly_contribution for b in self.buckets)


class CompoundProjector:
    """Projects savings growth for an individual or a couple."""

    def __init__(self, resolver: Optional[FieldResolver] = None):
        self.resolver = resolver or FieldResolver()

    def project(self, profile: Mapping, assumptions: Optional[ProjectionAssumptions] = None) -> Projection:
        """Project all buckets from the current age to retirement.

        Args:
            profile: Raw profile mapping
            assumptions: Rates and ceilings. Defaults to rates read from the profile.

        Returns:
            Projection with primary, partner and combined series.

        Raises:
            InvalidProfileError: if profile is not a mapping
            InvalidRangeError: if ages are missing, outside [18, 120], or
                retirement age is not after the current age
        """
        self.resolver.check_profile(profile)
        if assumptions is None:
            assumptions = ProjectionAssumptions.from_profile(profile, self.resolver)

        couple = is_couple(profile)
        current_age, retirement_age = self.validate_ages(profile)

        if couple:
            primary_inputs = self._saver_inputs(profile, assumptions, "partner1", fallback_to_base=True)
            partner_inputs = self._saver_inputs(profile, assumptions, "partner2", fallback_to_base=False)
        else:
            primary_inputs = self._saver_inputs(profile, assumptions, None, fallback_to_base=True)
            partner_inputs = None

        primary = self._project_series(primary_inputs, current_age, retirement_age, assumptions)
        if partner_inputs is not None:
            partner_age = self.resolver.resolve_partner(
                profile, CanonicalField.CURRENT_AGE, "partner2", fallback_to_base=False
            )
            partner_start = int(partner_age) if partner_age is not None else current_age
            partner = self._project_series(
                partner_inputs, partner_start, partner_start + (retirement_age - current_age), assumptions
            )
            combined = self._combine(primary, partner)
        else:
            partner = []
            combined = [self._copy_point(p) for p in primary]

        logger.info("Projected %d years (%s, %s compounding)",
                    retirement_age - current_age, "couple" if couple else "individual",
                    assumptions.compounding)
        return Projection(
            primary=primary,
            partner=partner,
            combined=combined,
            planning_type="couple" if couple else "individual",
            assumptions=assumptions.to_dict(),
        )

    def validate_ages(self, profile: Mapping) -> tuple:
        """Resolve and check the current and retirement ages.

        Returns:
            Tuple of (current_age, retirement_age) as ints.
        """
        if is_couple(profile):
            current = self.resolver.resolve_partner(profile, CanonicalField.CURRENT_AGE, "partner1")
            retirement = self.resolver.resolve_partner(profile, CanonicalField.RETIREMENT_AGE, "partner1")
        else:
            current = self.resolver.resolve(profile, CanonicalField.CURRENT_AGE)
            retirement = self.resolver.resolve(profile, CanonicalField.RETIREMENT_AGE)

        if current is None:
            raise InvalidRangeError("Current age is required for a projection", "currentAge", None)
        if retirement is None:
            raise InvalidRangeError("Retirement age is required for a projection", "retirementAge", None)
        for name, value in (("currentAge", current), ("retirementAge", retirement)):
            if not MIN_AGE <= value <= MAX_AGE:
                raise InvalidRangeError(
                    f"{name} must be between {MIN_AGE} and {MAX_AGE}, got {value}", name, value
                )
        current, retirement = int(current), int(retirement)
        if retirement <= current:
            raise InvalidRangeError(
                f"Retirement age ({retirement}) must be greater than current age ({current})",
                "retirementAge", retirement
            )
        return current, retirement

    def _value(self, profile, field: CanonicalField, partner: Optional[str], fallback_to_base: bool) -> float:
        if partner is None:
            value = self.resolver.resolve(profile, field, allow_zero=True)
        else:
            value = self.resolver.resolve_partner(
                profile, field, partner, allow_zero=True, fallback_to_base=fallback_to_base
            )
        return value or 0.0

    def _saver_inputs(self, profile, assumptions: ProjectionAssumptions,
                      partner: Optional[str], fallback_to_base: bool) -> SaverInputs:
        def value(f):
            return self._value(profile, f, partner, fallback_to_base)

        salary = value(CanonicalField.SALARY)

        pension_contribution = value(CanonicalField.MONTHLY_CONTRIBUTION)
        if pension_contribution <= 0:
            rate = value(CanonicalField.PENSION_EMPLOYEE_RATE) + value(CanonicalField.PENSION_EMPLOYER_RATE)
            pension_contribution = salary * rate / 100.0

        training_contribution = value(CanonicalField.TRAINING_FUND_CONTRIBUTION)
        if training_contribution <= 0:
            rate = (value(CanonicalField.TRAINING_FUND_EMPLOYEE_RATE)
                    + value(CanonicalField.TRAINING_FUND_EMPLOYER_RATE))
            training_contribution = salary * rate / 100.0

        portfolio_contribution = (value(CanonicalField.PERSONAL_SAVINGS_MONTHLY)
                                  + value(CanonicalField.ADDITIONAL_SAVINGS))

        # Unrealized gains tax is taken once from the opening portfolio, not every year
        gross_portfolio = max(0.0, value(CanonicalField.PERSONAL_PORTFOLIO))
        net_portfolio = gross_portfolio * (1 - self._portfolio_tax_rate(profile, assumptions, partner))

        buckets = [
            BucketState(AssetBucket.PENSION, max(0.0, value(CanonicalField.CURRENT_PENSION)),
                        max(0.0, pension_contribution), assumptions.pension_return,
                        assumptions.pension_ceiling),
            BucketState(AssetBucket.TRAINING_FUND, max(0.0, value(CanonicalField.CURRENT_TRAINING_FUND)),
                        max(0.0, training_contribution), assumptions.training_fund_return,
                        assumptions.training_fund_ceiling),
            BucketState(AssetBucket.PERSONAL_PORTFOLIO, net_portfolio,
                        max(0.0, portfolio_contribution), assumptions.portfolio_return,
                        assumptions.portfolio_ceiling),
        ]

        real_estate = max(0.0, value(CanonicalField.REAL_ESTATE))
        if real_estate > 0:
            buckets.append(BucketState(AssetBucket.REAL_ESTATE, real_estate, 0.0,
                                       assumptions.real_estate_return, assumptions.real_estate_ceiling))
        crypto = max(0.0, value(CanonicalField.CRYPTO))
        if crypto > 0:
            buckets.append(BucketState(AssetBucket.CRYPTO, crypto, 0.0,
                                       assumptions.crypto_return, assumptions.crypto_ceiling))
        return SaverInputs(buckets)

    def _portfolio_tax_rate(self, profile, assumptions: ProjectionAssumptions, partner: Optional[str]) -> float:
        """A partner's own capital gains rate, else the household rate."""
        if partner is None:
            return assumptions.portfolio_tax_rate
        pct = self.resolver.resolve_partner(
            profile, CanonicalField.PORTFOLIO_TAX_RATE, partner, allow_zero=True, fallback_to_base=False
        )
        if pct is None:
            return assumptions.portfolio_tax_rate
        return max(0.0, min(1.0, pct / 100.0))

    def _project_series(self, inputs: SaverInputs, start_age: int, end_age: int,
                        assumptions: ProjectionAssumptions) -> List[ProjectionPoint]:
        balances: Dict[AssetBucket, float] = {}
        for b in inputs.buckets:
            balances[b.bucket] = self._clamp(b.bucket, b.balance, b.ceiling)
        yearly_contributions = round(inputs.monthly_contributions * 12)

        points = []
        for offset in range(end_age - start_age + 1):
            if offset > 0:
                for b in inputs.buckets:
                    grown = compound_year(balances[b.bucket], b.monthly_contribution,
                                          b.annual_return, assumptions.compounding)
                    balances[b.bucket] = self._clamp(b.bucket, grown, b.ceiling)
            per_bucket = {b.value: round(v) for b, v in balances.items()}
            nominal = sum(per_bucket.values())
            points.append(ProjectionPoint(
                age=start_age + offset,
                year_offset=offset,
                nominal_total=nominal,
                real_total=round(real_value(nominal, assumptions.inflation_rate, offset)),
                per_bucket_nominal=per_bucket,
                yearly_contributions=yearly_contributions,
            ))
        return points

    @staticmethod
    def _clamp(bucket: AssetBucket, balance: float, ceiling: float) -> float:
        if balance > ceiling:
            logger.warning("Clamped %s balance %.0f to ceiling %.0f", bucket.value, balance, ceiling)
            return ceiling
        return max(0.0, balance)

    @staticmethod
    def _copy_point(point: ProjectionPoint) -> ProjectionPoint:
        return ProjectionPoint(
            age=point.age,
            year_offset=point.year_offset,
            nominal_total=point.nominal_total,
            real_total=point.real_total,
            per_bucket_nominal=dict(point.per_bucket_nominal),
            yearly_contributions=point.yearly_contributions,
        )

    @staticmethod
    def _combine(primary: List[ProjectionPoint], partner: List[ProjectionPoint]) -> List[ProjectionPoint]:
        combined = []
        for p, q in zip(primary, partner):
            per_bucket = dict(p.per_bucket_nominal)
            for bucket, value in q.per_bucket_nominal.items():
                per_bucket[bucket] = per_bucket.get(bucket, 0) + value
            combined.append(ProjectionPoint(
                age=p.age,
                year_offset=p.year_offset,
                nominal_total=p.nominal_total + q.nominal_total,
                real_total=p.real_total + q.real_total,
                per_bucket_nominal=per_bucket,
                yearly_contributions=p.yearly_contributions + q.yearly_contributions,
            ))
        return combined

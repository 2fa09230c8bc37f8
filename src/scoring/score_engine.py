"""Financial health score engine.

Runs the eight factor scorers, sums their scores into a 0-100 total and
attaches suggestions, a peer comparison, structural input checks and the
list of fields that were missing. Factors are isolated from one another:
an unexpected failure in one factor is logged and scored as 0 with status
'error' rather than aborting the whole report.
"""

import logging
from collections.abc import Mapping
from typing import Dict, List, Optional

from calc.field_resolver import FieldResolver, is_couple
from model.field_aliases import CanonicalField
from model.HealthReport import (
    HealthReport,
    InputValidation,
    MissingDataWarning,
    PeerComparison,
    ScoreFactor,
)
from model.ProjectionData import Projection
from scoring.benchmarks import ScoringBenchmarks, PeerGroup
from scoring.factor_scorers import FACTOR_SCORERS
from scoring.suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)

# Optional fields counted towards data completeness
COMPLETENESS_FIELDS = (
    CanonicalField.EMERGENCY_FUND,
    CanonicalField.PERSONAL_PORTFOLIO,
    CanonicalField.CURRENT_TRAINING_FUND,
    CanonicalField.EQUITY_PERCENTAGE,
    CanonicalField.BOND_PERCENTAGE,
)

# Raw keys that must never be negative
NON_NEGATIVE_FIELDS = (
    CanonicalField.CURRENT_AGE,
    CanonicalField.RETIREMENT_AGE,
    CanonicalField.SALARY,
    CanonicalField.MONTHLY_EXPENSES,
    CanonicalField.CURRENT_PENSION,
)


def score_status(total: float, thresholds: Optional[Dict[str, float]] = None) -> str:
    """Overall status for a total score."""
    thresholds = thresholds or {"excellent": 85, "good": 70, "needsWork": 50}
    if total >= thresholds["excellent"]:
        return "excellent"
    if total >= thresholds["good"]:
        return "good"
    if total >= thresholds["needsWork"]:
        return "needsWork"
    return "critical"


def calculate_percentile(score: float, group: PeerGroup) -> float:
    """Approximate percentile of a score within a peer group.

    Piecewise linear: 1-50 below the group average, 50-75 up to the top
    quartile, 75-99 above it.
    """
    mean, top = group.average_score, group.top_quartile
    if score >= top:
        return min(99.0, 75 + (score - top) / (100 - top) * 24) if top < 100 else 99.0
    if score >= mean:
        return 50 + (score - mean) / (top - mean) * 25
    return max(1.0, score / mean * 50) if mean > 0 else 1.0


class ScoreEngine:
    """Computes a HealthReport for a profile."""

    def __init__(self,
                 resolver: Optional[FieldResolver] = None,
                 benchmarks: Optional[ScoringBenchmarks] = None,
                 suggestions: Optional[SuggestionGenerator] = None):
        self.resolver = resolver or FieldResolver()
        self.benchmarks = benchmarks or ScoringBenchmarks.load()
        self.suggestions = suggestions or SuggestionGenerator()
        self.scorers = {name: cls() for name, cls in FACTOR_SCORERS.items()}

    def score(self, profile: Mapping, projection: Optional[Projection] = None) -> HealthReport:
        """Score a profile.

        Args:
            profile: Raw profile mapping
            projection: Optional projection used to enrich retirement readiness details

        Returns:
            HealthReport with factors, total, status and suggestions.

        Raises:
            InvalidProfileError: if profile is not a mapping
        """
        self.resolver.check_profile(profile)

        factors: Dict[str, ScoreFactor] = {}
        for name in self.scorers:
            factors[name] = self.score_factor(name, profile, projection)

        total = round(sum(f.score for f in factors.values()))
        total = max(0, min(100, total))
        missing = self.missing_data(profile)
        report = HealthReport(
            total_score=total,
            status=score_status(total, self.benchmarks.status_thresholds),
            factors=factors,
            suggestions=self.suggestions.generate(factors, missing),
            zero_score_factors=[name for name, f in factors.items() if f.score == 0],
            missing_data=missing,
            peer_comparison=self.peer_comparison(profile, total),
            validation=self.validate(profile),
            planning_type="couple" if is_couple(profile) else "individual",
        )
        logger.info("Scored profile: %d (%s)", report.total_score, report.status)
        return report

    def score_factor(self, name: str, profile: Mapping, projection: Optional[Projection] = None) -> ScoreFactor:
        """Score a single factor, absorbing calculation failures."""
        if name not in self.scorers:
            raise ValueError(f"Unknown factor '{name}'. Available factors: {list(self.scorers)}")
        try:
            return self.scorers[name].score(profile, self.resolver, self.benchmarks, projection)
        except (ArithmeticError, ValueError, TypeError) as e:
            logger.warning("Factor %s failed, scoring as 0: %s", name, e)
            return ScoreFactor(
                name=name,
                weight=self.benchmarks.weight(name),
                score=0.0,
                status="error",
                details={"calculationMethod": "error", "reason": str(e)},
            )

    def missing_data(self, profile: Mapping) -> List[MissingDataWarning]:
        """Record every field a factor needs that the profile does not supply."""
        diagnosis = self.resolver.diagnose(profile)
        warnings = []
        for name, scorer in self.scorers.items():
            for field in scorer.required_fields:
                if not diagnosis[field.value]["found"]:
                    warnings.append(MissingDataWarning(
                        field=field.value,
                        factor=name,
                        message=f"'{field.value}' was not found; {name} may be understated",
                    ))
        return warnings

    def peer_comparison(self, profile: Mapping, total: float) -> Optional[PeerComparison]:
        """Compare a total score with peers of the same age group."""
        age = self.resolver.resolve(profile, CanonicalField.CURRENT_AGE)
        group = self.benchmarks.peer_group(age if age is not None else 30)
        if group is None:
            return None
        if total >= group.top_quartile:
            comparison = "Above Top 25%"
        elif total >= group.average_score:
            comparison = "Above Average"
        else:
            comparison = "Below Average"
        return PeerComparison(
            age_group=group.age_group,
            average_score=group.average_score,
            top_quartile_score=group.top_quartile,
            user_percentile=round(calculate_percentile(total, group), 1),
            comparison=comparison,
        )

    def validate(self, profile: Mapping) -> InputValidation:
        """Structural checks on the raw profile; reported, never raised."""
        result = InputValidation()
        resolve = self.resolver.resolve

        if resolve(profile, CanonicalField.CURRENT_AGE) is None:
            result.critical_missing.append("Current age is required")
        if not resolve(profile, CanonicalField.SALARY, combine_partners=True):
            result.critical_missing.append("Monthly income is required")

        for field in NON_NEGATIVE_FIELDS:
            match = self.resolver.locate(profile, field)
            if match is not None and isinstance(match.value, float) and match.value < 0:
                result.errors.append(f"{match.alias} cannot be negative")

        current = resolve(profile, CanonicalField.CURRENT_AGE)
        retirement = resolve(profile, CanonicalField.RETIREMENT_AGE)
        if current is not None and retirement is not None and current >= retirement:
            result.warnings.append("Current age is greater than or equal to retirement age")

        diagnosis = self.resolver.diagnose(profile)
        filled = sum(1 for f in COMPLETENESS_FIELDS if diagnosis[f.value]["found"])
        result.data_completeness = round(filled / len(COMPLETENESS_FIELDS) * 100)

        result.is_valid = not result.errors and not result.critical_missing
        if result.errors:
            result.validation_level = "invalid"
        elif result.warnings or result.critical_missing:
            result.validation_level = "partial"
        else:
            result.validation_level = "complete"
        return result

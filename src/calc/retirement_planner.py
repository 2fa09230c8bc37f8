"""Orchestrates projection, scoring and retirement income for a profile.

RetirementPlanner wires together independently constructed components
(FieldResolver, CompoundProjector, ScoreEngine, PensionCalculator,
ExpenseCalculator) and optionally routes results through a ResultCache.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from calc.compound_projector import CompoundProjector
from calc.expense_calculator import ExpenseCalculator
from calc.field_resolver import FieldResolver
from calc.pension_calculator import PensionCalculator
from calc.result_cache import ResultCache
from model.Assumptions import ProjectionAssumptions, MONTHLY
from model.errors import InvalidRangeError
from model.field_aliases import CanonicalField
from model.HealthReport import HealthReport
from model.ProjectionData import Projection
from scoring.score_engine import ScoreEngine

logger = logging.getLogger(__name__)

EXPENSE_BREAKDOWN_KEY = "expenseBreakdown"


class RetirementPlanner:
    """Single entry point used by the CLI and the MCP tools."""

    def __init__(self,
                 resolver: Optional[FieldResolver] = None,
                 projector: Optional[CompoundProjector] = None,
                 engine: Optional[ScoreEngine] = None,
                 pension: Optional[PensionCalculator] = None,
                 expenses: Optional[ExpenseCalculator] = None,
                 cache: Optional[ResultCache] = None):
        self.resolver = resolver or FieldResolver()
        self.projector = projector or CompoundProjector(self.resolver)
        self.engine = engine or ScoreEngine(self.resolver)
        self.pension = pension or PensionCalculator()
        self.expenses = expenses or ExpenseCalculator()
        self.cache = cache

    def assumptions_for(self, profile: Mapping, compounding: str = MONTHLY) -> ProjectionAssumptions:
        return ProjectionAssumptions.from_profile(profile, self.resolver, compounding)

    def project(self, profile: Mapping, assumptions: Optional[ProjectionAssumptions] = None,
                compounding: str = MONTHLY) -> Projection:
        """Project savings; raises InvalidRangeError for unusable ages."""
        self.resolver.check_profile(profile)
        if assumptions is None:
            assumptions = self.assumptions_for(profile, compounding)
        if self.cache is None:
            return self.projector.project(profile, assumptions)
        return self.cache.get_or_compute(
            "project", dict(profile), lambda: self.projector.project(profile, assumptions), assumptions
        )

    def score(self, profile: Mapping, projection: Optional[Projection] = None) -> HealthReport:
        """Score a profile.

        When no projection is given one is computed; a profile whose ages do
        not allow a projection is still scored, just without projected values.
        """
        self.resolver.check_profile(profile)
        if projection is not None:
            return self.engine.score(profile, projection)

        def compute():
            return self.engine.score(profile, self._try_project(profile))

        if self.cache is None:
            return compute()
        return self.cache.get_or_compute("score", dict(profile), compute)

    def retirement_income(self, profile: Mapping, projection: Optional[Projection] = None) -> dict:
        """Monthly income the projected savings support at retirement."""
        projection = projection or self.project(profile)
        salary = self.resolver.resolve(profile, CanonicalField.SALARY, combine_partners=True) or 0.0
        return self.pension.retirement_income(projection, salary)

    def analyze_expenses(self, profile: Mapping, years: Optional[int] = None) -> Optional[dict]:
        """Ratio analysis and projection of the profile's expense breakdown, if it has one."""
        breakdown = profile.get(EXPENSE_BREAKDOWN_KEY)
        if not isinstance(breakdown, Mapping) or not breakdown:
            return None
        income = self.resolver.resolve(profile, CanonicalField.SALARY, combine_partners=True) or 0.0
        income += self.resolver.resolve(profile, CanonicalField.ADDITIONAL_INCOME, combine_partners=True) or 0.0
        analysis = self.expenses.analyze_ratios(dict(breakdown), income)
        if years is not None:
            analysis["projected_at_retirement"] = self.expenses.project_expenses(dict(breakdown), years)
        return analysis

    def plan(self, profile: Mapping, compounding: str = MONTHLY) -> dict:
        """Full plan: projection, health report, retirement income and expenses."""
        projection = self.project(profile, compounding=compounding)
        health = self.engine.score(profile, projection)
        years = len(projection.primary) - 1
        logger.info("Built plan over %d years with score %d", years, health.total_score)
        return {
            "projection": projection.to_dict(),
            "health": health.to_dict(),
            "retirement_income": self.retirement_income(profile, projection),
            "expenses": self.analyze_expenses(profile, years),
        }

    def _try_project(self, profile: Mapping) -> Optional[Projection]:
        try:
            return self.project(profile)
        except InvalidRangeError as e:
            logger.info("Scoring without projection: %s", e)
            return None

"""Renderer classes for displaying projection and health score results.

Each renderer takes one of the engine's result objects and prints it as a
text report. Renderers never compute anything themselves.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from model.HealthReport import HealthReport, Suggestion
from model.ProjectionData import Projection
from scoring.benchmarks import FACTOR_NAMES


FACTOR_LABELS = {
    "savingsRate": "Savings Rate",
    "retirementReadiness": "Retirement Readiness",
    "timeHorizon": "Time Horizon",
    "riskAlignment": "Risk Alignment",
    "diversification": "Diversification",
    "taxEfficiency": "Tax Efficiency",
    "emergencyFund": "Emergency Fund",
    "debtManagement": "Debt Management",
}

BUCKET_LABELS = {
    "pension": "Pension",
    "training_fund": "Training Fund",
    "personal_portfolio": "Portfolio",
    "real_estate": "Real Estate",
    "crypto": "Crypto",
}


def print_title(title: str, width: int = 60) -> None:
    print()
    print("=" * width)
    print(f"{title:^{width}}")
    print("=" * width)


def print_section(title: str, width: int = 60) -> None:
    print()
    print("-" * width)
    print(title)
    print("-" * width)


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data) -> None:
        """Render the data to output."""
        pass


class ProjectionRenderer(BaseRenderer):
    """Age-by-age table of projected balances."""

    def __init__(self, series: str = "combined"):
        self.series = series

    def render(self, data: Projection) -> None:
        points = data.get_series(self.series)
        if not points:
            print(f"No {self.series} projection data available")
            return

        buckets = list(points[0].per_bucket_nominal.keys())
        col_width = 14
        width = 8 + (col_width + 1) * (len(buckets) + 3)
        print_title(f"SAVINGS PROJECTION ({self.series.upper()})", width)

        header = f"  {'Age':<6}"
        for bucket in buckets:
            header += f" {BUCKET_LABELS.get(bucket, bucket):>{col_width}}"
        header += f" {'Contributions':>{col_width}} {'Nominal':>{col_width}} {'Real':>{col_width}}"
        print(header)
        print(f"  {'-' * 6}" + f" {'-' * col_width}" * (len(buckets) + 3))

        for p in points:
            line = f"  {p.age:<6}"
            for bucket in buckets:
                line += f" {p.per_bucket_nominal.get(bucket, 0):>{col_width},}"
            line += f" {p.yearly_contributions:>{col_width},}"
            line += f" {p.nominal_total:>{col_width},} {p.real_total:>{col_width},}"
            print(line)

        final = points[-1]
        print()
        print(f"  {'Balance at retirement (nominal):':<40} {final.nominal_total:>16,}")
        print(f"  {'Balance at retirement (real):':<40} {final.real_total:>16,}")
        if data.is_couple and self.series == "combined":
            primary, partner = data.final_point("primary"), data.final_point("partner")
            print(f"  {'Primary share (nominal):':<40} {primary.nominal_total:>16,}")
            print(f"  {'Partner share (nominal):':<40} {partner.nominal_total:>16,}")


class HealthScoreRenderer(BaseRenderer):
    """Factor-by-factor breakdown of the health score."""

    def render(self, data: HealthReport) -> None:
        print_title("FINANCIAL HEALTH SCORE")
        print(f"  {'Total Score:':<40} {data.total_score:>6} / 100")
        print(f"  {'Status:':<40} {data.status:>15}")
        if data.peer_comparison:
            peer = data.peer_comparison
            print(f"  {'Peer Group:':<40} {peer.age_group:>15}")
            print(f"  {'Percentile:':<40} {peer.user_percentile:>15.0f}")
            print(f"  {'Comparison:':<40} {peer.comparison:>15}")

        print_section("FACTORS")
        print(f"  {'Factor':<24} {'Score':>8} {'Weight':>8} {'Status':>12}")
        print(f"  {'-' * 24} {'-' * 8} {'-' * 8} {'-' * 12}")
        for name in FACTOR_NAMES:
            factor = data.get_factor(name)
            if factor is None:
                continue
            print(f"  {FACTOR_LABELS.get(name, name):<24} {factor.score:>8.1f} {factor.weight:>8g} {factor.status:>12}")

        if data.zero_score_factors:
            print_section("FACTORS SCORING ZERO")
            for name in data.zero_score_factors:
                reason = data.factors[name].details.get("reason", "")
                print(f"  {FACTOR_LABELS.get(name, name):<24} {reason}")

        if data.validation and not data.validation.is_valid:
            print_section("INPUT PROBLEMS")
            for message in data.validation.critical_missing + data.validation.errors:
                print(f"  - {message}")


class SuggestionsRenderer(BaseRenderer):
    """Ordered list of improvement suggestions."""

    def render(self, data) -> None:
        suggestions: List[Suggestion] = data.suggestions if isinstance(data, HealthReport) else data
        print_title("IMPROVEMENT SUGGESTIONS")
        if not suggestions:
            print("  No suggestions")
            return
        for i, s in enumerate(suggestions, start=1):
            print()
            print(f"  {i}. [{s.priority.upper()}] {FACTOR_LABELS.get(s.category, s.category)}")
            print(f"     Issue:  {s.issue}")
            print(f"     Action: {s.action}")
            print(f"     Impact: {s.impact}")


class DiagnosticsRenderer(BaseRenderer):
    """Which raw key, if any, supplied each canonical field."""

    def render(self, data: Dict[str, dict]) -> None:
        print_title("FIELD DIAGNOSTICS", 78)
        print(f"  {'Field':<28} {'Found':>6} {'Role':>9}  {'Raw Key':<30}")
        print(f"  {'-' * 28} {'-' * 6} {'-' * 9}  {'-' * 30}")
        found = 0
        for field, info in data.items():
            found += 1 if info["found"] else 0
            print(f"  {field:<28} {'yes' if info['found'] else 'no':>6} {info['role'] or '':>9}  {info['alias'] or '':<30}")
        print()
        print(f"  {found} of {len(data)} fields resolved")


class PlanSummaryRenderer(BaseRenderer):
    """One-page summary of a full plan dictionary."""

    def render(self, data: dict) -> None:
        projection = data["projection"]
        health = data["health"]
        income = data["retirement_income"]

        print_title("RETIREMENT PLAN SUMMARY")
        combined = projection["combined"]
        if combined:
            first, last = combined[0], combined[-1]
            print(f"  {'Planning Type:':<40} {projection['planning_type']:>16}")
            print(f"  {'Ages:':<40} {str(first['age']) + ' - ' + str(last['age']):>16}")
            print(f"  {'Savings Today:':<40} {first['nominal_total']:>16,}")
            print(f"  {'Savings at Retirement (nominal):':<40} {last['nominal_total']:>16,}")
            print(f"  {'Savings at Retirement (real):':<40} {last['real_total']:>16,}")

        print_section("RETIREMENT INCOME")
        print(f"  {'Monthly Income (real):':<40} {income['monthly_income_real']:>16,.2f}")
        if income.get("replacement_ratio") is not None:
            print(f"  {'Replacement Ratio:':<40} {income['replacement_ratio']:>16.1%}")

        print_section("HEALTH SCORE")
        print(f"  {'Total Score:':<40} {health['total_score']:>16}")
        print(f"  {'Status:':<40} {health['status']:>16}")
        for s in health["suggestions"][:3]:
            print(f"  - [{s['priority']}] {s['action']}")

        expenses = data.get("expenses")
        if expenses and expenses.get("over_budget"):
            print_section("EXPENSES OVER BUDGET")
            for category in expenses["over_budget"]:
                info = expenses["categories"][category]
                print(f"  {category:<24} {info['ratio']:>6.1f}% of income (max {info['recommended_max']}%)")


RENDERER_REGISTRY = {
    'Projection': ProjectionRenderer,
    'HealthScore': HealthScoreRenderer,
    'Suggestions': SuggestionsRenderer,
    'Diagnostics': DiagnosticsRenderer,
    'Plan': PlanSummaryRenderer,
}

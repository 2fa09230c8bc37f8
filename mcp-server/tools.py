"""Tools for querying retirement projections and health scores.

This module wraps the RetirementPlanner for use by the MCP server. Each
profile folder in input-parameters becomes a RetirementPlannerTools
instance, and MultiProfileTools routes queries to the right one.
"""

import os
import sys
import json
import logging
from typing import Dict, List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from calc.result_cache import ResultCache
from calc.retirement_planner import RetirementPlanner
from model.Assumptions import MONTHLY
from scoring.benchmarks import FACTOR_NAMES

logger = logging.getLogger(__name__)


class RetirementPlannerTools:
    """Tools for querying a single retirement profile."""

    def __init__(self, base_path: str, profile_name: str, cache: Optional[ResultCache] = None):
        """Initialize with path to the repository root and profile name.

        Args:
            base_path: Path to the retirement-planner root directory
            profile_name: Name of the profile folder in input-parameters
            cache: Shared result cache; a private one is created when omitted
        """
        self.base_path = base_path
        self.profile_name = profile_name
        self.profile = self._load_profile()
        self.planner = RetirementPlanner(cache=cache if cache is not None else ResultCache())

    def _load_profile(self) -> dict:
        """Load profile.json for this profile."""
        profile_path = os.path.join(self.base_path, 'input-parameters', self.profile_name, 'profile.json')
        with open(profile_path, 'r') as f:
            return json.load(f)

    def get_projection(self, compounding: str = MONTHLY, series: Optional[str] = None) -> dict:
        """Get the year-by-year projection.

        Args:
            compounding: 'monthly' or 'legacy'
            series: Optional single series to return ('primary', 'partner' or 'combined')
        """
        projection = self.planner.project(self.profile, compounding=compounding)
        result = projection.to_dict()
        if series:
            result = {
                "planning_type": result["planning_type"],
                "assumptions": result["assumptions"],
                series: [p.to_dict() for p in projection.get_series(series)],
            }
        return result

    def get_health_report(self) -> dict:
        """Get the complete financial health report."""
        return self.planner.score(self.profile).to_dict()

    def get_factor_details(self, factor: str) -> dict:
        """Get the score and diagnostic details for one factor."""
        if factor not in FACTOR_NAMES:
            return {"error": f"Unknown factor '{factor}'. Available factors: {list(FACTOR_NAMES)}"}
        report = self.planner.score(self.profile)
        result = report.factors[factor].to_dict()
        result["missing_fields"] = [m.field for m in report.missing_data if m.factor == factor]
        result["suggestion"] = next(
            (s.to_dict() for s in report.suggestions if s.category == factor), None
        )
        return result

    def get_suggestions(self, priority: Optional[str] = None) -> dict:
        """Get improvement suggestions, optionally filtered by priority."""
        report = self.planner.score(self.profile)
        suggestions = [s.to_dict() for s in report.suggestions]
        if priority:
            suggestions = [s for s in suggestions if s["priority"] == priority]
        return {
            "total_score": report.total_score,
            "status": report.status,
            "suggestions": suggestions,
        }

    def diagnose_fields(self, only_missing: bool = False) -> dict:
        """Report which input key supplied each canonical field."""
        diagnosis = self.planner.resolver.diagnose(self.profile)
        if only_missing:
            diagnosis = {k: v for k, v in diagnosis.items() if not v["found"]}
        found = sum(1 for v in diagnosis.values() if v["found"])
        return {
            "fields": diagnosis,
            "found_count": found,
            "missing_count": len(diagnosis) - found,
        }

    def get_retirement_income(self) -> dict:
        """Get the monthly income the projected savings support."""
        return self.planner.retirement_income(self.profile)

    def get_overview(self) -> dict:
        """Short summary used when listing and comparing profiles."""
        plan = self.planner.plan(self.profile)
        combined = plan["projection"]["combined"]
        final = combined[-1] if combined else {}
        return {
            "planning_type": plan["projection"]["planning_type"],
            "current_age": combined[0]["age"] if combined else None,
            "retirement_age": final.get("age"),
            "savings_today": combined[0]["nominal_total"] if combined else 0,
            "nominal_at_retirement": final.get("nominal_total", 0),
            "real_at_retirement": final.get("real_total", 0),
            "monthly_income_real": plan["retirement_income"]["monthly_income_real"],
            "total_score": plan["health"]["total_score"],
            "status": plan["health"]["status"],
        }


class MultiProfileTools:
    """Manager for multiple retirement profiles.

    Discovers all available profiles and shares one result cache between
    them, allowing queries to specify which profile to use.
    """

    def __init__(self, base_path: str, default_profile: Optional[str] = None):
        """Initialize and discover all available profiles.

        Args:
            base_path: Path to the retirement-planner root directory
            default_profile: Default profile to use when none specified
        """
        self.base_path = base_path
        self.profiles: Dict[str, RetirementPlannerTools] = {}
        self.default_profile = default_profile
        self.cache = ResultCache()
        self._discover_profiles()

    def _discover_profiles(self):
        """Discover and load all available profiles."""
        input_params_path = os.path.join(self.base_path, 'input-parameters')

        if not os.path.exists(input_params_path):
            return

        for name in sorted(os.listdir(input_params_path)):
            profile_dir = os.path.join(input_params_path, name)
            profile_path = os.path.join(profile_dir, 'profile.json')

            if os.path.isdir(profile_dir) and os.path.exists(profile_path):
                try:
                    self.profiles[name] = RetirementPlannerTools(self.base_path, name, self.cache)
                except (OSError, ValueError) as e:
                    # Log but don't fail on individual profile errors
                    logger.warning("Failed to load profile '%s': %s", name, e)

        # Set default if not specified
        if self.default_profile is None and self.profiles:
            self.default_profile = list(self.profiles.keys())[0]

    def _get_profile(self, profile: Optional[str] = None, require_explicit: bool = False) -> RetirementPlannerTools:
        """Get the specified profile or default.

        Args:
            profile: Profile name to use, or None for default
            require_explicit: If True, raise error when profile not specified and multiple exist
        """
        if profile is None and len(self.profiles) > 1 and require_explicit:
            available = list(self.profiles.keys())
            raise ValueError(
                f"Multiple profiles available: {available}. Please specify which profile to query."
            )

        profile_name = profile or self.default_profile

        if profile_name not in self.profiles:
            available = list(self.profiles.keys())
            raise ValueError(
                f"Profile '{profile_name}' not found. Available profiles: {available}"
            )

        return self.profiles[profile_name]

    def _tagged(self, result: dict, profile: Optional[str]) -> dict:
        result["profile"] = profile or self.default_profile
        return result

    def list_profiles(self) -> dict:
        """List all available profiles."""
        profiles_info = {}
        for name, tools in self.profiles.items():
            profiles_info[name] = {
                "planning_type": tools.profile.get('planningType', 'individual'),
                "current_age": tools.profile.get('currentAge', tools.profile.get('partner1Age')),
                "retirement_age": tools.profile.get('retirementAge'),
            }

        return {
            "available_profiles": list(self.profiles.keys()),
            "default_profile": self.default_profile,
            "profiles_info": profiles_info
        }

    def reload_profiles(self) -> dict:
        """Reload all profiles from disk, clearing the result cache.

        Use this after adding, modifying, or removing profile.json files
        to pick up changes without restarting the server.
        """
        old_profiles = set(self.profiles.keys())

        self.profiles.clear()
        self.default_profile = None
        self.cache.invalidate()

        self._discover_profiles()

        new_profiles = set(self.profiles.keys())

        return {
            "status": "success",
            "message": f"Reloaded {len(self.profiles)} profiles",
            "profiles_loaded": list(self.profiles.keys()),
            "default_profile": self.default_profile,
            "changes": {
                "added": sorted(new_profiles - old_profiles),
                "removed": sorted(old_profiles - new_profiles),
                "reloaded": sorted(old_profiles & new_profiles)
            }
        }

    def get_projection(self, compounding: str = MONTHLY, series: Optional[str] = None,
                       profile: Optional[str] = None) -> dict:
        """Get the year-by-year projection for a profile."""
        result = self._get_profile(profile, require_explicit=True).get_projection(compounding, series)
        return self._tagged(result, profile)

    def get_health_report(self, profile: Optional[str] = None) -> dict:
        """Get the financial health report for a profile."""
        result = self._get_profile(profile, require_explicit=True).get_health_report()
        return self._tagged(result, profile)

    def get_factor_details(self, factor: str, profile: Optional[str] = None) -> dict:
        """Get one factor's score and details for a profile."""
        result = self._get_profile(profile, require_explicit=True).get_factor_details(factor)
        return self._tagged(result, profile)

    def get_suggestions(self, priority: Optional[str] = None, profile: Optional[str] = None) -> dict:
        """Get improvement suggestions for a profile."""
        result = self._get_profile(profile, require_explicit=True).get_suggestions(priority)
        return self._tagged(result, profile)

    def diagnose_fields(self, only_missing: bool = False, profile: Optional[str] = None) -> dict:
        """Report field resolution for a profile."""
        result = self._get_profile(profile, require_explicit=True).diagnose_fields(only_missing)
        return self._tagged(result, profile)

    def get_retirement_income(self, profile: Optional[str] = None) -> dict:
        """Get projected monthly retirement income for a profile."""
        result = self._get_profile(profile, require_explicit=True).get_retirement_income()
        return self._tagged(result, profile)

    def get_cache_stats(self) -> dict:
        """Get hit/miss statistics for the shared result cache."""
        return self.cache.stats()

    def compare_profiles(self, profile1: str, profile2: str, metrics: Optional[List[str]] = None) -> dict:
        """Compare two profiles and report which is ahead on each metric.

        Args:
            profile1: First profile name to compare
            profile2: Second profile name to compare
            metrics: Optional list of metrics to include. If None, compares all.
                     Options: 'total_score', 'nominal_at_retirement', 'real_at_retirement',
                              'monthly_income_real', 'savings_today'
        """
        if profile1 not in self.profiles:
            return {"error": f"Profile '{profile1}' not found. Available: {list(self.profiles.keys())}"}
        if profile2 not in self.profiles:
            return {"error": f"Profile '{profile2}' not found. Available: {list(self.profiles.keys())}"}

        overview1 = self.profiles[profile1].get_overview()
        overview2 = self.profiles[profile2].get_overview()

        def compare_metric(val1: float, val2: float) -> dict:
            """Compare a metric and determine winner."""
            diff = val2 - val1
            if val1 != 0:
                pct_diff = (diff / abs(val1)) * 100
            else:
                pct_diff = 100 if val2 > 0 else (-100 if val2 < 0 else 0)
            winner = profile1 if val1 > val2 else (profile2 if val2 > val1 else "tie")
            return {
                profile1: val1,
                profile2: val2,
                "difference": diff,
                "percent_difference": round(pct_diff, 2),
                "winner": winner,
            }

        all_metrics = ['total_score', 'nominal_at_retirement', 'real_at_retirement',
                       'monthly_income_real', 'savings_today']
        selected = [m for m in (metrics or all_metrics) if m in all_metrics]

        comparison = {m: compare_metric(overview1[m] or 0, overview2[m] or 0) for m in selected}
        wins = {profile1: 0, profile2: 0}
        for result in comparison.values():
            if result["winner"] in wins:
                wins[result["winner"]] += 1

        if wins[profile1] > wins[profile2]:
            overall = profile1
        elif wins[profile2] > wins[profile1]:
            overall = profile2
        else:
            overall = "tie"

        return {
            "profiles": [profile1, profile2],
            "overviews": {profile1: overview1, profile2: overview2},
            "comparison": comparison,
            "wins": wins,
            "overall_winner": overall,
        }

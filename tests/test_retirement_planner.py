"""Tests for the RetirementPlanner facade."""

import json
import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.result_cache import ResultCache
from calc.retirement_planner import RetirementPlanner
from model.Assumptions import LEGACY
from model.errors import InvalidProfileError, InvalidRangeError
from model.HealthReport import HealthReport


INPUT_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../input-parameters'))


def load(name):
    with open(os.path.join(INPUT_PATH, name, 'profile.json'), 'r') as f:
        return json.load(f)


@pytest.fixture
def planner():
    return RetirementPlanner(cache=ResultCache())


def test_plan_individual(planner):
    plan = planner.plan(load("individual"))
    assert set(plan) == {"projection", "health", "retirement_income", "expenses"}
    assert plan["projection"]["combined"][-1]["age"] == 67
    assert 0 <= plan["health"]["total_score"] <= 100
    assert plan["retirement_income"]["retirement_age"] == 67
    assert plan["expenses"]["projected_at_retirement"]["housing"] > 5500


def test_plan_couple(planner):
    plan = planner.plan(load("couple"))
    assert plan["projection"]["planning_type"] == "couple"
    assert plan["projection"]["partner"]
    # No expense breakdown in this profile
    assert plan["expenses"] is None


def test_plan_is_json_serializable(planner):
    json.dumps(planner.plan(load("couple")))


def test_score_is_cached(planner):
    profile = load("individual")
    first = planner.score(profile)
    second = planner.score(profile)
    assert isinstance(second, HealthReport)
    assert first.total_score == second.total_score
    assert planner.cache.hits == 1


def test_changed_profile_is_not_served_from_cache(planner):
    profile = load("individual")
    planner.score(profile)
    planner.score(dict(profile, emergencyFund=0))
    assert planner.cache.hits == 0


def test_score_without_valid_ages(planner):
    report = planner.score({"currentAge": 50, "retirementAge": 45, "currentMonthlySalary": 10000})
    assert report.factors["timeHorizon"].status == "critical"
    assert "projected_nominal_at_retirement" not in report.factors["retirementReadiness"].details


def test_project_invalid_ages_raises(planner):
    with pytest.raises(InvalidRangeError):
        planner.project({"currentAge": 50, "retirementAge": 45})


def test_project_compounding_modes(planner):
    profile = load("individual")
    monthly = planner.project(profile)
    legacy = planner.project(profile, compounding=LEGACY)
    assert legacy.assumptions["compounding"] == "legacy"
    assert legacy.final_point().nominal_total < monthly.final_point().nominal_total


def test_assumptions_read_from_profile(planner):
    assumptions = planner.assumptions_for(load("individual"))
    assert assumptions.inflation_rate == pytest.approx(0.03)
    assert assumptions.portfolio_tax_rate == pytest.approx(0.25)


def test_retirement_income(planner):
    income = planner.retirement_income(load("individual"))
    assert income["monthly_income_real"] > 0
    assert income["replacement_ratio"] > 0


def test_analyze_expenses_without_breakdown(planner):
    assert planner.analyze_expenses({"currentMonthlySalary": 10000}) is None


def test_plan_with_unreadable_expense_entry(planner):
    plan = planner.plan({"currentAge": 30, "retirementAge": 40, "currentMonthlySalary": 10000,
                         "expenseBreakdown": {"housing": "n/a"}})
    assert plan["expenses"]["invalid"] == ["housing"]
    assert plan["expenses"]["projected_at_retirement"] == {"housing": 0.0}


def test_non_mapping_profile_rejected(planner):
    with pytest.raises(InvalidProfileError):
        planner.score(None)


def test_works_without_cache():
    planner = RetirementPlanner()
    assert planner.cache is None
    assert planner.score(load("individual")).total_score > 0

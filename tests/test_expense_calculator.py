"""Tests for the expense calculator."""

import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.expense_calculator import ExpenseCalculator


@pytest.fixture
def calc():
    return ExpenseCalculator()


def test_project_expenses_category_rates(calc):
    projected = calc.project_expenses({"food": 1000, "housing": 2000}, 1)
    # food grows 2.5% + 2%, housing 2.5% + 1%
    assert projected["food"] == pytest.approx(1045)
    assert projected["housing"] == pytest.approx(2070)


def test_project_expenses_compounds(calc):
    projected = calc.project_expenses({"housing": 2000}, 2)
    assert projected["housing"] == pytest.approx(2142.45)


def test_unknown_category_uses_base_rate(calc):
    assert calc.project_expenses({"travel": 100}, 1)["travel"] == pytest.approx(102.5)


def test_zero_years_unchanged(calc):
    assert calc.project_expenses({"food": 1234.5}, 0) == {"food": 1234.5}


def test_project_timeline(calc):
    timeline = calc.project_timeline({"food": 1000, "other": 500}, 2)
    assert list(timeline) == [0, 1, 2]
    assert timeline[0] == 1500
    assert timeline[2] > timeline[1] > timeline[0]


def test_analyze_ratios(calc):
    result = calc.analyze_ratios({"housing": 3500, "food": 1200, "transportation": 1800}, 10000)
    assert result["categories"]["housing"]["status"] == "high"
    assert result["categories"]["food"]["status"] == "good"
    assert result["categories"]["transportation"]["status"] == "acceptable"
    assert result["over_budget"] == ["housing"]
    # housing 1000 above ideal, transportation 300 above ideal
    assert result["savings_potential"] == pytest.approx(1300)
    assert result["total_expenses"] == 6500


def test_analyze_ratios_unrated_category(calc):
    result = calc.analyze_ratios({"travel": 500}, 10000)
    assert result["categories"]["travel"]["status"] == "unrated"


def test_analyze_ratios_without_income(calc):
    result = calc.analyze_ratios({"housing": 3500}, 0)
    assert result["categories"] == {}
    assert result["total_expenses"] == 3500


def test_unreadable_amount_counts_as_zero(calc):
    assert calc.project_expenses({"housing": "n/a", "food": "1000"}, 1) == {"housing": 0.0, "food": 1045.0}
    result = calc.analyze_ratios({"housing": "n/a", "food": 1200}, 10000)
    assert result["invalid"] == ["housing"]
    assert result["categories"]["housing"]["status"] == "invalid"
    assert result["categories"]["food"]["status"] == "good"
    assert result["total_expenses"] == 1200

"""Tests for the pension calculator."""

import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.pension_calculator import PensionCalculator
from model.ProjectionData import Projection, ProjectionPoint


@pytest.fixture
def calc():
    return PensionCalculator()


def test_training_fund_below_threshold(calc):
    result = calc.training_fund_contribution(10000)
    assert result["total_contribution"] == pytest.approx(1000)
    assert result["tax_deductible"] == pytest.approx(1000)
    assert result["taxable_amount"] == 0
    assert result["salary_status"] == "below_threshold"
    assert result["exceeds_threshold"] is False


def test_training_fund_above_threshold(calc):
    result = calc.training_fund_contribution(20000)
    assert result["total_contribution"] == pytest.approx(2000)
    assert result["tax_deductible"] == 1571
    assert result["taxable_amount"] == pytest.approx(429)
    assert result["salary_status"] == "above_threshold"
    assert result["exceeds_threshold"] is True


def test_training_fund_outside_israel(calc):
    result = calc.training_fund_contribution(20000, country="usa")
    assert result["tax_deductible"] == pytest.approx(2000)
    assert result["salary_status"] == "not_applicable"
    assert result["exceeds_threshold"] is False


def test_net_return(calc):
    assert calc.net_return(0.05, 0.01) == pytest.approx(0.04)
    assert calc.net_return(0.01, 0.02) == pytest.approx(0.001)


def test_monthly_income(calc):
    assert calc.monthly_income(1_200_000) == pytest.approx(4000)
    assert calc.monthly_income(1_200_000, withdrawal_rate=0.03) == pytest.approx(3000)


def test_retirement_income_from_projection(calc):
    final = ProjectionPoint(age=67, year_offset=37, nominal_total=2_400_000, real_total=1_200_000)
    projection = Projection(primary=[final], combined=[final])
    result = calc.retirement_income(projection, current_monthly_salary=10000)
    assert result["retirement_age"] == 67
    assert result["monthly_income_nominal"] == 8000
    assert result["monthly_income_real"] == 4000
    assert result["replacement_ratio"] == 0.4


def test_retirement_income_empty_projection(calc):
    result = calc.retirement_income(Projection())
    assert result["monthly_income_real"] == 0
    assert result["replacement_ratio"] is None


def test_replacement_ratio_without_salary(calc):
    assert calc.replacement_ratio(4000, 0) is None

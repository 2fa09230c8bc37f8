"""Tests for the text renderers."""

import pytest
import sys
import os
import json

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.retirement_planner import RetirementPlanner
from model.HealthReport import Suggestion
from render import (
    BaseRenderer,
    ProjectionRenderer,
    HealthScoreRenderer,
    SuggestionsRenderer,
    DiagnosticsRenderer,
    PlanSummaryRenderer,
    RENDERER_REGISTRY,
)


# Path to the project root (for sample profiles)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))


def load_profile(name):
    with open(os.path.join(PROJECT_ROOT, 'input-parameters', name, 'profile.json'), 'r') as f:
        return json.load(f)


@pytest.fixture(scope="module")
def planner():
    return RetirementPlanner()


@pytest.fixture(scope="module")
def individual():
    return load_profile('individual')


@pytest.fixture(scope="module")
def couple():
    return load_profile('couple')


class TestRendererRegistry:
    """Test that every mode is registered."""

    def test_modes(self):
        assert set(RENDERER_REGISTRY) == {'Projection', 'HealthScore', 'Suggestions', 'Diagnostics', 'Plan'}

    def test_all_renderers_are_base_renderers(self):
        for renderer_class in RENDERER_REGISTRY.values():
            assert issubclass(renderer_class, BaseRenderer)


class TestProjectionRenderer:

    def test_renders_every_age(self, planner, individual, capsys):
        projection = planner.project(individual)
        ProjectionRenderer().render(projection)
        out = capsys.readouterr().out
        assert 'SAVINGS PROJECTION (COMBINED)' in out
        assert 'Training Fund' in out
        assert 'Real Estate' not in out
        final = projection.final_point()
        assert f"{final.nominal_total:,}" in out

    def test_couple_shows_shares(self, planner, couple, capsys):
        ProjectionRenderer().render(planner.project(couple))
        out = capsys.readouterr().out
        assert 'Real Estate' in out
        assert 'Primary share (nominal):' in out
        assert 'Partner share (nominal):' in out

    def test_partner_series_for_individual(self, planner, individual, capsys):
        ProjectionRenderer(series='partner').render(planner.project(individual))
        assert 'No partner projection data available' in capsys.readouterr().out


class TestHealthScoreRenderer:

    def test_lists_factors(self, planner, individual, capsys):
        report = planner.score(individual)
        HealthScoreRenderer().render(report)
        out = capsys.readouterr().out
        assert 'FINANCIAL HEALTH SCORE' in out
        assert f"{report.total_score:>6} / 100" in out
        for label in ('Savings Rate', 'Retirement Readiness', 'Debt Management'):
            assert label in out

    def test_shows_input_problems(self, planner, capsys):
        HealthScoreRenderer().render(planner.score({}))
        out = capsys.readouterr().out
        assert 'FACTORS SCORING ZERO' in out
        assert 'INPUT PROBLEMS' in out
        assert 'Current age is required' in out


class TestSuggestionsRenderer:

    def test_renders_report(self, planner, capsys):
        SuggestionsRenderer().render(planner.score({'currentAge': 30, 'currentMonthlySalary': 10000}))
        out = capsys.readouterr().out
        assert 'IMPROVEMENT SUGGESTIONS' in out
        assert '1. [' in out

    def test_renders_list(self, capsys):
        SuggestionsRenderer().render([Suggestion('savingsRate', 'high', 'Low savings', 'Save more', 'Retire sooner')])
        out = capsys.readouterr().out
        assert '[HIGH] Savings Rate' in out
        assert 'Action: Save more' in out

    def test_empty_list(self, capsys):
        SuggestionsRenderer().render([])
        assert 'No suggestions' in capsys.readouterr().out


class TestDiagnosticsRenderer:

    def test_counts_resolved_fields(self, planner, couple, capsys):
        diagnosis = planner.resolver.diagnose(couple)
        DiagnosticsRenderer().render(diagnosis)
        out = capsys.readouterr().out
        found = sum(1 for info in diagnosis.values() if info['found'])
        assert f"{found} of {len(diagnosis)} fields resolved" in out
        assert 'partner1Salary' in out


class TestPlanSummaryRenderer:

    def test_summary_sections(self, planner, individual, capsys):
        PlanSummaryRenderer().render(planner.plan(individual))
        out = capsys.readouterr().out
        assert 'RETIREMENT PLAN SUMMARY' in out
        assert 'RETIREMENT INCOME' in out
        assert 'Replacement Ratio:' in out

    def test_over_budget_expenses(self, planner, individual, capsys):
        profile = dict(individual, expenseBreakdown={'housing': 9000, 'food': 2000})
        PlanSummaryRenderer().render(planner.plan(profile))
        out = capsys.readouterr().out
        assert 'EXPENSES OVER BUDGET' in out
        assert 'housing' in out

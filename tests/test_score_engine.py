"""Tests for the financial health score engine."""

import json
import os
import sys
import pytest
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.compound_projector import CompoundProjector
from model.errors import InvalidProfileError
from scoring.benchmarks import PeerGroup, FACTOR_NAMES
from scoring.score_engine import ScoreEngine, score_status, calculate_percentile


INPUT_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../input-parameters'))


def load(name):
    with open(os.path.join(INPUT_PATH, name, 'profile.json'), 'r') as f:
        return json.load(f)


@pytest.fixture(scope="module")
def engine():
    return ScoreEngine()


@pytest.mark.parametrize("total,expected", [
    (100, "excellent"),
    (85, "excellent"),
    (84, "good"),
    (70, "good"),
    (69, "needsWork"),
    (50, "needsWork"),
    (49, "critical"),
    (0, "critical"),
])
def test_score_status(total, expected):
    assert score_status(total) == expected


def test_calculate_percentile():
    group = PeerGroup("30-39", 40, 55, 75)
    assert calculate_percentile(55, group) == pytest.approx(50)
    assert calculate_percentile(65, group) == pytest.approx(62.5)
    assert calculate_percentile(75, group) == pytest.approx(75)
    assert calculate_percentile(100, group) == pytest.approx(99)
    assert calculate_percentile(27.5, group) == pytest.approx(25)
    assert calculate_percentile(0, group) == 1.0


@pytest.mark.parametrize("name", ["individual", "couple"])
def test_sample_profiles_score_within_bounds(engine, name):
    report = engine.score(load(name))
    assert set(report.factors) == set(FACTOR_NAMES)
    assert 0 <= report.total_score <= 100
    assert report.total_score == round(sum(f.score for f in report.factors.values()))
    for factor in report.factors.values():
        assert 0 <= factor.score <= factor.weight
    assert report.status == score_status(report.total_score)
    assert report.planning_type == name


def test_empty_profile_scores_zero(engine):
    report = engine.score({})
    assert report.total_score == 0
    assert report.status == "critical"
    assert set(report.zero_score_factors) == set(FACTOR_NAMES)
    assert report.missing_data
    assert not report.validation.is_valid
    assert len(report.validation.critical_missing) == 2
    # One suggestion per factor plus the data quality reminder
    assert len(report.suggestions) == len(FACTOR_NAMES) + 1
    assert report.suggestions[-1].category == "dataQuality"
    assert report.peer_comparison.age_group == "30-39"


def test_missing_data_names_factor(engine):
    report = engine.score({"currentAge": 30, "currentMonthlySalary": 10000})
    missing = {(m.field, m.factor) for m in report.missing_data}
    assert ("emergencyFund", "emergencyFund") in missing
    assert ("salary", "savingsRate") not in missing


def test_failing_factor_is_isolated(engine):
    profile = load("individual")
    with patch.object(engine.scorers["savingsRate"], "score", side_effect=ZeroDivisionError("boom")):
        report = engine.score(profile)
    failed = report.factors["savingsRate"]
    assert failed.status == "error"
    assert failed.score == 0
    assert "boom" in failed.details["reason"]
    assert report.factors["timeHorizon"].score > 0


def test_score_factor_unknown_name(engine):
    with pytest.raises(ValueError, match="Unknown factor"):
        engine.score_factor("luck", {})


def test_non_mapping_profile_rejected(engine):
    with pytest.raises(InvalidProfileError):
        engine.score("currentAge=30")


def test_more_savings_never_lowers_score(engine):
    profile = load("individual")
    base = engine.score(profile).total_score
    richer = engine.score(dict(profile, monthlyContribution=8000)).total_score
    assert richer >= base


def test_projection_enriches_readiness(engine):
    profile = load("individual")
    projection = CompoundProjector().project(profile)
    report = engine.score(profile, projection)
    details = report.factors["retirementReadiness"].details
    assert details["projected_nominal_at_retirement"] == projection.combined[-1].nominal_total


def test_validation_flags_negative_values(engine):
    report = engine.score({"currentAge": 30, "currentMonthlySalary": -100})
    assert "currentMonthlySalary cannot be negative" in report.validation.errors
    assert report.validation.validation_level == "invalid"


def test_validation_warns_on_age_order(engine):
    report = engine.score({"currentAge": 70, "retirementAge": 67, "currentMonthlySalary": 10000})
    assert report.validation.warnings
    assert report.validation.validation_level == "partial"


def test_peer_comparison(engine):
    report = engine.score(load("individual"))
    peer = report.peer_comparison
    assert peer.age_group == "30-39"
    assert 1 <= peer.user_percentile <= 99
    assert peer.comparison in ("Above Top 25%", "Above Average", "Below Average")


def test_report_to_dict_is_json_serializable(engine):
    data = engine.score(load("couple")).to_dict()
    encoded = json.dumps(data)
    assert '"total_score"' in encoded
    assert set(data["factors"]) == set(FACTOR_NAMES)

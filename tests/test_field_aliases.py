"""Tests for the canonical field alias table."""

import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from model.field_aliases import (
    CanonicalField,
    FieldAliases,
    FIELD_ALIASES,
    validate_aliases,
    get_aliases,
    is_string_field,
)


def test_every_canonical_field_has_aliases():
    for field in CanonicalField:
        assert field in FIELD_ALIASES
        assert len(get_aliases(field)) >= 1


def test_shipped_table_is_valid():
    # Raises if the table is incomplete or ambiguous
    validate_aliases(FIELD_ALIASES)


def test_pension_balance_legacy_aliases():
    aliases = get_aliases(CanonicalField.CURRENT_PENSION)
    assert aliases[0] == "currentPensionSavings"
    assert "pensionSavings" in aliases
    assert "currentSavings" in aliases


def test_salary_partner_aliases():
    partner1 = get_aliases(CanonicalField.SALARY, "partner1")
    assert partner1[:2] == ("partner1Salary", "partner1MonthlySalary")
    for key in ("partner2Income", "partner2GrossSalary", "partner2CurrentSalary"):
        assert key in get_aliases(CanonicalField.SALARY, "partner2")


def test_partner_balance_and_rate_spellings():
    assert "partner2CurrentSavings" in get_aliases(CanonicalField.CURRENT_PENSION, "partner2")
    assert "partner2TrainingFundBalance" in get_aliases(CanonicalField.CURRENT_TRAINING_FUND, "partner2")
    assert "partner2Investments" in get_aliases(CanonicalField.PERSONAL_PORTFOLIO, "partner2")
    assert "partner2TrainingRate" in get_aliases(CanonicalField.TRAINING_FUND_EMPLOYEE_RATE, "partner2")
    assert "partner1EmployeePensionRate" in get_aliases(CanonicalField.PENSION_EMPLOYEE_RATE, "partner1")


def test_allocation_fields_have_no_partner_aliases():
    assert get_aliases(CanonicalField.EQUITY_PERCENTAGE, "partner1") == ()


def test_unknown_role_rejected():
    with pytest.raises(ValueError, match="Unknown alias role"):
        get_aliases(CanonicalField.SALARY, "partner3")


def test_string_fields():
    assert is_string_field(CanonicalField.RISK_TOLERANCE)
    assert is_string_field(CanonicalField.COUNTRY)
    assert not is_string_field(CanonicalField.SALARY)


def test_missing_entry_rejected():
    table = dict(FIELD_ALIASES)
    del table[CanonicalField.CRYPTO]
    with pytest.raises(ValueError, match="missing canonical fields"):
        validate_aliases(table)


def test_duplicate_raw_key_rejected():
    table = dict(FIELD_ALIASES)
    table[CanonicalField.ADDITIONAL_INCOME] = FieldAliases(("monthlySalary",))
    with pytest.raises(ValueError, match="monthlySalary"):
        validate_aliases(table)


def test_empty_base_aliases_rejected():
    table = dict(FIELD_ALIASES)
    table[CanonicalField.CRYPTO] = FieldAliases(())
    with pytest.raises(ValueError, match="no base aliases"):
        validate_aliases(table)


def test_unknown_kind_rejected():
    table = dict(FIELD_ALIASES)
    table[CanonicalField.CRYPTO] = FieldAliases(("currentCrypto",), kind="boolean")
    with pytest.raises(ValueError, match="unknown kind"):
        validate_aliases(table)

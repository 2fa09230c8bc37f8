"""Canonical field names and the raw input keys that may carry them.

Profiles arrive with inconsistent key spellings ("currentMonthlySalary",
"monthlySalary", "currentSalary", ...). Every concept the engine reads is a
CanonicalField, and FIELD_ALIASES lists the raw keys for it in priority order:
most current spelling first, legacy spellings last.

The table is checked when this module is imported so a missing or
conflicting entry fails immediately instead of surfacing as a silent zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class CanonicalField(str, Enum):
    """Internal names for every financial concept the engine understands."""

    # Income and expenses (monthly)
    SALARY = "salary"
    ADDITIONAL_INCOME = "additionalIncome"
    MONTHLY_EXPENSES = "monthlyExpenses"

    # Monthly savings flows
    MONTHLY_CONTRIBUTION = "monthlyContribution"
    TRAINING_FUND_CONTRIBUTION = "trainingFundContribution"
    PERSONAL_SAVINGS_MONTHLY = "personalSavingsMonthly"
    ADDITIONAL_SAVINGS = "additionalSavings"

    # Payroll contribution rates (percent of salary)
    PENSION_EMPLOYEE_RATE = "pensionEmployeeRate"
    PENSION_EMPLOYER_RATE = "pensionEmployerRate"
    TRAINING_FUND_EMPLOYEE_RATE = "trainingFundEmployeeRate"
    TRAINING_FUND_EMPLOYER_RATE = "trainingFundEmployerRate"

    # Balances
    CURRENT_PENSION = "currentPension"
    CURRENT_TRAINING_FUND = "currentTrainingFund"
    PERSONAL_PORTFOLIO = "personalPortfolio"
    PORTFOLIO_TAX_RATE = "portfolioTaxRate"
    REAL_ESTATE = "realEstate"
    CRYPTO = "crypto"
    EMERGENCY_FUND = "emergencyFund"

    # Debt
    MONTHLY_DEBT_PAYMENTS = "monthlyDebtPayments"
    HIGH_INTEREST_DEBT = "highInterestDebt"
    TOTAL_DEBT = "totalDebt"

    # Allocation (percent of invested assets)
    EQUITY_PERCENTAGE = "equityPercentage"
    BOND_PERCENTAGE = "bondPercentage"
    CASH_PERCENTAGE = "cashPercentage"
    COMMODITIES_PERCENTAGE = "commoditiesPercentage"
    ALTERNATIVES_PERCENTAGE = "alternativesPercentage"
    INTERNATIONAL_PERCENTAGE = "internationalPercentage"

    # Descriptive
    RISK_TOLERANCE = "riskTolerance"
    COUNTRY = "country"
    JOB_STABILITY = "jobStability"

    # Ages
    CURRENT_AGE = "currentAge"
    RETIREMENT_AGE = "retirementAge"

    # Rate assumptions (percent per year)
    INFLATION_RATE = "inflationRate"
    PENSION_RETURN = "pensionReturn"
    TRAINING_FUND_RETURN = "trainingFundReturn"
    PORTFOLIO_RETURN = "portfolioReturn"
    REAL_ESTATE_RETURN = "realEstateReturn"
    CRYPTO_RETURN = "cryptoReturn"


NUMBER = "number"
STRING = "string"

ROLES = ("base", "partner1", "partner2")


@dataclass(frozen=True)
class FieldAliases:
    """Ordered raw keys for one canonical field."""
    base: Tuple[str, ...]
    partner1: Tuple[str, ...] = ()
    partner2: Tuple[str, ...] = ()
    kind: str = NUMBER


def _partners(*suffixes: str) -> Dict[str, Tuple[str, ...]]:
    """Build the partner1/partner2 key tuples for the given key suffixes."""
    return {
        "partner1": tuple(f"partner1{s}" for s in suffixes),
        "partner2": tuple(f"partner2{s}" for s in suffixes),
    }


FIELD_ALIASES: Dict[CanonicalField, FieldAliases] = {
    CanonicalField.SALARY: FieldAliases(
        ("currentMonthlySalary", "monthlySalary", "monthlyIncome", "currentSalary"),
        **_partners("Salary", "MonthlySalary", "Income", "MonthlyIncome",
                   "CurrentSalary", "GrossSalary", "NetSalary", "Wage")),
    CanonicalField.ADDITIONAL_INCOME: FieldAliases(
        ("additionalMonthlyIncome", "additionalIncome", "otherIncome", "freelanceIncome"),
        **_partners("AdditionalIncome", "OtherIncome")),
    CanonicalField.MONTHLY_EXPENSES: FieldAliases(
        ("currentMonthlyExpenses", "monthlyExpenses", "expenses")),

    CanonicalField.MONTHLY_CONTRIBUTION: FieldAliases(
        ("monthlyContribution", "monthlyPensionContribution", "pensionContribution"),
        **_partners("MonthlyContribution", "PensionContribution")),
    CanonicalField.TRAINING_FUND_CONTRIBUTION: FieldAliases(
        ("trainingFundContribution", "monthlyTrainingFundContribution"),
        **_partners("TrainingFundContribution")),
    CanonicalField.PERSONAL_SAVINGS_MONTHLY: FieldAliases(
        ("personalSavings", "personalPortfolioMonthly", "monthlySavings"),
        **_partners("PersonalSavings", "MonthlySavings", "PersonalPortfolioMonthly")),
    CanonicalField.ADDITIONAL_SAVINGS: FieldAliases(
        ("additionalSavings", "additionalMonthlySavings"),
        **_partners("AdditionalSavings")),

    CanonicalField.PENSION_EMPLOYEE_RATE: FieldAliases(
        ("pensionEmployeeRate", "pensionContributionRate", "employeePensionRate"),
        **_partners("PensionEmployeeRate", "PensionContributionRate", "EmployeePensionRate")),
    CanonicalField.PENSION_EMPLOYER_RATE: FieldAliases(
        ("pensionEmployerRate", "employerPensionRate", "employerContributionRate"),
        **_partners("PensionEmployerRate", "EmployerPensionRate")),
    CanonicalField.TRAINING_FUND_EMPLOYEE_RATE: FieldAliases(
        ("trainingFundEmployeeRate", "trainingFundContributionRate", "trainingFundRate"),
        **_partners("TrainingFundEmployeeRate", "TrainingFundContributionRate",
                   "TrainingFundRate", "TrainingRate", "KerenHishtalmutRate")),
    CanonicalField.TRAINING_FUND_EMPLOYER_RATE: FieldAliases(
        ("trainingFundEmployerRate", "employerTrainingFundRate"),
        **_partners("TrainingFundEmployerRate")),

    CanonicalField.CURRENT_PENSION: FieldAliases(
        ("currentPensionSavings", "pensionSavings", "currentPension", "currentSavings"),
        **_partners("CurrentPension", "PensionSavings", "CurrentSavings")),
    CanonicalField.CURRENT_TRAINING_FUND: FieldAliases(
        ("currentTrainingFund", "trainingFund", "currentTraining"),
        **_partners("CurrentTrainingFund", "TrainingFund", "TrainingFundBalance", "KerenHishtalmut")),
    CanonicalField.PERSONAL_PORTFOLIO: FieldAliases(
        ("personalPortfolio", "currentPortfolio", "totalPortfolio", "portfolio"),
        **_partners("PersonalPortfolio", "CurrentPersonalPortfolio", "Portfolio",
                   "Investments", "StockPortfolio")),
    CanonicalField.PORTFOLIO_TAX_RATE: FieldAliases(
        ("portfolioTaxRate", "capitalGainsTaxRate", "portfolioCapitalGainsTax"),
        **_partners("PortfolioTaxRate")),
    CanonicalField.REAL_ESTATE: FieldAliases(
        ("currentRealEstate", "realEstateValue", "realEstate"),
        **_partners("RealEstate", "CurrentRealEstate")),
    CanonicalField.CRYPTO: FieldAliases(
        ("currentCrypto", "cryptoValue", "crypto"),
        **_partners("Crypto", "CurrentCrypto")),
    CanonicalField.EMERGENCY_FUND: FieldAliases(
        ("emergencyFund", "emergencySavings", "cashSavings"),
        **_partners("EmergencyFund")),

    CanonicalField.MONTHLY_DEBT_PAYMENTS: FieldAliases(
        ("monthlyDebtPayments", "debtPayments"),
        **_partners("DebtPayments", "MonthlyDebtPayments")),
    CanonicalField.HIGH_INTEREST_DEBT: FieldAliases(
        ("highInterestDebt", "creditCardDebt"),
        **_partners("HighInterestDebt")),
    CanonicalField.TOTAL_DEBT: FieldAliases(
        ("totalDebt", "currentDebt", "debt"),
        **_partners("TotalDebt")),

    CanonicalField.EQUITY_PERCENTAGE: FieldAliases(
        ("equityPercentage", "stocksPercentage", "equityAllocation", "stocks")),
    CanonicalField.BOND_PERCENTAGE: FieldAliases(
        ("bondPercentage", "bondsPercentage", "bondAllocation", "bonds")),
    CanonicalField.CASH_PERCENTAGE: FieldAliases(
        ("cashPercentage", "cashAllocation", "cash")),
    CanonicalField.COMMODITIES_PERCENTAGE: FieldAliases(
        ("commoditiesPercentage", "goldPercentage", "commodities")),
    CanonicalField.ALTERNATIVES_PERCENTAGE: FieldAliases(
        ("alternativesPercentage", "alternativeAllocation", "alternatives")),
    CanonicalField.INTERNATIONAL_PERCENTAGE: FieldAliases(
        ("internationalPercentage", "internationalAllocation")),

    CanonicalField.RISK_TOLERANCE: FieldAliases(
        ("riskTolerance", "riskProfile", "investmentRiskProfile"), kind=STRING),
    CanonicalField.COUNTRY: FieldAliases(
        ("country", "taxCountry", "residenceCountry"), kind=STRING),
    CanonicalField.JOB_STABILITY: FieldAliases(
        ("jobStability", "employmentStability"), kind=STRING),

    CanonicalField.CURRENT_AGE: FieldAliases(
        ("currentAge", "age"),
        **_partners("Age", "CurrentAge")),
    CanonicalField.RETIREMENT_AGE: FieldAliases(
        ("retirementAge", "targetRetirementAge"),
        **_partners("RetirementAge")),

    CanonicalField.INFLATION_RATE: FieldAliases(("inflationRate", "expectedInflation")),
    CanonicalField.PENSION_RETURN: FieldAliases(("pensionReturn", "expectedPensionReturn")),
    CanonicalField.TRAINING_FUND_RETURN: FieldAliases(("trainingFundReturn", "expectedTrainingFundReturn")),
    CanonicalField.PORTFOLIO_RETURN: FieldAliases(("portfolioReturn", "personalPortfolioReturn")),
    CanonicalField.REAL_ESTATE_RETURN: FieldAliases(("realEstateReturn",)),
    CanonicalField.CRYPTO_RETURN: FieldAliases(("cryptoReturn",)),
}


def validate_aliases(table: Dict[CanonicalField, FieldAliases]) -> None:
    """Check that the alias table is complete and unambiguous.

    Raises:
        ValueError: if a canonical field has no entry or no base aliases, if
            an entry has an unknown kind, or if a raw key is claimed by two
            canonical fields in the same role.
    """
    missing = [f.name for f in CanonicalField if f not in table]
    if missing:
        raise ValueError(f"Alias table is missing canonical fields: {missing}")

    for role in ROLES:
        owners: Dict[str, CanonicalField] = {}
        for field, aliases in table.items():
            if not aliases.base:
                raise ValueError(f"Canonical field '{field.value}' has no base aliases")
            if aliases.kind not in (NUMBER, STRING):
                raise ValueError(f"Canonical field '{field.value}' has unknown kind '{aliases.kind}'")
            for key in getattr(aliases, role):
                if key in owners and owners[key] is not field:
                    raise ValueError(
                        f"Raw key '{key}' is mapped to both '{owners[key].value}' and '{field.value}'"
                    )
                owners[key] = field


def get_aliases(field: CanonicalField, role: str = "base") -> Tuple[str, ...]:
    """Get the ordered raw keys for a field in the given role."""
    if role not in ROLES:
        raise ValueError(f"Unknown alias role '{role}'. Expected one of {ROLES}")
    return getattr(FIELD_ALIASES[field], role)


def is_string_field(field: CanonicalField) -> bool:
    return FIELD_ALIASES[field].kind == STRING


validate_aliases(FIELD_ALIASES)

"""Pension and training fund helpers.

Covers the Israeli training fund tax ceiling, net-of-fee returns and the
monthly income a projected balance can sustain at retirement.
"""

from typing import Optional

from model.ProjectionData import Projection

# Israeli training fund rules (monthly amounts)
TRAINING_FUND_SALARY_THRESHOLD = 15712
TRAINING_FUND_MAX_DEDUCTIBLE = 1571
TRAINING_FUND_RATE = 0.10  # 7.5% employer + 2.5% employee

MIN_NET_RETURN = 0.001
DEFAULT_WITHDRAWAL_RATE = 0.04


class PensionCalculator:
    """Calculator for pension and training fund figures."""

    def __init__(self, withdrawal_rate: float = DEFAULT_WITHDRAWAL_RATE):
        self.withdrawal_rate = withdrawal_rate

    def training_fund_contribution(self, monthly_salary: float, country: str = "israel",
                                   rate: float = TRAINING_FUND_RATE) -> dict:
        """Split a monthly training fund contribution into deductible and taxable parts.

        In Israel only the contribution on salary up to the threshold is tax
        benefited; above it the deductible part is capped.

        Args:
            monthly_salary: Gross monthly salary
            country: Country key; anything other than 'israel' is fully deductible
            rate: Combined employee and employer contribution rate (fraction)

        Returns:
            Dictionary with total_contribution, tax_deductible, taxable_amount,
            exceeds_threshold and salary_status.
        """
        total = max(0.0, monthly_salary) * rate
        if country != "israel":
            return {
                "total_contribution": total,
                "tax_deductible": total,
                "taxable_amount": 0.0,
                "exceeds_threshold": False,
                "salary_status": "not_applicable",
            }
        if monthly_salary <= TRAINING_FUND_SALARY_THRESHOLD:
            return {
                "total_contribution": total,
                "tax_deductible": total,
                "taxable_amount": 0.0,
                "exceeds_threshold": False,
                "salary_status": "below_threshold",
            }
        deductible = min(total, TRAINING_FUND_MAX_DEDUCTIBLE)
        return {
            "total_contribution": total,
            "tax_deductible": deductible,
            "taxable_amount": total - deductible,
            "exceeds_threshold": True,
            "salary_status": "above_threshold",
        }

    @staticmethod
    def net_return(gross_return: float, management_fee: float) -> float:
        """Annual return after management fees, never below 0.1%."""
        return max(MIN_NET_RETURN, gross_return - management_fee)

    def monthly_income(self, total_savings: float, withdrawal_rate: Optional[float] = None) -> float:
        """Monthly income a balance supports at a fixed annual withdrawal rate."""
        rate = self.withdrawal_rate if withdrawal_rate is None else withdrawal_rate
        return total_savings * rate / 12

    def retirement_income(self, projection: Projection, current_monthly_salary: float = 0.0) -> dict:
        """Monthly retirement income from the combined projection at retirement age.

        Args:
            projection: Projection whose combined series ends at retirement
            current_monthly_salary: Used for the income replacement ratio

        Returns:
            Dictionary with the retirement age, balances, nominal and real monthly
            income, and the replacement ratio of real income to current salary.
        """
        final = projection.final_point("combined")
        if final is None:
            return {"retirement_age": None, "monthly_income_nominal": 0.0,
                    "monthly_income_real": 0.0, "replacement_ratio": None}
        real_income = self.monthly_income(final.real_total)
        return {
            "retirement_age": final.age,
            "withdrawal_rate": self.withdrawal_rate,
            "nominal_balance": final.nominal_total,
            "real_balance": final.real_total,
            "monthly_income_nominal": round(self.monthly_income(final.nominal_total), 2),
            "monthly_income_real": round(real_income, 2),
            "replacement_ratio": self.replacement_ratio(real_income, current_monthly_salary),
        }

    @staticmethod
    def replacement_ratio(monthly_retirement_income: float, current_monthly_salary: float) -> Optional[float]:
        """Retirement income as a fraction of today's salary, or None without a salary."""
        if current_monthly_salary <= 0:
            return None
        return round(monthly_retirement_income / current_monthly_salary, 4)

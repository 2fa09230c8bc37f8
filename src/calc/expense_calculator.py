"""Expense projections and expense-to-income ratio analysis."""

from typing import Dict

from calc.field_resolver import parse_number

# Extra annual growth over the base adjustment, in percentage points
CATEGORY_INFLATION_ADJUSTMENTS = {
    "housing": 1.0,
    "transportation": 0.0,
    "food": 2.0,
    "insurance": 3.0,
    "other": 0.0,
}

# Recommended share of monthly income, in percent
RECOMMENDED_EXPENSE_RATIOS = {
    "housing": {"min": 20, "max": 30, "ideal": 25},
    "transportation": {"min": 10, "max": 20, "ideal": 15},
    "food": {"min": 10, "max": 20, "ideal": 15},
    "insurance": {"min": 5, "max": 15, "ideal": 10},
    "other": {"min": 5, "max": 20, "ideal": 10},
}


def expense_amount(raw) -> float:
    """Monthly amount of one category; unreadable or negative entries count as 0."""
    value = parse_number(raw)
    return max(0.0, value) if value is not None else 0.0


class ExpenseCalculator:
    """Projects category expenses forward and compares them with income."""

    def __init__(self, base_adjustment: float = 2.5):
        """
        base_adjustment: base yearly growth of all expenses, in percent
        """
        self.base_adjustment = base_adjustment

    def project_expenses(self, expenses: Dict[str, float], years: int) -> Dict[str, float]:
        """Project monthly expenses by category a number of years ahead.

        Args:
            expenses: Current monthly expenses keyed by category
            years: Years to project

        Returns:
            Projected monthly expenses keyed by category.
        """
        projected = {}
        for category, amount in expenses.items():
            rate = (self.base_adjustment + CATEGORY_INFLATION_ADJUSTMENTS.get(category, 0.0)) / 100
            projected[category] = round(expense_amount(amount) * (1 + rate) ** years, 2)
        return projected

    def project_timeline(self, expenses: Dict[str, float], years: int) -> Dict[int, float]:
        """Total monthly expenses for each year from 0 to years inclusive."""
        return {y: round(sum(self.project_expenses(expenses, y).values()), 2) for y in range(years + 1)}

    def analyze_ratios(self, expenses: Dict[str, float], monthly_income: float) -> dict:
        """Compare each category's share of income with the recommended range.

        Returns:
            Dictionary with per-category ratios and status ('good', 'acceptable',
            'high', 'unrated', or 'invalid' for an unreadable amount), the
            categories over budget, the invalid ones, and the monthly amount that
            could be saved by bringing high categories down to their ideal.
        """
        if monthly_income <= 0:
            return {"categories": {}, "over_budget": [], "invalid": [], "savings_potential": 0.0,
                    "total_expenses": round(sum(expense_amount(v) for v in expenses.values()), 2)}

        categories = {}
        over_budget = []
        invalid = []
        savings_potential = 0.0
        for category, amount in expenses.items():
            if parse_number(amount) is None:
                invalid.append(category)
                categories[category] = {"amount": 0.0, "ratio": 0.0, "status": "invalid"}
                continue
            amount = expense_amount(amount)
            ratio = amount / monthly_income * 100
            recommended = RECOMMENDED_EXPENSE_RATIOS.get(category)
            if recommended is None:
                categories[category] = {"amount": amount, "ratio": round(ratio, 1), "status": "unrated"}
                continue
            if ratio <= recommended["ideal"]:
                status = "good"
            elif ratio <= recommended["max"]:
                status = "acceptable"
            else:
                status = "high"
                over_budget.append(category)
            if ratio > recommended["ideal"]:
                savings_potential += amount - recommended["ideal"] / 100 * monthly_income
            categories[category] = {
                "amount": amount,
                "ratio": round(ratio, 1),
                "recommended_max": recommended["max"],
                "status": status,
            }

        return {
            "categories": categories,
            "over_budget": over_budget,
            "invalid": invalid,
            "savings_potential": round(savings_potential, 2),
            "total_expenses": round(sum(expense_amount(v) for v in expenses.values()), 2),
        }

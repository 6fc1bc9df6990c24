"""Taxable income and fiscal parts.

Turns declared salaries into the household's net taxable income (revenu
net imposable) and reference income (revenu fiscal de référence), and
derives the quotient-familial part count.
"""

from typing import Iterable, Tuple

from ..schemas import Situation
from .schemas import StandardDeductionRules


def calc_professional_deduction(
    salary: float,
    declared_expenses: float,
    treat_gross_as_taxable: bool,
    rules: StandardDeductionRules,
) -> float:
    """Professional-expense deduction for one declarant.

    The standard deduction is rate x salary clamped to [floor, ceiling];
    declared actual expenses replace it when larger. A salary flagged as
    already taxable gets no deduction, and a zero salary gets none either
    (the floor would otherwise produce a negative net).

    The result is not clamped to the salary; taxable income is floored at
    0 when declarants are aggregated.
    """
    if treat_gross_as_taxable:
        return 0.0
    if salary == 0:
        return 0.0
    standard = min(salary * rules.rate, rules.ceiling)
    standard = max(standard, rules.floor)
    return max(standard, declared_expenses)


def cap_retirement_contribution(contribution: float, ceiling: float) -> Tuple[float, bool]:
    """Clamp a PER contribution to its deductible ceiling.

    Returns:
        Tuple of (deductible amount, whether the ceiling was exceeded)
    """
    return min(contribution, ceiling), contribution > ceiling


def calc_taxable_income(net_incomes: Iterable[float], common_charges: float) -> float:
    """Household net taxable income.

    Args:
        net_incomes: Per-declarant salary minus deduction minus PER deduction
        common_charges: Household-level deductible charges

    Returns:
        Taxable income, floored at 0
    """
    return max(0.0, sum(net_incomes) - common_charges)


def calc_reference_income(gross_salaries: Iterable[float], rate: float) -> float:
    """Reference income used for the surtax (rate x gross, before any relief)."""
    return sum(gross_salaries) * rate


def calc_fiscal_parts(situation: Situation, dependent_count: int) -> float:
    """Quotient-familial part count.

    Married households start at 2 parts, widowed households at 2 when they
    have dependents (1 otherwise), single declarants at 1. The first two
    dependents add half a part each, every further dependent a full part.
    """
    if situation == "married":
        parts = 2.0
    elif situation == "widowed":
        parts = 2.0 if dependent_count > 0 else 1.0
    else:
        parts = 1.0

    if dependent_count >= 1:
        parts += 0.5
    if dependent_count >= 2:
        parts += 0.5
    if dependent_count >= 3:
        parts += dependent_count - 2
    return parts


def calc_capping_base_parts(situation: Situation) -> float:
    """Reference part count for quotient-familial capping.

    Only married households get 2. Widowed households are capped against
    1 part even when calc_fiscal_parts gave them a 2-part base.
    """
    return 2.0 if situation == "married" else 1.0

"""Withholding-rate (prélèvement à la source) allocation.

The household rate is the tax before user credits over total gross salary.
Couples with two earners can split it: the lower earner is assigned the tax
they would owe on their own taxable income with the household's parts and
décote rule, and the higher earner takes the remainder. Both earners still
pay the household's total between them.
"""

from typing import Sequence

from ..schemas import Situation, WithholdingRates
from .brackets import calc_bracket_tax
from .reliefs import calc_decote
from .schemas import DecoteRules, TaxBracket


def _rate(amount: float, salary: float) -> float:
    return amount / salary if salary > 0 else 0.0


def calc_individual_tax(
    taxable_income: float,
    parts: float,
    situation: Situation,
    brackets: Sequence[TaxBracket],
    decote_rules: DecoteRules,
) -> float:
    """Theoretical tax on one earner's income at the household's parts."""
    tax = calc_bracket_tax(taxable_income, parts, brackets).tax
    return max(0.0, tax - calc_decote(tax, situation, decote_rules))


def allocate_withholding_rates(
    situation: Situation,
    household_tax: float,
    salaries: tuple,
    individual_taxable: tuple,
    parts: float,
    brackets: Sequence[TaxBracket],
    decote_rules: DecoteRules,
) -> WithholdingRates:
    """Split the household's effective rate between declarants.

    Args:
        situation: Household situation
        household_tax: Tax after décote, before user credits
        salaries: (declarant 1 gross, declarant 2 gross); declarant 2 is 0
            unless married
        individual_taxable: Each declarant's own taxable income
        parts: Household's actual part count
        brackets: Rate table
        decote_rules: Décote rules (household's parameter set is used)

    Returns:
        WithholdingRates as fractions of gross salary

    Note:
        With equal salaries declarant 1 is treated as the lower earner.
        This is a convention, not a rule from the tax code.
    """
    salary1, salary2 = salaries
    household_rate = _rate(household_tax, salary1 + salary2)

    if situation != "married":
        return WithholdingRates(household=household_rate, declarant1=household_rate, declarant2=0.0)

    if salary1 <= 0 or salary2 <= 0:
        # Single-earner couple: no individualisation
        return WithholdingRates(
            household=household_rate, declarant1=household_rate, declarant2=household_rate
        )

    lower = 1 if salary2 < salary1 else 0
    higher = 1 - lower

    lower_tax = calc_individual_tax(
        individual_taxable[lower], parts, situation, brackets, decote_rules
    )
    higher_tax = max(0.0, household_tax - lower_tax)

    rates = [0.0, 0.0]
    rates[lower] = _rate(lower_tax, salaries[lower])
    rates[higher] = _rate(higher_tax, salaries[higher])
    return WithholdingRates(household=household_rate, declarant1=rates[0], declarant2=rates[1])

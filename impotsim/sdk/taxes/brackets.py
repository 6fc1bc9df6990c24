"""Progressive bracket tax on the family quotient."""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .schemas import TaxBracket


@dataclass(frozen=True)
class BracketTax:
    """Bracket tax for one part count.

    Attributes:
        parts: Part count the income was divided by
        quotient: Taxable income per part
        tax_per_part: Unrounded tax on one quotient
        tax: Household tax (tax_per_part x parts, floored to the unit)
        marginal_rate: Highest non-zero rate that taxed part of the quotient
        breakdown: (label, rate, amount) for each bracket reached
    """
    parts: float
    quotient: float
    tax_per_part: float
    tax: int
    marginal_rate: float
    breakdown: List[tuple] = field(default_factory=list)


def bracket_upper(bracket: TaxBracket) -> float:
    return math.inf if bracket.up_to is None else bracket.up_to


def calc_bracket_tax(taxable_income: float, parts: float, brackets: Sequence[TaxBracket]) -> BracketTax:
    """Apply the rate table to taxable_income / parts and rescale to the household.

    Walks brackets in ascending order, taxing min(quotient, limit) - previous
    limit at each rate, and stops at the bracket containing the quotient.
    The breakdown amounts sum to the quotient. When nothing is taxable a
    single zero-rate placeholder entry is emitted so the breakdown is never
    empty.
    """
    quotient = taxable_income / parts
    tax_per_part = 0.0
    previous_limit = 0.0
    marginal_rate = 0.0
    breakdown = []

    for bracket in brackets:
        limit = bracket_upper(bracket)
        taxable_amount = min(quotient, limit) - previous_limit
        if taxable_amount > 0:
            tax_per_part += taxable_amount * bracket.rate
            breakdown.append((bracket.display_label, bracket.rate, taxable_amount))
            if bracket.rate > 0:
                marginal_rate = max(marginal_rate, bracket.rate)
        previous_limit = limit
        if quotient <= limit:
            break

    if not breakdown:
        first = brackets[0]
        breakdown.append((first.display_label, first.rate, 0.0))

    return BracketTax(
        parts=parts,
        quotient=quotient,
        tax_per_part=tax_per_part,
        tax=math.floor(tax_per_part * parts),
        marginal_rate=marginal_rate,
        breakdown=breakdown,
    )


def find_bracket_index(quotient: float, brackets: Sequence[TaxBracket]) -> int:
    """Index of the bracket containing the quotient (first limit >= quotient)."""
    for i, bracket in enumerate(brackets):
        if quotient <= bracket_upper(bracket):
            return i
    return len(brackets) - 1


def lower_bracket(quotient: float, brackets: Sequence[TaxBracket]) -> Optional[TaxBracket]:
    """The bracket immediately below the one containing the quotient, if any."""
    index = find_bracket_index(quotient, brackets)
    if index == 0:
        return None
    return brackets[index - 1]

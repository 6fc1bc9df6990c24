"""Retirement-savings (PER) optimizer.

Estimates the deductible contribution that brings the reported marginal
rate down one bracket, and the tax it would save at the current marginal
rate.

Without capping the amount follows from the quotient alone. With capping
the reported rate comes from the base-part computation until the income
falls low enough for capping to lift, at which point it switches to the
actual parts. The capped amount is therefore searched for against the
reduced income.
"""

import math
from typing import Sequence

from ..schemas import OptimizerSuggestion
from .brackets import calc_bracket_tax, lower_bracket
from .reliefs import capped_bracket_tax, round_to_unit
from .schemas import TaxBracket


def _suggestion(amount: int, marginal_rate: float, target_rate: float) -> OptimizerSuggestion:
    saving = round_to_unit(amount * marginal_rate)
    return OptimizerSuggestion(
        amount_to_invest=amount,
        estimated_saving=saving,
        target_rate=target_rate,
        explanation=(
            f"Investing {amount:,} in a retirement savings plan brings the marginal rate "
            f"down to {target_rate:.0%}, saving about {saving:,}."
        ),
    )


def _lowest_bracket(marginal_rate: float) -> OptimizerSuggestion:
    return OptimizerSuggestion(
        explanation=f"Already in the lowest taxed bracket ({marginal_rate:.0%}).",
    )


def suggest_retirement_contribution(
    marginal_rate: float,
    quotient: float,
    parts: float,
    brackets: Sequence[TaxBracket],
) -> OptimizerSuggestion:
    """Contribution needed to drop one marginal bracket.

    Args:
        marginal_rate: Current marginal rate
        quotient: Per-part income the marginal rate was determined from
        parts: Part count behind that quotient
        brackets: Rate table

    Returns:
        OptimizerSuggestion; empty when there is no lower non-zero bracket
        to drop into
    """
    if marginal_rate <= 0:
        return OptimizerSuggestion()

    target = lower_bracket(quotient, brackets)
    if target is None or target.rate <= 0 or target.up_to is None:
        return _lowest_bracket(marginal_rate)

    # Rounded up so that investing the amount actually clears the bracket
    amount = math.ceil((quotient - target.up_to) * parts)
    return _suggestion(amount, marginal_rate, target.rate)


def suggest_capped_contribution(
    taxable_income: float,
    parts: float,
    base_parts: float,
    brackets: Sequence[TaxBracket],
    cap_per_half_part: float,
) -> OptimizerSuggestion:
    """Contribution that lowers the reported marginal rate of a capped household.

    Searches for the smallest whole amount whose investment drops the
    reported rate, whether by moving the base-part quotient into the lower
    bracket or by lifting the capping. The target rate is the one reported
    after investing that amount.

    Note:
        When capping lifts, the actual-parts rate can sit more than one
        bracket below the base-part rate. The target rate then skips a step.
    """
    base = calc_bracket_tax(taxable_income, base_parts, brackets)
    marginal_rate = base.marginal_rate
    if marginal_rate <= 0:
        return OptimizerSuggestion()

    target = lower_bracket(base.quotient, brackets)
    if target is None or target.rate <= 0 or target.up_to is None:
        return _lowest_bracket(marginal_rate)

    def reported_rate(amount: int) -> float:
        basis = capped_bracket_tax(
            taxable_income - amount, parts, base_parts, brackets, cap_per_half_part
        )[3]
        return basis.marginal_rate

    # At high the base quotient has reached the lower bracket
    low = 1
    high = math.ceil((base.quotient - target.up_to) * base_parts)
    while low < high:
        mid = (low + high) // 2
        if reported_rate(mid) < marginal_rate:
            high = mid
        else:
            low = mid + 1

    return _suggestion(high, marginal_rate, reported_rate(high))

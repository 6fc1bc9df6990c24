"""Corrections applied to the raw bracket tax.

Order matters and is fixed by the pipeline in impotsim.sdk.simulation:
quotient-familial capping, widowed complementary relief, décote, then user
credits and the recoverability floor.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..schemas import Situation
from .brackets import BracketTax, calc_bracket_tax
from .schemas import DecoteParameters, DecoteRules, TaxBracket


@dataclass(frozen=True)
class CapResult:
    """Outcome of quotient-familial capping.

    Attributes:
        tax: Tax after capping
        was_capped: True when the part advantage exceeded its ceiling
        advantage_ceiling: (parts - base parts) x 2 x per-half-part cap
        advantage_granted: Base-part tax minus tax after capping
    """
    tax: float
    was_capped: bool
    advantage_ceiling: float
    advantage_granted: float


def apply_quotient_cap(
    actual_tax: float,
    base_tax: float,
    parts: float,
    base_parts: float,
    cap_per_half_part: float,
) -> CapResult:
    """Bound the tax advantage of parts beyond the base part count.

    Args:
        actual_tax: Bracket tax at the household's actual parts
        base_tax: Bracket tax at the base part count
        parts: Actual part count
        base_parts: Capping reference part count
        cap_per_half_part: Maximum advantage per half part

    Returns:
        CapResult; the tax is raised to base_tax - ceiling when the actual
        tax falls below it
    """
    if parts <= base_parts:
        return CapResult(
            tax=actual_tax,
            was_capped=False,
            advantage_ceiling=0.0,
            advantage_granted=max(0.0, base_tax - actual_tax),
        )

    advantage_ceiling = (parts - base_parts) * 2 * cap_per_half_part
    reference_floor = max(0.0, base_tax - advantage_ceiling)

    if actual_tax < reference_floor:
        return CapResult(
            tax=reference_floor,
            was_capped=True,
            advantage_ceiling=advantage_ceiling,
            advantage_granted=base_tax - reference_floor,
        )

    return CapResult(
        tax=actual_tax,
        was_capped=False,
        advantage_ceiling=advantage_ceiling,
        advantage_granted=max(0.0, base_tax - actual_tax),
    )


def capped_bracket_tax(
    taxable_income: float,
    parts: float,
    base_parts: float,
    brackets: Sequence[TaxBracket],
    cap_per_half_part: float,
) -> Tuple[BracketTax, BracketTax, CapResult, BracketTax]:
    """Bracket tax at the actual and base part counts, and the capping between them.

    Returns:
        Tuple of (actual, base, cap, basis). basis is the computation the
        result reports from: base when capping applied, actual otherwise.
    """
    actual = calc_bracket_tax(taxable_income, parts, brackets)
    base = calc_bracket_tax(taxable_income, base_parts, brackets)
    cap = apply_quotient_cap(actual.tax, base.tax, parts, base_parts, cap_per_half_part)
    basis = base if cap.was_capped else actual
    return actual, base, cap, basis


def apply_widow_relief(
    situation: Situation,
    was_capped: bool,
    capped_tax: float,
    uncapped_tax: float,
    relief_cap: float,
) -> tuple:
    """Complementary relief for widowed households whose capping triggered.

    The relief gives back part of what capping took: the difference between
    the capped tax and the true actual-parts tax, limited to relief_cap and
    floored to the unit.

    Returns:
        Tuple of (tax after relief, relief amount)
    """
    if situation != "widowed" or not was_capped:
        return capped_tax, 0

    relief = math.floor(min(capped_tax - uncapped_tax, relief_cap))
    relief = max(0, relief)
    return capped_tax - relief, relief


def decote_parameters(situation: Situation, rules: DecoteRules) -> DecoteParameters:
    """Couple parameters for married households, single ones otherwise.

    Widowed households always use the single set, whatever their parts.
    """
    return rules.couple if situation == "married" else rules.single


def calc_decote(tax: float, situation: Situation, rules: DecoteRules) -> float:
    """Low-income relief amount for a tax figure.

    No relief on a zero tax or on a tax at or above the threshold. Otherwise
    max_relief - rate x tax, never negative and never more than the tax.
    """
    params = decote_parameters(situation, rules)
    if tax <= 0 or tax >= params.threshold:
        return 0.0
    relief = max(0.0, params.max_relief - tax * rules.rate)
    return min(relief, tax)


def round_to_unit(amount: float) -> int:
    """Round to nearest unit (0.50+ rounds up)."""
    return int(amount + 0.5) if amount >= 0 else int(amount - 0.5)


def apply_credits(tax: float, credits: float, recoverability_threshold: float) -> int:
    """Subtract declared credits and apply the recoverability floor.

    The net amount is floored at 0 and rounded to the unit. A positive
    amount below the recoverability threshold is not collected.
    """
    net = round_to_unit(max(0.0, tax - credits))
    if 0 < net < recoverability_threshold:
        return 0
    return net

"""High-income contribution (contribution exceptionnelle sur les hauts revenus)."""

import math
from typing import Sequence

from ..schemas import Situation
from .reliefs import round_to_unit
from .schemas import SurtaxBand, SurtaxRules


def surtax_bands(situation: Situation, rules: SurtaxRules) -> Sequence[SurtaxBand]:
    """Couple table for married households; widowed use the single table."""
    return rules.couple if situation == "married" else rules.single


def calc_surtax(reference_income: float, situation: Situation, rules: SurtaxRules) -> int:
    """Surtax on reference income, summed over every band it reaches.

    The surtax is independent of décote and user credits; the pipeline adds
    it after the recoverability floor.
    """
    surtax = 0.0
    for band in surtax_bands(situation, rules):
        if reference_income <= band.over:
            continue
        upper = math.inf if band.up_to is None else band.up_to
        surtax += (min(reference_income, upper) - band.over) * band.rate
    return round_to_unit(surtax)

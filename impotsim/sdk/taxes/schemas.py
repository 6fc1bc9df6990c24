"""Pydantic schemas for tax rules validation.

These schemas validate the tax_rules/*.yaml files and provide typed access
to year-specific parameters: the progressive rate table, the standard
deduction, quotient-familial capping, décote, and surtax tables.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaxBracket(BaseModel):
    """Single entry of the progressive rate table."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[float] = Field(default=None, gt=0, description="Upper bound (None for the terminal bracket)")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")
    label: Optional[str] = Field(default=None, description="Display label (defaults to the rate as a percentage)")

    @property
    def display_label(self) -> str:
        return self.label or f"{self.rate:.0%}"


class StandardDeductionRules(BaseModel):
    """Flat professional-expense deduction (10% with floor and ceiling)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    rate: float = Field(..., ge=0, le=1)
    floor: float = Field(..., ge=0)
    ceiling: float = Field(..., ge=0)


class DecoteParameters(BaseModel):
    """Décote threshold and maximum relief for one household type."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    threshold: float = Field(..., ge=0, description="Relief applies strictly below this tax amount")
    max_relief: float = Field(..., ge=0, description="Relief granted on a zero tax")


class DecoteRules(BaseModel):
    """Low-income relief rules (single and couple parameter sets)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    rate: float = Field(..., ge=0, description="Phase-out rate applied to the tax")
    single: DecoteParameters
    couple: DecoteParameters


class SurtaxBand(BaseModel):
    """One band of the high-income contribution."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    over: float = Field(..., ge=0, description="Lower bound of reference income")
    up_to: Optional[float] = Field(default=None, description="Upper bound (None if unbounded)")
    rate: float = Field(..., ge=0, le=1)


class SurtaxRules(BaseModel):
    """High-income contribution tables keyed by household type."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    single: list[SurtaxBand]
    couple: list[SurtaxBand]


class TaxRules(BaseModel):
    """Complete tax rules for a year."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    year: int
    brackets: list[TaxBracket] = Field(..., min_length=1)
    standard_deduction: StandardDeductionRules
    quotient_cap_per_half_part: float = Field(..., ge=0)
    widow_relief_cap: float = Field(..., ge=0)
    decote: DecoteRules
    surtax: SurtaxRules
    recoverability_threshold: float = Field(..., ge=0)
    reference_income_rate: float = Field(default=0.9, ge=0, le=1)

    @model_validator(mode="after")
    def check_bracket_order(self) -> "TaxRules":
        """Brackets must ascend, and only the last one may be unbounded."""
        previous = 0.0
        for i, bracket in enumerate(self.brackets):
            is_last = i == len(self.brackets) - 1
            if bracket.up_to is None:
                if not is_last:
                    raise ValueError(f"Only the last bracket may be unbounded (bracket {i})")
                continue
            if bracket.up_to <= previous:
                raise ValueError(
                    f"Bracket bounds must be ascending: {bracket.up_to} after {previous}"
                )
            previous = bracket.up_to
        if self.brackets[-1].up_to is not None:
            raise ValueError("The last bracket must be unbounded (up_to: null)")
        return self

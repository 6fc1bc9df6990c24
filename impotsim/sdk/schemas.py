"""Pydantic schemas for simulation inputs and results.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in input files cause clear errors rather than silent ignoring.
They are also frozen: a TaxInputs or SimulationResult is created once
per simulation run and never mutated afterwards. Input amounts must be
finite; infinity and NaN are rejected like negative values.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Situation = Literal["single", "married", "widowed"]

# Labels used by the original web form
SITUATION_ALIASES = {
    "célibataire": "single",
    "celibataire": "single",
    "couple": "married",
    "marié": "married",
    "marie": "married",
    "veuf": "widowed",
    "veuve": "widowed",
}


# =============================================================================
# Inputs
# =============================================================================


class DeclarantInputs(BaseModel):
    """Income and retirement-savings figures for one declarant."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    gross_salary: float = Field(default=0, ge=0, description="Annual gross salary")
    declared_professional_expenses: float = Field(
        default=0, ge=0,
        description="Actual professional expenses (frais réels). 0 means use the standard deduction.",
    )
    treat_gross_as_taxable: bool = Field(
        default=False,
        description="Salary is already net taxable; skip the professional deduction.",
    )
    retirement_contribution: float = Field(
        default=0, ge=0, description="Voluntary retirement savings (PER) paid in",
    )
    retirement_contribution_ceiling: float = Field(
        default=0, ge=0, description="Deductible PER ceiling for this declarant",
    )


class TaxInputs(BaseModel):
    """Household situation for one simulation run."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    situation: Situation = Field(default="single", description="Marital situation")
    dependent_count: int = Field(default=0, ge=0, description="Number of dependent children")
    declarant1: DeclarantInputs = Field(default_factory=DeclarantInputs)
    declarant2: DeclarantInputs = Field(
        default_factory=DeclarantInputs,
        description="Second declarant. Ignored unless situation is 'married'.",
    )
    common_deductible_charges: float = Field(
        default=0, ge=0, description="Household charges deducted once from total income",
    )
    declared_tax_credits: float = Field(
        default=0, ge=0, description="Tax reductions/credits subtracted after décote",
    )

    @field_validator("situation", mode="before")
    @classmethod
    def normalize_situation(cls, v):
        """Accept French labels and any casing."""
        if isinstance(v, str):
            key = v.strip().lower()
            return SITUATION_ALIASES.get(key, key)
        return v

    def active_declarant2(self) -> Optional[DeclarantInputs]:
        """Declarant 2 when the household files jointly, else None."""
        if self.situation == "married":
            return self.declarant2
        return None

    @classmethod
    def default(cls) -> "TaxInputs":
        """The simulator's starting form values."""
        return cls(
            situation="single",
            dependent_count=0,
            declarant1=DeclarantInputs(gross_salary=24000, retirement_contribution_ceiling=3500),
            declarant2=DeclarantInputs(retirement_contribution_ceiling=3500),
        )


# =============================================================================
# Result
# =============================================================================


class BracketShare(BaseModel):
    """Portion of the per-part quotient taxed at one rate."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rate_label: str
    rate: float
    amount_taxed_at_this_rate: float


class WithholdingRates(BaseModel):
    """Withholding (prélèvement à la source) rates as fractions of gross salary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    household: float = 0
    declarant1: float = 0
    declarant2: float = 0


class CappingDetail(BaseModel):
    """Quotient-familial capping and widowed complementary relief."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    was_capped: bool = False
    advantage_granted: float = Field(default=0, description="Tax saved by parts beyond the base count")
    advantage_ceiling: float = Field(default=0, description="Legal ceiling on that saving")
    reference_tax_base: float = Field(default=0, description="Tax after capping (droits simples)")
    widow_relief: float = 0
    tax_before_widow_relief: float = 0


class DecoteDetail(BaseModel):
    """Low-income relief."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount_applied: float = 0
    tax_before_decote: float = 0


class RetirementCapWarnings(BaseModel):
    """Set when a declared PER contribution exceeds its deductible ceiling."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    declarant1_exceeded: bool = False
    declarant2_exceeded: bool = False


class OptimizerSuggestion(BaseModel):
    """Contribution needed to drop one marginal bracket."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount_to_invest: float = 0
    estimated_saving: float = 0
    target_rate: Optional[float] = Field(default=None, description="Marginal rate after investing")
    explanation: str = ""

    @property
    def available(self) -> bool:
        return self.amount_to_invest > 0


class DeclarantAmounts(BaseModel):
    """Per-declarant amounts (deductions applied)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    declarant1: float = 0
    declarant2: float = 0


class SimulationResult(BaseModel):
    """Everything derived from one TaxInputs under one year's rules."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    situation: Situation
    gross_income: float = Field(..., ge=0)
    taxable_income: float = Field(..., ge=0)
    reference_income: float = Field(..., ge=0)
    fiscal_parts: float = Field(..., ge=1)
    base_parts: float = Field(..., ge=1, description="Part count used as the capping reference")
    quotient: float = Field(..., ge=0)
    quotient_parts: float = Field(
        ..., ge=1, description="Parts behind quotient and breakdown (base parts when capped)",
    )
    gross_tax_before_relief: float = Field(..., ge=0)
    final_tax: float = Field(..., ge=0)
    surtax: float = Field(..., ge=0)
    total_tax: float = Field(..., ge=0)
    marginal_rate: float = Field(..., ge=0)
    withholding_rates: WithholdingRates
    bracket_breakdown: List[BracketShare] = Field(..., min_length=1)
    capping: CappingDetail
    decote: DecoteDetail
    retirement_cap_warnings: RetirementCapWarnings
    optimizer_suggestion: OptimizerSuggestion
    deductions: DeclarantAmounts
    retirement_deductions: DeclarantAmounts
    narrative_trace: List[str] = Field(default_factory=list)

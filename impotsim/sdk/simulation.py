"""Income tax simulation pipeline.

compute_tax() is a pure function from TaxInputs and one year's TaxRules to
a SimulationResult. Stages run in a fixed order, each consuming the
previous stage's output:

    deductions + PER caps -> taxable income -> fiscal parts
    -> bracket tax (actual parts, and base parts for the capping reference)
    -> quotient-familial capping -> widowed relief -> décote
    -> user credits -> recoverability floor -> + surtax

Withholding rates and the PER suggestion are derived from intermediate
values. Nothing is cached and no state is shared between calls.
"""

from typing import List, Optional, Union

from .schemas import (
    BracketShare,
    CappingDetail,
    DeclarantAmounts,
    DecoteDetail,
    RetirementCapWarnings,
    SimulationResult,
    TaxInputs,
)
from .taxes.income import (
    calc_capping_base_parts,
    calc_fiscal_parts,
    calc_professional_deduction,
    calc_reference_income,
    calc_taxable_income,
    cap_retirement_contribution,
)
from .taxes.optimizer import suggest_capped_contribution, suggest_retirement_contribution
from .taxes.reliefs import apply_credits, apply_widow_relief, calc_decote, capped_bracket_tax
from .taxes.rules import load_tax_rules, resolve_year
from .taxes.schemas import TaxRules
from .taxes.surtax import calc_surtax
from .taxes.withholding import allocate_withholding_rates


def _money(amount: float) -> str:
    return f"{amount:,.0f}"


def compute_tax(inputs: TaxInputs, rules: TaxRules) -> SimulationResult:
    """Compute a household's income tax under one year's rules.

    Args:
        inputs: Validated household inputs
        rules: Tax rules for the year

    Returns:
        SimulationResult with the tax breakdown and a narrative trace
    """
    trace: List[str] = []
    situation = inputs.situation
    d1 = inputs.declarant1
    d2 = inputs.active_declarant2()

    # 1. Professional deductions and PER caps
    deduction1 = calc_professional_deduction(
        d1.gross_salary, d1.declared_professional_expenses, d1.treat_gross_as_taxable,
        rules.standard_deduction,
    )
    per1, per1_exceeded = cap_retirement_contribution(
        d1.retirement_contribution, d1.retirement_contribution_ceiling
    )
    salary1 = d1.gross_salary

    if d2 is not None:
        deduction2 = calc_professional_deduction(
            d2.gross_salary, d2.declared_professional_expenses, d2.treat_gross_as_taxable,
            rules.standard_deduction,
        )
        per2, per2_exceeded = cap_retirement_contribution(
            d2.retirement_contribution, d2.retirement_contribution_ceiling
        )
        salary2 = d2.gross_salary
    else:
        deduction2, per2, per2_exceeded, salary2 = 0.0, 0.0, False, 0.0

    net1 = salary1 - deduction1 - per1
    net2 = salary2 - deduction2 - per2

    # 2. Taxable and reference income
    taxable_income = calc_taxable_income([net1, net2], inputs.common_deductible_charges)
    reference_income = calc_reference_income([salary1, salary2], rules.reference_income_rate)
    trace.append(f"Gross salaries: {_money(salary1 + salary2)}")
    trace.append(f"Professional deductions: -{_money(deduction1 + deduction2)}")
    if per1 or per2:
        trace.append(f"Retirement savings deduction: -{_money(per1 + per2)}")
    if per1_exceeded or per2_exceeded:
        trace.append("Retirement contributions above their ceiling were not deducted")
    if inputs.common_deductible_charges:
        trace.append(f"Common deductible charges: -{_money(inputs.common_deductible_charges)}")
    trace.append(f"Net taxable income: {_money(taxable_income)}")

    # 3. Fiscal parts
    parts = calc_fiscal_parts(situation, inputs.dependent_count)
    base_parts = calc_capping_base_parts(situation)
    trace.append(f"Fiscal parts: {parts:g} (capping reference: {base_parts:g})")

    # 4. Bracket tax at actual and base parts, 5. quotient-familial capping
    actual, base, cap, basis = capped_bracket_tax(
        taxable_income, parts, base_parts, rules.brackets, rules.quotient_cap_per_half_part
    )
    trace.append(f"Quotient: {_money(actual.quotient)} per part")
    trace.append(f"Gross tax at {parts:g} parts: {_money(actual.tax)}")
    if cap.was_capped:
        trace.append(
            f"Family quotient advantage capped at {_money(cap.advantage_ceiling)}: "
            f"tax raised to {_money(cap.tax)} (tax at {base_parts:g} part(s): {_money(base.tax)})"
        )

    # 6. Widowed complementary relief
    tax_after_widow, widow_relief = apply_widow_relief(
        situation, cap.was_capped, cap.tax, actual.tax, rules.widow_relief_cap
    )
    if widow_relief:
        trace.append(f"Widowed complementary relief: -{_money(widow_relief)}")

    # 7. Décote
    decote = calc_decote(tax_after_widow, situation, rules.decote)
    tax_after_decote = max(0.0, tax_after_widow - decote)
    if decote > 0:
        trace.append(f"Décote: -{_money(decote)}")

    # 8. Credits and recoverability floor
    final_tax = apply_credits(
        tax_after_decote, inputs.declared_tax_credits, rules.recoverability_threshold
    )
    if inputs.declared_tax_credits:
        trace.append(f"Declared credits and reductions: -{_money(inputs.declared_tax_credits)}")
    if tax_after_decote - inputs.declared_tax_credits > 0 and final_tax == 0:
        trace.append(
            f"Tax below the {_money(rules.recoverability_threshold)} recoverability threshold is not collected"
        )
    trace.append(f"Net income tax: {_money(final_tax)}")

    # 9. Surtax, on top of everything
    surtax = calc_surtax(reference_income, situation, rules.surtax)
    if surtax:
        trace.append(
            f"High-income contribution on reference income {_money(reference_income)}: +{_money(surtax)}"
        )
    total_tax = final_tax + surtax
    trace.append(f"Total tax: {_money(total_tax)}")

    # 10. Withholding rates and PER suggestion
    withholding = allocate_withholding_rates(
        situation,
        tax_after_decote,
        (salary1, salary2),
        (max(0.0, net1), max(0.0, net2)),
        parts,
        rules.brackets,
        rules.decote,
    )
    if cap.was_capped:
        suggestion = suggest_capped_contribution(
            taxable_income, parts, base_parts, rules.brackets, rules.quotient_cap_per_half_part
        )
    else:
        suggestion = suggest_retirement_contribution(
            basis.marginal_rate, basis.quotient, basis.parts, rules.brackets
        )

    return SimulationResult(
        year=rules.year,
        situation=situation,
        gross_income=salary1 + salary2,
        taxable_income=taxable_income,
        reference_income=reference_income,
        fiscal_parts=parts,
        base_parts=base_parts,
        quotient=basis.quotient,
        quotient_parts=basis.parts,
        gross_tax_before_relief=actual.tax,
        final_tax=final_tax,
        surtax=surtax,
        total_tax=total_tax,
        marginal_rate=basis.marginal_rate,
        withholding_rates=withholding,
        bracket_breakdown=[
            BracketShare(rate_label=label, rate=rate, amount_taxed_at_this_rate=amount)
            for label, rate, amount in basis.breakdown
        ],
        capping=CappingDetail(
            was_capped=cap.was_capped,
            advantage_granted=cap.advantage_granted,
            advantage_ceiling=cap.advantage_ceiling,
            reference_tax_base=cap.tax,
            widow_relief=widow_relief,
            tax_before_widow_relief=cap.tax,
        ),
        decote=DecoteDetail(amount_applied=decote, tax_before_decote=tax_after_widow),
        retirement_cap_warnings=RetirementCapWarnings(
            declarant1_exceeded=per1_exceeded, declarant2_exceeded=per2_exceeded
        ),
        optimizer_suggestion=suggestion,
        deductions=DeclarantAmounts(declarant1=deduction1, declarant2=deduction2),
        retirement_deductions=DeclarantAmounts(declarant1=per1, declarant2=per2),
        narrative_trace=trace,
    )


def run_simulation(
    inputs: TaxInputs,
    year: Optional[Union[int, str]] = None,
    tax_rules: Optional[TaxRules] = None,
) -> SimulationResult:
    """Load the year's rules (unless given) and compute the tax.

    Args:
        inputs: Household inputs
        year: Tax year; defaults to the configured or latest available year
        tax_rules: Optional pre-loaded rules (takes precedence over year)

    Raises:
        FileNotFoundError: If no rules exist for the year
        TaxRulesError: If the rules file is invalid
    """
    if tax_rules is None:
        tax_rules = load_tax_rules(resolve_year(year))
    return compute_tax(inputs, tax_rules)

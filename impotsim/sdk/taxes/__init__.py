"""taxes - Year-specific rules and the stages of the tax computation.

Scope:
- Tax rules loading and validation (tax_rules/{year}.yaml)
- Professional deductions, PER caps, fiscal parts
- Progressive bracket tax on the family quotient
- Quotient-familial capping, widowed relief, décote, recoverability floor
- High-income surtax
- Withholding-rate allocation and PER optimizer

Constraints:
- Pure calculation - no I/O except loading rules files
- Every stage takes its rules slice as an argument; no module constants

Usage:
    from impotsim.sdk.taxes import load_tax_rules, calc_bracket_tax

    rules = load_tax_rules(2025)
    tax = calc_bracket_tax(72000, 2.5, rules.brackets)
"""

from .schemas import TaxRules, TaxBracket

from .rules import (
    TaxRulesError,
    get_tax_rules_dir,
    get_available_years,
    load_tax_rules,
    resolve_year,
    rules_from_dict,
)

from .income import (
    calc_professional_deduction,
    cap_retirement_contribution,
    calc_taxable_income,
    calc_reference_income,
    calc_fiscal_parts,
    calc_capping_base_parts,
)

from .brackets import BracketTax, calc_bracket_tax

from .reliefs import (
    CapResult,
    apply_quotient_cap,
    capped_bracket_tax,
    apply_widow_relief,
    calc_decote,
    apply_credits,
)

from .surtax import calc_surtax
from .withholding import allocate_withholding_rates
from .optimizer import suggest_capped_contribution, suggest_retirement_contribution

__all__ = [
    # Rules
    "TaxRules",
    "TaxBracket",
    "TaxRulesError",
    "get_tax_rules_dir",
    "get_available_years",
    "load_tax_rules",
    "resolve_year",
    "rules_from_dict",
    # Income
    "calc_professional_deduction",
    "cap_retirement_contribution",
    "calc_taxable_income",
    "calc_reference_income",
    "calc_fiscal_parts",
    "calc_capping_base_parts",
    # Brackets
    "BracketTax",
    "calc_bracket_tax",
    # Reliefs
    "CapResult",
    "apply_quotient_cap",
    "capped_bracket_tax",
    "apply_widow_relief",
    "calc_decote",
    "apply_credits",
    # Surtax, withholding, optimizer
    "calc_surtax",
    "allocate_withholding_rates",
    "suggest_retirement_contribution",
    "suggest_capped_contribution",
]

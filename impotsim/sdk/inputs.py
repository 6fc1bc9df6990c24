"""Loading simulation inputs from files and flat form mappings."""

import json
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .schemas import DeclarantInputs, TaxInputs


# Flat field names of the web form -> DeclarantInputs fields
_DECLARANT_FIELDS = {
    "salary": "gross_salary",
    "realExpenses": "declared_professional_expenses",
    "treatAsRNI": "treat_gross_as_taxable",
    "per": "retirement_contribution",
    "perCeiling": "retirement_contribution_ceiling",
}

_HOUSEHOLD_FIELDS = {
    "situation": "situation",
    "children": "dependent_count",
    "commonCharges": "common_deductible_charges",
    "reduction": "declared_tax_credits",
}


def inputs_from_flat(data: Mapping[str, Any]) -> TaxInputs:
    """Build TaxInputs from the form's flat field names.

    Accepts keys such as salary1, realExpenses1, treatAsRNI1, per1,
    perCeiling1 (and the same with suffix 2), children, commonCharges and
    reduction. Unknown keys are rejected by validation.

    Raises:
        pydantic.ValidationError: If a value is invalid or a key unknown
    """
    household: dict = {}
    declarants: dict = {"declarant1": {}, "declarant2": {}}

    for key, value in data.items():
        if key in _HOUSEHOLD_FIELDS:
            household[_HOUSEHOLD_FIELDS[key]] = value
            continue
        prefix, suffix = key[:-1], key[-1:]
        if suffix in ("1", "2") and prefix in _DECLARANT_FIELDS:
            declarants[f"declarant{suffix}"][_DECLARANT_FIELDS[prefix]] = value
            continue
        # Let validation report it
        household[key] = value

    return TaxInputs.model_validate({
        **household,
        "declarant1": DeclarantInputs.model_validate(declarants["declarant1"]),
        "declarant2": DeclarantInputs.model_validate(declarants["declarant2"]),
    })


def load_inputs_file(path: Union[str, Path]) -> TaxInputs:
    """Load TaxInputs from a YAML or JSON file.

    Both the nested schema (declarant1: {gross_salary: ...}) and the flat
    form layout (salary1: ...) are accepted.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a mapping
        pydantic.ValidationError: If the contents are invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Inputs file not found: {path}")

    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Inputs file must contain a mapping: {path}")

    if any(key in data for key in ("declarant1", "declarant2", "dependent_count")):
        return TaxInputs.model_validate(data)
    return inputs_from_flat(data)

"""Tax rules loading.

Rules are versioned per tax year and stored as impotsim/tax_rules/YYYY.yaml.
They are validated into a frozen TaxRules model and injected into the
engine, so nothing in the computation depends on module-level constants.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .schemas import TaxRules

logger = logging.getLogger(__name__)


class TaxRulesError(Exception):
    """Raised when a tax rules file cannot be parsed or validated."""
    pass


def get_tax_rules_dir() -> Path:
    """Get the tax_rules directory path."""
    package_root = Path(__file__).parent.parent.parent  # taxes -> sdk -> impotsim
    return package_root / "tax_rules"


def get_available_years() -> list[int]:
    """Get sorted list of available tax rule years (descending)."""
    rules_dir = get_tax_rules_dir()
    years = [int(p.stem) for p in rules_dir.glob("*.yaml") if p.stem.isdigit()]
    return sorted(years, reverse=True)


def rules_from_dict(data: dict) -> TaxRules:
    """Validate a rules mapping (from YAML or built in code) into TaxRules.

    Raises:
        TaxRulesError: If the mapping does not satisfy the schema
    """
    try:
        return TaxRules.model_validate(data)
    except ValidationError as e:
        raise TaxRulesError(f"Invalid tax rules: {e}") from e


@lru_cache(maxsize=None)
def load_tax_rules(year: Union[int, str]) -> TaxRules:
    """Load tax rules for a specific year from tax_rules/YYYY.yaml.

    Args:
        year: Tax year (e.g., 2025 or "2025")

    Returns:
        Validated, immutable TaxRules

    Raises:
        FileNotFoundError: If no rules file exists for the year
        TaxRulesError: If the file is not valid YAML or fails validation
    """
    config_file = get_tax_rules_dir() / f"{year}.yaml"
    if not config_file.exists():
        available = ", ".join(str(y) for y in get_available_years())
        raise FileNotFoundError(
            f"Tax rules file not found for year {year}: {config_file} (available: {available})"
        )

    logger.debug("Loading tax rules from %s", config_file)
    with open(config_file, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise TaxRulesError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise TaxRulesError(f"Tax rules file is empty or not a mapping: {config_file}")

    rules = rules_from_dict(data)
    if rules.year != int(year):
        raise TaxRulesError(
            f"Tax rules file {config_file.name} declares year {rules.year}"
        )
    return rules


def resolve_year(year: Optional[Union[int, str]] = None) -> int:
    """Pick the tax year to simulate.

    Resolution order:
    1. Explicit year argument
    2. settings.json "default_year"
    3. Latest year with a rules file

    Raises:
        FileNotFoundError: If no rules files are installed at all
    """
    if year is not None:
        return int(year)

    from ..config import get_setting

    default_year = get_setting("default_year")
    if default_year is not None:
        return int(default_year)

    available = get_available_years()
    if not available:
        raise FileNotFoundError(f"No tax rules found in {get_tax_rules_dir()}")
    return available[0]

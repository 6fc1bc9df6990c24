"""Impot Sim SDK - Core functionality for income tax simulation."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    clear_setting,
)

from .schemas import (
    DeclarantInputs,
    TaxInputs,
    SimulationResult,
)

from .simulation import (
    compute_tax,
    run_simulation,
)

from .inputs import (
    inputs_from_flat,
    load_inputs_file,
)

from .report import (
    result_to_dict,
    result_to_csv_string,
    write_result_csv,
    format_result_text,
)

from .taxes import (
    TaxRules,
    TaxRulesError,
    get_available_years,
    load_tax_rules,
    resolve_year,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "clear_setting",
    # Schemas
    "DeclarantInputs",
    "TaxInputs",
    "SimulationResult",
    # Simulation
    "compute_tax",
    "run_simulation",
    # Inputs
    "inputs_from_flat",
    "load_inputs_file",
    # Export
    "result_to_dict",
    "result_to_csv_string",
    "write_result_csv",
    "format_result_text",
    # Rules
    "TaxRules",
    "TaxRulesError",
    "get_available_years",
    "load_tax_rules",
    "resolve_year",
]

"""Impot Sim CLI - Command-line interface for income tax simulation."""

import json

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from impotsim import __version__
from impotsim.sdk import (
    TaxInputs,
    TaxRulesError,
    format_result_text,
    get_available_years,
    get_setting,
    load_inputs_file,
    load_tax_rules,
    resolve_year,
    result_to_csv_string,
    result_to_dict,
    run_simulation,
)
from impotsim.sdk.config import OUTPUT_FORMATS

from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="impot-sim")
def cli():
    """Impot Sim - Household income tax simulator.

    Computes income tax with family quotient, quotient capping,
    widowed relief, décote, and the high-income contribution.

    Tax rules are versioned per year. Settings are loaded from (in order):

    \b
    1. IMPOT_SIM_CONFIG_PATH environment variable
    2. ~/.config/impot-sim/settings.json (XDG default)

    Run 'impot-sim rules list' to see the available tax years.
    """
    pass


cli.add_command(settings_group)


# (option name, TaxInputs path) for every per-field override
_DECLARANT_OPTIONS = {
    "salary": "gross_salary",
    "expenses": "declared_professional_expenses",
    "gross_is_taxable": "treat_gross_as_taxable",
    "per": "retirement_contribution",
    "per_ceiling": "retirement_contribution_ceiling",
}


def _input_options(func):
    """Attach the household input options shared by simulate and optimize."""
    options = [
        click.option("--inputs", "inputs_file", type=click.Path(exists=True, dir_okay=False),
                     help="YAML or JSON file with the household inputs."),
        click.option("--situation", type=click.Choice(["single", "married", "widowed"]),
                     help="Marital situation (default: single)."),
        click.option("--dependents", type=click.IntRange(min=0), help="Number of dependent children."),
        click.option("--charges", type=click.FloatRange(min=0), help="Common deductible charges."),
        click.option("--credits", type=click.FloatRange(min=0), help="Declared tax reductions and credits."),
    ]
    for n in ("1", "2"):
        options += [
            click.option(f"--salary{n}", type=click.FloatRange(min=0), help=f"Declarant {n} gross salary."),
            click.option(f"--expenses{n}", type=click.FloatRange(min=0),
                         help=f"Declarant {n} actual professional expenses (0 = standard deduction)."),
            click.option(f"--gross-is-taxable{n}", is_flag=True,
                         help=f"Declarant {n} salary is already net taxable."),
            click.option(f"--per{n}", type=click.FloatRange(min=0), help=f"Declarant {n} PER contribution."),
            click.option(f"--per-ceiling{n}", type=click.FloatRange(min=0),
                         help=f"Declarant {n} deductible PER ceiling."),
        ]
    for option in reversed(options):
        func = option(func)
    return func


def build_inputs(inputs_file=None, **overrides) -> TaxInputs:
    """Merge an optional inputs file with command-line overrides.

    Raises:
        click.ClickException: If the inputs are invalid
    """
    try:
        base = load_inputs_file(inputs_file) if inputs_file else TaxInputs()
    except (ValidationError, ValueError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Invalid inputs file: {e}")

    data = base.model_dump()
    household_options = {
        "situation": "situation",
        "dependents": "dependent_count",
        "charges": "common_deductible_charges",
        "credits": "declared_tax_credits",
    }
    for option, field in household_options.items():
        if overrides.get(option) is not None:
            data[field] = overrides[option]
    for n in ("1", "2"):
        for option, field in _DECLARANT_OPTIONS.items():
            value = overrides.get(f"{option}{n}")
            if option == "gross_is_taxable" and not value:
                # Flags can only switch the bypass on
                continue
            if value is not None:
                data[f"declarant{n}"][field] = value

    try:
        return TaxInputs.model_validate(data)
    except ValidationError as e:
        raise click.ClickException(f"Invalid inputs: {e}")


def _simulate(year, inputs: TaxInputs):
    """Run a simulation, converting SDK errors to CLI errors."""
    try:
        return run_simulation(inputs, year=year)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except TaxRulesError as e:
        raise click.ClickException(f"Invalid tax rules: {e}")


@cli.command("simulate")
@_input_options
@click.option("--year", type=int, default=None, help="Tax year (default: settings or latest).")
@click.option("--format", "output_format", type=click.Choice(list(OUTPUT_FORMATS)), default=None,
              help="Output format (default: settings or text).")
@click.option("--trace", is_flag=True, help="Print the computation steps (stderr, or a panel with --format rich).")
def simulate(year, output_format, trace, inputs_file, **overrides):
    """Compute a household's income tax.

    Inputs come from --inputs FILE (YAML or JSON), from options, or
    both (options override the file).

    \b
    Output formats:
      --format=text  ASCII tables (default, for terminal viewing)
      --format=rich  Rich tables
      --format=json  JSON object with every result field
      --format=csv   Line-itemized CSV (for spreadsheet import)

    Examples:

    \b
      impot-sim simulate --salary1 24000
      impot-sim simulate --situation married --dependents 1 --salary1 45000 --salary2 35000
      impot-sim simulate --inputs household.yaml --format json
    """
    inputs = build_inputs(inputs_file, **overrides)
    result = _simulate(year, inputs)

    if output_format is None:
        output_format = get_setting("default_output_format", "text")

    if output_format == "json":
        click.echo(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
    elif output_format == "csv":
        click.echo(result_to_csv_string(result), nl=False)
    elif output_format == "rich":
        from .renderers.result_renderer import render_result
        render_result(Console(), result, show_trace=trace)
    else:
        click.echo(format_result_text(result))

    # Rich output renders the trace as its own panel
    if trace and output_format != "rich":
        click.echo("\n--- Trace ---", err=True)
        for step in result.narrative_trace:
            click.echo(f"  {step}", err=True)


@cli.command("optimize")
@_input_options
@click.option("--year", type=int, default=None, help="Tax year (default: settings or latest).")
def optimize(year, inputs_file, **overrides):
    """Show the PER contribution that drops one marginal bracket."""
    inputs = build_inputs(inputs_file, **overrides)
    result = _simulate(year, inputs)
    suggestion = result.optimizer_suggestion

    click.echo(f"Marginal rate:     {result.marginal_rate:.0%}")
    if not suggestion.available:
        click.echo(suggestion.explanation or "No taxable income: nothing to optimize.")
        return
    click.echo(f"Amount to invest:  {suggestion.amount_to_invest:,.0f}")
    click.echo(f"Estimated saving:  {suggestion.estimated_saving:,.0f}")
    click.echo(f"Rate after:        {suggestion.target_rate:.0%}")


@cli.group("rules")
def rules_group():
    """Tax rules by year.

    \b
    Commands:
      list  Years with a rules file
      show  Print one year's rules
    """
    pass


@rules_group.command("list")
def rules_list():
    """List available tax years (latest first)."""
    years = get_available_years()
    if not years:
        raise click.ClickException("No tax rules installed")
    default = resolve_year()
    for year in years:
        marker = " (default)" if year == default else ""
        click.echo(f"{year}{marker}")


@rules_group.command("show")
@click.argument("year", type=int)
@click.option("--format", "output_format", type=click.Choice(["yaml", "json"]), default="yaml",
              help="Output format (default: yaml)")
def rules_show(year, output_format):
    """Print the validated tax rules for YEAR."""
    try:
        rules = load_tax_rules(year)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except TaxRulesError as e:
        raise click.ClickException(f"Invalid tax rules: {e}")

    data = rules.model_dump(mode="json")
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

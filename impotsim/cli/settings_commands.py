"""Settings CLI commands for Impot Sim.

Manages settings.json - default tax year and output format.
"""

import click

from impotsim.sdk import (
    clear_setting,
    get_available_years,
    get_settings_path,
    load_settings,
    resolve_year,
    set_setting,
)
from impotsim.sdk.config import OUTPUT_FORMATS


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - default_year: tax year used when --year is not given
    - default_output_format: text, rich, json or csv
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective values:")
    click.echo(f"  year: {resolve_year()}")
    click.echo(f"  output format: {current.get('default_output_format', 'text')}")


@settings.command("default-year")
@click.argument("year", required=False, type=int)
@click.option("--clear", is_flag=True, help="Clear default_year, revert to the latest available year")
def settings_default_year(year, clear):
    """Set or clear the default tax year.

    Examples:
        impot-sim settings default-year 2024
        impot-sim settings default-year --clear
    """
    if clear:
        if clear_setting("default_year"):
            click.echo("Cleared default_year setting.")
        else:
            click.echo("default_year was not set.")
        click.echo(f"Default year is now: {resolve_year()}")
        return

    if year is None:
        click.echo(f"default_year: {resolve_year()}")
        return

    available = get_available_years()
    if year not in available:
        raise click.BadParameter(
            f"No tax rules for {year}. Available: {', '.join(str(y) for y in available)}"
        )

    set_setting("default_year", year)
    click.echo(f"Set default_year to {year}")


@settings.command("output-format")
@click.argument("output_format", type=click.Choice(list(OUTPUT_FORMATS)))
def settings_output_format(output_format):
    """Set the default output format for 'simulate'."""
    set_setting("default_output_format", output_format)
    click.echo(f"Set default_output_format to {output_format}")

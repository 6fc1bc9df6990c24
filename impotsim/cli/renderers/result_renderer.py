"""Rich renderer for simulation results.

Transforms a SimulationResult into formatted Rich tables.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from impotsim.sdk.schemas import SimulationResult


def _money(value: float) -> str:
    return f"{value:,.0f} €"


def render_result(console: Console, result: SimulationResult, show_trace: bool = False) -> None:
    """Render a simulation result as Rich tables.

    Args:
        console: Rich Console instance
        result: Output of compute_tax()
        show_trace: Also render the narrative trace
    """
    # Warnings first
    warnings = result.retirement_cap_warnings
    if warnings.declarant1_exceeded or warnings.declarant2_exceeded:
        console.print(Panel(
            "[yellow]Some PER contributions exceed their deductible ceiling. "
            "The excess is not deducted.[/yellow]",
            title="PER ceiling exceeded",
            border_style="yellow",
        ))
    if result.capping.was_capped:
        console.print(Panel(
            f"[yellow]Family quotient advantage capped at {_money(result.capping.advantage_ceiling)}.[/yellow]",
            title="Quotient capping",
            border_style="yellow",
        ))

    _render_summary(console, result)
    _render_brackets(console, result)
    _render_tax(console, result)
    _render_withholding(console, result)

    suggestion = result.optimizer_suggestion
    if suggestion.explanation:
        console.print(Panel(suggestion.explanation, title="Retirement savings", border_style="cyan"))

    if show_trace:
        console.print(Panel("\n".join(result.narrative_trace), title="Trace", border_style="dim"))


def _render_summary(console: Console, result: SimulationResult) -> None:
    """Render key figures."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")

    table.add_row("Net taxable income", _money(result.taxable_income))
    table.add_row("Fiscal parts", f"{result.fiscal_parts:g}")
    table.add_row("Quotient", _money(result.quotient))
    table.add_row("Marginal rate", f"[red]{result.marginal_rate:.0%}[/red]")
    table.add_row("Net income tax", _money(result.final_tax))
    table.add_row("[bold]Total[/bold]", f"[bold]{_money(result.total_tax)}[/bold]")

    console.print(Panel(table, title=f"Simulation {result.year}", border_style="blue"))


def _render_brackets(console: Console, result: SimulationResult) -> None:
    """Render the per-part bracket composition."""
    table = Table(title="Quotient by bracket", box=box.SIMPLE, header_style="bold")
    table.add_column("Bracket")
    table.add_column("Amount", justify="right")

    for share in result.bracket_breakdown:
        table.add_row(share.rate_label, _money(share.amount_taxed_at_this_rate))

    console.print(table)


def _render_tax(console: Console, result: SimulationResult) -> None:
    """Render the tax computation lines."""
    table = Table(title="Tax computation", box=box.SIMPLE, header_style="bold")
    table.add_column("Step")
    table.add_column("Amount", justify="right")

    table.add_row("Gross tax", _money(result.gross_tax_before_relief))
    if result.capping.was_capped:
        table.add_row("After quotient capping", _money(result.capping.reference_tax_base))
    if result.capping.widow_relief:
        table.add_row("Widowed relief", f"[green]- {_money(result.capping.widow_relief)}[/green]")
    if result.decote.amount_applied:
        table.add_row("Décote", f"[green]- {_money(result.decote.amount_applied)}[/green]")
    table.add_row("Net income tax", _money(result.final_tax))
    if result.surtax:
        table.add_row("High-income contribution", f"[red]+ {_money(result.surtax)}[/red]")
    table.add_row("[bold]Total[/bold]", f"[bold]{_money(result.total_tax)}[/bold]")

    console.print(table)


def _render_withholding(console: Console, result: SimulationResult) -> None:
    """Render withholding rates."""
    table = Table(title="Withholding rates", box=box.SIMPLE, header_style="bold")
    table.add_column("Household", justify="right")
    table.add_column("Declarant 1", justify="right")
    table.add_column("Declarant 2", justify="right")

    rates = result.withholding_rates
    table.add_row(f"{rates.household:.1%}", f"{rates.declarant1:.1%}", f"{rates.declarant2:.1%}")

    console.print(table)

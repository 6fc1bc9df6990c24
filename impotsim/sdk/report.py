"""Result export: JSON-ready dicts, CSV and plain-text reports."""

import csv
import io
from pathlib import Path

from .schemas import SimulationResult


SITUATION_LABELS = {
    "single": "Single",
    "married": "Married",
    "widowed": "Widowed",
}


def result_to_dict(result: SimulationResult) -> dict:
    """JSON-serializable dict of every result field."""
    return result.model_dump(mode="json")


def _write_result_rows(writer, result: SimulationResult) -> None:
    """Write line-itemized result rows to a CSV writer.

    Internal function used by both file and string CSV generation.
    """
    writer.writerow(["section", "item", "value"])

    writer.writerow(["income", "year", result.year])
    writer.writerow(["income", "situation", result.situation])
    writer.writerow(["income", "gross_income", f"{result.gross_income:.2f}"])
    writer.writerow(["income", "deduction_declarant1", f"{result.deductions.declarant1:.2f}"])
    writer.writerow(["income", "deduction_declarant2", f"{result.deductions.declarant2:.2f}"])
    writer.writerow(["income", "retirement_deduction_declarant1", f"{result.retirement_deductions.declarant1:.2f}"])
    writer.writerow(["income", "retirement_deduction_declarant2", f"{result.retirement_deductions.declarant2:.2f}"])
    writer.writerow(["income", "taxable_income", f"{result.taxable_income:.2f}"])
    writer.writerow(["income", "reference_income", f"{result.reference_income:.2f}"])
    writer.writerow(["income", "fiscal_parts", f"{result.fiscal_parts:g}"])
    writer.writerow(["income", "quotient", f"{result.quotient:.2f}"])

    for share in result.bracket_breakdown:
        writer.writerow(["brackets", share.rate_label, f"{share.amount_taxed_at_this_rate:.2f}"])

    writer.writerow(["tax", "gross_tax_before_relief", f"{result.gross_tax_before_relief:.2f}"])
    writer.writerow(["tax", "capped", result.capping.was_capped])
    writer.writerow(["tax", "tax_after_capping", f"{result.capping.reference_tax_base:.2f}"])
    writer.writerow(["tax", "widow_relief", f"{result.capping.widow_relief:.2f}"])
    writer.writerow(["tax", "decote", f"{result.decote.amount_applied:.2f}"])
    writer.writerow(["tax", "final_tax", f"{result.final_tax:.2f}"])
    writer.writerow(["tax", "surtax", f"{result.surtax:.2f}"])
    writer.writerow(["tax", "total_tax", f"{result.total_tax:.2f}"])
    writer.writerow(["tax", "marginal_rate", f"{result.marginal_rate:.2f}"])

    writer.writerow(["withholding", "household", f"{result.withholding_rates.household:.4f}"])
    writer.writerow(["withholding", "declarant1", f"{result.withholding_rates.declarant1:.4f}"])
    writer.writerow(["withholding", "declarant2", f"{result.withholding_rates.declarant2:.4f}"])

    suggestion = result.optimizer_suggestion
    writer.writerow(["optimizer", "amount_to_invest", f"{suggestion.amount_to_invest:.2f}"])
    writer.writerow(["optimizer", "estimated_saving", f"{suggestion.estimated_saving:.2f}"])


def result_to_csv_string(result: SimulationResult) -> str:
    """Convert a simulation result to a CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)
    _write_result_rows(writer, result)
    return output.getvalue()


def write_result_csv(result: SimulationResult, output_path: Path) -> Path:
    """Write a simulation result to a CSV file.

    Returns:
        Path to the written file
    """
    with open(output_path, "w", newline="") as csvfile:
        writer = csv.writer(csvfile)
        _write_result_rows(writer, result)

    return output_path


def format_result_text(result: SimulationResult) -> str:
    """Format a simulation result as ASCII tables for terminal display."""
    lines = []

    # Header
    situation = SITUATION_LABELS.get(result.situation, result.situation)
    lines.append(f"INCOME TAX SIMULATION {result.year} ({situation})")
    lines.append("=" * 60)
    lines.append("")

    # Income builds down to taxable income
    lines.append("INCOME")
    lines.append("-" * 60)
    lines.append(f"  {'Gross salaries':<32} {result.gross_income:>14,.0f}")
    deductions = result.deductions.declarant1 + result.deductions.declarant2
    lines.append(f"  {'Professional deductions':<32}-{deductions:>14,.0f}")
    per = result.retirement_deductions.declarant1 + result.retirement_deductions.declarant2
    if per:
        lines.append(f"  {'Retirement savings (PER)':<32}-{per:>14,.0f}")
    lines.append("  " + "-" * 47)
    lines.append(f"  {'Net taxable income':<32} {result.taxable_income:>14,.0f}")
    lines.append(f"  {'Reference income':<32} {result.reference_income:>14,.0f}")
    lines.append(f"  {'Fiscal parts':<32} {result.fiscal_parts:>14g}")
    lines.append(f"  {'Quotient':<32} {result.quotient:>14,.0f}")
    lines.append("")

    # Breakdown of one quotient
    title = "BRACKETS (per part"
    if result.capping.was_capped:
        title += f", capped basis of {result.quotient_parts:g} part(s)"
    lines.append(title + ")")
    lines.append("-" * 60)
    for share in result.bracket_breakdown:
        lines.append(f"  {share.rate_label:<32} {share.amount_taxed_at_this_rate:>14,.0f}")
    lines.append("")

    # Tax computation
    lines.append("TAX")
    lines.append("-" * 60)
    lines.append(f"  {'Gross tax':<32} {result.gross_tax_before_relief:>14,.0f}")
    if result.capping.was_capped:
        lines.append(f"  {'After quotient capping':<32} {result.capping.reference_tax_base:>14,.0f}")
    if result.capping.widow_relief:
        lines.append(f"  {'Widowed relief':<32}-{result.capping.widow_relief:>14,.0f}")
    if result.decote.amount_applied:
        lines.append(f"  {'Décote':<32}-{result.decote.amount_applied:>14,.0f}")
    lines.append(f"  {'Net income tax':<32} {result.final_tax:>14,.0f}")
    if result.surtax:
        lines.append(f"  {'High-income contribution':<32}+{result.surtax:>14,.0f}")
    lines.append("  " + "-" * 47)
    lines.append(f"  {'TOTAL':<32} {result.total_tax:>14,.0f}")
    lines.append(f"  {'Marginal rate':<32} {result.marginal_rate:>14.0%}")
    lines.append("")

    lines.append("WITHHOLDING RATES")
    lines.append("-" * 60)
    rates = result.withholding_rates
    lines.append(f"  {'Household':<32} {rates.household:>14.1%}")
    lines.append(f"  {'Declarant 1':<32} {rates.declarant1:>14.1%}")
    if result.situation == "married":
        lines.append(f"  {'Declarant 2':<32} {rates.declarant2:>14.1%}")

    warnings = result.retirement_cap_warnings
    if warnings.declarant1_exceeded or warnings.declarant2_exceeded:
        lines.append("")
        lines.append("Warning: some PER contributions exceed their deductible ceiling; the excess is not deducted.")

    if result.optimizer_suggestion.explanation:
        lines.append("")
        lines.append(result.optimizer_suggestion.explanation)

    return "\n".join(lines)

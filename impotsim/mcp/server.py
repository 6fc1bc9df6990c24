"""Impot Sim MCP Server - FastMCP implementation for tax simulation tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from impotsim.sdk import (
    get_available_years,
    inputs_from_flat,
    result_to_dict,
    run_simulation,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("impot-sim")


# --- Tools ---

@mcp.tool()
async def compute_tax(
    situation: str = Field(default="single", description="'single', 'married' or 'widowed'"),
    children: int = Field(default=0, description="Number of dependent children"),
    salary1: float = Field(default=0, description="Declarant 1 gross salary"),
    salary2: float = Field(default=0, description="Declarant 2 gross salary (married only)"),
    real_expenses1: float = Field(default=0, description="Declarant 1 actual professional expenses (0 = standard deduction)"),
    real_expenses2: float = Field(default=0, description="Declarant 2 actual professional expenses"),
    treat_as_rni1: bool = Field(default=False, description="Declarant 1 salary is already net taxable (no professional deduction)"),
    treat_as_rni2: bool = Field(default=False, description="Declarant 2 salary is already net taxable"),
    per1: float = Field(default=0, description="Declarant 1 retirement savings (PER) contribution"),
    per2: float = Field(default=0, description="Declarant 2 retirement savings (PER) contribution"),
    per_ceiling1: float = Field(default=0, description="Declarant 1 deductible PER ceiling"),
    per_ceiling2: float = Field(default=0, description="Declarant 2 deductible PER ceiling"),
    common_charges: float = Field(default=0, description="Household deductible charges"),
    reduction: float = Field(default=0, description="Tax reductions and credits"),
    year: int | None = Field(default=None, description="Tax year (default: latest available)"),
) -> dict[str, Any]:
    """Compute a household's income tax. Returns taxable income, parts, tax breakdown, withholding rates and a PER suggestion."""
    try:
        inputs = inputs_from_flat({
            "situation": situation,
            "children": children,
            "salary1": salary1,
            "salary2": salary2,
            "realExpenses1": real_expenses1,
            "realExpenses2": real_expenses2,
            "treatAsRNI1": treat_as_rni1,
            "treatAsRNI2": treat_as_rni2,
            "per1": per1,
            "per2": per2,
            "perCeiling1": per_ceiling1,
            "perCeiling2": per_ceiling2,
            "commonCharges": common_charges,
            "reduction": reduction,
        })
        result = run_simulation(inputs, year=year)
        return {"result": result_to_dict(result)}

    except Exception as e:
        logger.error(f"Error computing tax: {e}")
        return {"error": str(e), "result": None}


@mcp.tool()
async def list_tax_years() -> dict[str, Any]:
    """List tax years with available rules, latest first."""
    try:
        return {"years": get_available_years()}
    except Exception as e:
        logger.error(f"Error listing tax years: {e}")
        return {"error": str(e), "years": []}


# --- Resources ---

@mcp.resource("impotsim://rules/years")
async def list_years_resource() -> str:
    """Available tax years as JSON."""
    return json.dumps({"years": get_available_years()})


def run_server():
    """Run the MCP server over stdio."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()

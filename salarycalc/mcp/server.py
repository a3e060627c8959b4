"""Salary Calc MCP Server - FastMCP implementation for contribution tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from salarycalc.sdk import (
    ConfigNotFoundError,
    RateConfigurationError,
    SalaryEngine,
    apply_change,
    get_rates_path,
    load_rates,
    prioritize_errors,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("salary-calc")


def _report(engine: SalaryEngine, values: dict[str, Any]) -> dict[str, Any]:
    """Recompute and flatten a snapshot into JSON-safe output."""
    snapshot = engine.recompute(values)
    ordered = prioritize_errors(snapshot.errors.values(), engine.pipeline.field_order)
    output = snapshot.model_dump(mode="json", include={"pf_result", "esi_result", "analytics"})
    output["errors"] = [e.model_dump(mode="json") for e in ordered]
    output["summary"] = snapshot.summary.model_dump(mode="json")
    return output


# --- Tools ---

@mcp.tool()
async def compute_salary(
    salary_amount: str = Field(description="Salary amount per basis period (e.g., '50000')"),
    salary_basis: str = Field(default="Monthly", description="Hourly, Daily, Weekly or Monthly"),
    payment_type: str = Field(default="Bank Transfer", description="Bank Transfer, Check or Cash"),
    pf_enabled: bool = Field(default=False, description="Apply Provident Fund"),
    pf_number: str = Field(default="", description="PF number (e.g., 'DL/DLI/1234567/123/1234567')"),
    pf_employee_rate: str | None = Field(default=None, description="Employee PF rate in percent"),
    pf_additional_rate: str | None = Field(default=None, description="Additional PF rate in percent"),
    esi_enabled: bool = Field(default=False, description="Apply Employee State Insurance"),
    esi_number: str = Field(default="", description="10-digit ESI number"),
    esi_employee_rate: str | None = Field(default=None, description="Employee ESI rate in percent"),
    esi_additional_rate: str | None = Field(default=None, description="Additional ESI rate in percent"),
) -> dict[str, Any]:
    """Compute PF/ESI contributions, net salary and cost-to-company for one salary.

    Validation findings are returned in 'errors'; they never block the
    calculation. Amounts are decimal strings rounded half-up to 2 places.
    """
    values: dict[str, Any] = {
        "salary_amount": salary_amount,
        "salary_basis": salary_basis,
        "payment_type": payment_type,
        "pf_contribution": pf_enabled,
        "esi_contribution": esi_enabled,
    }
    for field, value in (
        ("pf_number", pf_number),
        ("pf_employee_rate", pf_employee_rate),
        ("pf_additional_rate", pf_additional_rate),
        ("esi_number", esi_number),
        ("esi_employee_rate", esi_employee_rate),
        ("esi_additional_rate", esi_additional_rate),
    ):
        values = apply_change(values, field, value)

    try:
        return _report(SalaryEngine(), values)
    except (RateConfigurationError, ConfigNotFoundError) as e:
        logger.error(f"Error computing salary: {e}")
        return {"error": str(e)}


@mcp.tool()
async def validate_salary_form(
    values: dict[str, Any] = Field(
        description="Form field name -> value (salary_amount, salary_basis, payment_type, "
                    "pf_contribution, pf_number, pf_employee_rate, pf_additional_rate, "
                    "esi_contribution, esi_number, esi_employee_rate, esi_additional_rate)"
    ),
) -> dict[str, Any]:
    """Validate a complete salary form record.

    Returns every finding (one per field, most severe first), a summary
    with completion percentage, and the contributions computed from the
    same values.
    """
    try:
        return _report(SalaryEngine(), values)
    except (RateConfigurationError, ConfigNotFoundError) as e:
        logger.error(f"Error validating salary form: {e}")
        return {"error": str(e), "errors": []}


@mcp.tool()
async def get_rates(
    scheme: str | None = Field(default=None, description="'pf' or 'esi' (default: both)"),
) -> dict[str, Any]:
    """Get the statutory rate configuration in effect and its source file."""
    try:
        rates = load_rates()
    except (RateConfigurationError, ConfigNotFoundError) as e:
        logger.error(f"Error loading rates: {e}")
        return {"error": str(e), "rates": None}

    data = rates.model_dump(mode="json")
    if scheme:
        if scheme not in ("pf", "esi"):
            return {"error": f"Unknown scheme: {scheme}", "rates": None}
        data = {scheme: data[scheme]}

    return {"source": str(get_rates_path()), "rates": data}


# --- Resources ---

@mcp.resource("salarycalc://rates")
async def rates_resource() -> str:
    """Rates in effect as JSON."""
    try:
        return json.dumps(load_rates().model_dump(mode="json"), indent=2)
    except RateConfigurationError as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()

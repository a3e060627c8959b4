"""Salary Calc CLI - Command-line interface for statutory contributions."""

import json
from pathlib import Path

import click
import yaml
from rich.console import Console

from salarycalc import __version__
from salarycalc.sdk import (
    ConfigNotFoundError,
    RateConfigurationError,
    SalaryEngine,
    apply_change,
    load_rates,
    prioritize_errors,
)
from salarycalc.sdk.schemas import PAYMENT_TYPES, SALARY_BASES

from .rates_commands import rates as rates_group
from .settings_commands import settings as settings_group
from .renderers.salary_renderer import render_errors, render_snapshot


@click.group()
@click.version_option(version=__version__, prog_name="salary-calc")
def cli():
    """Salary Calc - PF/ESI contributions and salary form validation.

    Computes statutory contributions and payroll analytics for a salary,
    and validates salary form records against the rate configuration.

    Rates are loaded from (in order):

    \b
    1. settings.json 'rates' key (set via 'salary-calc settings rates')
    2. rates.yaml in the config directory
    3. The bundled default rates

    The config directory is SALARY_CALC_CONFIG_PATH if set, otherwise
    ~/.config/salary-calc.
    """
    pass


cli.add_command(rates_group)
cli.add_command(settings_group)


def _build_engine(rates_path):
    """Engine for an explicit rates file, or the rates in effect."""
    try:
        rates = load_rates(Path(rates_path) if rates_path else None)
        return SalaryEngine(rates=rates)
    except (RateConfigurationError, ConfigNotFoundError) as e:
        raise click.ClickException(str(e))


def _load_form(form_file: Path) -> dict:
    """Read form values from a YAML or JSON file (JSON is valid YAML)."""
    try:
        with open(form_file, "r") as f:
            values = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Could not parse {form_file}: {e}")

    if values is None:
        return {}
    if not isinstance(values, dict):
        raise click.ClickException(f"{form_file} must contain a mapping of field names to values")
    return values


def _report(engine: SalaryEngine, snapshot) -> dict:
    ordered = prioritize_errors(snapshot.errors.values(), engine.pipeline.field_order)
    return {
        "errors": [e.model_dump(mode="json") for e in ordered],
        "summary": snapshot.summary.model_dump(mode="json"),
    }


@cli.command("compute")
@click.option("--salary", required=True, help="Salary amount per basis period.")
@click.option("--basis", type=click.Choice(SALARY_BASES), default="Monthly", show_default=True,
              help="Salary basis.")
@click.option("--payment", type=click.Choice(PAYMENT_TYPES), default="Bank Transfer", show_default=True,
              help="Payment type.")
@click.option("--pf/--no-pf", default=False, help="Enable Provident Fund.")
@click.option("--pf-number", default="", help="PF number (e.g. DL/DLI/1234567/123/1234567).")
@click.option("--pf-rate", default=None, help="Employee PF rate (%).")
@click.option("--pf-additional", default=None, help="Additional PF rate (%).")
@click.option("--esi/--no-esi", default=False, help="Enable Employee State Insurance.")
@click.option("--esi-number", default="", help="ESI number (10 digits).")
@click.option("--esi-rate", default=None, help="Employee ESI rate (%).")
@click.option("--esi-additional", default=None, help="Additional ESI rate (%).")
@click.option("--rates", "rates_path", type=click.Path(exists=True, dir_okay=False),
              help="Rates YAML to use instead of the configured one.")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of tables.")
def compute(salary, basis, payment, pf, pf_number, pf_rate, pf_additional,
            esi, esi_number, esi_rate, esi_additional, rates_path, as_json):
    """Compute contributions and analytics for one salary.

    Contributions are always computed; validation findings are reported
    alongside and never block the calculation.

    Examples:

    \b
        salary-calc compute --salary 50000 --pf --pf-rate 12 \\
            --pf-number DL/DLI/1234567/123/1234567
        salary-calc compute --salary 18000 --esi --esi-rate 0.75 \\
            --esi-number 1234567890 --json
    """
    engine = _build_engine(rates_path)

    values = {
        "salary_amount": salary,
        "salary_basis": basis,
        "payment_type": payment,
        "pf_contribution": pf,
        "esi_contribution": esi,
    }
    # Normalizes statutory numbers and derives total rates
    for field, value in (
        ("pf_number", pf_number),
        ("pf_employee_rate", pf_rate),
        ("pf_additional_rate", pf_additional),
        ("esi_number", esi_number),
        ("esi_employee_rate", esi_rate),
        ("esi_additional_rate", esi_additional),
    ):
        values = apply_change(values, field, value)

    snapshot = engine.recompute(values)

    if as_json:
        output = snapshot.model_dump(mode="json", include={"pf_result", "esi_result", "analytics"})
        output.update(_report(engine, snapshot))
        click.echo(json.dumps(output, indent=2))
        return

    console = Console()
    render_snapshot(console, snapshot)
    if snapshot.errors:
        render_errors(console, engine.pipeline.categorized())


@cli.command("validate")
@click.argument("form_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rates", "rates_path", type=click.Path(exists=True, dir_okay=False),
              help="Rates YAML to use instead of the configured one.")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of tables.")
def validate(form_file, rates_path, as_json):
    """Validate a salary form record.

    FORM_FILE is YAML or JSON mapping form field names to values, e.g.:

    \b
        salary_amount: 25000
        salary_basis: Monthly
        payment_type: Bank Transfer
        esi_contribution: true
        esi_number: "1234567890"
        esi_employee_rate: 0.75

    Exits with status 1 if any Error-severity finding is reported.
    """
    engine = _build_engine(rates_path)
    values = _load_form(form_file)
    snapshot = engine.recompute(values)
    summary = snapshot.summary

    if as_json:
        click.echo(json.dumps(_report(engine, snapshot), indent=2))
    else:
        console = Console()
        render_errors(console, engine.pipeline.categorized())
        console.print(
            f"{summary.total} finding(s): {summary.critical} error(s), "
            f"{summary.warnings} warning(s). "
            f"Completion {summary.completion_percentage}%"
        )

    if summary.critical:
        raise SystemExit(1)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

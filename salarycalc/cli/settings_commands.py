"""Settings CLI commands for Salary Calc.

Manages settings.json - rates file path, debounce window.
"""

import click
from pathlib import Path

from salarycalc.sdk import (
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_settings_path,
    get_rates_path,
    get_debounce_ms,
    load_rates,
    RateConfigurationError,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - rates: path to a custom rates YAML
    - debounce_ms: real-time validation debounce window
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their effective values."""
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
    click.echo(f"  rates: {get_rates_path()}")
    click.echo(f"  debounce_ms: {get_debounce_ms()}")


@settings.command("rates")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom rates path, revert to default")
def settings_rates(path, clear):
    """Set or clear the custom rates file.

    PATH is a YAML file with the same layout as the bundled rates file.
    It is validated before being saved.

    Examples:
        salary-calc settings rates ~/payroll/rates-2025.yaml
        salary-calc settings rates --clear
    """
    if clear:
        current = load_settings()
        if "rates" in current:
            del current["rates"]
            save_settings(current)
            click.echo("Cleared rates setting.")
            click.echo(f"Rates file is now: {get_rates_path()}")
        else:
            click.echo("rates was not set.")
        return

    if not path:
        current_rates = get_setting("rates")
        if current_rates:
            click.echo(f"Current rates: {current_rates}")
        else:
            click.echo(f"No custom rates set. Using: {get_rates_path()}")
        return

    rates_path = Path(path).expanduser().resolve()
    if not rates_path.is_file():
        raise click.ClickException(f"Rates file not found: {rates_path}")

    try:
        load_rates(rates_path)
    except RateConfigurationError as e:
        raise click.ClickException(str(e))

    set_setting("rates", str(rates_path))
    click.echo(f"Set rates: {rates_path}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("debounce")
@click.argument("milliseconds", required=False, type=click.IntRange(min=0))
def settings_debounce(milliseconds):
    """Show or set the real-time validation debounce window."""
    if milliseconds is None:
        click.echo(f"debounce_ms: {get_debounce_ms()}")
        return

    set_setting("debounce_ms", milliseconds)
    click.echo(f"Set debounce_ms: {milliseconds}")
    click.echo(f"Saved to: {get_settings_path()}")

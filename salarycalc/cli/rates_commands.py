"""Rate configuration commands."""

import json

import click
from rich.console import Console

from salarycalc.sdk import get_rates_path, load_rates, RateConfigurationError
from .renderers.salary_renderer import render_rates


@click.group()
def rates():
    """Inspect statutory rate configuration."""
    pass


@rates.command("show")
@click.option("--scheme", type=click.Choice(["pf", "esi"]), help="Show a single scheme.")
@click.option("--json", "as_json", is_flag=True, help="Output JSON instead of a table.")
def rates_show(scheme, as_json):
    """Show the rates in effect and where they were loaded from."""
    try:
        loaded = load_rates()
    except RateConfigurationError as e:
        raise click.ClickException(str(e))

    if as_json:
        data = loaded.model_dump(mode="json")
        if scheme:
            data = {scheme: data[scheme]}
        click.echo(json.dumps(data, indent=2))
        return

    console = Console()
    console.print(f"[dim]Source: {get_rates_path()}[/dim]")
    render_rates(console, loaded, scheme)

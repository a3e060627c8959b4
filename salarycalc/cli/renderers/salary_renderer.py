"""Rich renderers for engine snapshots, validation errors and rates.

Transforms SDK models into formatted Rich tables.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from salarycalc.sdk.contributions.rates import SCHEME_LABELS, StatutoryRates
from salarycalc.sdk.engine import EngineSnapshot
from salarycalc.sdk.schemas import ContributionResult
from salarycalc.sdk.validation.rules import Severity, ValidationError

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}

SECTION_TITLES = {
    "salary": "Salary Issues",
    "pf": "PF Issues",
    "esi": "ESI Issues",
    "business": "Business Rule Issues",
}


def render_snapshot(console: Console, snapshot: EngineSnapshot) -> None:
    """Render contributions and analytics for one snapshot.

    Args:
        console: Rich Console instance
        snapshot: Output of SalaryEngine.recompute()
    """
    _render_schemes(console, snapshot)
    _render_breakdown(console, snapshot)


def _status(result: ContributionResult, enabled: bool) -> str:
    if not enabled:
        return "[dim]disabled[/dim]"
    if result.is_eligible is False:
        return "[red]not eligible[/red]"
    if result.is_compliant:
        return "[green]compliant[/green]"
    return "[red]non-compliant[/red]"


def _render_schemes(console: Console, snapshot: EngineSnapshot) -> None:
    table = Table(title="Statutory Contributions", box=box.ROUNDED)
    table.add_column("Scheme", style="bold")
    table.add_column("Employee %", justify="right")
    table.add_column("Employer %", justify="right")
    table.add_column("Total %", justify="right")
    table.add_column("Status")

    for result, scheme in (
        (snapshot.pf_result, snapshot.pf_scheme),
        (snapshot.esi_result, snapshot.esi_scheme),
    ):
        table.add_row(
            SCHEME_LABELS[result.scheme],
            _pct(result.employee_rate),
            _pct(result.employer_rate),
            _pct(result.total_rate),
            _status(result, scheme.enabled),
        )

    console.print(table)


def _render_breakdown(console: Console, snapshot: EngineSnapshot) -> None:
    analytics = snapshot.analytics

    table = Table(title="Salary Breakdown", box=box.ROUNDED)
    table.add_column("Component", style="bold", min_width=18)
    table.add_column("Employee", justify="right", min_width=12)
    table.add_column("Employer", justify="right", min_width=12)
    table.add_column("Total", justify="right", min_width=12)

    table.add_row("Basic Salary", _fmt(analytics.gross_salary), "-", _fmt(analytics.gross_salary))
    if snapshot.pf_scheme.enabled:
        pf = analytics.pf_breakdown
        table.add_row("PF Contribution", f"-{_fmt(pf.employee)}", _fmt(pf.employer), _fmt(pf.total))
    if snapshot.esi_scheme.enabled:
        esi = analytics.esi_breakdown
        table.add_row("ESI Contribution", f"-{_fmt(esi.employee)}", _fmt(esi.employer), _fmt(esi.total))
    table.add_row("", "", "", "")
    table.add_row(
        "[bold green]Net Amount[/bold green]",
        f"[bold green]{_fmt(analytics.net_salary)}[/bold green]",
        _fmt(analytics.employer_contribution),
        f"[bold]{_fmt(analytics.cost_to_company)}[/bold]",
    )
    console.print(table)

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value")
    summary.add_row("Total Deductions", _fmt(analytics.total_deductions))
    summary.add_row("Take-home", f"{analytics.take_home_percentage}%")
    summary.add_row("Deductions (% of gross)", f"{analytics.deduction_percentages.total}%")
    if analytics.annual_cost_to_company is not None:
        summary.add_row("Annual CTC", _fmt(analytics.annual_cost_to_company))
    console.print(Panel(summary, title="Analytics", border_style="dim"))


def render_errors(console: Console, groups: Dict[str, List[ValidationError]]) -> None:
    """Render categorized validation errors, one panel per non-empty section."""
    if not any(groups.values()):
        console.print(Panel("[green]No validation errors[/green]", border_style="green"))
        return

    for section, errors in groups.items():
        if not errors:
            continue
        lines = []
        for error in errors:
            style = SEVERITY_STYLES[error.severity]
            lines.append(
                f"[{style}]{error.severity.value}[/{style}] "
                f"[dim]{error.category.value}[/dim] {error.field}: {error.message}"
            )
        title = f"{SECTION_TITLES.get(section, section)} ({len(errors)})"
        console.print(Panel("\n".join(lines), title=title, border_style="red"))


def render_rates(console: Console, rates: StatutoryRates, scheme: Optional[str] = None) -> None:
    """Render the statutory rate table for one or both schemes."""
    schemes = [scheme] if scheme else ["pf", "esi"]

    table = Table(title="Statutory Rates", box=box.ROUNDED)
    table.add_column("Setting", style="bold")
    for name in schemes:
        table.add_column(SCHEME_LABELS[name], justify="right")

    configs = [rates.for_scheme(name) for name in schemes]
    rows = [
        ("Employer rate", lambda c: _pct(c.employer_rate)),
        ("Employee rate", lambda c: f"{_pct(c.min_employee_rate)} - {_pct(c.max_employee_rate)}"),
        ("Employee step", lambda c: _pct(c.employee_rate_step) if c.employee_rate_step else "-"),
        ("Additional rate", lambda c: f"{_pct(c.min_additional_rate)} - {_pct(c.max_additional_rate)}"),
        ("Max total rate", lambda c: _pct(c.max_total_rate)),
        ("Salary band", lambda c: (
            f"{_fmt(c.min_salary_threshold or Decimal('0'))} - {_fmt(c.salary_threshold)}"
            if c.has_eligibility_band else "-"
        )),
        ("Number format", lambda c: c.number_example or c.number_pattern),
    ]
    for label, getter in rows:
        table.add_row(label, *[getter(c) for c in configs])

    console.print(table)
    console.print(f"[dim]Max salary amount: {_fmt(rates.limits.max_salary_amount)}[/dim]")


def _pct(rate: Optional[Decimal]) -> str:
    if rate is None:
        return "-"
    return f"{rate.normalize():f}%"


def _fmt(amount: Optional[Decimal]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"₹{amount:,.2f}"

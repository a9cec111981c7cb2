"""check command - local build vs. rebuild from its own proof."""
from __future__ import annotations

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..identity import available_algorithms
from ..reproducibility import ReproducibilityReport, compare
from .build_cmd import make_build
from .exit_codes import EXIT_NOT_REPRODUCIBLE
from .utils import Runtime, exits_on_error


def _render(report: ReproducibilityReport) -> None:
    console = Console()
    table = Table(title="Reproducibility", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("local")
    table.add_column("from proof")
    local, rebuilt = report.local.proof.lines(), report.rebuilt.proof.lines()
    for i in range(max(len(local), len(rebuilt))):
        a = local[i] if i < len(local) else ""
        b = rebuilt[i] if i < len(rebuilt) else ""
        style = None if a == b else "red"
        table.add_row(str(i + 1), a, b, style=style)
    console.print(table)

    if report.reproducible:
        console.print("[green]reproducible[/green]: artifact and proof match")
    else:
        line = report.first_divergent_line
        where = f" (first difference at line {line})" if line else ""
        console.print(f"[red]NOT reproducible[/red]{where}")


@click.command("check")
@click.argument("sources", nargs=-1)
@click.option("--algorithm", "-a", type=click.Choice(available_algorithms()),
              help="Hash algorithm (default: config 'algorithm')")
@click.option("--strict/--lenient", default=None,
              help="Also require identical inclusion proofs (default: config 'strict')")
@click.option("--json", "output_json", is_flag=True, help="Output JSON for CI")
@click.pass_obj
@exits_on_error
def check_command(
    runtime: Runtime,
    sources: tuple[str, ...],
    algorithm: Optional[str],
    strict: Optional[bool],
    output_json: bool,
) -> None:
    """Build locally, rebuild from the emitted proof, and compare."""
    build = make_build(runtime, sources, algorithm)
    if strict is None:
        strict = bool(runtime.config["strict"])
    report = compare(build, strict=strict)

    if output_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _render(report)

    if not report.reproducible:
        raise SystemExit(EXIT_NOT_REPRODUCIBLE)

"""Rich output formatting helpers for the imagetrust CLI.

Provides consistent, decision-colored terminal output for evaluation
reports and configuration.

Decision Color Mapping:
    auto-approve = bold green, needs-human-review = yellow,
    auto-reject = bold red
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from imagetrust.core.scoring import Decision, EvaluationReport
from imagetrust.core.scoring.report import format_timestamp

_DECISION_STYLES: dict[Decision, str] = {
    Decision.AUTO_APPROVE: "bold green",
    Decision.NEEDS_HUMAN_REVIEW: "yellow",
    Decision.AUTO_REJECT: "bold red",
}

console = Console()


def decision_style(decision: Decision) -> str:
    """Return the Rich style string for a given decision."""
    return _DECISION_STYLES.get(decision, "white")


def _points_style(points: int, max_points: int) -> str:
    if points == max_points:
        return "green"
    return "yellow" if points > 0 else "red"


def print_report(report: EvaluationReport) -> None:
    """Print a formatted evaluation report.

    Args:
        report: The completed evaluation report.
    """
    ref = report.image
    header = Text.assemble(
        ("Image: ", "bold"), (report.raw_reference, ""),
        ("  Date: ", "bold"), (format_timestamp(report.timestamp), "dim"),
    )
    console.print(Panel(header, title="Image Registry Evaluation Report"))
    console.print(
        f"  Registry: {ref.registry} | Namespace: {ref.namespace or '-'} | "
        f"Repo: {ref.repository or '-'} | Tag: {ref.tag}"
    )

    table = Table(title="Scores", show_header=True, header_style="bold")
    table.add_column("Criterion", style="bold")
    table.add_column("Points", justify="right")
    table.add_column("Max", justify="right", style="dim")
    table.add_column("Detail")
    for result in report.results:
        table.add_row(
            result.criterion.label,
            Text(str(result.points), style=_points_style(result.points, result.max_points)),
            str(result.max_points),
            result.detail,
        )
    console.print(table)

    counts = report.vulnerability_counts
    console.print(
        f"  Vulnerabilities: [bold red]{counts.critical}[/bold red] critical | "
        f"[yellow]{counts.high}[/yellow] high | "
        f"[cyan]{counts.medium}[/cyan] medium | "
        f"[green]{counts.low}[/green] low"
    )

    meta = report.image_metadata
    if meta.digest or meta.layers is not None:
        size = f"{meta.size_mb} MB" if meta.size_mb is not None else "-"
        console.print(
            f"  Digest: [dim]{meta.digest or '-'}[/dim] | "
            f"Layers: {meta.layers if meta.layers is not None else '-'} | Size: {size}"
        )

    console.print(f"  Total Score: [bold]{report.total_score} / {report.max_score}[/bold]")
    console.print(
        "  Decision:    ",
        Text(report.decision.value, style=decision_style(report.decision)),
    )
    if not report.vendor_known and report.decision is Decision.NEEDS_HUMAN_REVIEW:
        console.print("  [dim]Unknown vendors always require human review.[/dim]")


def print_config(data: dict[str, Any]) -> None:
    """Print the effective configuration as a two-column table."""
    table = Table(title="Effective Configuration", show_header=True, header_style="bold")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value) if value else "-"
        table.add_row(key, str(value))
    console.print(table)


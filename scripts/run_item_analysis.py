#!/usr/bin/env python
"""
Run the full item analysis on a CSV of exam responses and display results.
"""

import math
from datetime import datetime
from pathlib import Path

import pandas as pd
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from item_analysis.analysis import AnalysisSettings, ItemAnalysisPipeline
from item_analysis.analysis.pipeline import ItemAnalysisReport
from item_analysis.core.data import (
    load_items_csv,
    load_response_times_csv,
    load_responses_csv,
)
from item_analysis.core.exceptions import (
    MalformedResponseError,
    ModelFitError,
)
from item_analysis.flags import FlagValue

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "reports" / "item-analysis"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def _fmt(value: object) -> str:
    if isinstance(value, float):
        return "-" if math.isnan(value) else f"{value:.3f}"
    return str(value)


def print_frame(frame: pd.DataFrame, title: str, index: bool = False) -> None:
    """Pretty-print a statistics table as a rich Table."""
    table = Table(title=title)
    if index:
        table.add_column(str(frame.index.name), style="bold")
    for column in frame.columns:
        table.add_column(str(column), justify="right")

    for idx, row in frame.iterrows():
        cells = [_fmt(v) for v in row.tolist()]
        if index:
            cells.insert(0, str(idx))
        table.add_row(*cells)

    console.print(table)


def print_flagged_items(report: ItemAnalysisReport) -> None:
    flagged = report.flagged_items
    if flagged.empty:
        console.print("[green]No items flagged[/green]")
        return
    styled = flagged.replace(
        {FlagValue.FLAG.value: "[red]flag[/red]", FlagValue.NORMAL.value: ""}
    )
    print_frame(styled, title="Flagged Items", index=True)


def save_report(output_dir: Path, report: ItemAnalysisReport) -> Path:
    """Save the statistics and flag tables as CSV files."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = output_dir / timestamp
    run_dir.mkdir(parents=True, exist_ok=True)
    report.item_statistics.to_csv(run_dir / "items.csv", index=False)
    report.option_statistics.to_csv(run_dir / "options.csv", index=False)
    report.flags.evaluations.to_csv(run_dir / "flag_evaluations.csv")
    report.flagged_items.to_csv(run_dir / "flagged_items.csv")
    return run_dir


@app.command()
def main(
    responses_path: Path = typer.Argument(
        ...,
        help="CSV of responses (person_id + one column per item)",
    ),
    items_path: Path = typer.Argument(
        ...,
        help="CSV of item metadata (item_id, item_type, key[, options])",
    ),
    times_path: Path | None = typer.Option(
        None,
        "--times",
        help="CSV of average response times (item_id, average_time)",
    ),
    random_seed: int | None = typer.Option(
        None,
        help="Random seed for reproducibility",
    ),
    output_dir: Path | None = typer.Option(
        None,
        help=f"Save tables as CSV under this directory "
        f"(e.g. {DEFAULT_OUTPUT_DIR})",
    ),
) -> None:
    """Score responses, estimate abilities, compute statistics, flag items."""
    settings = AnalysisSettings()
    if random_seed is not None:
        settings = settings.model_copy(update={"random_seed": random_seed})

    try:
        items = load_items_csv(items_path)
        dataset = load_responses_csv(
            responses_path, items, missing_marker=settings.missing_marker
        )
        response_times = (
            load_response_times_csv(times_path) if times_path else None
        )
    except (ValueError, MalformedResponseError) as e:
        console.print(f"[red]Error loading input: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Item Analysis[/bold]\n\n"
            f"Responses: [cyan]{responses_path}[/cyan]\n"
            f"Persons: [cyan]{dataset.n_persons}[/cyan]\n"
            f"Items: [cyan]{dataset.n_items}[/cyan]\n"
            f"Response times: [cyan]{times_path or '-'}[/cyan]",
            title="Configuration",
        )
    )

    pipeline = ItemAnalysisPipeline.from_settings(settings)
    try:
        with console.status("[bold cyan]Running analysis..."):
            report = pipeline.run(dataset, response_times=response_times)
    except ModelFitError as e:
        console.print(f"[red]Model fit failed: {e}[/red]")
        raise typer.Exit(1) from e

    print_frame(report.item_statistics, title="Item Statistics")
    print_frame(report.option_statistics, title="Option Statistics")
    print_flagged_items(report)

    if output_dir is not None:
        run_dir = save_report(output_dir, report)
        console.print(
            Panel(
                f"[bold green]Report saved[/bold green]\n\n"
                f"Output: [cyan]{run_dir}[/cyan]",
                title="Done",
            )
        )


if __name__ == "__main__":
    app()

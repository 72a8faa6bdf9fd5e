#!/usr/bin/env python
"""
Fit the Rasch / partial credit model to exam responses and save the
fitted model.
"""

from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.panel import Panel

from item_analysis.analysis.settings import AnalysisSettings
from item_analysis.core.data import load_items_csv, load_responses_csv
from item_analysis.core.exceptions import (
    MalformedResponseError,
    ModelFitError,
)
from item_analysis.irt import fit_latent_traits
from item_analysis.irt.estimation import IRTEstimationResult
from item_analysis.scoring import score_dataset

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "data" / "fitted-models"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def save_model(model: IRTEstimationResult, output_path: Path) -> None:
    """Save fitted model to json file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(model.model_dump_json(indent=4))


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
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Output directory for fitted model",
    ),
    seed: int | None = typer.Option(
        None,
        "-s",
        "--seed",
        help="Random seed for reproducibility",
    ),
) -> None:
    """Fit the latent trait model to exam responses and save as JSON."""

    for path in (responses_path, items_path):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)

    settings = AnalysisSettings()

    console.print("[dim]Loading data...[/dim]")
    try:
        items = load_items_csv(items_path)
        dataset = load_responses_csv(
            responses_path, items, missing_marker=settings.missing_marker
        )
    except (ValueError, MalformedResponseError) as e:
        console.print(f"[red]Error loading CSV: {e}[/red]")
        raise typer.Exit(1) from e

    scores = score_dataset(dataset)

    console.print(
        Panel(
            f"[bold]Fit Rasch / PCM Model[/bold]\n\n"
            f"Responses: [cyan]{responses_path}[/cyan]\n"
            f"Persons: [cyan]{scores.n_persons}[/cyan]\n"
            f"Items: [cyan]{scores.n_items}[/cyan]\n"
            f"Max score: [cyan]{int(scores.max_scores.max())}[/cyan]",
            title="Configuration",
        )
    )

    console.print("[dim]Fitting model...[/dim]")
    rng = np.random.default_rng(seed) if seed is not None else None
    try:
        fit = fit_latent_traits(
            scores, config=settings.to_estimation_config(), rng=rng
        )
    except ModelFitError as e:
        console.print(f"[red]Model fit failed: {e}[/red]")
        raise typer.Exit(1) from e

    model = fit.model
    console.print(
        f"  {model.convergence_status.value} "
        f"({model.n_iterations} iterations, LL={model.log_likelihood:.2f})"
    )

    diff = fit.diagnostics.difference
    console.print("Model Diagnostics:")
    console.print(f"  Latent SD = {model.latent_sd:.4f}")
    console.print(f"  Mean diff = {float(np.nanmean(diff)):.4f}")
    console.print(f"  Max |diff| = {fit.diagnostics.max_abs_difference:.4f}")

    output_path = output_dir / f"{responses_path.stem}.json"
    save_model(model, output_path)

    console.print(
        Panel(
            f"[bold green]Model saved[/bold green]\n\n"
            f"Output: [cyan]{output_path}[/cyan]",
            title="Done",
        )
    )


if __name__ == "__main__":
    app()

# src/decomposer/cli.py
"""
Decomposer Command Line Interface (CLI).

A thin `typer` + `rich` layer over :func:`decomposer.pipelines.run_pipeline`.

Features
--------
- **Block table**: every text/task block with size, repository and category.
- **Estimation panel**: formulas, totals, task counters and the LLM comparison.
- **Schedule panel**: extra risk buffer, working days and delivery date.
- **JSON mode**: the same data in the camelCase wire shape for other tools.

Usage
-----
    # Parse a decomposition exported from a JIRA description
    $ decomposer parse samples/decomposition.txt

    # Ask the model for sizes and plan for two engineers
    $ decomposer parse samples/decomposition.txt --llm-estimates --parallel 2

    # Show the active story point scale
    $ decomposer mapping --mapping config/estimation-mapping.json
"""

from __future__ import annotations

import json
import traceback
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from decomposer.core.contracts.block import TSHIRT_SIZES, Block
from decomposer.core.estimation import format_points
from decomposer.core.mapping import SPMapping, load_mapping
from decomposer.core.repositories import categorize_repository
from decomposer.core.settings import load_settings
from decomposer.pipelines.decomposition import PipelineResult, run_pipeline

# Ensure env vars (like OPENAI_API_KEY) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="Decomposer: parse JIRA task decompositions and estimate them in story points.",
    rich_markup_mode="markdown",
)
console = Console()
err_console = Console(stderr=True)

_PREVIEW_CHARS = 60


class ProviderChoice(str, Enum):
    regexp = "regexp"
    llm = "llm"


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) <= _PREVIEW_CHARS:
        return flat
    return flat[: _PREVIEW_CHARS - 1] + "…"


def _render_blocks(blocks: tuple[Block, ...]) -> None:
    table = Table(title="Blocks", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type")
    table.add_column("Size", justify="center")
    table.add_column("Repo")
    table.add_column("Category")
    table.add_column("Title / content")

    for index, block in enumerate(blocks, start=1):
        info = block.task_info
        if info is None:
            preview = escape(_preview(block.content))
            table.add_row(str(index), "text", "", "", "", f"[dim]{preview}[/dim]")
            continue
        size = info.estimation or "-"
        if info.risk:
            size += f"+{info.risk}"
        if info.estimation_by_llm is not None and info.estimation_by_llm.estimation:
            size += f" [magenta](LLM {info.estimation_by_llm.estimation})[/magenta]"
        table.add_row(
            str(index),
            "[bold]task[/bold]",
            size,
            escape(info.repository or ""),
            categorize_repository(info.repository) or "",
            escape(info.title),
        )

    console.print(table)


def _render_estimation(result: PipelineResult) -> None:
    estimation = result["estimation"]
    schedule = result["schedule"]

    lines = [
        f"Base:  [bold]{estimation.formula}[/bold]",
        f"Risks: [bold]{estimation.risk_formula}[/bold]",
        f"Tasks: {estimation.task_count} "
        f"(without estimation: {estimation.tasks_without_estimation}, "
        f"LLM-filled: {estimation.tasks_with_llm_estimation})",
    ]
    if estimation.llm is not None:
        lines.append(f"LLM:   [magenta]{estimation.llm.formula}[/magenta]")
    if result["categories"]:
        per_category = ", ".join(f"{k}: {v}" for k, v in sorted(result["categories"].items()))
        lines.append(f"By category: {per_category}")
    console.print(Panel("\n".join(lines), title="Estimation", border_style="cyan"))

    console.print(
        Panel(
            f"Additional risks ({format_points(schedule.additional_risk_percent)}%): "
            f"{format_points(schedule.additional_risks)} SP\n"
            f"Total: [bold]{format_points(schedule.total)} SP[/bold]\n"
            f"Working days (x{format_points(schedule.parallelization_coefficient)}): "
            f"{schedule.working_days}\n"
            f"Delivery date: [bold green]{schedule.delivery_date.isoformat()}[/bold green]",
            title="Schedule",
            border_style="green",
        )
    )


def _result_payload(result: PipelineResult) -> dict[str, Any]:
    """Serialize a pipeline result into the camelCase wire shape."""
    return {
        "blocks": [b.model_dump(by_alias=True, mode="json") for b in result["blocks"]],
        "estimation": result["estimation"].model_dump(by_alias=True, mode="json"),
        "schedule": result["schedule"].model_dump(by_alias=True, mode="json"),
        "mapping": result["mapping"].as_dict(),
        "categories": result["categories"],
    }


def _resolve_mapping(path: Path | None) -> SPMapping:
    return load_mapping(path if path is not None else load_settings().mapping_path)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def parse(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Text file holding the decomposition (JIRA wiki markup).",
        ),
    ],
    provider: Annotated[
        ProviderChoice | None,
        typer.Option("--provider", "-p", help="Block producer; defaults to DECOMPOSER_PARSER."),
    ] = None,
    llm_estimates: Annotated[
        bool,
        typer.Option("--llm-estimates", help="Ask the model for a size per task."),
    ] = False,
    mapping: Annotated[
        Path | None,
        typer.Option("--mapping", "-m", help="JSON file with the size -> SP mapping."),
    ] = None,
    risk_percent: Annotated[
        int | None,
        typer.Option("--risk-percent", min=0, max=100, help="Additional risk buffer, %."),
    ] = None,
    parallel: Annotated[
        float | None,
        typer.Option("--parallel", help="Parallelization coefficient (engineers)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON instead of tables."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks for debugging."),
    ] = False,
) -> None:
    """
    Parse a decomposition file, aggregate story points and plan delivery.
    """
    cfg = load_settings()
    provider_name = provider.value if provider is not None else cfg.parser_provider
    if (provider_name == "llm" or llm_estimates) and not cfg.has_llm_credentials:
        err_console.print("[yellow]No LLM API key configured; model stages will fall back.[/yellow]")

    try:
        sp_mapping = _resolve_mapping(mapping)
        result = run_pipeline(
            file.read_text(encoding="utf-8"),
            provider=provider_name,
            mapping=sp_mapping,
            llm_estimates=llm_estimates,
            additional_risk_percent=(
                risk_percent if risk_percent is not None else cfg.additional_risk_percent
            ),
            parallelization=parallel if parallel is not None else cfg.parallelization_coefficient,
        )
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(_result_payload(result), indent=2, ensure_ascii=False))
        return

    _render_blocks(result["blocks"])
    _render_estimation(result)


@app.command()  # type: ignore[misc]
def mapping(
    path: Annotated[
        Path | None,
        typer.Option("--mapping", "-m", help="JSON file with the size -> SP mapping."),
    ] = None,
) -> None:
    """
    Show the active T-shirt size -> story point mapping.
    """
    try:
        sp_mapping = _resolve_mapping(path)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    table = Table(title="Story points")
    table.add_column("Size")
    table.add_column("SP", justify="right")
    for size in TSHIRT_SIZES:
        points = sp_mapping.resolve(size)
        table.add_row(size, format_points(points) if points is not None else "[dim]unmapped[/dim]")
    console.print(table)


if __name__ == "__main__":
    app()

"""Command-line entry point for the keyword research pipeline.

  ppc-keywords run --seeds "kw1,kw2" --competitors "d1.com,d2.com" --country GB
"""

from __future__ import annotations

import datetime
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import DEFAULT_API_BASE_URL
from .data_access import check_backend_status
from .errors import KeywordPipelineError
from .models import PipelineResult, config_from_env
from .pipeline import PipelineStatus, run_pipeline_sync

console = Console()
app = typer.Typer(
    name="ppc-keywords",
    help="PPC keyword research: expand seeds, find competitor gaps, score and report.",
    add_completion=False,
    no_args_is_help=True,
)

DEFAULT_SEEDS = (
    "accounts payable automation,invoice processing software,AP automation,"
    "purchase order automation,invoice matching software"
)
DEFAULT_COMPETITORS = "bill.com,tipalti.com,stampli.com,avidxchange.com"


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _default_output() -> Path:
    stamp = datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return Path(f"pipeline-results-{stamp}.json")


def _print_progress(status: PipelineStatus, detail: str) -> None:
    style = "red" if status is PipelineStatus.FAILED else "cyan"
    console.print(f"[{style}]{status.value:>10}[/{style}]  {escape(detail)}")


def _print_summary(result: PipelineResult) -> None:
    summary = result.summary
    console.print(f"\n[bold]Keywords found:[/bold] {summary.total_keywords_found}")
    console.print(
        "[bold]Tiers:[/bold] "
        + ", ".join(f"{tier} {count}" for tier, count in summary.tier_counts.items())
    )
    console.print(f"[bold]Competitor gaps:[/bold] {summary.competitor_gaps}")
    console.print(f"[bold]Average CPC:[/bold] {summary.avg_cpc:.2f}")
    console.print(f"[bold]Top keyword:[/bold] {summary.top_keyword}")

    table = Table(title="Top picks", show_header=True, header_style="bold magenta")
    table.add_column("Keyword", style="cyan", min_width=25)
    table.add_column("Volume", justify="right")
    table.add_column("CPC", justify="right")
    table.add_column("Tier")
    table.add_column("Why", max_width=60)
    for pick in result.report.top_keywords:
        table.add_row(pick.keyword, str(pick.volume), f"{pick.cpc:.2f}", pick.tier, pick.reason)
    console.print(table)

    console.print(f"\n[bold]Recommended budget:[/bold] {result.report.recommended_budget}")
    console.print(f"\n[bold]Market opportunity:[/bold] {summary.market_opportunity}")
    console.print("\n[bold]Next steps:[/bold]")
    for i, step in enumerate(result.report.next_steps, start=1):
        console.print(f"  {i}. {step}")


@app.callback()
def main() -> None:
    """PPC keyword research pipeline."""


@app.command()
def run(
    seeds: str = typer.Option(DEFAULT_SEEDS, "--seeds", "-s", help="Comma-separated seed keywords."),
    competitors: str = typer.Option(
        DEFAULT_COMPETITORS, "--competitors", "-c", help="Comma-separated competitor domains."
    ),
    country: str = typer.Option("GB", "--country", help="Two-letter target market code."),
    cpc_min: float = typer.Option(3.0, "--cpc-min", help="Lowest affordable CPC."),
    cpc_max: float = typer.Option(8.0, "--cpc-max", help="Highest affordable CPC."),
    product: Optional[str] = typer.Option(None, "--product", help="Product name."),
    product_desc: str = typer.Option("", "--product-desc", help="Product description."),
    product_target: Optional[str] = typer.Option(None, "--product-target", help="Target buyer."),
    product_integrations: Optional[str] = typer.Option(
        None, "--product-integrations", help="Integrations the product offers."
    ),
    api: Optional[str] = typer.Option(
        None, "--api", help=f"Backend base URL (default: $API_BASE_URL or {DEFAULT_API_BASE_URL})."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the result JSON."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run the full pipeline and write the result JSON."""
    _setup_logging(verbose)
    load_dotenv()

    if not (os.environ.get("GOOGLE_API_KEY") or os.environ.get("GOOGLE_GENAI_USE_VERTEXAI")):
        console.print("[red]GOOGLE_API_KEY (or GOOGLE_GENAI_USE_VERTEXAI) must be set.[/red]")
        raise typer.Exit(code=1)

    overrides = {
        "seed_keywords": _split(seeds),
        "target_country": country,
        "competitors": _split(competitors),
        "cpc_range": {"min": cpc_min, "max": cpc_max},
        "api_base_url": api,
    }
    if product:
        overrides["product"] = {
            "name": product,
            "description": product_desc,
            "target": product_target,
            "integrations": product_integrations,
        }

    try:
        config = config_from_env(**overrides)

        console.print("\n[bold]Pipeline configuration[/bold]")
        console.print(f"  API base URL: {config.api_base_url}")
        console.print(f"  Country:      {config.target_country}")
        console.print(f"  Seeds:        {', '.join(config.seed_keywords)}")
        console.print(f"  Competitors:  {', '.join(config.competitors)}")
        console.print(f"  CPC range:    {config.cpc_range.min:g}-{config.cpc_range.max:g}")
        if config.product:
            console.print(f"  Product:      {config.product.name}")

        status = check_backend_status(config.api_base_url)
        console.print("  Server:       [green]reachable[/green]")
        if status.get("credentialsConfigured") is False and config.credentials is None:
            console.print("  [yellow]Backend reports no data API credentials configured.[/yellow]")
        console.print()

        result = run_pipeline_sync(config, on_progress=_print_progress)
    except KeywordPipelineError as e:
        console.print(f"\n[red]Pipeline failed:[/red] {escape(e.message)}")
        raise typer.Exit(code=1)

    _print_summary(result)
    out_file = output or _default_output()
    out_file.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    console.print(f"\nResults saved to: {out_file}")


if __name__ == "__main__":
    app()

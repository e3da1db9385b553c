"""Command-line interface for PixelScope."""

import json
import logging
import sys
from pathlib import Path

import click
import rich.traceback
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .analysis.analyzer import ImageAnalyzer
from .analysis.results import ImageAnalysis
from .errors import ImageLoadError, InvalidInput
from .image.loader import load_pixel_buffer
from .utils.config import ConfigError, ConfigManager
from .utils.logging import setup_logging

console = Console()
rich.traceback.install(console=console)

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
@click.option(
    "--config", type=click.Path(exists=True), help="Path to configuration file"
)
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, config):
    """PixelScope: pixel statistics, palettes and insights for images."""
    ctx.ensure_object(dict)

    try:
        manager = ConfigManager.from_env(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(str(manager.get("logging.level", "INFO")).upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    setup_logging(
        level=log_level,
        log_file=manager.get("logging.file"),
        enable_colors=bool(manager.get("logging.colors", True)),
    )

    ctx.obj["config_manager"] = manager
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command()
@click.argument("input_image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--profile",
    type=click.Choice(["fast", "balanced", "detailed"]),
    help="Apply a predefined configuration profile",
)
@click.option("--palette-size", type=int, help="Maximum number of palette colors")
@click.option("--levels", type=int, help="Quantization levels per channel")
@click.option("--min-share", type=float, help="Minimum palette share in percent")
@click.option(
    "--merge-distance",
    type=float,
    help="Delta E below which palette buckets merge (0 disables)",
)
@click.option("--max-samples", type=int, help="Pixel budget before sub-sampling")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON")
@click.option("--output", "-o", type=click.Path(), help="Write the analysis to a JSON file")
@click.pass_context
def analyze(
    ctx,
    input_image,
    profile,
    palette_size,
    levels,
    min_share,
    merge_distance,
    max_samples,
    as_json,
    output,
):
    """Analyze an image and report its statistics."""
    manager: ConfigManager = ctx.obj["config_manager"]

    try:
        if profile:
            manager.apply_profile(profile)

        overrides = {
            "palette.size": palette_size,
            "palette.levels": levels,
            "palette.min_share": min_share,
            "palette.merge_distance": merge_distance,
            "sampling.max_samples": max_samples,
        }
        for key, value in overrides.items():
            if value is not None:
                manager.set(key, value)

        analyzer = ImageAnalyzer(manager.get_analysis_config())
        buffer = load_pixel_buffer(input_image)
        result = analyzer.analyze(buffer)

    except (ConfigError, ImageLoadError, InvalidInput) as e:
        logger.error(f"Error during analysis: {e}", exc_info=ctx.obj["verbose"])
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not ctx.obj["quiet"]:
        render_analysis(result, Path(input_image).name)

    if output:
        with open(output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        if not as_json:
            click.echo(f"\nAnalysis saved to {output}")


def render_analysis(result: ImageAnalysis, title: str) -> None:
    """Print an analysis as rich tables."""
    summary = Table(title=title, show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value")

    summary.add_row(
        "Dimensions",
        f"{result.width} x {result.height} px ({result.megapixels:.2f} MP)",
    )
    summary.add_row("Aspect ratio", f"{result.aspect_ratio} ({result.orientation})")
    summary.add_row("Entropy", f"{result.entropy:.2f} bits")

    average = result.average_color
    summary.add_row(
        "Average color",
        f"[on {average.hex}]    [/] {average.hex.upper()}  R{average.r} G{average.g} B{average.b}",
    )
    summary.add_row("Brightness", f"{result.brightness}%")
    summary.add_row("Contrast", f"{result.contrast}%")
    console.print(summary)

    if result.palette:
        palette = Table(title="Dominant colors")
        palette.add_column("", width=4)
        palette.add_column("Hex")
        palette.add_column("Share", justify="right")
        for entry in result.palette:
            palette.add_row(f"[on {entry.hex}]    [/]", entry.hex, f"{entry.percentage:.1f}%")
        console.print(palette)
    else:
        console.print("[yellow]No dominant colors could be extracted.[/yellow]")

    if result.insights:
        body = "\n".join(f"- {insight}" for insight in result.insights)
        console.print(Panel(body, title="Insights", expand=False))


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="./pixelscope.yaml",
    help="Output configuration file path (.yaml or .json)",
)
@click.option(
    "--profile",
    type=click.Choice(["fast", "balanced", "detailed"]),
    help="Start from a predefined profile",
)
def init_config(output, profile):
    """Initialize a default configuration file."""
    manager = ConfigManager()
    if profile:
        manager.apply_profile(profile)

    manager.save_config(output)
    click.echo(f"Configuration created at: {output}")
    logger.info(f"Initialized config file at {output} (profile={profile})")


@cli.command()
def version():
    """Display PixelScope version."""
    click.echo(f"PixelScope Version: {__version__}")


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()

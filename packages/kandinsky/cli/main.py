"""Command-line interface for the Kandinsky client.

Commands:
    kandinsky models    list the models offered to the configured credentials
    kandinsky generate  generate one image and save it
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kandinsky.core.api.http.errors import ApiError
from kandinsky.core.config.loader import load_settings
from kandinsky.core.config.models import KandinskySettings
from kandinsky.core.generation.client import KandinskyClient
from kandinsky.core.generation.errors import KandinskyError
from kandinsky.core.generation.image import save_as
from kandinsky.core.generation.models import GenerationParams
from kandinsky.core.utils.logging import configure_logging_from_config, get_logger

console = Console()
logger = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> KandinskySettings:
    settings = load_settings(Path(args.config) if args.config else None)
    if args.verbose:
        settings = settings.model_copy(
            update={"logging": settings.logging.model_copy(update={"level": "DEBUG"})}
        )
    configure_logging_from_config(settings.logging)
    return settings


def _build_params(args: argparse.Namespace, settings: KandinskySettings) -> GenerationParams:
    """Merge command-line options over the settings' generation defaults."""
    return GenerationParams(
        query=args.prompt,
        style=args.style or settings.default_style,
        width=args.width if args.width is not None else settings.default_width,
        height=args.height if args.height is not None else settings.default_height,
        negative_prompt=args.negative or settings.default_negative_prompt,
    )


def run_models(args: argparse.Namespace, settings: KandinskySettings) -> int:
    """Print the models offered to the configured credentials."""
    with KandinskyClient.from_settings(settings) as client:
        models = client.list_models()

    table = Table(title="Available models")
    table.add_column("id", justify="right")
    table.add_column("name")
    table.add_column("version")
    table.add_column("type")
    for model in models:
        table.add_row(str(model.id), model.name, f"{model.version:g}", model.type)
    console.print(table)
    return 0


def run_generate(args: argparse.Namespace, settings: KandinskySettings) -> int:
    """Generate one image and save it to the output directory."""
    params = _build_params(args, settings)
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    log = get_logger(__name__, prompt_chars=len(params.query))

    with KandinskyClient.from_settings(settings) as client:
        model_id = client.resolve_model()
        console.print(f"[green]Model:[/green] {model_id}")
        handle = client.submit(params)
        console.print(f"[green]Task:[/green] {handle.uuid} ({handle.status})")
        with console.status("Waiting for the image..."):
            result = client.await_completion(handle, timeout=args.timeout)

    if result.censored:
        console.print("[yellow]Warning: the service flagged this image as censored[/yellow]")

    target = save_as(result, args.name or handle.uuid, out_dir, args.format)
    log.info("Generation finished for task %s", handle.uuid)
    console.print(f"[green]Saved:[/green] {target}")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="kandinsky",
        description="Kandinsky - text-to-image generation through the FusionBrain API",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to settings file (json/yaml)")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("models", parents=[common], help="List available models")

    gen = sub.add_parser("generate", parents=[common], help="Generate an image from a prompt")
    gen.add_argument("--prompt", required=True, help="Text prompt")
    gen.add_argument("--style", default=None, help="Style (default from settings)")
    gen.add_argument("--width", type=int, default=None, help="Width in pixels (>= 128)")
    gen.add_argument("--height", type=int, default=None, help="Height in pixels (>= 128)")
    gen.add_argument("--negative", default=None, help="Negative prompt")
    gen.add_argument("--out", default=".", help="Output directory (default: current dir)")
    gen.add_argument("--name", default=None, help="File name without extension (default: task id)")
    gen.add_argument("--format", default="png", choices=["png", "jpg"], help="Image format")
    gen.add_argument(
        "--timeout", type=float, default=None, help="Give up after this many seconds"
    )

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    args = build_arg_parser().parse_args(argv)
    commands = {"models": run_models, "generate": run_generate}

    try:
        settings = _load(args)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]ERROR: Could not load config: {escape(str(e))}[/red]")
        return 1

    try:
        return commands[args.cmd](args, settings)
    except (KandinskyError, ApiError, ValidationError) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line interface for smoothing recorded pose traces.
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from posesmooth.config.settings import FilterConfig, FilterVariant, ScalePolicy, Settings
from posesmooth.core.pipeline import smooth_trace
from posesmooth.data.trace import export_csv, export_json, load_trace
from posesmooth.utils.logging_utils import setup_logging

console = Console()


def load_config(path: Optional[Path]) -> FilterConfig:
    """Filter configuration from a YAML or JSON settings file, or defaults."""
    if path is None:
        return FilterConfig()
    if path.suffix.lower() in (".yaml", ".yml"):
        return FilterConfig.from_yaml(path)

    settings = Settings(path, config=FilterConfig())
    if not settings.load():
        raise ValueError(f"Could not read configuration from {path}")
    return settings.snapshot()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="posesmooth",
        description="Smooth a recorded pose trace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Smooth with default settings
  posesmooth trace.json --output smoothed.json

  # Use the speed-adaptive lerp variant and export CSV too
  posesmooth trace.json --output smoothed --variant adaptive_alpha_lerp --export-format both

  # Use a saved configuration
  posesmooth trace.json --output smoothed.json --config filter.yaml
        """,
    )

    parser.add_argument("trace", type=Path, help="Recorded trace (JSON)")
    parser.add_argument("--output", type=Path, required=True, help="Output file path (JSON or CSV)")
    parser.add_argument("--config", type=Path, help="Configuration file (YAML or JSON)")

    parser.add_argument(
        "--variant",
        choices=[v.name.lower() for v in FilterVariant],
        help="Pose filter variant",
    )
    parser.add_argument(
        "--scale-policy",
        choices=[p.name.lower() for p in ScalePolicy],
        help="How overscanned scale is applied",
    )
    parser.add_argument("--min-cutoff", type=float, help="One-Euro minimum cutoff (Hz)")
    parser.add_argument("--beta", type=float, help="One-Euro speed coefficient")
    parser.add_argument("--overscan", type=float, help="Uniform scale multiplier")
    parser.add_argument("--no-smoothing", action="store_true", help="Pass raw poses through")

    parser.add_argument(
        "--nominal-dt",
        type=float,
        default=1.0 / 60.0,
        help="Frame interval assumed after each acquisition (s)",
    )
    parser.add_argument(
        "--export-format",
        choices=["json", "csv", "both"],
        default="json",
        help="Export format",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    return parser


def apply_overrides(config: FilterConfig, args: argparse.Namespace) -> FilterConfig:
    """Apply command-line overrides on top of a loaded configuration."""
    changes = {}
    if args.variant:
        changes["variant"] = FilterVariant[args.variant.upper()]
    if args.scale_policy:
        changes["scale_policy"] = ScalePolicy[args.scale_policy.upper()]
    if args.min_cutoff is not None:
        changes["min_cutoff"] = args.min_cutoff
    if args.beta is not None:
        changes["beta"] = args.beta
    if args.overscan is not None:
        changes["overscan"] = args.overscan
    if args.no_smoothing:
        changes["smoothing_enabled"] = False

    return replace(config, **changes).clamped()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = apply_overrides(load_config(args.config), args)
        frames = load_trace(args.trace)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading input:[/red] {e}")
        return 1

    console.print(f"[bold green]Smoothing trace:[/bold green] {args.trace} ({len(frames)} frames)")
    console.print(
        f"  variant={config.variant.name} min_cutoff={config.min_cutoff} "
        f"beta={config.beta} overscan={config.overscan}"
    )

    results = smooth_trace(frames, config, nominal_dt=args.nominal_dt, show_progress=True)

    console.print("\n[cyan]Exporting results...[/cyan]")

    if args.export_format in ["json", "both"]:
        json_path = args.output.with_suffix(".json")
        export_json(results, json_path)
        console.print(f"[green]✓[/green] Exported JSON: {json_path}")

    if args.export_format in ["csv", "both"]:
        csv_path = args.output.with_suffix(".csv")
        export_csv(results, csv_path)
        console.print(f"[green]✓[/green] Exported CSV: {csv_path}")

    updated = sum(1 for row in results if row["updated"])
    gaps = sum(1 for row in results if not row["tracked"])
    console.print(f"\n[bold green]✓ Smoothing complete![/bold green]")
    console.print(f"  Frames updated: {updated}/{len(results)}")
    console.print(f"  Untracked frames: {gaps}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

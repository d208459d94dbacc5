#!/usr/bin/env python3
"""
Command-line interface for the Silhouette to Mesh converter.

This module handles all the CLI-specific stuff: argument parsing, pretty
printing, error display, etc. The actual conversion logic lives in
silhouette_to_mesh.py and can be imported/used programmatically.
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel
from rich.table import Table
from rich import box

from .constants import (
    THICKNESS,
    EDGE_DIVISIONS,
    POINT_DECIMATION_STEP,
    TEXTURE_SIZE_PX,
    DEFAULT_OUTPUT_SUFFIX,
    DEFAULT_OUTPUT_FORMAT,
    SUPPORTED_OUTPUT_FORMATS,
    SUPPORTED_IMAGE_EXTENSIONS,
    __version__
)
from .config import ExtrusionConfig
from .silhouette_to_mesh import convert_image_to_mesh
from .triangulator import TriangulationError
from .mesh_exporter import check_output_format

# Create Rich consoles for output and errors
console = Console()
error_console = Console(stderr=True)

# Human-readable stage labels for the progress spinner
STAGE_LABELS = {
    'load': "[cyan]📁 Loading image...",
    'detect': "[magenta]🔍 Detecting silhouette...",
    'outline': "[magenta]✏️  Preparing outline...",
    'triangulate': "[blue]🔺 Triangulating...",
    'extrude': "[blue]🎲 Extruding...",
    'validate': "[yellow]🩺 Validating...",
    'export': "[green]📦 Writing mesh file...",
}


def is_image_file(filepath: Path) -> bool:
    """Check if a file is a supported image format."""
    return filepath.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS


def default_output_path(input_path: Path, output_format: str) -> Path:
    """{input_name}_model.{format} next to the input."""
    return input_path.with_name(input_path.stem + DEFAULT_OUTPUT_SUFFIX + '.' + output_format)


def configure_logging(verbose: bool) -> None:
    """Send the package's log records to stderr when --verbose is given."""
    package_logger = logging.getLogger('silhouette_to_mesh')
    if not verbose:
        return
    package_logger.setLevel(logging.DEBUG)
    # Add handler only if one doesn't exist
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('   [%(name)s] %(message)s'))
        package_logger.addHandler(handler)


def generate_batch_summary(
    results: Dict[str, List[Dict[str, Any]]],
    output_folder: Path,
    start_time: datetime,
    end_time: datetime
) -> str:
    """
    Generate a Markdown summary of batch processing results.

    Args:
        results: Dictionary with 'success' and 'failed' lists
        output_folder: Where to write the summary file
        start_time: When batch processing started
        end_time: When batch processing finished

    Returns:
        Path to the generated summary file
    """
    timestamp = start_time.strftime("%Y%m%d%H%M%S")
    summary_path = output_folder / f"batch_summary_{timestamp}.md"

    duration = end_time - start_time

    lines = []
    lines.append("# Batch Conversion Summary")
    lines.append(f"**Date:** {start_time.strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"**Duration:** {duration.total_seconds():.1f} seconds")
    lines.append("")

    lines.append("## Results Overview")
    lines.append(f"- ✅ **Successful:** {len(results['success'])} files")
    lines.append(f"- ❌ **Failed:** {len(results['failed'])} files")
    lines.append(f"- 📁 **Total processed:** {len(results['success']) + len(results['failed'])} files")
    lines.append("")

    if results['success']:
        lines.append("## ✅ Successful Conversions")
        lines.append("")
        lines.append("| Input File | Output File | Outline Points | Vertices | Triangles | File Size |")
        lines.append("|------------|-------------|----------------|----------|-----------|-----------|")

        for item in results['success']:
            lines.append(
                f"| {item['input_file']} | {item['output_file']} | "
                f"{item['num_outline_points']} | {item['num_vertices']} | "
                f"{item['num_triangles']} | {item['file_size']} |"
            )
        lines.append("")

    if results['failed']:
        lines.append("## ❌ Failed Files")
        lines.append("")
        lines.append("These files encountered errors during conversion:")
        lines.append("")

        for item in results['failed']:
            lines.append(f"### {item['input_file']}")
            lines.append(f"**Error:** {item['error']}")
            lines.append("")

    summary_path.write_text('\n'.join(lines), encoding='utf-8')

    return str(summary_path)


def process_batch(
    input_folder: Path,
    output_folder: Path,
    config: ExtrusionConfig,
    recurse: bool = False
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Process all images in a folder in batch mode.

    A failing image (no silhouette, untriangulatable outline, ...) is
    recorded and the batch moves on to the next file.

    Args:
        input_folder: Folder containing input images
        output_folder: Folder where output files should be written
        config: ExtrusionConfig object with conversion parameters
        recurse: If True, process subfolders recursively and maintain folder structure

    Returns:
        Dictionary with 'success' and 'failed' results
    """
    results: Dict[str, List[Dict[str, Any]]] = {
        'success': [],
        'failed': []
    }

    output_folder.mkdir(parents=True, exist_ok=True)

    if recurse:
        image_files = [f for f in input_folder.rglob('*') if f.is_file() and is_image_file(f)]
    else:
        image_files = [f for f in input_folder.iterdir() if f.is_file() and is_image_file(f)]

    if not image_files:
        console.print(f"[yellow]⚠️  No image files found in {input_folder}[/yellow]")
        return results

    console.print(f"[cyan]📁 Found {len(image_files)} image(s) to process[/cyan]")
    console.print()

    for i, input_path in enumerate(sorted(image_files), start=1):
        console.print(f"[cyan][{i}/{len(image_files)}] Processing: {input_path.name}[/cyan]")

        relative_path = input_path.relative_to(input_folder)
        input_display = str(relative_path) if recurse else input_path.name

        if recurse:
            # Same subfolder structure in output
            output_file_path = output_folder / relative_path.parent / (
                relative_path.stem + DEFAULT_OUTPUT_SUFFIX + '.' + config.output_format
            )
            output_file_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            output_file_path = output_folder / (
                input_path.stem + DEFAULT_OUTPUT_SUFFIX + '.' + config.output_format
            )

        try:
            stats = convert_image_to_mesh(
                input_path=str(input_path),
                output_path=str(output_file_path),
                config=config,
                progress_callback=None  # No progress in batch mode
            )
        except (ValueError, RuntimeError, OSError) as e:
            results['failed'].append({
                'input_file': input_display,
                'error': str(e)
            })
            error_console.print(f"[red]   ❌ Failed: {e}[/red]")
            console.print()
            continue

        output_display = str(output_file_path.relative_to(output_folder)) if recurse else output_file_path.name
        results['success'].append({
            'input_file': input_display,
            'output_file': output_display,
            'num_outline_points': stats['num_outline_points'],
            'num_vertices': stats['num_vertices'],
            'num_triangles': stats['num_triangles'],
            'file_size': stats['file_size']
        })
        console.print(
            f"[green]   ✅ Success: {stats['num_outline_points']} outline points, "
            f"{stats['num_triangles']} triangles, {stats['file_size']}[/green]"
        )
        console.print()

    return results


def build_parser() -> argparse.ArgumentParser:
    """Set up the command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="Turn a photo of an object into a textured, beveled 3D model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single file conversion
  %(prog)s cookie.jpg
  %(prog)s sticker.png --output sticker.glb
  %(prog)s leaf.png --thickness 0.08 --decimation 16

  # Batch mode
  %(prog)s --batch --batch-input photos/ --batch-output models/
  %(prog)s --batch --batch-input photos/ --batch-output models/ --recurse

The program will:
  1. Load your photo and find the object's silhouette
  2. Cut the object out as a texture
  3. Triangulate the outline
  4. Extrude it into a solid with a rounded rim
  5. Export the mesh (glb keeps the texture)
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program's version number and exit"
    )

    parser.add_argument(
        "image_file",
        type=str,
        nargs='?',
        help="Input photo (PNG, JPG, etc.) - not used in batch mode"
    )

    parser.add_argument(
        "--batch",
        action="store_true",
        help="Enable batch mode to process multiple images from a folder"
    )

    parser.add_argument(
        "--batch-input",
        type=str,
        default="batch/input",
        help="Input folder for batch mode (default: batch/input)"
    )

    parser.add_argument(
        "--batch-output",
        type=str,
        default="batch/output",
        help="Output folder for batch mode (default: batch/output)"
    )

    parser.add_argument(
        "--recurse",
        action="store_true",
        help="Process subfolders recursively in batch mode, maintaining folder structure in output"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output mesh file path (default: {input_name}_model.{format})"
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=sorted(SUPPORTED_OUTPUT_FORMATS),
        default=None,
        help=f"Output format (default: from --output extension, else {DEFAULT_OUTPUT_FORMAT})"
    )

    parser.add_argument(
        "--thickness",
        type=float,
        default=THICKNESS,
        help=f"Thickness of the solid relative to its largest dimension (default: {THICKNESS})"
    )

    parser.add_argument(
        "--edge-divisions",
        type=int,
        default=EDGE_DIVISIONS,
        help=f"Ring transitions in the beveled rim (default: {EDGE_DIVISIONS})"
    )

    parser.add_argument(
        "--decimation",
        type=int,
        default=POINT_DECIMATION_STEP,
        help=f"Keep every Nth contour point (default: {POINT_DECIMATION_STEP})"
    )

    parser.add_argument(
        "--texture-size",
        type=int,
        default=TEXTURE_SIZE_PX,
        help=f"Texture canvas size in pixels (default: {TEXTURE_SIZE_PX})"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the mesh (watertight, consistent winding) before writing it"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed log output"
    )

    return parser


def _resolve_output_format(args: argparse.Namespace) -> str:
    """
    --format wins, then the --output extension, then the default.

    Raises ValueError when --output has an extension we can't write.
    """
    suffix = Path(args.output).suffix if args.output else ""
    suffix_format = check_output_format(suffix) if suffix else None
    if args.format:
        return args.format
    return suffix_format or DEFAULT_OUTPUT_FORMAT


def main():
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.batch:
        if args.image_file:
            error_console.print("[red]❌ Error: Don't specify an image file when using --batch mode[/red]")
            error_console.print("[red]   Use --batch-input to specify the input folder instead[/red]")
            sys.exit(1)
    else:
        if not args.image_file:
            error_console.print("[red]❌ Error: Image file is required (or use --batch mode)[/red]")
            parser.print_help()
            sys.exit(1)

    configure_logging(args.verbose)

    try:
        config = ExtrusionConfig(
            thickness=args.thickness,
            edge_divisions=args.edge_divisions,
            decimation_step=args.decimation,
            texture_size_px=args.texture_size,
            output_format=_resolve_output_format(args),
            validate_mesh=args.validate
        )
    except ValueError as e:
        error_console.print(f"[red]❌ Error: Invalid configuration: {e}[/red]")
        sys.exit(1)

    # =========================================================================
    # BATCH MODE
    # =========================================================================
    if args.batch:
        console.print(Panel.fit(
            "[bold cyan]🧩 Silhouette to Mesh Converter - BATCH MODE[/bold cyan]",
            border_style="cyan"
        ))
        console.print()

        input_folder = Path(args.batch_input)
        output_folder = Path(args.batch_output)

        if not input_folder.is_dir():
            error_console.print(f"[red]❌ Error: Input folder not found: {input_folder}[/red]")
            sys.exit(1)

        console.print(f"[cyan]📂 Input folder:  {input_folder}[/cyan]")
        console.print(f"[cyan]📂 Output folder: {output_folder}[/cyan]")
        console.print(f"[cyan]🔄 Recursive:     {args.recurse}[/cyan]")
        console.print()

        start_time = datetime.now()
        results = process_batch(input_folder, output_folder, config, recurse=args.recurse)
        end_time = datetime.now()

        summary_path = generate_batch_summary(results, output_folder, start_time, end_time)

        console.print(Panel.fit(
            "[bold green]✅ Batch processing complete![/bold green]",
            border_style="green"
        ))
        console.print("[bold]📊 Results:[/bold]")
        console.print(f"   [green]✅ Successful: {len(results['success'])} files[/green]")
        console.print(f"   [red]❌ Failed:     {len(results['failed'])} files[/red]")
        console.print()
        console.print(f"[cyan]📄 Summary: {summary_path}[/cyan]")
        console.print()

        if results['failed']:
            sys.exit(1)
        return

    # =========================================================================
    # SINGLE-FILE MODE
    # =========================================================================
    input_path = Path(args.image_file)
    if not input_path.exists():
        error_console.print(f"[red]❌ Error: Input file not found: {args.image_file}[/red]")
        sys.exit(1)

    output_path = args.output or str(default_output_path(input_path, config.output_format))

    console.print(Panel.fit(
        "[bold cyan]🧩 Silhouette to Mesh Converter[/bold cyan]",
        border_style="cyan"
    ))
    console.print()

    config_table = Table(title="Configuration", box=box.ROUNDED, show_header=True, header_style="bold cyan")
    config_table.add_column("Parameter", style="bold yellow")
    config_table.add_column("Value", style="white")
    config_table.add_row("Input File", str(input_path))
    config_table.add_row("Output File", output_path)
    config_table.add_row("Format", config.output_format)
    config_table.add_row("Thickness", str(config.thickness))
    config_table.add_row("Edge Divisions", str(config.edge_divisions))
    config_table.add_row("Decimation", f"every {config.decimation_step} points")
    config_table.add_row("Texture Size", f"{config.texture_size_px}px")
    config_table.add_row("Validation", "Enabled" if config.validate_mesh else "Disabled")
    console.print(config_table)
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=False
    ) as progress:
        tasks: Dict[str, Any] = {}

        def progress_callback(stage: str, message: str):
            label = STAGE_LABELS.get(stage, stage)
            if stage not in tasks:
                # A new stage means every earlier one is done
                for task_id in tasks.values():
                    progress.update(task_id, completed=1, total=1)
                tasks[stage] = progress.add_task(label, total=None)
            progress.update(tasks[stage], description=f"{label} {message}")

        try:
            stats = convert_image_to_mesh(
                input_path=str(input_path),
                output_path=output_path,
                config=config,
                progress_callback=progress_callback
            )
            for task_id in tasks.values():
                progress.update(task_id, completed=1, total=1)
        except FileNotFoundError as e:
            error_console.print(f"\n[red]❌ Error: {e}[/red]")
            sys.exit(1)
        except TriangulationError as e:
            error_console.print(f"\n[red]❌ Could not triangulate the outline: {e}[/red]")
            error_console.print("[red]   Try a different photo or a different --decimation value[/red]")
            sys.exit(1)
        except (ValueError, RuntimeError) as e:
            error_console.print(f"\n[red]❌ Error: {e}[/red]")
            sys.exit(1)

    console.print()
    console.print(Panel.fit(
        "[bold green]✅ Conversion complete![/bold green]",
        border_style="green"
    ))

    stats_table = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    stats_table.add_column("Label", style="bold cyan")
    stats_table.add_column("Value", style="white")
    x, y, width, height = stats['piece_box']
    stats_table.add_row("Image:", f"{stats['image_width']} x {stats['image_height']} pixels")
    stats_table.add_row("Piece:", f"{width} x {height} pixels at ({x}, {y})")
    stats_table.add_row("Outline:", f"{stats['num_contour_points']} -> {stats['num_outline_points']} points")
    stats_table.add_row("Mesh:", f"{stats['num_vertices']} vertices, {stats['num_triangles']} triangles")
    stats_table.add_row("Output:", f"{stats['output_path']} ({stats['file_size']})")
    console.print(stats_table)
    console.print()


if __name__ == "__main__":
    main()

"""Command-line interface for oss_attribution.

Provides the entry point that scans npm projects and writes the
attribution document and its backing JSON record.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from oss_attribution.merge import (
    apply_overrides,
    dedupe_by_name,
    exclude_top_level,
    load_overrides,
    merge_scan_results,
    read_project_identity,
)
from oss_attribution.models import BatchResult, RawScanRecord
from oss_attribution.reporters import JsonReporter, TextReporter
from oss_attribution.resolvers import BatchResolver
from oss_attribution.scanners import get_scanner

app = typer.Typer(
    name="oss-attribution",
    help=(
        "Calculate the npm modules used in this project and generate a "
        "third-party attribution (credits) text."
    ),
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("oss_attribution")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("oss_attribution").setLevel(level)


def _help_callback(ctx: typer.Context, value: bool) -> None:
    """Print usage and exit with status 1."""
    if value and not ctx.resilient_parsing:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


async def _scan_and_resolve(
    base_dirs: list[Path],
    concurrency: Optional[int],
    verbose: bool,
) -> BatchResult:
    """Scan every base directory and resolve the merged package set.

    Directories that are not npm projects are skipped. The top-level
    project, identified from the first scanned directory, is excluded.

    Args:
        base_dirs: Project directories to scan, in order.
        concurrency: Optional limit of concurrent resolutions.
        verbose: Whether to print verbose output.

    Returns:
        BatchResult with records deduplicated by name and any
        per-package resolution errors.

    Raises:
        ValueError: If a project manifest is invalid.
        Exception: If scanning fails.
    """
    scan_results: list[dict[str, RawScanRecord]] = []
    scanned_dirs: list[Path] = []

    for base_dir in base_dirs:
        try:
            scanner = get_scanner(base_dir)
        except ValueError as e:
            logger.warning("%s, skipping NPM checks for path %s", e, base_dir)
            continue
        scan_results.append(scanner.scan())
        scanned_dirs.append(base_dir)

    if not scanned_dirs:
        return BatchResult()

    if verbose:
        console.print(
            f"[dim]Looking at directories: {', '.join(str(d) for d in scanned_dirs)}[/dim]"
        )

    merged = merge_scan_results(scan_results)
    project_key = read_project_identity(scanned_dirs[0])
    candidates = exclude_top_level(merged, project_key)

    resolver = BatchResolver(concurrency=concurrency)
    batch = await resolver.resolve_batch(list(candidates.values()))
    batch.records = dedupe_by_name(batch.records)
    return batch


async def _run_gen(
    base_dirs: list[Path],
    output_dir: Path,
    template: Optional[Path],
    concurrency: Optional[int],
    allow_unresolved: bool,
    verbose: bool,
) -> int:
    """Async implementation of the attribution command."""
    _setup_logging(verbose)
    started = time.perf_counter()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning npm licenses...", total=None)

        try:
            batch = await _scan_and_resolve(
                base_dirs=base_dirs,
                concurrency=concurrency,
                verbose=verbose,
            )
        except ValueError as e:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
            return 1
        except Exception as e:
            err_console.print(f"[red]Error scanning licenses:[/red] {escape(str(e))}")
            return 1

        progress.update(task, completed=True)

    if verbose:
        console.print(f"[dim]Npm Licenses: {time.perf_counter() - started:.2f}s[/dim]")

    if not batch.ok:
        err_console.print(
            f"[red]Unable to resolve {len(batch.errors)} package(s):[/red]"
        )
        for message in batch.errors:
            err_console.print(f"  - {escape(message)}")
        if not allow_unresolved:
            return 1

    console.print(f"Resolved [bold]{len(batch.records)}[/bold] packages")

    try:
        overrides = load_overrides(output_dir)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    if overrides:
        console.print(f"Using overrides for [bold]{len(overrides)}[/bold] packages")
    records = apply_overrides(batch.records, overrides)

    try:
        json_reporter = JsonReporter()
        json_reporter.write(records, output_dir / json_reporter.default_filename)

        text_reporter = TextReporter.from_output_dir(output_dir, template_path=template)
        if text_reporter.header is not None and verbose:
            console.print("[dim]Using header.txt[/dim]")
        text_path = output_dir / text_reporter.default_filename
        text_reporter.write(records, text_path)
    except Exception as e:
        err_console.print(f"[red]ERROR writing attribution file:[/red] {escape(str(e))}")
        return 1

    console.print(f"[green]Generated:[/green] {text_path}")
    if verbose:
        console.print(f"[dim]Total Processing: {time.perf_counter() - started:.2f}s[/dim]")
    return 0


@app.command(context_settings={"help_option_names": []})
def generate(
    output_dir: Annotated[
        Path,
        typer.Option(
            "--outputDir",
            "--output-dir",
            "-o",
            help="Directory for attribution.txt and licenseInfos.json",
        ),
    ] = Path("./oss-attribution"),
    base_dir: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--baseDir",
            "--base-dir",
            "-b",
            help="npm project directory to scan (repeatable, default: current directory)",
        ),
    ] = None,
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template for a single attribution entry",
            exists=True,
            readable=True,
        ),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option(
            "--concurrency",
            "-j",
            help="Maximum number of packages resolved concurrently (default: CPU count)",
            min=1,
        ),
    ] = None,
    allow_unresolved: Annotated[
        bool,
        typer.Option(
            "--allow-unresolved",
            help="Write output even if some packages could not be resolved",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
    show_help: Annotated[
        bool,
        typer.Option(
            "--help",
            "-h",
            help="Show this message and exit.",
            callback=_help_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Generate a third-party attribution document for npm projects.

    Scans the production dependencies installed under each base directory
    and writes attribution.txt and licenseInfos.json to the output
    directory, applying overrides.json and header.txt from it if present.

    Exit codes:
        0 - Attribution generated
        1 - Scanning, resolution or writing failed
    """
    base_dirs = [path.resolve() for path in (base_dir or [Path.cwd()])]

    exit_code = asyncio.run(
        _run_gen(
            base_dirs=base_dirs,
            output_dir=output_dir.resolve(),
            template=template,
            concurrency=concurrency,
            allow_unresolved=allow_unresolved,
            verbose=verbose,
        )
    )
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()

"""Generate winnowing fingerprints (WFP) for files and folders."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from snippetscan.application.dto.scan import WfpRequest
from snippetscan.application.use_cases.fingerprint_files import fingerprint_files
from snippetscan.domain.errors import FileAccessError, InvalidInputError, SettingsError
from snippetscan.infrastructure.adapters.content_classifier import HeuristicContentClassifier
from snippetscan.infrastructure.adapters.file_discovery import LocalFileDiscovery
from snippetscan.infrastructure.adapters.local_file_reader import LocalFileReader
from snippetscan.infrastructure.adapters.memory_obfuscation_store import InMemoryObfuscationStore
from snippetscan.infrastructure.adapters.rich_progress_reporter import create_progress_reporter
from snippetscan.infrastructure.config.settings import Settings
from snippetscan.infrastructure.logging import configure_logging, get_correlation_id

app = typer.Typer(help="Generate winnowing fingerprints")
# stdout carries the WFP text
console = Console(stderr=True)
logger = logging.getLogger(__name__)


def split_target(path: Path) -> tuple[str, list[str] | None]:
    """Root folder and explicit file list for a file or folder argument."""
    if path.is_file():
        return str(path.parent), [path.name]
    return str(path), None


@app.command()
def run(
    path: Path = typer.Argument(..., help="File or folder to fingerprint"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the WFP to this file instead of stdout"),
    skip_snippets: bool = typer.Option(False, "--skip-snippets", help="Only emit file-level hashes"),
    all_extensions: bool = typer.Option(False, "--all-extensions", help="Fingerprint every file extension"),
    hpsm: bool = typer.Option(False, "--hpsm", help="Add High Precision Snippet Matching hashes"),
    obfuscate: bool = typer.Option(False, "--obfuscate", help="Replace file paths with identifiers"),
    hidden: bool = typer.Option(False, "--hidden", help="Include hidden files and folders"),
    threads: int | None = typer.Option(None, "--threads", "-T", min=1, help="Number of worker threads"),
    config_path: Path | None = typer.Option(None, "--config", help="Path to snippetscan.toml configuration file"),
    progress: bool = typer.Option(False, "--progress", help="Show a progress bar"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Fingerprint a file or every eligible file of a folder.

    Examples:
        snippetscan wfp run src/ --output project.wfp
        snippetscan wfp run main.c --hpsm
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING, verbose=verbose)
    correlation_id = get_correlation_id()

    try:
        settings = Settings.from_toml(config_path)
    except SettingsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    defaults = settings.winnowing
    use_all_extensions = all_extensions or defaults.all_extensions
    root, files = split_target(path)
    request = WfpRequest(
        root=root,
        files=files,
        skip_snippets=skip_snippets or defaults.skip_snippets,
        all_extensions=use_all_extensions,
        hpsm=hpsm or defaults.hpsm,
        obfuscate=obfuscate or defaults.obfuscate,
        snippet_limit=defaults.snippet_limit,
        hidden_files=hidden or settings.scan.hidden_files,
        num_threads=threads or settings.scan.num_threads,
    )

    reporter = create_progress_reporter(progress)
    try:
        result = fingerprint_files(
            request,
            reader=LocalFileReader(),
            classifier=HeuristicContentClassifier(),
            discovery=LocalFileDiscovery(all_extensions=use_all_extensions),
            obfuscation_store=InMemoryObfuscationStore() if request.obfuscate else None,
            progress_reporter=reporter,
            correlation_id=correlation_id,
        )
    except (FileAccessError, InvalidInputError) as e:
        console.print(f"[red]Fingerprinting failed: {e}[/red]")
        raise typer.Exit(code=1)
    finally:
        reporter.cleanup()

    for failure in result.failures:
        console.print(f"[yellow]Skipped {failure.path}: {failure.error}[/yellow]")

    if output is None:
        typer.echo(result.wfp, nl=False)
        return

    try:
        output.write_text(result.wfp, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot write {output}: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]Fingerprinted {result.files_fingerprinted} files "
        f"({result.snippet_files} with snippets) into {output}[/green]"
    )

"""Scan files against the remote match service and curate the results."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from snippetscan.application.dto.scan import ScanRequest, ScanResult
from snippetscan.application.use_cases.scan_files import scan_files, scan_wfp
from snippetscan.domain.errors import FileAccessError, InvalidInputError, SettingsError
from snippetscan.domain.models.match_result import match_results_to_dict, parse_match_results
from snippetscan.domain.models.rules import RuleSet
from snippetscan.domain.services.result_curator import ResultCurator
from snippetscan.infrastructure.adapters.content_classifier import HeuristicContentClassifier
from snippetscan.infrastructure.adapters.file_discovery import LocalFileDiscovery
from snippetscan.infrastructure.adapters.local_file_reader import LocalFileReader
from snippetscan.infrastructure.adapters.memory_obfuscation_store import InMemoryObfuscationStore
from snippetscan.infrastructure.adapters.requests_scan_transport import RequestsScanTransport
from snippetscan.infrastructure.adapters.rich_progress_reporter import create_progress_reporter
from snippetscan.infrastructure.cli.commands.wfp import split_target
from snippetscan.infrastructure.config.settings import Settings, load_rule_set
from snippetscan.infrastructure.logging import configure_logging, get_correlation_id

app = typer.Typer(help="Scan files and curate match results")
# stdout carries the JSON results
console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _load_rules(rules_path: Path | None) -> RuleSet:
    if rules_path is None:
        return RuleSet()
    try:
        return load_rule_set(rules_path)
    except SettingsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def _load_settings(config_path: Path | None, api_url: str | None, api_key: str | None) -> Settings:
    try:
        settings = Settings.from_toml(config_path)
    except SettingsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    if api_url:
        settings.api.url = api_url
    if api_key:
        settings.api.api_key = api_key
    return settings


def _write_json(payload: dict[str, Any], output: Path | None) -> None:
    text = json.dumps(payload, indent=2)
    if output is None:
        typer.echo(text)
        return
    try:
        output.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot write {output}: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Results written to {output}[/green]")


def _print_summary(result: ScanResult) -> None:
    table = Table(title="Scan Summary", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Files Scanned", str(result.files_scanned))
    table.add_row("Requests Sent", str(result.requests_sent))
    table.add_row("Results", str(len(result.results)))
    table.add_row("Results Removed", str(result.results_removed))
    table.add_row("Failures", str(len(result.failures)))
    table.add_row("Duration", f"{result.duration_seconds:.2f}s")
    console.print(table)
    for failure in result.failures[:10]:
        console.print(f"[yellow]{failure.path}: {failure.error}[/yellow]")
    if len(result.failures) > 10:
        console.print(f"[yellow]... and {len(result.failures) - 10} more failures[/yellow]")


@app.command()
def run(
    path: Path = typer.Argument(..., help="File or folder to scan"),
    rules_path: Path | None = typer.Option(None, "--settings", "-s", help="JSON rule configuration (bom include/remove/replace)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write results JSON to this file instead of stdout"),
    skip_snippets: bool = typer.Option(False, "--skip-snippets", help="Only send file-level hashes"),
    all_extensions: bool = typer.Option(False, "--all-extensions", help="Fingerprint every file extension"),
    hpsm: bool = typer.Option(False, "--hpsm", help="Add High Precision Snippet Matching hashes"),
    obfuscate: bool = typer.Option(False, "--obfuscate", help="Replace file paths with identifiers"),
    hidden: bool = typer.Option(False, "--hidden", help="Include hidden files and folders"),
    threads: int | None = typer.Option(None, "--threads", "-T", min=1, help="Number of worker threads"),
    context: str | None = typer.Option(None, "--context", help="Scan context forwarded to the service"),
    api_url: str | None = typer.Option(None, "--api-url", help="Scan service endpoint"),
    api_key: str | None = typer.Option(None, "--api-key", help="Scan service API key"),
    config_path: Path | None = typer.Option(None, "--config", help="Path to snippetscan.toml configuration file"),
    progress: bool = typer.Option(False, "--progress", help="Show a progress bar"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Fingerprint a file or folder, scan it, and print curated results as JSON.

    Examples:
        snippetscan scan run src/ --settings scanoss.json --output results.json
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING, verbose=verbose)
    correlation_id = get_correlation_id()
    settings = _load_settings(config_path, api_url, api_key)
    rules = _load_rules(rules_path or settings.scan.rules_file)

    defaults = settings.winnowing
    use_all_extensions = all_extensions or defaults.all_extensions
    root, files = split_target(path)
    request = ScanRequest(
        root=root,
        files=files,
        skip_snippets=skip_snippets or defaults.skip_snippets,
        all_extensions=use_all_extensions,
        hpsm=hpsm or defaults.hpsm,
        obfuscate=obfuscate or defaults.obfuscate,
        snippet_limit=defaults.snippet_limit,
        hidden_files=hidden or settings.scan.hidden_files,
        num_threads=threads or settings.scan.num_threads,
        context=context,
        max_wfp_bytes=settings.scan.max_wfp_bytes,
    )

    reporter = create_progress_reporter(progress)
    try:
        result = scan_files(
            request,
            reader=LocalFileReader(),
            classifier=HeuristicContentClassifier(),
            discovery=LocalFileDiscovery(all_extensions=use_all_extensions),
            transport=RequestsScanTransport(settings.api, rules=rules),
            rules=rules,
            obfuscation_store=InMemoryObfuscationStore() if request.obfuscate else None,
            progress_reporter=reporter,
            correlation_id=correlation_id,
        )
    except (FileAccessError, InvalidInputError) as e:
        console.print(f"[red]Scan failed: {e}[/red]")
        raise typer.Exit(code=1)
    finally:
        reporter.cleanup()

    _write_json(result.results, output)
    if output is not None or verbose:
        _print_summary(result)


@app.command("wfp")
def scan_wfp_file(
    wfp_file: Path = typer.Argument(..., help="Previously generated .wfp file"),
    rules_path: Path | None = typer.Option(None, "--settings", "-s", help="JSON rule configuration (bom include/remove/replace)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write results JSON to this file instead of stdout"),
    threads: int | None = typer.Option(None, "--threads", "-T", min=1, help="Number of concurrent requests"),
    context: str | None = typer.Option(None, "--context", help="Scan context forwarded to the service"),
    api_url: str | None = typer.Option(None, "--api-url", help="Scan service endpoint"),
    api_key: str | None = typer.Option(None, "--api-key", help="Scan service API key"),
    config_path: Path | None = typer.Option(None, "--config", help="Path to snippetscan.toml configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Scan the fingerprints of an existing WFP file."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING, verbose=verbose)
    correlation_id = get_correlation_id()
    settings = _load_settings(config_path, api_url, api_key)
    rules = _load_rules(rules_path or settings.scan.rules_file)

    try:
        wfp = wfp_file.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot read {wfp_file}: {e}[/red]")
        raise typer.Exit(code=1)

    try:
        result = scan_wfp(
            wfp,
            transport=RequestsScanTransport(settings.api, rules=rules),
            rules=rules,
            context=context,
            max_wfp_bytes=settings.scan.max_wfp_bytes,
            num_threads=threads or settings.scan.num_threads,
            correlation_id=correlation_id,
        )
    except (InvalidInputError, ValueError) as e:
        console.print(f"[red]Invalid WFP file {wfp_file}: {e}[/red]")
        raise typer.Exit(code=1)

    _write_json(result.results, output)
    if output is not None or verbose:
        _print_summary(result)


@app.command()
def curate(
    results_file: Path = typer.Argument(..., help="Saved scan results JSON"),
    rules_path: Path = typer.Option(..., "--settings", "-s", help="JSON rule configuration (bom remove/replace)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write curated JSON to this file instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Apply remove and replace rules to a saved results file without scanning."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING, verbose=verbose)
    rules = _load_rules(rules_path)

    try:
        payload = json.loads(results_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot load results from {results_file}: {e}[/red]")
        raise typer.Exit(code=1)
    if not isinstance(payload, dict):
        console.print(f"[red]Results in {results_file} must be a JSON object keyed by file path[/red]")
        raise typer.Exit(code=1)

    results = parse_match_results(payload)
    curated = ResultCurator().curate(results, rules)
    console.print(f"[cyan]{len(results) - len(curated)} of {len(results)} results removed[/cyan]")
    _write_json(match_results_to_dict(curated), output)

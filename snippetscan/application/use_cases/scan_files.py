from __future__ import annotations

import contextvars
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ...domain.errors import InvalidInputError, ScanApiError
from ...domain.models.fingerprint import FingerprintRecord, parse_wfp
from ...domain.models.match_result import match_results_to_dict, parse_match_results
from ...domain.models.rules import RuleSet
from ...domain.services.result_curator import ResultCurator
from ...infrastructure.logging import get_correlation_id
from ..dto.scan import FileFailure, ScanRequest, ScanResult
from ..ports.content_classifier import ContentClassifierPort
from ..ports.file_discovery import FileDiscoveryPort
from ..ports.file_reader import FileReaderPort
from ..ports.obfuscation_store import ObfuscationStorePort
from ..ports.progress_reporter import ProgressReporterPort
from ..ports.scan_transport import ScanTransportPort
from .fingerprint_files import build_winnowing_service, fingerprint_batch, resolve_files

logger = logging.getLogger(__name__)

DEFAULT_MAX_WFP_BYTES = 64 * 1024


def batch_records(records: list[FingerprintRecord], max_wfp_bytes: int) -> list[list[FingerprintRecord]]:
    """
    Group records into requests of at most ``max_wfp_bytes`` of WFP text.

    A single record larger than the limit is sent on its own.
    """
    batches: list[list[FingerprintRecord]] = []
    current: list[FingerprintRecord] = []
    current_size = 0
    for record in records:
        size = len(record.to_wfp().encode("utf-8"))
        if current and current_size + size > max_wfp_bytes:
            batches.append(current)
            current = []
            current_size = 0
        current.append(record)
        current_size += size
    if current:
        batches.append(current)
    return batches


def submit_records(
    records: list[FingerprintRecord],
    transport: ScanTransportPort,
    context: str | None = None,
    max_wfp_bytes: int = DEFAULT_MAX_WFP_BYTES,
    num_threads: int = 5,
    correlation_id: str | None = None,
) -> tuple[dict[str, Any], list[FileFailure], int]:
    """
    Send records to the scan service in batches and merge the replies.

    A rejected batch marks each of its files as failed; other batches still
    complete.

    Returns:
        (merged payload keyed by record path, failures, number of requests sent)
    """
    batches = batch_records(records, max_wfp_bytes)
    merged: dict[str, Any] = {}
    failures: list[FileFailure] = []

    def _submit(scan_id: int, batch: list[FingerprintRecord]) -> dict[str, Any]:
        wfp = "".join(record.to_wfp() for record in batch)
        return transport.scan(wfp, context=context, scan_id=scan_id)

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        futures = [
            executor.submit(contextvars.copy_context().run, _submit, scan_id, batch)
            for scan_id, batch in enumerate(batches, start=1)
        ]
        for batch, future in zip(batches, futures):
            try:
                merged.update(future.result())
            except ScanApiError as e:
                logger.error(
                    f"Scan request failed for {len(batch)} files: {e}",
                    extra={"correlation_id": correlation_id},
                )
                failures.extend(FileFailure(path=record.path, error=str(e)) for record in batch)
    return merged, failures, len(batches)


def _curated_result(
    merged: dict[str, Any],
    rules: RuleSet | None,
    files_scanned: int,
    requests_sent: int,
    failures: list[FileFailure],
    start_time: float,
    correlation_id: str,
) -> ScanResult:
    results = parse_match_results(merged)
    curated = ResultCurator().curate(results, rules or RuleSet())
    removed = len(results) - len(curated)
    duration = time.time() - start_time
    logger.info(
        f"Scan completed: {files_scanned} files in {requests_sent} requests, "
        f"{removed} results removed, {duration:.2f}s",
        extra={"correlation_id": correlation_id},
    )
    return ScanResult(
        results=match_results_to_dict(curated),
        files_scanned=files_scanned,
        requests_sent=requests_sent,
        results_removed=removed,
        duration_seconds=duration,
        failures=sorted(failures, key=lambda f: f.path),
    )


def scan_files(
    request: ScanRequest,
    reader: FileReaderPort,
    classifier: ContentClassifierPort,
    discovery: FileDiscoveryPort,
    transport: ScanTransportPort,
    rules: RuleSet | None = None,
    obfuscation_store: ObfuscationStorePort | None = None,
    progress_reporter: ProgressReporterPort | None = None,
    correlation_id: str | None = None,
) -> ScanResult:
    """
    Orchestrate a scan: fingerprint → submit → merge → de-obfuscate → curate.

    Args:
        request: ScanRequest with root, file selection, winnowing and batching options
        reader: FileReaderPort for loading file contents
        classifier: ContentClassifierPort for binary detection
        discovery: FileDiscoveryPort used when no explicit file list is given
        transport: ScanTransportPort submitting WFP batches to the match service
        rules: BOM rules used to curate the merged results (optional)
        obfuscation_store: Store mapping paths to identifiers (required with ``obfuscate``)
        progress_reporter: Optional progress reporter for the fingerprinting stage
        correlation_id: Optional correlation ID (generated if not provided)

    Returns:
        ScanResult with curated results keyed by original file path
    """
    start_time = time.time()
    correlation_id = correlation_id or get_correlation_id()
    winnowing = build_winnowing_service(request, obfuscation_store)
    files = resolve_files(request, discovery)

    logger.info(
        f"Scanning {len(files)} files under '{request.root}'",
        extra={"correlation_id": correlation_id, "threads": request.num_threads},
    )
    records, failures = fingerprint_batch(
        request.root,
        files,
        request.num_threads,
        reader,
        classifier,
        winnowing,
        progress_reporter,
    )
    merged, scan_failures, requests_sent = submit_records(
        records,
        transport,
        context=request.context,
        max_wfp_bytes=request.max_wfp_bytes,
        num_threads=request.num_threads,
        correlation_id=correlation_id,
    )
    failures.extend(scan_failures)

    if request.obfuscate and obfuscation_store is not None:
        merged = {obfuscation_store.deobfuscate(path): details for path, details in merged.items()}
        failures = [FileFailure(path=obfuscation_store.deobfuscate(f.path), error=f.error) for f in failures]

    return _curated_result(merged, rules, len(records), requests_sent, failures, start_time, correlation_id)


def scan_wfp(
    wfp: str,
    transport: ScanTransportPort,
    rules: RuleSet | None = None,
    context: str | None = None,
    max_wfp_bytes: int = DEFAULT_MAX_WFP_BYTES,
    num_threads: int = 5,
    correlation_id: str | None = None,
) -> ScanResult:
    """
    Scan previously generated WFP text and curate the results.

    Raises:
        InvalidInputError: If the text holds no fingerprint records
        ValueError: If the text is not valid WFP
    """
    start_time = time.time()
    correlation_id = correlation_id or get_correlation_id()
    records = parse_wfp(wfp)
    if not records:
        raise InvalidInputError("No fingerprints found in WFP. Cannot scan", field="wfp")

    logger.info(f"Scanning {len(records)} fingerprinted files", extra={"correlation_id": correlation_id})
    merged, failures, requests_sent = submit_records(
        records,
        transport,
        context=context,
        max_wfp_bytes=max_wfp_bytes,
        num_threads=num_threads,
        correlation_id=correlation_id,
    )
    return _curated_result(merged, rules, len(records), requests_sent, failures, start_time, correlation_id)

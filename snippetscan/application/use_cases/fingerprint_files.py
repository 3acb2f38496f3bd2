from __future__ import annotations

import contextvars
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from ...domain.errors import InvalidInputError
from ...domain.models.fingerprint import FingerprintRecord
from ...domain.policy.snippet_policy import SnippetPolicy
from ...domain.services.winnowing import WinnowingService
from ...infrastructure.logging import get_correlation_id
from ..dto.scan import FileFailure, WfpRequest, WfpResult
from ..ports.content_classifier import ContentClassifierPort
from ..ports.file_discovery import FileDiscoveryPort
from ..ports.file_reader import FileReaderPort
from ..ports.obfuscation_store import ObfuscationStorePort
from ..ports.progress_reporter import NullProgressReporter, ProgressReporterPort

logger = logging.getLogger(__name__)


def fingerprint_file(
    file_path: str,
    record_path: str,
    reader: FileReaderPort,
    classifier: ContentClassifierPort,
    winnowing: WinnowingService,
) -> FingerprintRecord:
    """
    Read, classify and fingerprint a single file.

    Args:
        file_path: Location of the file on disk
        record_path: Path to write into the fingerprint record
        reader: FileReaderPort used to load the contents
        classifier: ContentClassifierPort deciding binary vs text
        winnowing: WinnowingService producing the record

    Returns:
        FingerprintRecord for the file

    Raises:
        InvalidInputError: If either path is empty
        FileAccessError: If the file cannot be read
    """
    if not file_path:
        raise InvalidInputError("No filename specified. Cannot fingerprint", field="file_path")
    if not record_path:
        raise InvalidInputError("No record path specified. Cannot fingerprint", field="record_path")
    contents = reader.read_bytes(file_path)
    is_binary = classifier.is_binary(file_path, contents)
    return winnowing.fingerprint(record_path, is_binary, contents)


def build_winnowing_service(
    request: WfpRequest,
    obfuscation_store: ObfuscationStorePort | None = None,
) -> WinnowingService:
    """Create the winnowing service configured by a request."""
    policy = SnippetPolicy(
        skip_snippets=request.skip_snippets,
        all_extensions=request.all_extensions,
        hpsm=request.hpsm,
        obfuscate=request.obfuscate,
        snippet_limit=request.snippet_limit,
    )
    if request.obfuscate and obfuscation_store is None:
        raise InvalidInputError("Path obfuscation requires an obfuscation store", field="obfuscation_store")
    return WinnowingService(policy, path_mapper=obfuscation_store.obfuscate if obfuscation_store else None)


def resolve_files(request: WfpRequest, discovery: FileDiscoveryPort) -> list[str]:
    """Files to process, relative to the request root."""
    if not request.root:
        raise InvalidInputError("No folder/directory specified. Cannot process request", field="root")
    if request.files is None:
        return discovery.discover(request.root, hidden_files=request.hidden_files)
    if not request.files:
        raise InvalidInputError("No file list specified. Cannot process request", field="files")
    return sorted(set(request.files))


def fingerprint_batch(
    root: str,
    files: list[str],
    num_threads: int,
    reader: FileReaderPort,
    classifier: ContentClassifierPort,
    winnowing: WinnowingService,
    progress_reporter: ProgressReporterPort | None = None,
) -> tuple[list[FingerprintRecord], list[FileFailure]]:
    """
    Fingerprint many files on a worker pool, one task per file.

    A failure on one file is recorded and does not abort the batch.

    Returns:
        (records sorted by path, failures sorted by path)
    """
    reporter = progress_reporter or NullProgressReporter()
    progress = reporter.start_batch(total_files=len(files))
    records: list[FingerprintRecord] = []
    failures: list[FileFailure] = []

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        futures = {
            # Workers inherit the caller's correlation ID
            executor.submit(
                contextvars.copy_context().run,
                fingerprint_file,
                os.path.join(root, relative),
                relative,
                reader,
                classifier,
                winnowing,
            ): relative
            for relative in files
        }
        for future in as_completed(futures):
            relative = futures[future]
            try:
                records.append(future.result())
                progress.advance(relative)
            except Exception as e:
                logger.warning(f"Failed to fingerprint {relative}: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
                failures.append(FileFailure(path=relative, error=str(e)))
                progress.advance(relative, failed=True)
    progress.finish()

    # Ordered by the path written into each record (identifiers when obfuscated)
    records.sort(key=lambda record: record.path)
    failures.sort(key=lambda failure: failure.path)
    return records, failures


def fingerprint_files(
    request: WfpRequest,
    reader: FileReaderPort,
    classifier: ContentClassifierPort,
    discovery: FileDiscoveryPort,
    obfuscation_store: ObfuscationStorePort | None = None,
    progress_reporter: ProgressReporterPort | None = None,
    correlation_id: str | None = None,
) -> WfpResult:
    """
    Generate the WFP for a folder or an explicit list of files.

    Args:
        request: WfpRequest with root, optional file list and winnowing options
        reader: FileReaderPort for loading file contents
        classifier: ContentClassifierPort for binary detection
        discovery: FileDiscoveryPort used when no explicit file list is given
        obfuscation_store: Store mapping paths to identifiers (required with ``obfuscate``)
        progress_reporter: Optional progress reporter
        correlation_id: Optional correlation ID (generated if not provided)

    Returns:
        WfpResult with concatenated WFP text and per-file failures
    """
    start_time = time.time()
    correlation_id = correlation_id or get_correlation_id()
    winnowing = build_winnowing_service(request, obfuscation_store)
    files = resolve_files(request, discovery)

    logger.info(
        f"Fingerprinting {len(files)} files under '{request.root}'",
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
    duration = time.time() - start_time
    logger.info(
        f"Fingerprinted {len(records)} files ({len(failures)} failures) in {duration:.2f}s",
        extra={"correlation_id": correlation_id},
    )
    return WfpResult(
        wfp="".join(record.to_wfp() for record in records),
        files_fingerprinted=len(records),
        snippet_files=sum(1 for record in records if record.has_snippets),
        duration_seconds=duration,
        failures=failures,
    )

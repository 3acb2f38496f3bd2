from typing import Any

from pydantic import BaseModel, Field


class FileFailure(BaseModel):
    """A file that could not be processed within a batch."""

    path: str
    error: str


class WfpRequest(BaseModel):
    """Request DTO for the fingerprint files use case."""

    root: str
    files: list[str] | None = None  # Relative paths; None means discover everything under root
    skip_snippets: bool = False
    all_extensions: bool = False
    hpsm: bool = False
    obfuscate: bool = False
    snippet_limit: int = Field(default=1000, ge=0)
    hidden_files: bool = False
    num_threads: int = Field(default=5, ge=1)


class WfpResult(BaseModel):
    """Result DTO for the fingerprint files use case."""

    wfp: str
    files_fingerprinted: int
    snippet_files: int
    duration_seconds: float
    failures: list[FileFailure] = []


class ScanRequest(WfpRequest):
    """Request DTO for the scan files use case."""

    context: str | None = None
    max_wfp_bytes: int = Field(default=64 * 1024, ge=1024)


class ScanResult(BaseModel):
    """Result DTO for the scan files use case."""

    results: dict[str, list[dict[str, Any]]]
    files_scanned: int
    requests_sent: int
    results_removed: int
    duration_seconds: float
    failures: list[FileFailure] = []

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ScanTransportPort(Protocol):
    """Protocol for submitting fingerprints to the remote match service."""

    def scan(self, wfp: str, context: str | None = None, scan_id: int = 1) -> dict[str, Any]:
        """
        Submit WFP text for one or more files and return the match payload.

        Implementation Requirements:
        - Must send the WFP as the ``file`` part of a multipart form
        - Must retry timed out requests up to the configured retry limit
        - Must not mutate the WFP text

        Args:
            wfp: WFP text (one or more records)
            context: Optional scan context forwarded to the service
            scan_id: Sequence number of the request within a batch (for logging)

        Returns:
            Mapping from scanned file path to a list of match detail objects

        Raises:
            ScanApiError: If the service rejects the request or cannot be reached
        """
        ...

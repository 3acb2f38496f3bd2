"""Domain service for winnowing fingerprint generation."""

from __future__ import annotations

import hashlib
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from ..errors import InvalidInputError
from ..models.fingerprint import FingerprintRecord, SnippetLine
from ..policy.snippet_policy import MIN_FILE_SIZE, SKIP_SNIPPET_EXT, SnippetPolicy
from .hashing import crc32c, crc32c_hex_of_int
from .hpsm import calculate_hpsm
from .normalizer import normalize

logger = logging.getLogger(__name__)

GRAM = 30  # Winnowing gram size. Do NOT modify
WINDOW = 64  # Winnowing window size. Do NOT modify
MAX_CRC32 = 4294967296  # Sentinel above any 32-bit hash


@dataclass
class _WinnowState:
    """Accumulators for one fingerprint computation."""

    gram: str = ""
    window: deque[int] = field(default_factory=deque)
    line: int = 1
    last_line: int = 0
    last_hash: int = MAX_CRC32
    pending: list[str] = field(default_factory=list)
    pending_line: int = 0
    emitted: list[SnippetLine] = field(default_factory=list)

    def flush(self) -> None:
        if self.pending:
            self.emitted.append(SnippetLine(line_number=self.pending_line, hashes=tuple(self.pending)))
        self.pending = []


def _step(state: _WinnowState, c: str) -> None:
    if c == "\n":
        state.line += 1
        return
    normalized = normalize(c)
    if normalized is None:
        return
    state.gram += normalized
    if len(state.gram) < GRAM:
        return
    state.window.append(crc32c(state.gram.encode("ascii")))
    if len(state.window) >= WINDOW:
        min_hash = min(state.window)
        if min_hash != state.last_hash:
            token = crc32c_hex_of_int(min_hash)
            if state.last_line != state.line:
                state.flush()
                state.pending = [token]
                state.pending_line = state.line
            else:
                state.pending.append(token)
            state.last_line = state.line
            state.last_hash = min_hash
        state.window.popleft()
    state.gram = state.gram[1:]


def winnow(text: str) -> tuple[SnippetLine, ...]:
    """
    Run min-hash winnowing over already decoded text.

    Pure: every call owns its own gram buffer, window and line counters.
    """
    state = _WinnowState()
    for c in text:
        _step(state, c)
    state.flush()
    return tuple(state.emitted)


class WinnowingService:
    """
    Domain service turning file contents into fingerprint records.

    The service holds only immutable configuration, so one instance may be
    shared by any number of worker threads, one call per file.
    """

    def __init__(
        self,
        policy: SnippetPolicy | None = None,
        path_mapper: Callable[[str], str] | None = None,
    ) -> None:
        """
        Initialize winnowing service.

        Args:
            policy: Snippet generation policy (defaults to SnippetPolicy())
            path_mapper: Maps a path to the identifier written into the record.
                Required when ``policy.obfuscate`` is set.
        """
        self.policy = policy or SnippetPolicy()
        if self.policy.obfuscate and path_mapper is None:
            raise ValueError("path_mapper is required when obfuscation is enabled")
        self.path_mapper = path_mapper

    def fingerprint(self, path: str, is_binary: bool, contents: bytes) -> FingerprintRecord:
        """
        Compute the fingerprint record for one file.

        Args:
            path: Path to record for the file (relative to the scan root)
            is_binary: Whether the content was classified as binary
            contents: Raw file bytes

        Returns:
            FingerprintRecord with header, and snippet lines unless skipped
        """
        if not path:
            raise InvalidInputError("A path is required to fingerprint contents", field="path")
        content_hash = hashlib.md5(contents).hexdigest()
        record_path = self.path_mapper(path) if self.policy.obfuscate and self.path_mapper else path

        if is_binary or self.policy.skip_snippets:
            return FingerprintRecord(content_hash=content_hash, byte_length=len(contents), path=record_path)

        text = contents.decode("utf-8", errors="replace")
        if self.should_skip_snippets(path, contents, text):
            return FingerprintRecord(content_hash=content_hash, byte_length=len(contents), path=record_path)

        hpsm = calculate_hpsm(contents) if self.policy.hpsm else None
        return FingerprintRecord(
            content_hash=content_hash,
            byte_length=len(contents),
            path=record_path,
            snippet_lines=winnow(text),
            hpsm=hpsm,
        )

    def should_skip_snippets(self, path: str, contents: bytes, text: str | None = None) -> bool:
        """
        Decide whether a text file is excluded from snippet generation.

        Skips denylisted file endings, files of MIN_FILE_SIZE bytes or less,
        JSON/XML/HTML looking content, and files whose first line is longer
        than the policy's snippet limit. ``all_extensions`` disables every check.
        """
        if self.policy.all_extensions:
            logger.debug(f"Generating snippets for all extensions: {path}")
            return False
        lower_path = path.lower()
        for ending in SKIP_SNIPPET_EXT:
            if lower_path.endswith(ending):
                logger.debug(f"Skipping snippets due to file ending: {path} - {ending}")
                return True
        if len(contents) <= MIN_FILE_SIZE:
            logger.debug(f"Skipping snippets as the file is too small: {path} - {len(contents)}")
            return True
        if contents[:1] in (b"{", b"<"):
            logger.debug(f"Skipping snippets as the file appears to be JSON/XML/HTML: {path}")
            return True
        if self.policy.snippet_limit > 0:
            if text is None:
                text = contents.decode("utf-8", errors="replace")
            first_line_end = text.find("\n")
            if first_line_end <= 0:
                first_line_end = len(text) - 1
            if first_line_end > self.policy.snippet_limit:
                logger.debug(f"Skipping snippets due to first line being too long: {path} - {first_line_end} chars")
                return True
        return False

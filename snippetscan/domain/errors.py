"""Domain errors for fingerprinting, scanning and result curation."""


class FileAccessError(Exception):
    """
    Raised when a file cannot be read for fingerprinting.

    Covers missing paths, paths that are not regular files, and permission
    or I/O failures while loading the contents.

    Attributes:
        path: Path that could not be read
        reason: Why the file could not be read
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read '{path}': {reason}")


class InvalidInputError(Exception):
    """
    Raised when an operation receives an absent or empty required argument.

    Attributes:
        message: Error message
        field: Name of the offending argument (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(f"{message} (field: {field})" if field else message)


class MalformedRuleError(Exception):
    """
    Raised when a rule entry in a rule configuration cannot be interpreted.

    Rules that simply carry neither a path nor a package identifier are not
    malformed: they are inert and match nothing. This error is reserved for
    entries of the wrong shape (e.g. a rule that is not a mapping, or a
    non-integer line bound).

    Attributes:
        rule: The offending raw rule entry
        reason: Why the entry was rejected
    """

    def __init__(self, rule: object, reason: str) -> None:
        self.rule = rule
        self.reason = reason
        super().__init__(f"Malformed rule {rule!r}: {reason}")


class ScanApiError(Exception):
    """
    Raised when the remote scan service rejects or fails a request.

    Attributes:
        url: Endpoint that was called
        status_code: HTTP status code (None for transport-level failures)
        hint: Actionable hint for resolution (optional)
    """

    def __init__(self, url: str, status_code: int | None = None, hint: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        self.hint = hint
        msg = f"Scan request against {url} failed"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        if hint:
            msg += f". {hint}"
        super().__init__(msg)


class SettingsError(Exception):
    """
    Raised when a settings or rule configuration file cannot be loaded.

    Attributes:
        path: Path to the configuration file
        reason: Why loading failed
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load settings from '{path}': {reason}")

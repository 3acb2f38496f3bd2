from dataclasses import dataclass

# Minimum content size (bytes) for a file to be considered for snippet generation
MIN_FILE_SIZE = 256
# Maximum length of a first source line before a file stops looking like source code
MAX_LONG_LINE_CHARS = 1000

# File endings that never get snippet fingerprints
SKIP_SNIPPET_EXT = (
    ".exe", ".zip", ".tar", ".tgz", ".gz", ".7z", ".rar", ".jar", ".war", ".ear", ".class", ".pyc",
    ".o", ".a", ".so", ".obj", ".dll", ".lib", ".out", ".app", ".bin",
    ".lst", ".dat", ".json", ".htm", ".html", ".xml", ".md", ".txt",
    ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods", ".odp", ".pages", ".key", ".numbers",
    ".pdf", ".min.js", ".mf", ".sum", ".woff", ".woff2", ".xsd", ".pom", ".whl",
)


@dataclass(frozen=True)
class SnippetPolicy:
    """Policy controlling which snippet data the fingerprinting engine emits."""

    skip_snippets: bool = False
    all_extensions: bool = False
    hpsm: bool = False
    obfuscate: bool = False
    snippet_limit: int = MAX_LONG_LINE_CHARS

    def __post_init__(self) -> None:
        """Validate snippet policy."""
        if self.snippet_limit < 0:
            raise ValueError(f"snippet_limit must be >= 0 (0 disables the check), got {self.snippet_limit}")

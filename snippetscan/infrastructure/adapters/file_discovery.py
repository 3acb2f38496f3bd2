"""Deterministic discovery of the files of a folder that are worth fingerprinting."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ...domain.errors import FileAccessError

logger = logging.getLogger(__name__)

# Folders to skip
FILTERED_DIRS = (
    "nbproject", "nbbuild", "nbdist", "__pycache__", "venv", "_yardoc", "eggs", "wheels", "htmlcov",
    "__pypackages__", "target",
)

# Folder endings to skip
FILTERED_DIR_EXT = (".egg-info",)

# File extensions and name endings to skip
FILTERED_EXTENSIONS = (
    ".1", ".2", ".3", ".4", ".5", ".6", ".7", ".8", ".9", ".ac", ".adoc", ".am",
    ".asciidoc", ".bmp", ".build", ".cfg", ".chm", ".class", ".cmake", ".cnf",
    ".conf", ".config", ".contributors", ".copying", ".crt", ".csproj", ".css",
    ".csv", ".dat", ".data", ".doc", ".docx", ".dtd", ".dts", ".iws", ".c9", ".c9revisions",
    ".dtsi", ".dump", ".eot", ".eps", ".geojson", ".gdoc", ".gif",
    ".glif", ".gmo", ".gradle", ".guess", ".hex", ".htm", ".html", ".ico", ".iml",
    ".in", ".inc", ".info", ".ini", ".ipynb", ".jpeg", ".jpg", ".json", ".jsonld", ".lock",
    ".log", ".m4", ".map", ".markdown", ".md", ".md5", ".meta", ".mk", ".mxml",
    ".o", ".otf", ".out", ".pbtxt", ".pdf", ".pem", ".phtml", ".plist", ".png",
    ".po", ".ppt", ".prefs", ".properties", ".pyc", ".qdoc", ".result", ".rgb",
    ".rst", ".scss", ".sha", ".sha1", ".sha2", ".sha256", ".sln", ".spec", ".sql",
    ".sub", ".svg", ".svn-base", ".tab", ".template", ".test", ".tex", ".tiff",
    ".toml", ".ttf", ".txt", ".utf-8", ".vim", ".wav", ".woff", ".woff2", ".xht",
    ".xhtml", ".xls", ".xlsx", ".xml", ".xpm", ".xsd", ".xul", ".yaml", ".yml", ".wfp",
    ".editorconfig", ".dotcover", ".pid", ".lcov", ".egg", ".manifest", ".cache", ".coverage", ".cover",
    ".gem", ".lst", ".pickle", ".pdb", ".gml", ".pot", ".plt",
    # name endings
    "-doc", "changelog", "config", "copying", "license", "authors", "news", "licenses", "notice",
    "readme", "swiftdoc", "texidoc", "todo", "version", "ignore", "manifest", "sqlite", "sqlite3",
)

# Files to skip
FILTERED_FILES = frozenset(
    {
        "gradlew", "gradlew.bat", "mvnw", "mvnw.cmd", "gradle-wrapper.jar", "maven-wrapper.jar",
        "thumbs.db", "babel.config.js", "license.txt", "license.md", "copying.lib", "makefile",
    }
)


def skip_folder(name: str, hidden_files: bool = False, all_folders: bool = False) -> bool:
    """Whether a folder (by its own name) should not be descended into."""
    if not hidden_files and name.startswith(".") and name != ".":
        return True
    if all_folders:
        return False
    lower = name.lower()
    return lower.endswith(FILTERED_DIRS) or lower.endswith(FILTERED_DIR_EXT)


def skip_file(name: str, hidden_files: bool = False, all_extensions: bool = False) -> bool:
    """Whether a file (by its own name) should not be fingerprinted."""
    if not hidden_files and name.startswith("."):
        return True
    if all_extensions:
        return False
    lower = name.lower()
    return lower in FILTERED_FILES or lower.endswith(FILTERED_EXTENSIONS)


class LocalFileDiscovery:
    """
    Walks a folder and lists candidate files, sorted by relative path.

    Symbolic links and empty files are never returned.
    """

    def __init__(self, all_extensions: bool = False, all_folders: bool = False) -> None:
        self.all_extensions = all_extensions
        self.all_folders = all_folders

    def discover(self, root: str, hidden_files: bool = False) -> list[str]:
        """
        List files below ``root`` as POSIX paths relative to it.

        Raises:
            FileAccessError: If ``root`` is not an existing folder
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise FileAccessError(root, "not an existing folder")

        found: list[str] = []
        stack: list[Path] = [root_path]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as entries:
                    ordered_entries = sorted(entries, key=lambda item: item.name)
            except OSError as e:
                logger.warning(f"Cannot list folder {current}: {e}")
                continue
            for entry in ordered_entries:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if skip_folder(entry.name, hidden_files, self.all_folders):
                        logger.debug(f"Skipping folder: {entry.path}")
                        continue
                    stack.append(Path(entry.path))
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                if skip_file(entry.name, hidden_files, self.all_extensions):
                    logger.debug(f"Skipping file: {entry.path}")
                    continue
                try:
                    if entry.stat(follow_symlinks=False).st_size == 0:
                        continue
                except OSError as e:
                    logger.warning(f"Cannot stat {entry.path}: {e}")
                    continue
                found.append(Path(entry.path).relative_to(root_path).as_posix())

        found.sort()
        logger.debug(f"Discovered {len(found)} files under {root}")
        return found


def discover_files(
    root: str,
    hidden_files: bool = False,
    all_extensions: bool = False,
    all_folders: bool = False,
) -> list[str]:
    """Shortcut for :meth:`LocalFileDiscovery.discover`."""
    return LocalFileDiscovery(all_extensions=all_extensions, all_folders=all_folders).discover(root, hidden_files)

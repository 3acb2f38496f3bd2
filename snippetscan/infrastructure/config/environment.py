"""Scan service settings taken from the process environment and ``.env`` files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

API_URL_VAR = "SCANOSS_API_URL"
API_KEY_VAR = "SCANOSS_API_KEY"
CONFIG_VAR = "SNIPPETSCAN_CONFIG"

# Parent folders searched for a .env file above the working directory
DOTENV_PARENT_LEVELS = 3


def find_dotenv_file(start: Path | None = None) -> Path | None:
    """First ``.env`` in ``start`` (default: cwd) or one of its nearest parents."""
    current = start or Path.cwd()
    for folder in [current, *list(current.parents)[:DOTENV_PARENT_LEVELS]]:
        candidate = folder / ".env"
        if candidate.is_file():
            return candidate
    return None


def load_environment_variables(dotenv_path: Path | str | None = None) -> Path | None:
    """
    Load a ``.env`` file into the process environment.

    Variables already set in the environment win over ``.env`` values
    (``override=False``).

    Args:
        dotenv_path: Explicit ``.env`` file; searched for with
                     :func:`find_dotenv_file` when omitted

    Returns:
        The loaded file, or None when there was nothing to load
    """
    path = Path(dotenv_path) if dotenv_path is not None else find_dotenv_file()
    if path is None or not path.is_file():
        logger.debug(f"No .env file loaded (looked for {path or '.env'})")
        return None
    load_dotenv(path, override=False)
    logger.debug(f"Loaded .env file from: {path}")
    return path


def get_env(key: str, default: str | None = None) -> str | None:
    return os.getenv(key, default)


def api_overrides() -> dict[str, str]:
    """``[api]`` settings fields set through ``SCANOSS_API_URL`` / ``SCANOSS_API_KEY``."""
    overrides: dict[str, str] = {}
    url = get_env(API_URL_VAR)
    if url is not None:
        overrides["url"] = url
    api_key = get_env(API_KEY_VAR)
    if api_key is not None:
        overrides["api_key"] = api_key
    return overrides

"""Pydantic settings for snippetscan.toml configuration."""

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ...domain.errors import MalformedRuleError, SettingsError
from ...domain.models.rules import RuleSet
from .environment import CONFIG_VAR, api_overrides, get_env, load_environment_variables

DEFAULT_API_URL = "https://api.osskb.org/scan/direct"
DEFAULT_PREMIUM_API_URL = "https://api.scanoss.com/scan/direct"
DEFAULT_CONFIG_FILE = "snippetscan.toml"


class ApiSettings(BaseModel):
    """Remote scan service settings."""

    url: str = ""
    api_key: str = ""
    timeout_seconds: int = Field(default=120, ge=1)
    retry_limit: int = Field(default=5, ge=0)
    retry_sleep_seconds: float = Field(default=5.0, ge=0)
    flags: str | None = None
    user_agent: str = "snippetscan"

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        # system env > .env > TOML > defaults
        super().__init__(**{**data, **api_overrides()})

    @property
    def effective_url(self) -> str:
        """Configured URL, or the free/premium endpoint depending on the API key."""
        if self.url:
            return self.url
        return DEFAULT_PREMIUM_API_URL if self.api_key else DEFAULT_API_URL


class WinnowingSettings(BaseModel):
    """Fingerprinting defaults."""

    skip_snippets: bool = False
    all_extensions: bool = False
    hpsm: bool = False
    obfuscate: bool = False
    snippet_limit: int = Field(default=1000, ge=0)


class ScanSettings(BaseModel):
    """File selection and batching defaults."""

    num_threads: int = Field(default=5, ge=1)
    hidden_files: bool = False
    max_wfp_bytes: int = Field(default=64 * 1024, ge=1024)
    rules_file: Path | None = None

    @field_validator("rules_file", mode="before")
    @classmethod
    def validate_rules_path(cls, v: Any) -> Path | None:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v) if v else None
        return v


class Settings(BaseModel):
    """Main settings loaded from snippetscan.toml."""

    api: ApiSettings = Field(default_factory=ApiSettings)
    winnowing: WinnowingSettings = Field(default_factory=WinnowingSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)

    @classmethod
    def from_toml(cls, toml_path: Path | str | None = None) -> "Settings":
        """
        Load settings from a TOML file with environment variable precedence.

        Environment variables (system env > .env file) override TOML values.
        A missing default file yields default settings; a missing file that
        was asked for explicitly is an error.

        Args:
            toml_path: Path to the TOML file (defaults to ``$SNIPPETSCAN_CONFIG``
                       or ``snippetscan.toml``)

        Returns:
            Settings instance with loaded configuration

        Raises:
            SettingsError: If an explicit file is missing or any file is invalid
        """
        load_environment_variables()

        explicit = toml_path is not None or get_env(CONFIG_VAR) is not None
        toml_path = Path(toml_path or get_env(CONFIG_VAR) or DEFAULT_CONFIG_FILE)

        if not toml_path.exists():
            if explicit:
                raise SettingsError(str(toml_path), "file does not exist")
            return cls()

        try:
            with toml_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise SettingsError(str(toml_path), f"invalid TOML: {e}") from e

        try:
            return cls(
                api=ApiSettings(**data.get("api", {})),
                winnowing=WinnowingSettings(**data.get("winnowing", {})),
                scan=ScanSettings(**data.get("scan", {})),
            )
        except ValidationError as e:
            raise SettingsError(str(toml_path), f"invalid settings: {e}") from e


def load_rule_set(path: Path | str) -> RuleSet:
    """
    Load BOM rules from a JSON rule configuration file.

    Args:
        path: Path to the JSON file (``{"bom": {"include": [], "remove": [], "replace": []}}``)

    Returns:
        RuleSet parsed from the file

    Raises:
        SettingsError: If the file is missing, not valid JSON, or holds malformed rules
    """
    path = Path(path)
    if not path.is_file():
        raise SettingsError(str(path), "file does not exist")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SettingsError(str(path), f"cannot parse rule configuration: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(str(path), "rule configuration must be a JSON object")
    try:
        return RuleSet.from_dict(data)
    except MalformedRuleError as e:
        raise SettingsError(str(path), str(e)) from e

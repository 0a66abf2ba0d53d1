"""
Configuration management for BDD Reporter.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field, fields

from bdd_reporter.core.errors import ConfigurationError

CONFIG_ENV_VAR = "BDD_REPORTER_CONFIG"
CONFIG_FILE_NAME = "bdd_reporter.toml"

PATH_KEYS = frozenset({
    "config_file", "theme_file", "strings_file", "coverage_file",
})
LIST_KEYS = frozenset({"paths", "name_filter", "tag_filter"})


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Return the config file to use, or None when there is none."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).resolve()
        if not path.exists():
            raise ConfigurationError(
                f"Environment variable {CONFIG_ENV_VAR} points to a missing file: {env_path}"
            )
        return path

    start_dir = Path(start_dir) if start_dir is not None else Path.cwd()
    for candidate in (start_dir / CONFIG_FILE_NAME, start_dir / "pyproject.toml"):
        if candidate.exists():
            return candidate
    return None


def read_config_table(config_file: Path) -> Dict[str, Any]:
    """Read the bdd_reporter table from a TOML file ({} if absent)."""
    try:
        try:
            import tomllib  # Python 3.11+
        except ModuleNotFoundError:  # Python 3.8-3.10
            import tomli as tomllib

        data = tomllib.loads(Path(config_file).read_text())
    except Exception as e:
        raise ConfigurationError(f"Failed to read config file: {config_file}: {e}") from e

    table = data.get("bdd_reporter") or data.get("tool", {}).get("bdd_reporter", {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[bdd_reporter] in {config_file} must be a table")
    return table


@dataclass
class Config:
    """Configuration class for BDD Reporter."""

    # What the run covers
    paths: List[str] = field(default_factory=lambda: ["."])
    name_filter: List[str] = field(default_factory=list)
    tag_filter: List[str] = field(default_factory=list)

    # Result policy
    strict: bool = False

    # Output
    quiet: bool = False
    enable_exit: bool = False
    verbosity: int = 0  # 0=warnings, 1=progress, 2=details, 3=debug
    theme_file: Optional[Path] = None
    strings_file: Optional[Path] = None
    coverage_file: Optional[Path] = None

    config_file: Optional[Path] = None

    def __post_init__(self):
        """Post-initialization processing."""
        for key in LIST_KEYS:
            value = getattr(self, key)
            if value is None:
                value = []
            elif isinstance(value, str):
                value = [value]
            setattr(self, key, [str(v) for v in value])
        if not self.paths:
            self.paths = ["."]

        for key in PATH_KEYS:
            value = getattr(self, key)
            if value is not None and not isinstance(value, Path):
                setattr(self, key, Path(value))

        if not 0 <= self.verbosity <= 3:
            raise ValueError(f"verbosity must be between 0 and 3, got {self.verbosity}")

    @classmethod
    def load(cls, config_file: Optional[Path] = None, **overrides) -> "Config":
        """
        Build a configuration from the config file plus explicit values.

        Explicit values that are not None take precedence over the file.

        Args:
            config_file: TOML file to read (discovered when omitted)
            **overrides: Field values

        Returns:
            Config instance
        """
        if config_file is None:
            config_file = find_config_file()

        values: Dict[str, Any] = {}
        if config_file is not None:
            known = {f.name for f in fields(cls)}
            for key, value in read_config_table(config_file).items():
                if key not in known:
                    raise ConfigurationError(f"Unknown config key '{key}' in {config_file}")
                if value is not None:
                    values[key] = value
            base_dir = Path(config_file).resolve().parent
            for key in PATH_KEYS & values.keys():
                path = Path(values[key])
                values[key] = path if path.is_absolute() else base_dir / path

        for key, value in overrides.items():
            if value is None or (key in LIST_KEYS and value == []):
                continue
            values[key] = value
        values["config_file"] = config_file
        return cls.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "paths": list(self.paths),
            "name_filter": list(self.name_filter),
            "tag_filter": list(self.tag_filter),
            "strict": self.strict,
            "quiet": self.quiet,
            "enable_exit": self.enable_exit,
            "verbosity": self.verbosity,
            "theme_file": str(self.theme_file) if self.theme_file else None,
            "strings_file": str(self.strings_file) if self.strings_file else None,
            "coverage_file": str(self.coverage_file) if self.coverage_file else None,
            "config_file": str(self.config_file) if self.config_file else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        data = dict(data)
        for key in PATH_KEYS:
            if key in data and isinstance(data[key], str):
                data[key] = Path(data[key])
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

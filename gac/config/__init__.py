"""Configuration Management Package"""

import json
import sys
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional

from gac import ENGINES, STYLES

VALID_STYLES = set(STYLES)
VALID_ENGINES = set(ENGINES)

# camelCase keys accepted from .gacrc / package.json
KEY_ALIASES = {
    "maxLen": "max_len",
    "dryRun": "dry_run",
    "ignoredFiles": "ignored_files",
    "openaiApiKey": "openai_api_key",
    "anthropicApiKey": "anthropic_api_key",
    "geminiApiKey": "gemini_api_key",
}

SECRET_FIELDS = ("openai_api_key", "anthropic_api_key", "gemini_api_key")


@dataclass
class Config:
    """User configuration with sensible defaults."""
    prefix: str = ""
    style: str = "mix"
    engine: str = "ollama"
    model: str = "mistral:7b"
    max_len: int = 72
    dry_run: bool = False
    ignored_files: list[str] = field(default_factory=list)
    regen: int = 0
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.style not in VALID_STYLES:
            warnings.append(f"Invalid style '{self.style}', using '{defaults.style}'")
            self.style = defaults.style

        if self.engine not in VALID_ENGINES:
            warnings.append(f"Invalid engine '{self.engine}', using '{defaults.engine}'")
            self.engine = defaults.engine

        if not isinstance(self.model, str) or not self.model:
            warnings.append(f"Invalid model '{self.model}', using '{defaults.model}'")
            self.model = defaults.model

        if not isinstance(self.prefix, str):
            warnings.append(f"Invalid prefix '{self.prefix}', using no prefix")
            self.prefix = defaults.prefix

        if isinstance(self.max_len, bool) or not isinstance(self.max_len, int) or self.max_len <= 0:
            warnings.append(f"Invalid max_len '{self.max_len}', using {defaults.max_len}")
            self.max_len = defaults.max_len

        if isinstance(self.regen, bool) or not isinstance(self.regen, int) or self.regen < 0:
            warnings.append(f"Invalid regen '{self.regen}', using {defaults.regen}")
            self.regen = defaults.regen

        if not isinstance(self.dry_run, bool):
            warnings.append(f"Invalid dry_run '{self.dry_run}', using {defaults.dry_run}")
            self.dry_run = defaults.dry_run

        if not isinstance(self.ignored_files, list) or not all(isinstance(p, str) for p in self.ignored_files):
            warnings.append("Invalid ignored_files, expected a list of glob patterns")
            self.ignored_files = []

        return warnings

    def api_key_for(self, engine: str) -> Optional[str]:
        return getattr(self, f"{engine}_api_key", None)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        normalized = {KEY_ALIASES.get(k, k): v for k, v in data.items()}
        filtered = {k: v for k, v in normalized.items() if k in valid_keys}
        config = cls(**filtered)
        # Validate and print warnings to stderr
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


def read_ignore_file(path: Path) -> list[str]:
    """Glob patterns from a .gacignore file; blank lines and # comments skipped."""
    patterns = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".gacrc"
    IGNORE_FILENAME = ".gacignore"
    PACKAGE_FILENAME = "package.json"
    PACKAGE_KEY = "gac"

    def __init__(self, cwd: Optional[Path] = None, home: Optional[Path] = None):
        self._cwd = cwd
        self._home = home
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    @property
    def cwd(self) -> Path:
        return self._cwd or Path.cwd()

    @property
    def home(self) -> Path:
        return self._home or Path.home()

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        data = {}
        for path in (self.cwd / self.CONFIG_FILENAME, self.home / self.CONFIG_FILENAME):
            if path.exists():
                data = self._read_json(path)
                self._config_path = path
                break

        package_path = self.cwd / self.PACKAGE_FILENAME
        if package_path.exists():
            package_section = self._read_json(package_path).get(self.PACKAGE_KEY)
            if isinstance(package_section, dict):
                data.update(package_section)

        config = Config.from_dict(data)

        ignore_path = self.cwd / self.IGNORE_FILENAME
        if ignore_path.exists():
            try:
                config.ignored_files = config.ignored_files + read_ignore_file(ignore_path)
            except (OSError, UnicodeDecodeError) as e:
                print(f"Warning: Could not read {ignore_path}: {e}", file=sys.stderr)

        self._config = config
        return self._config

    def _read_json(self, path: Path) -> dict:
        try:
            with open(path, 'r', encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return {}
        if not isinstance(data, dict):
            print(f"Warning: Could not load {path}: expected a JSON object", file=sys.stderr)
            return {}
        return data

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = self.home / self.CONFIG_FILENAME if global_config else self.cwd / self.CONFIG_FILENAME
        data = {k: v for k, v in config.to_dict().items() if k not in SECRET_FIELDS}
        with open(path, 'w', encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "save_config",
    "get_config_path",
    "read_ignore_file",
    "VALID_ENGINES",
    "VALID_STYLES",
]

"""Configuration Management Package"""

import json
import logging
import os
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

# Valid configuration values
VALID_PROVIDERS = {"auto", "github", "gitlab"}
VALID_LLMS = {"auto", "claude", "ollama"}
MIN_OPTIONS, MAX_OPTIONS = 2, 5

LOG = logging.getLogger("git_pr_ai")


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "auto"
    llm: str = "auto"
    model: Optional[str] = None
    num_options: int = 3
    max_subject_length: int = 72
    web: bool = True  # open the browser when creating a PR

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        if self.llm not in VALID_LLMS:
            warnings.append(f"Invalid llm '{self.llm}', using '{defaults.llm}'")
            self.llm = defaults.llm

        if not isinstance(self.num_options, int) or not MIN_OPTIONS <= self.num_options <= MAX_OPTIONS:
            warnings.append(f"Invalid num_options '{self.num_options}', using {defaults.num_options}")
            self.num_options = defaults.num_options

        if not isinstance(self.max_subject_length, int) or self.max_subject_length <= 0:
            warnings.append(f"Invalid max_subject_length '{self.max_subject_length}', using {defaults.max_subject_length}")
            self.max_subject_length = defaults.max_subject_length

        if not isinstance(self.web, bool):
            warnings.append(f"Invalid web '{self.web}', using {str(defaults.web).lower()}")
            self.web = defaults.web

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".git-pr-ai.json"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()
        if not isinstance(data, dict):
            print(f"Warning: Could not load {path}: expected a JSON object", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


def resolve_settings(config: Config, provider: str | None = None, llm: str | None = None,
                     model: str | None = None) -> tuple[str, str, Optional[str]]:
    """Resolve (provider, llm, model).

    Precedence: CLI args > environment variables > config file
    """
    return (
        provider or os.environ.get('GPA_PROVIDER') or config.provider,
        llm or os.environ.get('GPA_LLM') or config.llm,
        model or os.environ.get('GPA_MODEL') or config.model,
    )


def setup_logging(verbose: bool = False) -> None:
    """Enable debug logging when GPA_DEBUG=1 or --verbose."""
    level = logging.DEBUG if (verbose or os.getenv("GPA_DEBUG")) else logging.WARNING
    LOG.setLevel(level)
    if level == logging.DEBUG and not LOG.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        LOG.addHandler(handler)


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config_path",
    "resolve_settings",
    "setup_logging",
    "VALID_PROVIDERS",
    "VALID_LLMS",
]

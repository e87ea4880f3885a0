"""
Configuration Management

Loads the inspection configuration from ``manifest.config.yaml`` and the
environment, and sets up logging.
"""

import os
import logging
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .exceptions import ConfigError
from .github.git import find_git_root


CONFIG_FILE_NAME = "manifest.config.yaml"
FORMATTERS = ("pretty", "github")


@dataclass
class InspectionConfig:
    """Which checkers run and how."""
    concurrency: int = 1
    formatter: str = "pretty"
    checkers: Dict[str, str] = field(default_factory=dict)
    fetch_pull_info: bool = False
    strict: bool = False


@dataclass
class GitHubConfig:
    """GitHub API settings"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30
    no_gh: bool = False


@dataclass
class LoggingConfig:
    """Logging settings"""
    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """Full application configuration"""
    inspection: InspectionConfig = field(default_factory=InspectionConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Load settings from environment variables."""
        env = os.environ if env is None else env
        debug = _truthy(env.get("DEBUG", ""))

        return cls(
            github=GitHubConfig(
                token=env.get("MANIFEST_GITHUB_TOKEN") or None,
                api_base_url=env.get("MANIFEST_GITHUB_API_URL", "https://api.github.com"),
                timeout_seconds=_as_int(env.get("MANIFEST_GITHUB_TIMEOUT", "30"), "MANIFEST_GITHUB_TIMEOUT"),
            ),
            logging=LoggingConfig(
                level=env.get("MANIFEST_LOG_LEVEL", "DEBUG" if debug else "WARNING"),
                file_path=env.get("MANIFEST_LOG_FILE") or None,
            ),
            debug=debug,
        )

    def apply_yaml(self, path: Path) -> None:
        """
        Merge a ``manifest.config.yaml`` file into this configuration.

        Args:
            path: Path to the YAML file

        Raises:
            ConfigError: When the file cannot be read or parsed
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"could not read configuration file: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"could not parse configuration file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("configuration file must contain a mapping")

        section = data.get("manifest") or {}
        if not isinstance(section, dict):
            raise ConfigError("'manifest' must be a mapping")

        concurrency = section.get("concurrency")
        if concurrency:
            self.inspection.concurrency = _as_int(concurrency, "concurrency")

        if section.get("formatter"):
            self.inspection.formatter = section["formatter"]

        if section.get("fetchPullRequestInfo"):
            self.inspection.fetch_pull_info = True

        if section.get("noGH"):
            self.github.no_gh = True

        for name, checker in (section.get("checkers") or {}).items():
            if isinstance(checker, dict):
                command = checker.get("command")
            else:
                command = checker
            if not command:
                raise ConfigError(f"checker '{name}' has no command")
            self.inspection.checkers[name] = command

    @classmethod
    def from_yaml(cls, config_path: str, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Load settings from the environment and a YAML file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        config = cls.from_env(env)
        config.apply_yaml(config_file)
        return config

    def validate(self) -> None:
        """Validate settings"""
        errors = []

        if self.inspection.formatter not in FORMATTERS:
            errors.append(f"could not find formatter '{self.inspection.formatter}'")

        if self.github.timeout_seconds <= 0:
            errors.append("GitHub timeout must be positive")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a dictionary"""
        return {
            'inspection': {
                'concurrency': self.inspection.concurrency,
                'formatter': self.inspection.formatter,
                'checkers': dict(self.inspection.checkers),
                'fetch_pull_info': self.inspection.fetch_pull_info,
                'strict': self.inspection.strict,
            },
            'github': {
                'api_base_url': self.github.api_base_url,
                'timeout_seconds': self.github.timeout_seconds,
                'no_gh': self.github.no_gh,
                # token intentionally omitted
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


def find_config_file(start: Path) -> Optional[Path]:
    """Return ``manifest.config.yaml`` at the root of the git checkout containing ``start``."""
    root = find_git_root(start)
    if root is None:
        return None

    config_path = root / CONFIG_FILE_NAME
    return config_path if config_path.is_file() else None


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger."""
    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
    )

    if config.file_path:
        handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
        handler.setFormatter(logging.Formatter(config.format))
        logging.getLogger().addHandler(handler)


def _truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{name}' must be an integer, got {value!r}") from e

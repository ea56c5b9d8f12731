"""Configuration loading and validation for the finance ledger."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from finance_ledger.models.statement import AccountType
from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Environment variable overriding storage.path
DATA_PATH_ENV = "FINANCE_LEDGER_DATA"

DEFAULT_DATA_FILE = "finance_data.json"
DEFAULT_LOG_FILE = "finance_ledger.log"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass
class StorageConfig:
    """Configuration for persisted finance data.

    Attributes:
        path: JSON data file.
    """

    path: Path = field(default_factory=lambda: Path(DEFAULT_DATA_FILE))

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "StorageConfig":
        """Create from dictionary."""
        return cls(path=Path(str(data.get("path", DEFAULT_DATA_FILE))))


@dataclass
class ParsingConfig:
    """Configuration for statement parsing.

    Attributes:
        default_account_type: Layout used for CSV files, or None to detect
            it from the header.
    """

    default_account_type: Optional[AccountType] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ParsingConfig":
        """Create from dictionary."""
        raw = data.get("default_account_type")
        if raw is None or raw == "":
            return cls()
        try:
            account_type = AccountType.parse(str(raw))
        except ValueError:
            raise ConfigError(
                f"parsing.default_account_type must be 'checking' or 'credit', got {raw!r}"
            ) from None
        return cls(default_account_type=account_type)


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file (empty string disables file logging).
    """

    level: str = "INFO"
    file: str = DEFAULT_LOG_FILE

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        level = str(data.get("level", "INFO")).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError(f"Invalid logging.level: {level!r}")
        file = data.get("file", DEFAULT_LOG_FILE)
        return cls(level=level, file="" if file is None else str(file))


@dataclass
class Config:
    """Main configuration container."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load configuration from settings.yaml and the environment.

    A missing settings file is not an error; defaults are used. The
    ``FINANCE_LEDGER_DATA`` environment variable overrides ``storage.path``.

    Args:
        settings_path: Path to settings.yaml (or None to use the default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the settings file is invalid.
    """
    if config_dir is None:
        config_dir = Path("config")
    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    config = Config()

    if settings_path.exists():
        data = load_yaml_file(settings_path)
        config.storage = StorageConfig.from_dict(_section(data, "storage"))
        config.parsing = ParsingConfig.from_dict(_section(data, "parsing"))
        config.logging = LoggingConfig.from_dict(_section(data, "logging"))
        logger.info(f"Loaded settings from {settings_path}")
    else:
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    env_path = os.environ.get(DATA_PATH_ENV)
    if env_path:
        config.storage.path = Path(env_path)
        logger.debug(f"Data path overridden by {DATA_PATH_ENV}: {env_path}")

    return config

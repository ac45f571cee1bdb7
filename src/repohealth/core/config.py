"""
Configuration module for repo-health.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Name of the per-repository configuration file
REPO_CONFIG_FILE_NAME = ".repohealth.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""

    pass


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    value = section_defaults.get(key, fallback)
    # Lists are copied so that callers never mutate the shared defaults
    if isinstance(value, list):
        return list(value)
    return value


@dataclass
class ScanConfig:
    """Configuration for the unified file scanner."""

    cache_threshold_bytes: int = field(
        default_factory=lambda: _get_default("scan", "cache_threshold_bytes", 1024 * 1024)
    )
    streaming_threshold_bytes: int = field(
        default_factory=lambda: _get_default("scan", "streaming_threshold_bytes", 1024 * 1024)
    )
    stream_chunk_size: int = field(
        default_factory=lambda: _get_default("scan", "stream_chunk_size", 64 * 1024)
    )
    vcs_dir_name: str = field(default_factory=lambda: _get_default("scan", "vcs_dir_name", ".git"))
    ignore_file_name: str = field(
        default_factory=lambda: _get_default("scan", "ignore_file_name", ".gitignore")
    )


@dataclass
class SecurityConfig:
    """Configuration for secret and suspicious-file detection."""

    secret_patterns: list[str] = field(
        default_factory=lambda: _get_default("security", "secret_patterns", [])
    )
    suspicious_files: list[str] = field(
        default_factory=lambda: _get_default("security", "suspicious_files", [])
    )
    allowed_secrets: list[str] = field(
        default_factory=lambda: _get_default("security", "allowed_secrets", [])
    )
    relevant_extensions: list[str] = field(
        default_factory=lambda: _get_default(
            "security", "relevant_extensions", [".go", ".yaml", ".yml", ".json", ".env"]
        )
    )
    max_file_size_mb: int = field(
        default_factory=lambda: _get_default("security", "max_file_size_mb", 100)
    )


@dataclass
class PerformanceConfig:
    """Configuration for the large-file analyzer."""

    large_file_size_mb: int = field(
        default_factory=lambda: _get_default("performance", "large_file_size_mb", 10)
    )
    binary_extensions: list[str] = field(
        default_factory=lambda: _get_default("performance", "binary_extensions", [])
    )


@dataclass
class QualityConfig:
    """Configuration for file-length and function-complexity checks."""

    max_file_lines: int = field(default_factory=lambda: _get_default("quality", "max_file_lines", 2000))
    complexity_threshold: int = field(
        default_factory=lambda: _get_default("quality", "complexity_threshold", 10)
    )
    code_extensions: list[str] = field(
        default_factory=lambda: _get_default("quality", "code_extensions", [".go", ".py"])
    )


@dataclass
class MaintenanceConfig:
    """Configuration for the required-files analyzer."""

    required_files: list[str] = field(
        default_factory=lambda: _get_default("maintenance", "required_files", [".gitignore"])
    )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default("logging", "format", "%(message)s")
    )


@dataclass
class HealthConfig:
    """Main configuration class for repo-health."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    maintenance: MaintenanceConfig = field(default_factory=MaintenanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "HealthConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            HealthConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "HealthConfig":
        """Create HealthConfig from a dictionary."""
        config = cls()

        try:
            if "scan" in data:
                config.scan = ScanConfig(**data["scan"])
            if "security" in data:
                config.security = SecurityConfig(**data["security"])
            if "performance" in data:
                config.performance = PerformanceConfig(**data["performance"])
            if "quality" in data:
                config.quality = QualityConfig(**data["quality"])
            if "maintenance" in data:
                config.maintenance = MaintenanceConfig(**data["maintenance"])
            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])
        except TypeError as e:
            raise ConfigError(f"Unknown configuration key: {e}") from e

        return config

    def apply_env_overrides(self) -> "HealthConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: REPOHEALTH_<SECTION>_<KEY>
        Examples:
            - REPOHEALTH_SCAN_CACHE_THRESHOLD_BYTES
            - REPOHEALTH_SECURITY_ALLOWED_SECRETS (comma separated)
            - REPOHEALTH_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Scan config
            "REPOHEALTH_SCAN_CACHE_THRESHOLD_BYTES": ("scan", "cache_threshold_bytes", int),
            "REPOHEALTH_SCAN_STREAMING_THRESHOLD_BYTES": (
                "scan",
                "streaming_threshold_bytes",
                int,
            ),
            "REPOHEALTH_SCAN_STREAM_CHUNK_SIZE": ("scan", "stream_chunk_size", int),
            # Security config
            "REPOHEALTH_SECURITY_ALLOWED_SECRETS": ("security", "allowed_secrets", _parse_list),
            "REPOHEALTH_SECURITY_MAX_FILE_SIZE_MB": ("security", "max_file_size_mb", int),
            # Performance config
            "REPOHEALTH_PERFORMANCE_LARGE_FILE_SIZE_MB": (
                "performance",
                "large_file_size_mb",
                int,
            ),
            # Quality config
            "REPOHEALTH_QUALITY_MAX_FILE_LINES": ("quality", "max_file_lines", int),
            "REPOHEALTH_QUALITY_COMPLEXITY_THRESHOLD": ("quality", "complexity_threshold", int),
            # Logging config
            "REPOHEALTH_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                try:
                    setattr(section_obj, key, converter(value))
                except ValueError as e:
                    raise ConfigError(f"Invalid value for {env_var}: {value!r}") from e

        return self

    def validate(self) -> "HealthConfig":
        """
        Check configuration values for consistency.

        Raises:
            ConfigError: If a value is out of range
        """
        if self.security.max_file_size_mb <= 0:
            raise ConfigError("security.max_file_size_mb must be positive")
        if self.performance.large_file_size_mb < 0:
            raise ConfigError("performance.large_file_size_mb must be non-negative")
        if self.quality.max_file_lines <= 0:
            raise ConfigError("quality.max_file_lines must be positive")
        if self.quality.complexity_threshold <= 0:
            raise ConfigError("quality.complexity_threshold must be positive")
        if self.scan.cache_threshold_bytes < 0:
            raise ConfigError("scan.cache_threshold_bytes must be non-negative")
        if self.scan.streaming_threshold_bytes < 0:
            raise ConfigError("scan.streaming_threshold_bytes must be non-negative")
        if self.scan.stream_chunk_size <= 0:
            raise ConfigError("scan.stream_chunk_size must be positive")
        if not self.scan.vcs_dir_name:
            raise ConfigError("scan.vcs_dir_name must not be empty")
        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_list(value: str) -> list[str]:
    """Parse a comma separated string into a list of non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(
    config_path: Optional[Path | str] = None,
    repo_root: Optional[Path | str] = None,
    apply_env: bool = True,
) -> HealthConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, a .repohealth.yaml
                     in repo_root is used when present, otherwise defaults.
        repo_root: Repository root used to look up .repohealth.yaml.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        Validated HealthConfig instance
    """
    if config_path:
        config = HealthConfig.from_file(config_path)
    elif repo_root is not None and (Path(repo_root) / REPO_CONFIG_FILE_NAME).is_file():
        logger.debug(f"Using repository config: {Path(repo_root) / REPO_CONFIG_FILE_NAME}")
        config = HealthConfig.from_file(Path(repo_root) / REPO_CONFIG_FILE_NAME)
    else:
        config = HealthConfig()

    if apply_env:
        config.apply_env_overrides()

    return config.validate()

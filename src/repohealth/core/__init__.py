"""
Core Layer - Configuration, file scanning, caching and report models.
"""

from repohealth.core.config import (
    ConfigError,
    HealthConfig,
    LoggingConfig,
    MaintenanceConfig,
    PerformanceConfig,
    QualityConfig,
    ScanConfig,
    SecurityConfig,
    load_config,
)
from repohealth.core.file_scanner import (
    FileScanner,
    FileScannerInterface,
    FileSystemInterface,
    IgnoreRuleSet,
    LocalFileSystem,
    MatchRecord,
    ScanCache,
    ScanError,
    ScannedFile,
)
from repohealth.core.language_registry import LanguageRegistry
from repohealth.core.report import (
    Category,
    CodeStats,
    HealthReport,
    Issue,
    Severity,
    Summary,
)

__all__ = [
    # Config
    "HealthConfig",
    "ScanConfig",
    "SecurityConfig",
    "PerformanceConfig",
    "QualityConfig",
    "MaintenanceConfig",
    "LoggingConfig",
    "ConfigError",
    "load_config",
    # FileScanner
    "FileScanner",
    "FileScannerInterface",
    "FileSystemInterface",
    "LocalFileSystem",
    "IgnoreRuleSet",
    "ScanCache",
    "ScannedFile",
    "MatchRecord",
    "ScanError",
    # Languages
    "LanguageRegistry",
    # Report
    "Issue",
    "Severity",
    "Category",
    "Summary",
    "CodeStats",
    "HealthReport",
]

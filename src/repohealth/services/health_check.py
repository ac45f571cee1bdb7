"""
Health-check orchestration.

Builds one scanner per repository, performs exactly one traversal, and
runs the enabled analyzers against the shared scan cache.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from repohealth import __version__
from repohealth.analyzers import (
    AnalyzerInterface,
    CodeStatsAnalyzer,
    MaintenanceAnalyzer,
    PerformanceAnalyzer,
    QualityAnalyzer,
    SecurityAnalyzer,
)
from repohealth.core.config import HealthConfig
from repohealth.core.file_scanner import FileScanner, FileSystemInterface
from repohealth.core.report import CodeStats, HealthReport, Issue, Summary
from repohealth.infrastructure import PatternSearcher

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOptions:
    """
    Which analyses a health check runs.

    When no flag is set, resolve() enables every analysis.
    """

    security: bool = False
    performance: bool = False
    quality: bool = False
    maintenance: bool = False
    code_stats: bool = False

    def any_enabled(self) -> bool:
        return (
            self.security
            or self.performance
            or self.quality
            or self.maintenance
            or self.code_stats
        )

    def resolve(self) -> "AnalysisOptions":
        """Return the effective options."""
        if self.any_enabled():
            return AnalysisOptions(
                security=self.security,
                performance=self.performance,
                quality=self.quality,
                maintenance=self.maintenance,
                code_stats=self.code_stats,
            )
        return AnalysisOptions(
            security=True, performance=True, quality=True, maintenance=True, code_stats=True
        )


@dataclass
class HealthCheckServices:
    """
    Shared instances for one repository.

    Attributes:
        config: Effective configuration
        scanner: Scanner owning the shared cache
        searcher: Pattern searcher over the same scanner
    """

    config: HealthConfig
    scanner: FileScanner
    searcher: PatternSearcher = field(init=False)

    def __post_init__(self):
        self.searcher = PatternSearcher(self.scanner)


def create_services(
    root: Path | str,
    config: Optional[HealthConfig] = None,
    file_system: Optional[FileSystemInterface] = None,
) -> HealthCheckServices:
    """
    Create the scanner and searcher for a repository.

    Args:
        root: Repository root directory
        config: Configuration; defaults are used if None
        file_system: Optional filesystem override (tests)

    Raises:
        ScanError: If the root path cannot be resolved
    """
    config = config or HealthConfig()
    scanner = FileScanner.from_config(root, config.scan, file_system=file_system)
    return HealthCheckServices(config=config, scanner=scanner)


def build_analyzers(
    services: HealthCheckServices, options: AnalysisOptions
) -> list[AnalyzerInterface]:
    """Instantiate the enabled issue-producing analyzers, in report order."""
    analyzers: list[AnalyzerInterface] = []
    if options.security:
        analyzers.append(SecurityAnalyzer(services.config.security, services.scanner))
    if options.performance:
        analyzers.append(PerformanceAnalyzer(services.config.performance, services.scanner))
    if options.quality:
        analyzers.append(QualityAnalyzer(services.config.quality, services.scanner))
    if options.maintenance:
        analyzers.append(MaintenanceAnalyzer(services.config.maintenance, services.scanner))
    return analyzers


def run_health_check(
    root: Path | str,
    config: Optional[HealthConfig] = None,
    options: Optional[AnalysisOptions] = None,
    file_system: Optional[FileSystemInterface] = None,
    cancel_event: Optional[threading.Event] = None,
) -> HealthReport:
    """
    Run a complete health check.

    Args:
        root: Repository root directory
        config: Configuration; defaults are used if None
        options: Analyses to run; all of them if None or nothing is set
        file_system: Optional filesystem override (tests)
        cancel_event: Optional event that cancels the traversal

    Returns:
        HealthReport with issues, summary and code statistics

    Raises:
        ScanError: If the repository cannot be traversed
    """
    start = time.perf_counter()
    effective = (options or AnalysisOptions()).resolve()
    services = create_services(root, config, file_system)

    files = services.scanner.scan_all(cancel_event)

    issues: list[Issue] = []
    for analyzer in build_analyzers(services, effective):
        analyzer_start = time.perf_counter()
        found = analyzer.analyze()
        logger.debug(
            f"{analyzer.name} analyzer: {len(found)} issues in "
            f"{time.perf_counter() - analyzer_start:.2f}s"
        )
        issues.extend(found)

    code_stats = (
        CodeStatsAnalyzer(services.scanner).analyze() if effective.code_stats else CodeStats()
    )

    report = HealthReport(
        repository=str(services.scanner.root_path),
        summary=Summary.from_issues(issues),
        code_stats=code_stats,
        issues=issues,
        duration_seconds=time.perf_counter() - start,
        files_scanned=len(files),
        version=__version__,
    )
    logger.info(
        f"Health check complete: {report.summary.total_issues} issues, "
        f"score {report.summary.score} ({report.summary.grade})"
    )
    return report

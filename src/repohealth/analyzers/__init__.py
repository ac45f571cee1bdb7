"""
Analyzers - passes over the shared scan cache that produce issues and statistics.
"""

from repohealth.analyzers.base import AnalyzerInterface, iter_file_lines
from repohealth.analyzers.code_stats import CodeStatsAnalyzer
from repohealth.analyzers.maintenance import MaintenanceAnalyzer
from repohealth.analyzers.performance import PerformanceAnalyzer
from repohealth.analyzers.quality import QualityAnalyzer
from repohealth.analyzers.security import (
    SecurityAnalyzer,
    classify_secret_severity,
    classify_suspicious_file_severity,
    is_test_file,
)

__all__ = [
    "AnalyzerInterface",
    "iter_file_lines",
    "SecurityAnalyzer",
    "CodeStatsAnalyzer",
    "PerformanceAnalyzer",
    "QualityAnalyzer",
    "MaintenanceAnalyzer",
    "classify_secret_severity",
    "classify_suspicious_file_severity",
    "is_test_file",
]

"""
Maintenance checks: files every repository is expected to carry.
"""

import logging

from repohealth.core.config import MaintenanceConfig
from repohealth.core.file_scanner import FileScanner
from repohealth.core.report import Category, Issue, Severity

from .base import AnalyzerInterface

logger = logging.getLogger(__name__)

REQUIRED_FILES_RULE = "required-files-check"


class MaintenanceAnalyzer(AnalyzerInterface):
    """
    Reports required files missing from the repository root.

    Existence is checked on the filesystem rather than in the scan cache,
    since an ignored file still exists.
    """

    name = "maintenance"

    def __init__(self, config: MaintenanceConfig, scanner: FileScanner):
        self._config = config
        self._scanner = scanner

    def analyze(self) -> list[Issue]:
        issues: list[Issue] = []
        fs = self._scanner.file_system
        for required in self._config.required_files:
            if fs.is_file(self._scanner.root_path / required):
                continue
            logger.debug(f"Required file missing: {required}")
            severity = Severity.MEDIUM if required == ".gitignore" else Severity.LOW
            issues.append(
                Issue(
                    id=f"missing-file-{required.replace('/', '-')}",
                    title=f"Missing {required}",
                    description=f"Repository has no {required} at its root",
                    category=Category.MAINTENANCE,
                    severity=severity,
                    file=required,
                    rule=REQUIRED_FILES_RULE,
                    fix=f"Add a {required} file to the repository root",
                )
            )
        return issues

"""
Report data models for repo-health.

Analyzers contribute Issue records; the health-check service aggregates
them into a HealthReport with a scored Summary.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Issue severity, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: "str | Severity", default: "Severity | None" = None) -> "Severity":
        """
        Parse a severity name case-insensitively.

        Args:
            value: Severity name or instance
            default: Returned for unknown names; if None, ValueError is raised
        """
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            if default is not None:
                return default
            raise


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

# Points deducted from a perfect score of 100 per issue
_SEVERITY_PENALTY = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}


class Category(str, Enum):
    """Area of repository health an issue belongs to."""

    SECURITY = "security"
    PERFORMANCE = "performance"
    QUALITY = "quality"
    MAINTENANCE = "maintenance"
    WORKFLOW = "workflow"
    DEPENDENCIES = "dependencies"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Issue:
    """
    A single finding contributed by an analyzer.

    Attributes:
        id: Stable identifier derived from rule, file and line
        title: Short human-readable title
        description: Longer explanation
        category: Health area
        severity: Severity level
        file: Path relative to the repository root, if file-specific
        line: 1-based line number, 0 if not line-specific
        column: 1-based column, 0 if unknown
        rule: Rule identifier (e.g. 'secret-detection')
        fix: Suggested remediation
        created_at: When the issue was produced
    """

    id: str
    title: str
    description: str
    category: Category
    severity: Severity
    file: str = ""
    line: int = 0
    column: int = 0
    rule: str = ""
    fix: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary, omitting empty optional fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "severity": self.severity.value,
        }
        if self.file:
            data["file"] = self.file
        if self.line:
            data["line"] = self.line
        if self.column:
            data["column"] = self.column
        if self.rule:
            data["rule"] = self.rule
        if self.fix:
            data["fix"] = self.fix
        data["created_at"] = self.created_at.isoformat()
        return data


def calculate_health_score(issues_by_severity: dict[Severity, int]) -> int:
    """Score 100 minus severity-weighted penalties, floored at 0."""
    score = 100
    for severity, penalty in _SEVERITY_PENALTY.items():
        score -= issues_by_severity.get(severity, 0) * penalty
    return max(score, 0)


def calculate_grade(score: int) -> str:
    """Map a health score to a letter grade."""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


@dataclass
class Summary:
    """Aggregate counts, score and grade for a list of issues."""

    total_issues: int = 0
    issues_by_severity: dict[Severity, int] = field(default_factory=dict)
    issues_by_category: dict[Category, int] = field(default_factory=dict)
    score: int = 100
    grade: str = "A"

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> "Summary":
        by_severity = dict(Counter(issue.severity for issue in issues))
        by_category = dict(Counter(issue.category for issue in issues))
        score = calculate_health_score(by_severity)
        return cls(
            total_issues=len(issues),
            issues_by_severity=by_severity,
            issues_by_category=by_category,
            score=score,
            grade=calculate_grade(score),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_issues": self.total_issues,
            "issues_by_severity": {k.value: v for k, v in self.issues_by_severity.items()},
            "issues_by_category": {k.value: v for k, v in self.issues_by_category.items()},
            "score": self.score,
            "grade": self.grade,
        }


def filter_issues_by_severity(issues: list[Issue], threshold: "str | Severity") -> list[Issue]:
    """
    Keep issues at or above threshold.

    An unrecognised threshold name is treated as 'low' (keep everything).
    """
    level = Severity.parse(threshold, default=Severity.LOW)
    return [issue for issue in issues if issue.severity.rank >= level.rank]


@dataclass
class CodeStats:
    """Line counts per language across the repository."""

    total_lines: int = 0
    total_files: int = 0
    language_breakdown: dict[str, int] = field(default_factory=dict)
    language_percent: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lines": self.total_lines,
            "total_files": self.total_files,
            "language_breakdown": dict(self.language_breakdown),
            "language_percent": {k: round(v, 2) for k, v in self.language_percent.items()},
        }


@dataclass
class HealthReport:
    """Complete result of one health check."""

    repository: str
    timestamp: datetime = field(default_factory=_utcnow)
    summary: Summary = field(default_factory=Summary)
    code_stats: CodeStats = field(default_factory=CodeStats)
    issues: list[Issue] = field(default_factory=list)
    duration_seconds: float = 0.0
    files_scanned: int = 0
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository,
            "timestamp": self.timestamp.isoformat(),
            "summary": self.summary.to_dict(),
            "code_stats": self.code_stats.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "duration_seconds": round(self.duration_seconds, 3),
            "files_scanned": self.files_scanned,
            "version": self.version,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

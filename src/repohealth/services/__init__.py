"""
Service Layer - health-check orchestration.
"""

from repohealth.services.health_check import (
    AnalysisOptions,
    HealthCheckServices,
    build_analyzers,
    create_services,
    run_health_check,
)

__all__ = [
    "AnalysisOptions",
    "HealthCheckServices",
    "create_services",
    "build_analyzers",
    "run_health_check",
]

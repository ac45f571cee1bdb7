"""
repo-health: repository health checks built on a single shared file scan.
"""

__version__ = "0.1.0"

"""
Reliability reports: comment rendering, flair and the post-submit handler.

Components:
- ReporterConfig: Per-installation settings (registry, flair, footer, ...)
- build_report / flair_text: Markdown and flair for matched sources
- ReportService: Runs the full flow for a new submission
"""

from media_reliability.reporting.comment import build_report, flair_text, should_flair, source_line
from media_reliability.reporting.config import ReporterConfig, validate_setting
from media_reliability.reporting.service import ReportOutcome, ReportService

__all__ = [
    "ReportOutcome",
    "ReportService",
    "ReporterConfig",
    "build_report",
    "flair_text",
    "should_flair",
    "source_line",
    "validate_setting",
]

"""Moderation services: scoring, scanning, triage, detection and analytics."""

from .analytics import AnalyticsAggregator, compute_growth_rate
from .detector import SuspiciousActivityDetector
from .ip_blocking import IPBlockService
from .priority import calculate_report_priority
from .rule_engine import RuleEngine
from .security_log import SecurityLogService, sanitize_log_data
from .triage import TriageProcessor
from .user_admin import UserAdminService

__all__ = [
    "AnalyticsAggregator",
    "IPBlockService",
    "RuleEngine",
    "SecurityLogService",
    "SuspiciousActivityDetector",
    "TriageProcessor",
    "UserAdminService",
    "calculate_report_priority",
    "compute_growth_rate",
    "sanitize_log_data",
]

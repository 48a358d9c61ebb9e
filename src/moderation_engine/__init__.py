"""Content moderation and report triage engine."""

__version__ = "0.1.0"

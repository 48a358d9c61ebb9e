"""Application settings and configuration.

This module defines all configuration options for the moderation engine.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Moderation Engine", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./moderation.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Rule engine weights
    block_confidence_threshold: float = Field(default=0.8, alias="BLOCK_CONFIDENCE_THRESHOLD")
    keyword_high_weight: float = Field(default=0.4, alias="KEYWORD_HIGH_WEIGHT")
    keyword_default_weight: float = Field(default=0.2, alias="KEYWORD_DEFAULT_WEIGHT")
    spam_pattern_weight: float = Field(default=0.3, alias="SPAM_PATTERN_WEIGHT")
    # Priority snapshot stored on reports generated by the rule engine.
    auto_report_priority: int = Field(default=8, ge=1, le=10, alias="AUTO_REPORT_PRIORITY")

    # Triage policy
    auto_approve_deletes_content: bool = Field(
        default=False,
        alias="AUTO_APPROVE_DELETES_CONTENT",
    )

    # Suspicious activity thresholds (exclusive)
    ip_requests_medium: int = Field(default=100, alias="IP_REQUESTS_MEDIUM")
    ip_requests_high: int = Field(default=500, alias="IP_REQUESTS_HIGH")
    user_activity_medium: int = Field(default=50, alias="USER_ACTIVITY_MEDIUM")
    user_activity_high: int = Field(default=200, alias="USER_ACTIVITY_HIGH")
    login_failures_medium: int = Field(default=10, alias="LOGIN_FAILURES_MEDIUM")
    login_failures_high: int = Field(default=50, alias="LOGIN_FAILURES_HIGH")

    # Bounded retry for aggregate reads
    read_retry_attempts: int = Field(default=3, ge=1, alias="READ_RETRY_ATTEMPTS")
    read_retry_base_delay_seconds: float = Field(
        default=0.2,
        ge=0.0,
        alias="READ_RETRY_BASE_DELAY_SECONDS",
    )
    read_retry_max_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        alias="READ_RETRY_MAX_DELAY_SECONDS",
    )

    security_log_page_size: int = Field(default=50, alias="SECURITY_LOG_PAGE_SIZE")

    # Periodic refresh of detection and analytics snapshots
    analytics_refresh_enabled: bool = Field(default=False, alias="ANALYTICS_REFRESH_ENABLED")
    analytics_refresh_interval_seconds: float = Field(
        default=300.0,
        alias="ANALYTICS_REFRESH_INTERVAL_SECONDS",
    )
    refresh_detection_window_hours: int = Field(
        default=24,
        alias="REFRESH_DETECTION_WINDOW_HOURS",
    )
    refresh_report_window_days: int = Field(default=30, alias="REFRESH_REPORT_WINDOW_DAYS")

    # CORS configuration for the admin frontend
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def detection_thresholds(self) -> dict[str, tuple[int, int]]:
        """Return (medium, high) thresholds keyed by suspicious activity type."""
        return {
            "EXCESSIVE_REQUESTS": (self.ip_requests_medium, self.ip_requests_high),
            "EXCESSIVE_USER_ACTIVITY": (self.user_activity_medium, self.user_activity_high),
            "REPEATED_LOGIN_FAILURES": (self.login_failures_medium, self.login_failures_high),
        }


settings = Settings()

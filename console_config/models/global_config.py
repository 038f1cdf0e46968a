"""Global (platform-wide) configuration record."""

from enum import StrEnum

from pydantic import Field

from console_config.models.base import CamelModel


class LogLevel(StrEnum):
    """Monitoring log verbosity."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class PlatformSettings(CamelModel):
    name: str = "EVA DA 2.0"
    version: str = "2.0.0"
    base_url: str = "http://localhost:8000"
    support_email: str = "support@eva-da.ca"
    max_projects_per_user: int = 10
    session_timeout: int = 480  # minutes


class PasswordPolicy(CamelModel):
    min_length: int = 8
    require_special_chars: bool = True
    require_numbers: bool = True


class SecuritySettings(CamelModel):
    require_mfa: bool = Field(default=False, alias="requireMFA")
    password_policy: PasswordPolicy = Field(default_factory=PasswordPolicy)
    allowed_domains: list[str] = Field(default_factory=list)
    max_login_attempts: int = 5


class PerformanceSettings(CamelModel):
    default_timeout: int = 30000  # ms
    max_retries: int = 3
    cache_timeout: int = 60  # minutes
    batch_size: int = 50


class MonitoringSettings(CamelModel):
    enable_telemetry: bool = True
    log_level: LogLevel = LogLevel.INFO
    application_insights_key: str | None = None


def _default_features() -> dict[str, bool]:
    return {
        "enableJurisprudence": True,
        "enableMultiTenant": True,
        "enableAdvancedAnalytics": False,
        "enableRealTimeChat": False,
    }


class GlobalConfiguration(CamelModel):
    """Singleton platform configuration.

    Instantiating with no arguments yields the built-in defaults.
    """

    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    performance: PerformanceSettings = Field(default_factory=PerformanceSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    features: dict[str, bool] = Field(default_factory=_default_features)

    @classmethod
    def defaults(cls, platform_name: str | None = None, base_url: str | None = None):
        """Built-in defaults, optionally stamped with the deployment identity."""
        config = cls()
        if platform_name:
            config.platform.name = platform_name
        if base_url:
            config.platform.base_url = base_url
        return config

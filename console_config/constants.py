"""Shared constants used across the application."""

# Persistence keys (logical; adapters may namespace them)
GLOBAL_CONFIG_KEY = "globalConfig.v1"
PROJECT_CONFIG_KEY = "projectConfig.v1"
USER_CONFIG_KEY = "userConfig.v1"
DEFAULT_USER_ID = "default-user"
LEGACY_REGISTRY_KEY = "projectRegistry.v0.68"

# Backups
BACKUP_PREFIX = "config-backup-"
BACKUP_FORMAT_VERSION = "2.0.0"
EXPORT_FILENAME_PREFIX = "config-export-"

# A backup whose recorded health is above this is reported as valid
BACKUP_HEALTHY_THRESHOLD = 80

# Validation formats
HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Validation bounds
MIN_THROUGHPUT = 400
MAX_THROUGHPUT = 10000
MAX_CHAT_RETENTION_DAYS = 2555  # 7 years
MAX_PROJECTS_PER_USER = 50
MIN_SESSION_TIMEOUT = 5  # minutes
MAX_SESSION_TIMEOUT = 480  # 8 hours

# Cost centres carrying this marker were never customised after seeding
PLACEHOLDER_COST_CENTRE_MARKER = "CC-2024"

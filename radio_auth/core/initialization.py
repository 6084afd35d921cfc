"""Application initialization and setup.

Runs once per process before the application or a job starts.
"""

from radio_auth.core.config.settings import settings
from radio_auth.core.logging import configure_logging


def initialize_application() -> None:
    """Configure logging from the loaded settings."""
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

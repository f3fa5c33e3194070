"""Configuration management"""
import os
from dotenv import load_dotenv
import pytz

from src.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar used to decide which day a session belongs to (IANA timezone)
REFERENCE_TIMEZONE: str = os.getenv("REFERENCE_TIMEZONE", "UTC")

# Points & levels
BASE_SESSION_POINTS: int = int(os.getenv("BASE_SESSION_POINTS", "10"))
POINTS_PER_LEVEL: int = int(os.getenv("POINTS_PER_LEVEL", "100"))


# Validation
def validate_config() -> None:
    """Validate gamification configuration"""
    try:
        pytz.timezone(REFERENCE_TIMEZONE)
    except pytz.exceptions.UnknownTimeZoneError:
        raise ConfigurationError(
            f"Invalid REFERENCE_TIMEZONE: '{REFERENCE_TIMEZONE}'",
            config_key="REFERENCE_TIMEZONE",
        )
    if BASE_SESSION_POINTS < 0:
        raise ConfigurationError(
            "BASE_SESSION_POINTS must not be negative",
            config_key="BASE_SESSION_POINTS",
        )
    if POINTS_PER_LEVEL <= 0:
        raise ConfigurationError(
            "POINTS_PER_LEVEL must be positive",
            config_key="POINTS_PER_LEVEL",
        )

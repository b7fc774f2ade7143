"""
SwimPractice configuration.

Settings are read from unprefixed environment variables (and a
local .env file) by pydantic-settings. Mock mode keeps practices in
memory so the API runs without Snowflake credentials.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

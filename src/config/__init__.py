"""
Storefront configuration.

Settings come from the environment (and ``.env``) through pydantic-settings;
static lookup tables (colors, categories, scoring weights) live in
``config.constants``.

Usage:
    from config import get_settings

    settings = get_settings()
    if settings.email_enabled:
        ...
"""

from config.settings import Settings, get_settings, get_settings_for_testing

__all__ = ["Settings", "get_settings", "get_settings_for_testing"]

"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- Authentication utilities (customer and admin)
- Common utilities
"""

from core.logging import configure_logging, get_logger
from core.auth import require_admin, require_auth, get_current_user, SupabaseUser
from core.utils import coerce_number, generate_slug, normalize_string_set, split_csv

__all__ = [
    "configure_logging",
    "get_logger",
    "require_admin",
    "require_auth",
    "get_current_user",
    "SupabaseUser",
    "coerce_number",
    "generate_slug",
    "normalize_string_set",
    "split_csv",
]

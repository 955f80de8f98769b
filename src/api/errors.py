"""
Domain error -> HTTP error translation shared by the route modules.

Every domain exception carries a ``status_code``; the response detail is
always ``{"error": ..., "message": ...}``.
"""

from typing import Optional

from fastapi import HTTPException


def http_error(status_code: int, error: str, message: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "message": message or error},
    )


def domain_error(exc: Exception) -> HTTPException:
    """Convert a domain exception (with status_code, error/message) to HTTPException."""
    status_code = getattr(exc, "status_code", 400)
    to_detail = getattr(exc, "to_detail", None)
    if callable(to_detail):
        return HTTPException(status_code=status_code, detail=to_detail())
    message = getattr(exc, "message", None) or str(exc)
    return http_error(status_code, message)


def not_found(what: str) -> HTTPException:
    return http_error(404, f"{what} not found")

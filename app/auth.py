"""
Identity hand-off.

Credential verification happens upstream (gateway / session service); by the
time a request reaches this app the verified user id travels in the trusted
``settings.AUTH_USER_HEADER`` header.  ``RequestContextMiddleware`` parses it
once and attaches it to the request state, and the dependencies below read
it from there.
"""
import logging

from fastapi import Request

from app.errors import Unauthenticated

logger = logging.getLogger(__name__)


def parse_identity(raw: str | None) -> int | None:
    """Return the canonical user id carried by *raw*, or None when absent/unusable."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric identity header value %r", raw)
        return None


def get_optional_user_id(request: Request) -> int | None:
    return getattr(request.state, "user_id", None)


def require_user_id(request: Request) -> int:
    user_id = get_optional_user_id(request)
    if user_id is None:
        raise Unauthenticated("Not authorized")
    return user_id

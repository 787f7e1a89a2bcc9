# control_panel/core/limiter.py
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from control_panel.core.config import RATE_LIMITS

logger = logging.getLogger(__name__)

def get_rate_limit_key(request: Request) -> str:
    """
    Rate limiting key for the control panel.

    Moderators are keyed by their user id once the session dependency has
    stored it on the request; anonymous callers (the login form) by IP.
    """
    ip = get_remote_address(request)

    moderator = getattr(request.state, "moderator", None)
    if moderator is not None:
        return f"moderator:{moderator.user_id}:{ip}"

    return f"anon:{ip}"

def log_rate_limit_violation(request: Request, limit: str):
    """Log rate limit violations for monitoring."""
    ip = get_remote_address(request)
    logger.warning(f"Rate limit exceeded: {limit} | IP: {ip} | Endpoint: {request.url.path}")

limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[RATE_LIMITS["default"]],
)

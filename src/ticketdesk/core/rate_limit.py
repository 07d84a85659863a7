"""
Shared slowapi limiter.

Limits are keyed by requester id when the identity header is present,
otherwise by client address.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings
from .security import USER_ID_HEADER


def requester_key(request: Request) -> str:
    user_id = request.headers.get(USER_ID_HEADER)
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=requester_key, enabled=settings.rate_limit.enabled)

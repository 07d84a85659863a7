"""
Requester dependencies for FastAPI.

Identity is established upstream; the gateway forwards it as headers.
"""

from typing import Optional

from fastapi import Header

from .exceptions import ValidationError
from .security import USER_ID_HEADER, USER_ROLE_HEADER, Requester
from ticketdesk.db.enums import UserRole


async def get_requester(
    user_id: Optional[str] = Header(None, alias=USER_ID_HEADER),
    role: Optional[str] = Header(None, alias=USER_ROLE_HEADER),
) -> Requester:
    """Build the Requester for this call from the identity headers.

    Raises:
        ValidationError: If the user id header is missing or not a positive integer
    """
    if user_id is None or not user_id.strip():
        raise ValidationError(f"{USER_ID_HEADER} header is required")

    try:
        parsed_id = int(user_id)
    except ValueError:
        raise ValidationError(f"{USER_ID_HEADER} must be an integer")

    if parsed_id <= 0:
        raise ValidationError(f"{USER_ID_HEADER} must be a positive integer")

    return Requester(
        user_id=parsed_id,
        role=(role or "").strip() or UserRole.USER.value,
    )

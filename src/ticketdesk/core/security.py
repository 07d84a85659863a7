"""
Requester identity.

Authentication happens outside this service; what reaches us is an opaque
(user_id, role) pair. It is passed explicitly into every engine, service and
session call instead of being looked up from ambient state.
"""

from dataclasses import dataclass

from ticketdesk.db.enums import UserRole

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"


@dataclass(frozen=True)
class Requester:
    """The user on whose behalf an operation runs."""

    user_id: int
    role: str = UserRole.USER.value

    @property
    def is_elevated(self) -> bool:
        """Elevated (admin) role drives forward transitions and deletions."""
        return self.role == UserRole.SUPERADMIN.value

    def as_headers(self) -> dict:
        return {USER_ID_HEADER: str(self.user_id), USER_ROLE_HEADER: self.role}

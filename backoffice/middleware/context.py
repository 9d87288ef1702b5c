"""Per-request authentication context."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class AuthContext:
    """
    Identity established for one request.

    ``roles`` come from the user loaded at request time, never from the
    token claims.
    """

    user_id: str
    username: str
    roles: List[str] = field(default_factory=list)
    email: Optional[str] = None
    token: Optional[str] = None

    def has_role(self, *role_names: str) -> bool:
        return any(role in self.roles for role in role_names)

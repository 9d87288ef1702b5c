"""Role repository."""
from typing import Optional
from backoffice.repositories.base import BaseRepository
from backoffice.models.role import Role
from backoffice.models.enums import RoleName


class RoleRepository(BaseRepository[Role]):
    """Repository for Role operations."""

    def __init__(self, session):
        super().__init__(session, Role)

    def find_by_name(self, name: RoleName) -> Optional[Role]:
        """Find role by name."""
        return self._session.query(Role).filter(Role.name == name).first()

    def get_or_create(
        self, name: RoleName, description: str = "", is_system: bool = False
    ) -> Role:
        """Return the role with this name, creating it when missing."""
        role = self.find_by_name(name)
        if role:
            return role

        role = Role(name=name, description=description, is_system=is_system)
        return self.save(role)

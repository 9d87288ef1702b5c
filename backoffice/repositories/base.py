"""Generic repository base."""
from typing import Generic, Optional, Type, TypeVar, Union
from uuid import UUID

T = TypeVar("T")


def to_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    """Coerce an id to UUID; malformed values yield None."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class BaseRepository(Generic[T]):
    """
    Base repository with common CRUD operations.

    Subclasses pass their model class and add entity-specific queries
    on ``self._session``.
    """

    def __init__(self, session, model: Type[T]):
        self._session = session
        self._model = model

    @property
    def session(self):
        return self._session

    def find_by_id(self, id: Union[str, UUID]) -> Optional[T]:
        """Find entity by primary key; malformed ids yield None."""
        uid = to_uuid(id)
        if uid is None:
            return None
        return self._session.get(self._model, uid)

    def exists(self, id: Union[str, UUID]) -> bool:
        return self.find_by_id(id) is not None

    def save(self, entity: T) -> T:
        """Persist a new or modified entity and commit."""
        self._session.add(entity)
        self._session.commit()
        return entity

    def update(self, entity: T) -> T:
        self._session.merge(entity)
        self._session.commit()
        return entity

    def delete(self, entity: T) -> None:
        self._session.delete(entity)
        self._session.commit()

"""Operation repository."""
from typing import Optional
from backoffice.repositories.base import BaseRepository
from backoffice.models.operation import Operation


class OperationRepository(BaseRepository[Operation]):
    def __init__(self, session):
        super().__init__(session=session, model=Operation)

    def find_by_code(self, code: str) -> Optional[Operation]:
        return self._session.query(Operation).filter(Operation.code == code).first()

"""Company repository."""
from typing import Optional
from backoffice.repositories.base import BaseRepository
from backoffice.models.company import Company


class CompanyRepository(BaseRepository[Company]):
    def __init__(self, session):
        super().__init__(session=session, model=Company)

    def find_by_code(self, code: str) -> Optional[Company]:
        return self._session.query(Company).filter(Company.code == code).first()

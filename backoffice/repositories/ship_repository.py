"""Ship repository."""
from typing import Optional
from backoffice.repositories.base import BaseRepository
from backoffice.models.ship import Ship


class ShipRepository(BaseRepository[Ship]):
    def __init__(self, session):
        super().__init__(session=session, model=Ship)

    def find_by_imo(self, numero_imo: str) -> Optional[Ship]:
        return self._session.query(Ship).filter(Ship.numero_imo == numero_imo).first()

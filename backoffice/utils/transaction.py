"""Transaction helper for multi-row writes."""


class TransactionContext:
    """
    Context manager for database transactions.

    Commits on success and rolls back on exception. With nested=True a
    savepoint is used so only the inner block is rolled back.

    Usage:
        with TransactionContext(session):
            session.add(company)
            session.add(ship)
    """

    def __init__(self, session, nested: bool = False):
        self._session = session
        self._nested = nested
        self._savepoint = None

    def __enter__(self):
        if self._nested:
            self._savepoint = self._session.begin_nested()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            if self._nested and self._savepoint:
                self._savepoint.rollback()
            else:
                self._session.rollback()
            return False

        if not self._nested:
            self._session.commit()
        return False

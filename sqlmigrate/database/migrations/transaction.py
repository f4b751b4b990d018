"""
Unit-of-work wrapper for one migration operation.
"""

import logging
from types import TracebackType
from typing import Optional, Type

from ..connection import DatabaseManager, DatabaseTransaction, TransactionError


class TransactionScope:
    """
    Context manager owning the transaction of one top-level operation.

    Commits when the block exits normally and rolls back on every other path.
    Only one scope may be open per manager at a time.
    """

    def __init__(self, db: DatabaseManager, logger: logging.Logger):
        self.db = db
        self.logger = logger
        self.transaction: Optional[DatabaseTransaction] = None

    @property
    def is_open(self) -> bool:
        return self.transaction is not None

    def __enter__(self) -> DatabaseTransaction:
        if self.transaction is not None:
            raise TransactionError("A migration transaction is already open")

        self.transaction = self.db.begin()
        return self.transaction

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        transaction, self.transaction = self.transaction, None
        if transaction is None:
            return

        if exc_type is None:
            try:
                transaction.commit()
            except Exception as e:
                self.logger.error(f"tx.commit failed: {e}")
                raise TransactionError(f"Could not commit transaction: {e}", cause=e) from e
            return

        try:
            transaction.rollback()
            self.logger.info("tx.rollback executed")
        except Exception as e:
            # The exception being propagated stays the one the caller sees
            self.logger.error(f"tx.rollback failed: {e}")

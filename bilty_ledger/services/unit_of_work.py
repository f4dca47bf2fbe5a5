"""Transaction boundary shared by the services"""

from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.orm import Session
from bilty_ledger.domain.exceptions import StoreError, ConcurrentUpdateError
from bilty_ledger.infrastructure.database.repositories import store_errors
from bilty_ledger.infrastructure.observability.metrics import store_failures_counter


@contextmanager
def transaction(db: Session) -> Iterator[None]:
    """Commit everything done inside the block, or roll all of it back"""
    try:
        yield
        with store_errors():
            db.commit()
    except (StoreError, ConcurrentUpdateError):
        store_failures_counter.inc()
        db.rollback()
        raise
    except Exception:
        db.rollback()
        raise

"""Persistence collaborator for the redemption ledger.

Wraps the Flask-SQLAlchemy session behind a small interface: a transaction
boundary, a unique-key insert that reports ``DuplicateKey`` instead of a
vendor error code, an atomic balance increment and point lookups.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import DuplicateKey, PersistenceError, StampError
from .models import db, Customer, StampTransaction

logger = logging.getLogger(__name__)


class StampRepository:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    @contextmanager
    def transaction(self):
        """Commit on success, roll back on any error.

        SQLAlchemy errors escaping the block are surfaced as PersistenceError.
        """
        try:
            yield self
            self.session.commit()
        except StampError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception('stamp transaction failed')
            raise PersistenceError() from exc
        except Exception:
            self.session.rollback()
            raise

    def insert_transaction(self, record: StampTransaction) -> StampTransaction:
        self.session.add(record)
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            # generic unique check: the row is visible once the winner committed
            if self.find_by_redemption_id(record.redemption_id) is not None:
                raise DuplicateKey('redemption_id', record.redemption_id) from exc
            raise PersistenceError() from exc
        return record

    def increment_balance(self, customer_id: str, business_id: str, stamps: int,
                          visited_at, count_visit: bool = True) -> bool:
        values = {'total_stamps': Customer.total_stamps + stamps}
        if count_visit:
            values['total_visits'] = Customer.total_visits + 1
            values['last_visit'] = visited_at
        stmt = (
            update(Customer)
            .where(Customer.id == customer_id, Customer.business_id == business_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def find_by_redemption_id(self, redemption_id: str) -> StampTransaction | None:
        stmt = select(StampTransaction).where(StampTransaction.redemption_id == redemption_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_customer(self, customer_id: str) -> Customer | None:
        return self.session.get(Customer, customer_id)

    def list_transactions(self, business_id: str, customer_id: str | None = None, limit: int = 50):
        stmt = select(StampTransaction).where(StampTransaction.business_id == business_id)
        if customer_id:
            stmt = stmt.where(StampTransaction.customer_id == customer_id)
        stmt = stmt.order_by(StampTransaction.created_at.desc(), StampTransaction.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

# offer_service/db/sqlalchemy_adapter.py
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from offer_service.core.exceptions import AdapterError, ConflictError
from offer_service.db import adapter as collections
from offer_service.db.adapter import PersistenceAdapter
from offer_service.models.counter_offer import CounterOffer
from offer_service.models.offer import Offer
from offer_service.models.offer_share import OfferShare
from offer_service.models.saved_offer import SavedOffer
from offer_service.models.trip_request import TripRequest
from offer_service.models.vendor import Vendor

logger = logging.getLogger(__name__)

MODELS = {
    collections.TRIP_REQUESTS: TripRequest,
    collections.OFFERS: Offer,
    collections.COUNTER_OFFERS: CounterOffer,
    collections.SAVED_OFFERS: SavedOffer,
    collections.OFFER_SHARES: OfferShare,
    collections.VENDORS: Vendor,
}


class SQLAlchemyAdapter(PersistenceAdapter):
    """PersistenceAdapter backed by a SQLAlchemy ORM session."""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    # ── Helpers ──────────────────────────────────────────────────────

    def _model(self, collection: str):
        try:
            return MODELS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")

    def _load_options(self, model, joins: Sequence[str]) -> list:
        options = []
        for path in joins:
            current_model = model
            loader = None
            for name in path.split("."):
                attr = getattr(current_model, name)
                strategy = selectinload if attr.property.uselist else joinedload
                loader = strategy(attr) if loader is None else getattr(loader, strategy.__name__)(attr)
                current_model = attr.property.mapper.class_
            options.append(loader)
        return options

    def _pk_criteria(self, model, record_id: Any):
        pk_columns = model.__mapper__.primary_key
        if len(pk_columns) == 1:
            return pk_columns[0] == record_id
        return and_(*(col == value for col, value in zip(pk_columns, record_id)))

    @contextmanager
    def _reading(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Read failed during {operation}: {e}")
            raise AdapterError(f"Storage read failed: {operation}", operation=operation) from e

    # ── Transactions ─────────────────────────────────────────────────

    @contextmanager
    def transaction(self):
        if self._depth:
            # Nested blocks join the outermost unit of work.
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Write rejected by storage constraint: {e.orig}")
            raise ConflictError(
                "Write conflicts with the current state of the record",
                details={"constraint": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage write failed: {e}")
            raise AdapterError("Storage write failed", operation="transaction") from e
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._depth = 0

    # ── Reads ────────────────────────────────────────────────────────

    def get(self, collection: str, record_id: Any, joins: Sequence[str] = ()) -> Optional[Any]:
        model = self._model(collection)
        with self._reading(f"get {collection}"):
            return self.db.get(
                model,
                record_id,
                options=self._load_options(model, joins),
                populate_existing=True,
            )

    def query_joined(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        joins: Sequence[str] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Any]:
        model = self._model(collection)
        with self._reading(f"query {collection}"):
            query = self.db.query(model).options(*self._load_options(model, joins))

            for field, value in (filters or {}).items():
                column = getattr(model, field)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.filter(column.in_(list(value)))
                else:
                    query = query.filter(column == value)

            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())

            return query.populate_existing().all()

    # ── Writes ───────────────────────────────────────────────────────

    def update(
        self,
        collection: str,
        record_id: Any,
        patch: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> bool:
        model = self._model(collection)
        with self.transaction():
            query = self.db.query(model).filter(self._pk_criteria(model, record_id))
            if expected_status is not None:
                query = query.filter(model.status == expected_status)
            # Plain UPDATE so rowcount is exact; reads use populate_existing.
            count = query.update(patch, synchronize_session=False)
        return count == 1

    def insert(self, collection: str, record: Dict[str, Any]) -> Any:
        model = self._model(collection)
        with self.transaction():
            db_obj = model(**record)
            self.db.add(db_obj)
            self.db.flush()
        return db_obj

    def upsert(
        self, collection: str, record: Dict[str, Any], key_fields: Sequence[str]
    ) -> Any:
        try:
            return self._upsert_once(collection, record, key_fields)
        except ConflictError:
            # A concurrent insert won; the row exists now, so this pass updates it.
            logger.info(f"Upsert on {collection} raced an insert, retrying as update")
            return self._upsert_once(collection, record, key_fields)

    def _upsert_once(
        self, collection: str, record: Dict[str, Any], key_fields: Sequence[str]
    ) -> Any:
        model = self._model(collection)
        with self.transaction():
            key = {field: record[field] for field in key_fields}
            db_obj = self.db.query(model).filter_by(**key).first()
            if db_obj is None:
                db_obj = model(**record)
                self.db.add(db_obj)
            else:
                for field, value in record.items():
                    setattr(db_obj, field, value)
            self.db.flush()
        return db_obj

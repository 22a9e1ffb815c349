# offer_service/db/adapter.py
"""
Persistence contract consumed by the offer lifecycle services.

The services never build queries themselves; they ask an adapter for records
by collection name and describe filters as plain field/value mappings.
"""
from abc import ABC, abstractmethod
from typing import Any, ContextManager, Dict, List, Optional, Sequence

# Collections the services read and write.
TRIP_REQUESTS = "trip_requests"
OFFERS = "offers"
COUNTER_OFFERS = "counter_offers"
SAVED_OFFERS = "saved_offers"
OFFER_SHARES = "offer_shares"
VENDORS = "vendors"


class PersistenceAdapter(ABC):
    """
    Transactional read/write interface over the offer collections.

    Implementations must:
    - raise ConflictError when a write violates a uniqueness guard,
    - raise AdapterError for any other storage failure,
    - make `update(..., expected_status=...)` a single conditional write.
    """

    @abstractmethod
    def get(
        self, collection: str, record_id: Any, joins: Sequence[str] = ()
    ) -> Optional[Any]:
        """Return one record by primary key, or None."""

    @abstractmethod
    def query_joined(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        joins: Sequence[str] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Any]:
        """
        Return records matching every filter. A list/tuple/set value matches
        any of its members. `joins` names relationships to load alongside,
        dotted for nested ones ("offer.vendor").
        """

    @abstractmethod
    def update(
        self,
        collection: str,
        record_id: Any,
        patch: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> bool:
        """
        Apply `patch` to one record. When `expected_status` is given the write
        only happens if the stored status still equals it. Returns True when a
        row was written.
        """

    @abstractmethod
    def insert(self, collection: str, record: Dict[str, Any]) -> Any:
        """Create a record and return it."""

    @abstractmethod
    def upsert(
        self, collection: str, record: Dict[str, Any], key_fields: Sequence[str]
    ) -> Any:
        """Insert, or update the record sharing the same `key_fields` values."""

    @abstractmethod
    def transaction(self) -> ContextManager["PersistenceAdapter"]:
        """
        Group writes into one unit: commit on success, roll back and re-raise
        on error. Writes made outside a transaction commit individually.
        """

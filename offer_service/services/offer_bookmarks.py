# offer_service/services/offer_bookmarks.py
"""Per-user saved offers and the append-only log of offers shared to groups."""
import logging
import uuid
from typing import List, Optional, Sequence

from offer_service.core.clock import Clock, ensure_aware, system_clock
from offer_service.core.config import settings
from offer_service.core.exceptions import ValidationError
from offer_service.db.adapter import OFFER_SHARES, SAVED_OFFERS, PersistenceAdapter
from offer_service.schemas.offer import OfferShareRead
from offer_service.schemas.saved_offer import (
    SavedOfferRead,
    SavedOffersResult,
    SavedOfferSortKey,
    SavedOfferStatusFilter,
    SavedOfferSummary,
    SavedOfferView,
)
from offer_service.services.offer_lifecycle import get_offer_or_404
from offer_service.services.offer_views import build_offer_view, build_trip_request_summary

logger = logging.getLogger(__name__)

SAVED_OFFER_JOINS = ("offer.vendor", "offer.trip_request", "offer.counter_offers")


# --- Pure helpers ---

def filter_saved_offers(
    views: Sequence[SavedOfferView], status_filter: str = SavedOfferStatusFilter.ALL
) -> List[SavedOfferView]:
    try:
        status_filter = SavedOfferStatusFilter(status_filter)
    except ValueError:
        raise ValidationError(f"Unknown saved offer filter: {status_filter}", field="status")

    if status_filter == SavedOfferStatusFilter.ACTIVE:
        return [v for v in views if v.offer.can_respond]
    if status_filter == SavedOfferStatusFilter.EXPIRED:
        return [v for v in views if v.offer.days_until_expiry <= 0]
    return list(views)


def sort_saved_offers(
    views: Sequence[SavedOfferView], sort_by: str = SavedOfferSortKey.SAVED_AT
) -> List[SavedOfferView]:
    try:
        sort_by = SavedOfferSortKey(sort_by)
    except ValueError:
        raise ValidationError(f"Unknown saved offer sort key: {sort_by}", field="sort_by")

    if sort_by == SavedOfferSortKey.PRICE:
        return sorted(views, key=lambda v: v.offer.proposed_price)
    if sort_by == SavedOfferSortKey.EXPIRY:
        return sorted(views, key=lambda v: v.offer.valid_until)
    return sorted(views, key=lambda v: v.saved_at, reverse=True)


def summarize_saved_offers(
    views: Sequence[SavedOfferView], expiring_soon_days: Optional[int] = None
) -> SavedOfferSummary:
    if expiring_soon_days is None:
        expiring_soon_days = settings.EXPIRING_SOON_DAYS
    return SavedOfferSummary(
        total=len(views),
        active=sum(1 for v in views if v.offer.can_respond),
        expiring_soon=sum(
            1 for v in views if 0 < v.offer.days_until_expiry <= expiring_soon_days
        ),
        expired=sum(1 for v in views if v.offer.days_until_expiry <= 0),
    )


class OfferBookmarkService:
    def __init__(self, adapter: PersistenceAdapter, clock: Clock = system_clock):
        self.adapter = adapter
        self.clock = clock

    def save_offer_for_later(self, offer_id: str, user_id: str) -> SavedOfferRead:
        """Bookmark an offer. Saving again only refreshes saved_at."""
        get_offer_or_404(self.adapter, offer_id)
        saved_at = self.clock.now()
        self.adapter.upsert(
            SAVED_OFFERS,
            {"user_id": user_id, "offer_id": offer_id, "saved_at": saved_at},
            key_fields=("user_id", "offer_id"),
        )
        logger.info(f"User {user_id} saved offer {offer_id}")
        return SavedOfferRead(user_id=user_id, offer_id=offer_id, saved_at=saved_at)

    def share_offer_with_group(
        self, offer_id: str, group_id: str, message: Optional[str] = None
    ) -> OfferShareRead:
        if not group_id or not group_id.strip():
            raise ValidationError("A group is required to share an offer", field="group_id")
        get_offer_or_404(self.adapter, offer_id)

        share = {
            "id": f"shr_{uuid.uuid4().hex[:12]}",
            "offer_id": offer_id,
            "group_id": group_id.strip(),
            "message": message,
            "shared_at": self.clock.now(),
        }
        self.adapter.insert(OFFER_SHARES, share)
        logger.info(f"Offer {offer_id} shared with group {share['group_id']}")
        return OfferShareRead(**share)

    def load_saved_offers(
        self,
        user_id: str,
        status_filter: str = SavedOfferStatusFilter.ALL,
        sort_by: str = SavedOfferSortKey.SAVED_AT,
    ) -> SavedOffersResult:
        """
        The user's bookmarks joined with the current offer, vendor and trip
        request. The summary always covers every bookmark, regardless of the
        filter applied to the list.
        """
        now = self.clock.now()
        rows = self.adapter.query_joined(
            SAVED_OFFERS,
            filters={"user_id": user_id},
            joins=SAVED_OFFER_JOINS,
            order_by="saved_at",
            descending=True,
        )
        views = [
            SavedOfferView(
                user_id=row.user_id,
                offer_id=row.offer_id,
                saved_at=ensure_aware(row.saved_at),
                offer=build_offer_view(row.offer, now),
                trip_request=(
                    build_trip_request_summary(row.offer.trip_request)
                    if row.offer.trip_request
                    else None
                ),
            )
            for row in rows
        ]
        return SavedOffersResult(
            saved_offers=sort_saved_offers(filter_saved_offers(views, status_filter), sort_by),
            summary=summarize_saved_offers(views),
        )

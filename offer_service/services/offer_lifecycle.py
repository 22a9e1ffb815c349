# offer_service/services/offer_lifecycle.py
"""
Offer lifecycle engine.

Owns the offer state machine and the cross-entity rule that a trip request
ends up with exactly one accepted offer. Concurrency is optimistic: every
status change is a conditional write that only lands while the offer is
still pending.
"""
import logging
from datetime import datetime
from typing import List, Optional

from offer_service.core.clock import Clock, system_clock
from offer_service.core.config import settings
from offer_service.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OfferExpiredError,
    OfferServiceError,
    PartialFailureError,
    ValidationError,
)
from offer_service.db.adapter import OFFERS, TRIP_REQUESTS, PersistenceAdapter
from offer_service.schemas.offer import AcceptOfferResult, OfferView, RejectionReason
from offer_service.services import expiry
from offer_service.services.offer_views import build_offer_view, build_trip_request_summary

logger = logging.getLogger(__name__)

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
COUNTER_OFFERED = "counter_offered"

TRIP_OPEN = "open"
TRIP_ACCEPTED = "accepted"

# Valid state transitions for stored offer statuses.
# "expired" is derived at read time and has no row of its own.
VALID_OFFER_TRANSITIONS = {
    PENDING: {ACCEPTED, REJECTED, COUNTER_OFFERED},
    ACCEPTED: set(),  # Terminal state
    REJECTED: set(),  # Terminal state
    COUNTER_OFFERED: set(),  # Superseded by its counter offer
}

REJECTION_REASON_MAX_LENGTH = 500

OFFER_JOINS = ("vendor", "counter_offers")


def validate_transition(old_status: str, new_status: str) -> bool:
    """Returns True if the offer state machine allows old_status → new_status."""
    return new_status in VALID_OFFER_TRANSITIONS.get(old_status, set())


def get_offer_or_404(adapter: PersistenceAdapter, offer_id: str):
    offer = adapter.get(OFFERS, offer_id, joins=OFFER_JOINS)
    if offer is None:
        raise NotFoundError("Offer", offer_id)
    return offer


def get_trip_request_or_404(adapter: PersistenceAdapter, trip_request_id: str):
    trip_request = adapter.get(TRIP_REQUESTS, trip_request_id)
    if trip_request is None:
        raise NotFoundError("TripRequest", trip_request_id)
    return trip_request


def check_owner(trip_request, user_id: Optional[str]) -> None:
    if user_id is not None and trip_request.user_id != user_id:
        raise ForbiddenError(
            "Only the traveler who posted the trip request can act on its offers",
            details={"trip_request_id": trip_request.id},
        )


def ensure_can_transition(offer, new_status: str, now: datetime) -> None:
    """
    Gate a lifecycle change. A lapsed offer is refused even while its stored
    status is still pending.
    """
    if offer.status == PENDING and expiry.has_lapsed(offer.valid_until, now):
        raise OfferExpiredError(offer.id, new_status)
    if not validate_transition(offer.status, new_status):
        raise InvalidTransitionError(offer.id, offer.status, new_status)


class OfferLifecycleService:
    """Accept and reject offers against a persistence adapter."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        clock: Clock = system_clock,
        atomic_accept: Optional[bool] = None,
    ):
        self.adapter = adapter
        self.clock = clock
        self.atomic_accept = (
            settings.OFFER_ACCEPT_ATOMIC if atomic_accept is None else atomic_accept
        )

    # ── Accept ────────────────────────────────────────────────────────

    def accept_offer(self, offer_id: str, user_id: str) -> AcceptOfferResult:
        """
        Accept one offer, reject its still-pending siblings and mark the trip
        request accepted with the winning vendor.

        The target offer's conditional write is committed before any sibling
        or trip request write is attempted. In best-effort mode a failure in
        those later writes raises PartialFailureError without undoing the
        accept; in atomic mode everything rolls back together.
        """
        now = self.clock.now()
        offer = get_offer_or_404(self.adapter, offer_id)
        trip_request = get_trip_request_or_404(self.adapter, offer.trip_request_id)
        check_owner(trip_request, user_id)
        ensure_can_transition(offer, ACCEPTED, now)

        if trip_request.status != TRIP_OPEN:
            raise InvalidTransitionError(
                trip_request.id,
                trip_request.status,
                TRIP_ACCEPTED,
                message=f"Trip request {trip_request.id} is '{trip_request.status}' and no longer takes offers",
            )

        # Read everything needed from the records before the first commit.
        trip_request_id = trip_request.id
        vendor_id = offer.vendor_id

        if self.atomic_accept:
            rejected_ids = self._accept_atomically(offer_id, trip_request_id, vendor_id, now)
        else:
            rejected_ids = self._accept_best_effort(offer_id, trip_request_id, vendor_id, now)

        logger.info(
            f"Offer {offer_id} accepted for trip request {trip_request_id}; "
            f"rejected siblings: {rejected_ids}"
        )
        return AcceptOfferResult(
            offer=self._reload_view(offer_id, now),
            rejected_offer_ids=rejected_ids,
            trip_request=build_trip_request_summary(
                get_trip_request_or_404(self.adapter, trip_request_id)
            ),
        )

    def _claim(self, offer_id: str, now: datetime) -> None:
        won = self.adapter.update(
            OFFERS,
            offer_id,
            {"status": ACCEPTED, "accepted_at": now},
            expected_status=PENDING,
        )
        if not won:
            logger.warning(f"Accept of offer {offer_id} lost a race: no longer pending")
            raise ConflictError(
                f"Offer {offer_id} changed status before it could be accepted",
                details={"offer_id": offer_id},
            )

    def _pending_sibling_ids(self, trip_request_id: str, offer_id: str) -> List[str]:
        siblings = self.adapter.query_joined(
            OFFERS,
            filters={"trip_request_id": trip_request_id, "status": PENDING},
            order_by="created_at",
        )
        return [s.id for s in siblings if s.id != offer_id]

    def _reject_sibling(self, sibling_id: str, now: datetime) -> bool:
        return self.adapter.update(
            OFFERS,
            sibling_id,
            {"status": REJECTED, "rejected_at": now},
            expected_status=PENDING,
        )

    def _select_vendor(self, trip_request_id: str, vendor_id: str) -> bool:
        return self.adapter.update(
            TRIP_REQUESTS,
            trip_request_id,
            {"status": TRIP_ACCEPTED, "selected_vendor_id": vendor_id},
            expected_status=TRIP_OPEN,
        )

    def _accept_atomically(
        self, offer_id: str, trip_request_id: str, vendor_id: str, now: datetime
    ) -> List[str]:
        rejected_ids = []
        with self.adapter.transaction():
            self._claim(offer_id, now)
            for sibling_id in self._pending_sibling_ids(trip_request_id, offer_id):
                if self._reject_sibling(sibling_id, now):
                    rejected_ids.append(sibling_id)
            if not self._select_vendor(trip_request_id, vendor_id):
                raise ConflictError(
                    f"Trip request {trip_request_id} changed status during accept",
                    details={"trip_request_id": trip_request_id},
                )
        return rejected_ids

    def _accept_best_effort(
        self, offer_id: str, trip_request_id: str, vendor_id: str, now: datetime
    ) -> List[str]:
        self._claim(offer_id, now)

        rejected_ids = []
        failed = []

        try:
            sibling_ids = self._pending_sibling_ids(trip_request_id, offer_id)
        except OfferServiceError as e:
            logger.error(f"Could not load siblings of offer {offer_id}: {e.message}")
            sibling_ids = []
            failed.append(_failure("load_siblings", e, trip_request_id=trip_request_id))

        for sibling_id in sibling_ids:
            try:
                if self._reject_sibling(sibling_id, now):
                    rejected_ids.append(sibling_id)
            except OfferServiceError as e:
                logger.error(f"Failed to reject sibling offer {sibling_id}: {e.message}")
                failed.append(_failure("reject_sibling", e, offer_id=sibling_id))

        try:
            if not self._select_vendor(trip_request_id, vendor_id):
                failed.append({
                    "operation": "update_trip_request",
                    "trip_request_id": trip_request_id,
                    "error_code": "CONFLICT",
                    "message": "Trip request was no longer open",
                })
        except OfferServiceError as e:
            logger.error(f"Failed to update trip request {trip_request_id}: {e.message}")
            failed.append(_failure("update_trip_request", e, trip_request_id=trip_request_id))

        if failed:
            logger.warning(
                f"Offer {offer_id} accepted with {len(failed)} failed follow-up write(s)"
            )
            raise PartialFailureError(
                f"Offer {offer_id} was accepted but follow-up updates failed",
                completed={
                    "accepted_offer_id": offer_id,
                    "rejected_offer_ids": rejected_ids,
                },
                failed=failed,
            )
        return rejected_ids

    # ── Reject ────────────────────────────────────────────────────────

    def reject_offer(
        self,
        offer_id: str,
        reason: Optional[str] = None,
        *,
        user_id: Optional[str] = None,
    ) -> OfferView:
        """Reject one pending offer. Siblings and the trip request are untouched."""
        if isinstance(reason, RejectionReason):
            reason = reason.value
        if reason is not None:
            reason = reason.strip() or None
        if reason is not None and len(reason) > REJECTION_REASON_MAX_LENGTH:
            raise ValidationError(
                f"Rejection reason must be at most {REJECTION_REASON_MAX_LENGTH} characters",
                field="reason",
            )

        now = self.clock.now()
        offer = get_offer_or_404(self.adapter, offer_id)
        if user_id is not None:
            check_owner(get_trip_request_or_404(self.adapter, offer.trip_request_id), user_id)
        ensure_can_transition(offer, REJECTED, now)

        won = self.adapter.update(
            OFFERS,
            offer_id,
            {"status": REJECTED, "rejected_at": now, "rejection_reason": reason},
            expected_status=PENDING,
        )
        if not won:
            raise ConflictError(
                f"Offer {offer_id} changed status before it could be rejected",
                details={"offer_id": offer_id},
            )

        logger.info(f"Offer {offer_id} rejected (reason: {reason})")
        return self._reload_view(offer_id, now)

    def _reload_view(self, offer_id: str, now: datetime) -> OfferView:
        return build_offer_view(get_offer_or_404(self.adapter, offer_id), now)


def _failure(operation: str, error: OfferServiceError, **ids) -> dict:
    return {
        "operation": operation,
        **ids,
        "error_code": error.error_code,
        "message": error.message,
    }

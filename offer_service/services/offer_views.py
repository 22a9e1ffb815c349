# offer_service/services/offer_views.py
"""Builders that turn ORM records into read models with derived fields."""
from datetime import datetime
from typing import List, Optional

from offer_service.core.clock import ensure_aware
from offer_service.models.offer import Offer
from offer_service.models.trip_request import TripRequest
from offer_service.schemas.offer import (
    CounterOfferRead,
    OfferView,
    TripRequestSummary,
    VendorSummary,
)
from offer_service.schemas.trip_request import TripRequestWithOffers
from offer_service.services import expiry


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_aware(value) if value is not None else None


def build_offer_view(offer: Offer, now: datetime) -> OfferView:
    valid_until = ensure_aware(offer.valid_until)

    latest_counter = None
    if offer.counter_offers:
        latest = offer.counter_offers[-1]
        latest_counter = CounterOfferRead(
            id=latest.id,
            original_offer_id=latest.original_offer_id,
            proposed_price=latest.proposed_price,
            message=latest.message,
            modifications=latest.modifications,
            status=latest.status,
            created_at=ensure_aware(latest.created_at),
        )

    return OfferView(
        id=offer.id,
        trip_request_id=offer.trip_request_id,
        vendor_id=offer.vendor_id,
        vendor=VendorSummary.model_validate(offer.vendor) if offer.vendor else None,
        proposed_price=offer.proposed_price,
        price_breakdown=offer.price_breakdown,
        message=offer.message,
        valid_until=valid_until,
        created_at=ensure_aware(offer.created_at),
        status=offer.status,
        accepted_at=_aware(offer.accepted_at),
        rejected_at=_aware(offer.rejected_at),
        rejection_reason=offer.rejection_reason,
        counter_offer=latest_counter,
        display_status=expiry.display_status(offer.status, valid_until, now),
        is_expired=expiry.is_expired(valid_until, now),
        days_until_expiry=expiry.days_until_expiry(valid_until, now),
        can_respond=expiry.can_respond(offer.status, valid_until, now),
    )


def build_trip_request_summary(trip_request: TripRequest) -> TripRequestSummary:
    return TripRequestSummary(
        id=trip_request.id,
        user_id=trip_request.user_id,
        destination=trip_request.destination,
        start_date=trip_request.start_date,
        end_date=trip_request.end_date,
        group_size=trip_request.group_size,
        budget=trip_request.budget,
        status=trip_request.status,
        selected_vendor_id=trip_request.selected_vendor_id,
        created_at=ensure_aware(trip_request.created_at),
    )


def build_trip_request_with_offers(
    trip_request: TripRequest, now: datetime
) -> TripRequestWithOffers:
    summary = build_trip_request_summary(trip_request)
    return TripRequestWithOffers(
        **summary.model_dump(),
        offers=[build_offer_view(o, now) for o in trip_request.offers],
    )


def flatten_offers(trip_requests: List[TripRequestWithOffers]) -> List[OfferView]:
    """All offers across the given trip requests, in request then offer order."""
    return [offer for request in trip_requests for offer in request.offers]

# offer_service/api/v1/endpoints/offers.py
from datetime import datetime
from typing import List, Optional

import pydantic
from fastapi import APIRouter, Body, Depends, status

from offer_service.api import deps
from offer_service.core.exceptions import ValidationError
from offer_service.schemas.comparison import ComparisonResult
from offer_service.schemas.offer import (
    AcceptOfferResult,
    CompareOffersRequest,
    CounterOfferCreate,
    CounterOfferResult,
    OfferFilters,
    OfferShareRead,
    OfferView,
    RejectOfferRequest,
    ShareOfferRequest,
)
from offer_service.schemas.saved_offer import SavedOfferRead
from offer_service.schemas.token import TokenPayload
from offer_service.services.counter_offers import CounterOfferService
from offer_service.services.offer_bookmarks import OfferBookmarkService
from offer_service.services.offer_comparison import compare_offers
from offer_service.services.offer_filters import filter_and_sort
from offer_service.services.offer_lifecycle import OfferLifecycleService
from offer_service.services.offer_views import flatten_offers
from offer_service.services.trip_requests import TripRequestService

router = APIRouter()


def _user_offers(trip_requests: TripRequestService, user_id: str) -> List[OfferView]:
    return flatten_offers(trip_requests.load_trip_requests(user_id))


@router.get("", response_model=List[OfferView])
def list_offers(
    status_filter: Optional[str] = None,
    price_min: Optional[int] = None,
    price_max: Optional[int] = None,
    min_vendor_rating: float = 0,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    trip_requests: TripRequestService = Depends(deps.get_trip_request_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    List every offer on the caller's trip requests, filtered and sorted.
    `status_filter` matches the displayed status; "all" or omitted means no filter.
    """
    try:
        filters = OfferFilters(
            status=None if status_filter in (None, "all") else status_filter,
            price_min=price_min,
            price_max=price_max,
            min_vendor_rating=min_vendor_rating,
            created_from=created_from,
            created_to=created_to,
        )
    except pydantic.ValidationError as e:
        raise ValidationError(e.errors()[0]["msg"], field="filters")

    return filter_and_sort(
        _user_offers(trip_requests, current_user.sub),
        filters,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("/compare", response_model=ComparisonResult)
def compare_selected_offers(
    compare_in: CompareOffersRequest,
    trip_requests: TripRequestService = Depends(deps.get_trip_request_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Compare offers side by side. Only the caller's own offers can be selected.
    """
    return compare_offers(
        _user_offers(trip_requests, current_user.sub), compare_in.offer_ids
    )


@router.post("/{offer_id}/accept", response_model=AcceptOfferResult)
def accept_offer(
    offer_id: str,
    lifecycle: OfferLifecycleService = Depends(deps.get_lifecycle_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Accept an offer. Other pending offers on the same trip request are rejected.
    """
    return lifecycle.accept_offer(offer_id, current_user.sub)


@router.post("/{offer_id}/reject", response_model=OfferView)
def reject_offer(
    offer_id: str,
    reject_in: Optional[RejectOfferRequest] = Body(None),
    lifecycle: OfferLifecycleService = Depends(deps.get_lifecycle_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    reason = reject_in.rejection_reason if reject_in else None
    return lifecycle.reject_offer(offer_id, reason, user_id=current_user.sub)


@router.post(
    "/{offer_id}/counter",
    response_model=CounterOfferResult,
    status_code=status.HTTP_201_CREATED,
)
def submit_counteroffer(
    offer_id: str,
    counter_in: CounterOfferCreate,
    counter_offers: CounterOfferService = Depends(deps.get_counter_offer_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return counter_offers.submit_counteroffer(
        offer_id,
        counter_in.proposed_price,
        counter_in.message,
        counter_in.modifications,
        user_id=current_user.sub,
    )


@router.post("/{offer_id}/save", response_model=SavedOfferRead)
def save_offer_for_later(
    offer_id: str,
    bookmarks: OfferBookmarkService = Depends(deps.get_bookmark_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Bookmark an offer. Saving the same offer again refreshes saved_at."""
    return bookmarks.save_offer_for_later(offer_id, current_user.sub)


@router.post(
    "/{offer_id}/share",
    response_model=OfferShareRead,
    status_code=status.HTTP_201_CREATED,
)
def share_offer_with_group(
    offer_id: str,
    share_in: ShareOfferRequest,
    bookmarks: OfferBookmarkService = Depends(deps.get_bookmark_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return bookmarks.share_offer_with_group(offer_id, share_in.group_id, share_in.message)

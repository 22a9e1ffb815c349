# offer_service/services/offer_filters.py
"""Filtering and sorting of offer views. Pure: inputs are never mutated."""
from typing import List, Optional, Sequence

from offer_service.core.clock import ensure_aware
from offer_service.core.exceptions import ValidationError
from offer_service.schemas.offer import OfferFilters, OfferView, SortKey, SortOrder

SORT_KEYS = {
    SortKey.PRICE: lambda o: o.proposed_price,
    SortKey.RATING: lambda o: o.vendor_rating or 0,
    SortKey.EXPIRY: lambda o: o.valid_until,
    SortKey.CREATED_AT: lambda o: o.created_at,
}


def _matches(offer: OfferView, filters: OfferFilters) -> bool:
    if filters.status is not None and offer.display_status != filters.status.value:
        return False
    if filters.price_min is not None and offer.proposed_price < filters.price_min:
        return False
    if filters.price_max is not None and offer.proposed_price > filters.price_max:
        return False
    if filters.min_vendor_rating > 0 and (offer.vendor_rating or 0) < filters.min_vendor_rating:
        return False
    if filters.created_from is not None and offer.created_at < ensure_aware(filters.created_from):
        return False
    if filters.created_to is not None and offer.created_at > ensure_aware(filters.created_to):
        return False
    return True


def filter_offers(
    offers: Sequence[OfferView], filters: Optional[OfferFilters] = None
) -> List[OfferView]:
    if filters is None:
        return list(offers)
    return [o for o in offers if _matches(o, filters)]


def sort_offers(
    offers: Sequence[OfferView],
    sort_by: str = SortKey.CREATED_AT,
    sort_order: str = SortOrder.DESC,
) -> List[OfferView]:
    try:
        key = SORT_KEYS[SortKey(sort_by)]
    except ValueError:
        raise ValidationError(f"Unknown sort key: {sort_by}", field="sort_by")
    try:
        order = SortOrder(sort_order)
    except ValueError:
        raise ValidationError(f"Unknown sort order: {sort_order}", field="sort_order")

    # sorted() is stable and keeps input order for ties under reverse=True too.
    return sorted(offers, key=key, reverse=order == SortOrder.DESC)


def filter_and_sort(
    offers: Sequence[OfferView],
    filters: Optional[OfferFilters] = None,
    sort_by: str = SortKey.CREATED_AT,
    sort_order: str = SortOrder.DESC,
) -> List[OfferView]:
    """Apply every filter (AND), then order by sort_by in sort_order."""
    return sort_offers(filter_offers(offers, filters), sort_by, sort_order)

# offer_service/services/offer_comparison.py
"""
Side-by-side comparison of selected offers.

Works on already-built OfferViews, so the expiry numbers match whatever
"now" the views were built with.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from offer_service.core.config import settings
from offer_service.core.exceptions import NotFoundError, ValidationError
from offer_service.schemas.comparison import (
    ComparisonResult,
    ExpirationEntry,
    PriceRange,
    RatingPolicy,
    ValueRange,
)
from offer_service.schemas.offer import OfferView

logger = logging.getLogger(__name__)

HIGHEST = "highest"
LOWEST = "lowest"

# criterion -> (value getter, default direction)
CRITERIA: Dict[str, tuple] = {
    "price": (lambda o: o.proposed_price, LOWEST),
    "rating": (lambda o: o.vendor_rating, HIGHEST),
    "reviews": (lambda o: o.vendor_reviews, HIGHEST),
    "expiry": (lambda o: o.valid_until, HIGHEST),
}


def _rating_getter(policy: RatingPolicy) -> Callable[[OfferView], Optional[float]]:
    if policy == RatingPolicy.ZERO:
        return lambda o: o.vendor_rating or 0
    return lambda o: o.vendor_rating


def best_value(
    offers: Sequence[OfferView],
    criterion: str,
    direction: Optional[str] = None,
    rating_policy: RatingPolicy = RatingPolicy.ZERO,
) -> List[str]:
    """
    Ids of every offer whose value equals the extremum for `criterion`.
    Ties are all flagged. Offers without a value (unrated vendors under the
    "exclude" policy) never qualify.
    """
    if criterion not in CRITERIA:
        raise ValidationError(f"Unknown comparison criterion: {criterion}", field="criterion")
    getter, default_direction = CRITERIA[criterion]
    if criterion == "rating":
        getter = _rating_getter(RatingPolicy(rating_policy))

    direction = direction or default_direction
    if direction not in (HIGHEST, LOWEST):
        raise ValidationError(f"Unknown direction: {direction}", field="direction")

    values = [(o.id, getter(o)) for o in offers]
    values = [(offer_id, v) for offer_id, v in values if v is not None]
    if not values:
        return []

    pick = max if direction == HIGHEST else min
    target = pick(v for _, v in values)
    return [offer_id for offer_id, v in values if v == target]


def _rating_range(offers: Sequence[OfferView], policy: RatingPolicy) -> Optional[ValueRange]:
    getter = _rating_getter(policy)
    ratings = [r for r in (getter(o) for o in offers) if r is not None]
    if not ratings:
        return None
    return ValueRange(
        min=min(ratings), max=max(ratings), average=sum(ratings) / len(ratings)
    )


def _average_minor_units(prices: Sequence[int]) -> int:
    # Integer half-up rounding; prices are never negative.
    return (2 * sum(prices) + len(prices)) // (2 * len(prices))


def compare_offers(
    offers: Sequence[OfferView],
    selected_ids: Sequence[str],
    rating_policy: Optional[str] = None,
) -> ComparisonResult:
    if not selected_ids:
        raise ValidationError("Select at least one offer to compare", field="offer_ids")

    try:
        policy = RatingPolicy(rating_policy or settings.COMPARISON_RATING_POLICY)
    except ValueError:
        raise ValidationError(f"Unknown rating policy: {rating_policy}", field="rating_policy")
    by_id = {o.id: o for o in offers}

    selected: List[OfferView] = []
    seen = set()
    for offer_id in selected_ids:
        if offer_id in seen:
            continue
        if offer_id not in by_id:
            raise NotFoundError("Offer", offer_id)
        seen.add(offer_id)
        selected.append(by_id[offer_id])

    prices = [o.proposed_price for o in selected]
    expiration_days = sorted(
        (ExpirationEntry(offer_id=o.id, days_until_expiry=o.days_until_expiry) for o in selected),
        key=lambda e: e.days_until_expiry,
    )

    best_values = {
        criterion: best_value(selected, criterion, rating_policy=policy)
        for criterion in CRITERIA
    }
    highlights: Dict[str, List[str]] = {o.id: [] for o in selected}
    for criterion, winners in best_values.items():
        for offer_id in winners:
            highlights[offer_id].append(criterion)

    logger.debug(f"Compared {len(selected)} offers with rating policy '{policy.value}'")
    return ComparisonResult(
        offers=selected,
        price_range=PriceRange(
            min=min(prices), max=max(prices), average=_average_minor_units(prices)
        ),
        rating_range=_rating_range(selected, policy),
        expiration_days=expiration_days,
        rating_policy=policy,
        best_values=best_values,
        highlights=highlights,
    )

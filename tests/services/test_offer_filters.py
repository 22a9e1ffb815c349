# tests/services/test_offer_filters.py
from datetime import timedelta

import pydantic
import pytest

from offer_service.core.exceptions import ValidationError
from offer_service.schemas.offer import OfferFilters
from offer_service.services.offer_filters import filter_and_sort
from tests.utils.offers import NOW, make_offer_view


def _ids(offers):
    return [o.id for o in offers]


def test_sort_by_price_ascending_is_pure():
    offers = [
        make_offer_view("a", proposed_price=300),
        make_offer_view("b", proposed_price=100),
        make_offer_view("c", proposed_price=200),
    ]

    result = filter_and_sort(offers, sort_by="price", sort_order="asc")

    assert [o.proposed_price for o in result] == [100, 200, 300]
    assert _ids(offers) == ["a", "b", "c"]
    assert result is not offers


def test_sort_is_stable_in_both_directions():
    offers = [
        make_offer_view("a", proposed_price=100),
        make_offer_view("b", proposed_price=200),
        make_offer_view("c", proposed_price=100),
    ]

    assert _ids(filter_and_sort(offers, sort_by="price", sort_order="asc")) == ["a", "c", "b"]
    assert _ids(filter_and_sort(offers, sort_by="price", sort_order="desc")) == ["b", "a", "c"]


def test_default_sort_is_newest_first():
    offers = [
        make_offer_view("old", created_at=NOW - timedelta(days=3)),
        make_offer_view("new", created_at=NOW - timedelta(hours=1)),
        make_offer_view("mid", created_at=NOW - timedelta(days=1)),
    ]

    assert _ids(filter_and_sort(offers)) == ["new", "mid", "old"]


def test_sort_by_rating_treats_missing_as_zero():
    offers = [
        make_offer_view("unrated", rating=None),
        make_offer_view("great", rating=4.8),
        make_offer_view("ok", rating=3.1),
    ]

    assert _ids(filter_and_sort(offers, sort_by="rating", sort_order="desc")) == [
        "great",
        "ok",
        "unrated",
    ]


def test_sort_by_expiry():
    offers = [
        make_offer_view("late", valid_until=NOW + timedelta(days=9)),
        make_offer_view("soon", valid_until=NOW + timedelta(days=1)),
    ]

    assert _ids(filter_and_sort(offers, sort_by="expiry", sort_order="asc")) == ["soon", "late"]


def test_status_filter_uses_display_status():
    offers = [
        make_offer_view("live"),
        make_offer_view("lapsed", valid_until=NOW - timedelta(minutes=5)),
        make_offer_view("done", status="accepted"),
    ]

    expired = filter_and_sort(offers, OfferFilters(status="expired"))
    pending = filter_and_sort(offers, OfferFilters(status="pending"))

    assert _ids(expired) == ["lapsed"]
    assert _ids(pending) == ["live"]
    assert len(filter_and_sort(offers, OfferFilters())) == 3


def test_price_range_is_inclusive():
    offers = [make_offer_view(str(p), proposed_price=p) for p in (100, 200, 300, 400)]

    result = filter_and_sort(
        offers, OfferFilters(price_min=200, price_max=300), sort_by="price", sort_order="asc"
    )

    assert _ids(result) == ["200", "300"]


def test_min_rating_filter():
    offers = [
        make_offer_view("unrated", rating=None),
        make_offer_view("low", rating=2.0),
        make_offer_view("high", rating=4.5),
    ]

    assert _ids(filter_and_sort(offers, OfferFilters(min_vendor_rating=4))) == ["high"]
    # A minimum of 0 keeps unrated vendors.
    assert len(filter_and_sort(offers, OfferFilters(min_vendor_rating=0))) == 3


def test_created_range_is_inclusive():
    offers = [
        make_offer_view("d1", created_at=NOW - timedelta(days=1)),
        make_offer_view("d2", created_at=NOW - timedelta(days=2)),
        make_offer_view("d3", created_at=NOW - timedelta(days=3)),
    ]

    result = filter_and_sort(
        offers,
        OfferFilters(created_from=NOW - timedelta(days=2), created_to=NOW - timedelta(days=1)),
    )

    assert _ids(result) == ["d1", "d2"]


def test_filters_combine():
    offers = [
        make_offer_view("cheap_unrated", proposed_price=100, rating=None),
        make_offer_view("cheap_rated", proposed_price=120, rating=4.2),
        make_offer_view("pricey_rated", proposed_price=900, rating=4.9),
    ]

    result = filter_and_sort(offers, OfferFilters(price_max=500, min_vendor_rating=4))

    assert _ids(result) == ["cheap_rated"]


def test_unknown_sort_key():
    with pytest.raises(ValidationError):
        filter_and_sort([make_offer_view("a")], sort_by="vendor_name")


def test_unknown_sort_order():
    with pytest.raises(ValidationError):
        filter_and_sort([make_offer_view("a")], sort_order="sideways")


def test_inverted_price_range_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        OfferFilters(price_min=500, price_max=100)

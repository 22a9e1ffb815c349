# tests/services/test_trip_requests.py
from datetime import timedelta

from offer_service.services.offer_views import flatten_offers
from offer_service.services.trip_requests import TripRequestService
from tests.utils.offers import (
    NOW,
    OTHER_USER_ID,
    USER_ID,
    create_random_offer,
    create_random_trip_request,
    create_random_vendor,
)


def test_load_trip_requests(db, adapter, clock):
    older = create_random_trip_request(db, destination="Porto", created_at=NOW - timedelta(days=20))
    newer = create_random_trip_request(db, destination="Oslo", created_at=NOW - timedelta(days=2))
    create_random_trip_request(db, user_id=OTHER_USER_ID, destination="Rome")

    vendor = create_random_vendor(db, business_name="Fjord Trips", rating=None, total_reviews=0)
    create_random_offer(db, newer, vendor=vendor, created_at=NOW - timedelta(days=1))
    create_random_offer(
        db, older, proposed_price=50000, valid_until=NOW - timedelta(days=1),
        created_at=NOW - timedelta(days=15),
    )
    create_random_offer(db, older, proposed_price=60000, created_at=NOW - timedelta(days=14))
    older_id, newer_id = older.id, newer.id

    trip_requests = TripRequestService(adapter, clock).load_trip_requests(USER_ID)

    assert [tr.id for tr in trip_requests] == [newer_id, older_id]
    oslo = trip_requests[0]
    assert oslo.destination == "Oslo"
    assert oslo.offers[0].vendor.business_name == "Fjord Trips"
    assert oslo.offers[0].vendor_rating is None
    assert oslo.offers[0].days_until_expiry == 7

    porto_offers = trip_requests[1].offers
    assert [o.proposed_price for o in porto_offers] == [50000, 60000]
    assert porto_offers[0].display_status == "expired"
    assert porto_offers[0].can_respond is False
    assert porto_offers[1].can_respond is True

    flat = flatten_offers(trip_requests)
    assert [o.trip_request_id for o in flat] == [newer_id, older_id, older_id]


def test_load_trip_requests_for_user_without_any(adapter, clock):
    assert TripRequestService(adapter, clock).load_trip_requests("nobody") == []

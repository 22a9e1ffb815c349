# offer_service/services/trip_requests.py
from typing import List

from offer_service.core.clock import Clock, system_clock
from offer_service.db.adapter import TRIP_REQUESTS, PersistenceAdapter
from offer_service.schemas.trip_request import TripRequestWithOffers
from offer_service.services.offer_views import build_trip_request_with_offers

TRIP_REQUEST_JOINS = ("offers.vendor", "offers.counter_offers")


class TripRequestService:
    def __init__(self, adapter: PersistenceAdapter, clock: Clock = system_clock):
        self.adapter = adapter
        self.clock = clock

    def load_trip_requests(self, user_id: str) -> List[TripRequestWithOffers]:
        """The user's trip requests, newest first, each with its offers."""
        now = self.clock.now()
        trip_requests = self.adapter.query_joined(
            TRIP_REQUESTS,
            filters={"user_id": user_id},
            joins=TRIP_REQUEST_JOINS,
            order_by="created_at",
            descending=True,
        )
        return [build_trip_request_with_offers(tr, now) for tr in trip_requests]

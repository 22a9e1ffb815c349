# offer_service/schemas/trip_request.py
from typing import List

from offer_service.schemas.offer import OfferView, TripRequestSummary


class TripRequestWithOffers(TripRequestSummary):
    offers: List[OfferView] = []

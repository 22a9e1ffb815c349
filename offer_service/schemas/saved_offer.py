# offer_service/schemas/saved_offer.py
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from enum import Enum

from offer_service.schemas.offer import OfferView, TripRequestSummary


class SavedOfferStatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    EXPIRED = "expired"


class SavedOfferSortKey(str, Enum):
    SAVED_AT = "saved_at"  # most recently saved first
    PRICE = "price"  # cheapest first
    EXPIRY = "expiry"  # soonest expiring first


class SavedOfferRead(BaseModel):
    user_id: str
    offer_id: str
    saved_at: datetime

    model_config = {"from_attributes": True}


class SavedOfferView(BaseModel):
    user_id: str
    offer_id: str
    saved_at: datetime
    offer: OfferView
    trip_request: Optional[TripRequestSummary] = None


class SavedOfferSummary(BaseModel):
    total: int
    active: int
    expiring_soon: int
    expired: int


class SavedOffersResult(BaseModel):
    saved_offers: List[SavedOfferView]
    summary: SavedOfferSummary

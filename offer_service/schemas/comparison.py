# offer_service/schemas/comparison.py
from pydantic import BaseModel
from typing import Optional, List, Dict
from enum import Enum

from offer_service.schemas.offer import OfferView


class RatingPolicy(str, Enum):
    ZERO = "zero"  # unrated vendors count as 0
    EXCLUDE = "exclude"  # unrated vendors are left out of rating aggregates


class ValueRange(BaseModel):
    min: float
    max: float
    average: float


class PriceRange(BaseModel):
    min: int
    max: int
    average: int  # mean rounded half-up to a whole minor unit


class ExpirationEntry(BaseModel):
    offer_id: str
    days_until_expiry: int


class ComparisonResult(BaseModel):
    offers: List[OfferView]
    price_range: PriceRange
    rating_range: Optional[ValueRange] = None  # None when no offer is rated under "exclude"
    expiration_days: List[ExpirationEntry]
    rating_policy: RatingPolicy
    # criterion -> ids of the offers holding the extremum (ties included)
    best_values: Dict[str, List[str]]
    # offer id -> criteria it is best at
    highlights: Dict[str, List[str]]

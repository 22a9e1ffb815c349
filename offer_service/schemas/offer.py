# offer_service/schemas/offer.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
from datetime import datetime, date
from enum import Enum


# --- Enums ---

class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COUNTER_OFFERED = "counter_offered"
    EXPIRED = "expired"  # derived at read time, never stored


class RejectionReason(str, Enum):
    PRICE_TOO_HIGH = "price_too_high"
    DIFFERENT_REQUIREMENTS = "different_requirements"
    VENDOR_CONCERNS = "vendor_concerns"
    TIMING_ISSUES = "timing_issues"
    FOUND_BETTER_OPTION = "found_better_option"
    TRIP_CANCELLED = "trip_cancelled"
    OTHER = "other"


class SortKey(str, Enum):
    PRICE = "price"
    RATING = "rating"
    EXPIRY = "expiry"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# --- Read models ---

class VendorSummary(BaseModel):
    id: str
    business_name: str
    rating: Optional[float] = None
    total_reviews: int = 0
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class TripRequestSummary(BaseModel):
    id: str
    user_id: str
    destination: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    group_size: int
    budget: Optional[int] = None
    status: str
    selected_vendor_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CounterOfferRead(BaseModel):
    id: str
    original_offer_id: str
    proposed_price: int
    message: Optional[str] = None
    modifications: Optional[str] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OfferView(BaseModel):
    """An offer as presented to callers, with read-time derived fields."""

    id: str
    trip_request_id: str
    vendor_id: str
    vendor: Optional[VendorSummary] = None
    proposed_price: int
    price_breakdown: Optional[Dict[str, int]] = None
    message: Optional[str] = None
    valid_until: datetime
    created_at: datetime
    status: str  # as stored
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    counter_offer: Optional[CounterOfferRead] = None

    # Derived
    display_status: str
    is_expired: bool
    days_until_expiry: int
    can_respond: bool

    @property
    def vendor_rating(self) -> Optional[float]:
        return self.vendor.rating if self.vendor else None

    @property
    def vendor_reviews(self) -> int:
        return self.vendor.total_reviews if self.vendor else 0


# --- Filters ---

class OfferFilters(BaseModel):
    status: Optional[OfferStatus] = None  # None means all
    price_min: Optional[int] = Field(None, ge=0)
    price_max: Optional[int] = Field(None, ge=0)
    min_vendor_rating: float = Field(0, ge=0, le=5)
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None

    @model_validator(mode="after")
    def check_ranges(self):
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise ValueError("price_min must be less than or equal to price_max")
        if self.created_from and self.created_to and self.created_from > self.created_to:
            raise ValueError("created_from must be before created_to")
        return self


# --- Requests ---

class RejectOfferRequest(BaseModel):
    reason: Optional[str] = None
    reason_code: Optional[RejectionReason] = None

    @model_validator(mode="after")
    def check_single_reason(self):
        if self.reason and self.reason_code:
            raise ValueError("Give either a reason or a reason_code, not both")
        return self

    @property
    def rejection_reason(self) -> Optional[str]:
        return self.reason_code.value if self.reason_code else self.reason


class CounterOfferCreate(BaseModel):
    # Positivity is enforced by the counter offer service so the error
    # surfaces as a ValidationError from every entry point.
    proposed_price: int
    message: Optional[str] = None
    modifications: Optional[str] = None


class ShareOfferRequest(BaseModel):
    group_id: str
    message: Optional[str] = None


class CompareOffersRequest(BaseModel):
    offer_ids: List[str]


# --- Results ---

class AcceptOfferResult(BaseModel):
    offer: OfferView
    rejected_offer_ids: List[str] = []
    trip_request: TripRequestSummary


class CounterOfferResult(BaseModel):
    counter_offer: CounterOfferRead
    offer: OfferView


class OfferShareRead(BaseModel):
    id: str
    offer_id: str
    group_id: str
    message: Optional[str] = None
    shared_at: datetime

    model_config = {"from_attributes": True}

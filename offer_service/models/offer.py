# offer_service/models/offer.py
import uuid
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Index, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from offer_service.db.base_class import Base, JSONType


class Offer(Base):
    __tablename__ = "offers"

    id = Column(
        String, primary_key=True, default=lambda: f"ofr_{uuid.uuid4().hex[:12]}"
    )
    trip_request_id = Column(
        String,
        ForeignKey("trip_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vendor_id = Column(
        String, ForeignKey("vendors.id"), nullable=False, index=True
    )

    # Pricing in minor currency units (cents)
    proposed_price = Column(Integer, nullable=False)
    price_breakdown = Column(JSONType, nullable=True)  # {"lodging": 30000, ...}
    message = Column(Text, nullable=True)
    valid_until = Column(DateTime(timezone=True), nullable=False)

    # pending, accepted, rejected, counter_offered
    # "expired" is never stored; it is derived at read time.
    status = Column(String, nullable=False, server_default=text("'pending'"))
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    trip_request = relationship("TripRequest", back_populates="offers")
    vendor = relationship("Vendor")
    counter_offers = relationship(
        "CounterOffer", back_populates="original_offer", order_by="CounterOffer.created_at"
    )

    __table_args__ = (
        Index("ix_offers_trip_request_status", "trip_request_id", "status"),
        # At most one accepted offer per trip request.
        Index(
            "uq_offers_one_accepted_per_trip_request",
            "trip_request_id",
            unique=True,
            postgresql_where=text("status = 'accepted'"),
            sqlite_where=text("status = 'accepted'"),
        ),
    )

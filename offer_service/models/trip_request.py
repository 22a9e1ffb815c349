# offer_service/models/trip_request.py
import uuid
from sqlalchemy import Column, String, Text, Integer, Date, DateTime, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from offer_service.db.base_class import Base


class TripRequest(Base):
    __tablename__ = "trip_requests"

    id = Column(
        String, primary_key=True, default=lambda: f"trq_{uuid.uuid4().hex[:12]}"
    )
    user_id = Column(String, nullable=False, index=True)  # traveler who posted it
    destination = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    group_size = Column(Integer, nullable=False, server_default=text("1"))
    budget = Column(Integer, nullable=True)  # minor currency units

    # open, accepted, cancelled, expired
    status = Column(String, nullable=False, server_default=text("'open'"))
    selected_vendor_id = Column(String, nullable=True)  # set only when accepted

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
    offers = relationship(
        "Offer", back_populates="trip_request", order_by="Offer.created_at"
    )

    __table_args__ = (
        Index("ix_trip_requests_user_status", "user_id", "status"),
    )

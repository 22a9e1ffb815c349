# offer_service/models/counter_offer.py
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from offer_service.db.base_class import Base


class CounterOffer(Base):
    __tablename__ = "counter_offers"

    id = Column(
        String, primary_key=True, default=lambda: f"cof_{uuid.uuid4().hex[:12]}"
    )
    original_offer_id = Column(
        String,
        ForeignKey("offers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    proposed_price = Column(Integer, nullable=False)  # minor currency units
    message = Column(Text, nullable=True)
    modifications = Column(Text, nullable=True)

    # pending, accepted, rejected (vendor-side responses live elsewhere)
    status = Column(String, nullable=False, server_default=text("'pending'"))

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # Relationships
    original_offer = relationship("Offer", back_populates="counter_offers")

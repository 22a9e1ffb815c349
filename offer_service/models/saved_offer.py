# offer_service/models/saved_offer.py
from sqlalchemy import Column, String, DateTime, ForeignKey, PrimaryKeyConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from offer_service.db.base_class import Base


class SavedOffer(Base):
    __tablename__ = "saved_offers"

    user_id = Column(String, nullable=False)
    offer_id = Column(
        String, ForeignKey("offers.id", ondelete="CASCADE"), nullable=False
    )
    saved_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # Relationships
    offer = relationship("Offer")

    __table_args__ = (
        PrimaryKeyConstraint("user_id", "offer_id", name="pk_saved_offers"),
        Index("ix_saved_offers_user_saved_at", "user_id", "saved_at"),
    )

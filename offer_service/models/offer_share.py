# offer_service/models/offer_share.py
# Append-only log: rows are never updated or deduplicated.
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from offer_service.db.base_class import Base


class OfferShare(Base):
    __tablename__ = "offer_shares"

    id = Column(
        String, primary_key=True, default=lambda: f"shr_{uuid.uuid4().hex[:12]}"
    )
    offer_id = Column(
        String,
        ForeignKey("offers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_id = Column(String, nullable=False, index=True)
    message = Column(Text, nullable=True)
    shared_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

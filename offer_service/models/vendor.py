# offer_service/models/vendor.py
# Read-only here: vendor profiles are owned by the vendor service.
import uuid
from sqlalchemy import Column, String, Float, Integer, DateTime, text
from sqlalchemy.sql import func
from offer_service.db.base_class import Base


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(
        String, primary_key=True, default=lambda: f"vnd_{uuid.uuid4().hex[:12]}"
    )
    business_name = Column(String, nullable=False)
    rating = Column(Float, nullable=True)  # 0-5, null when unrated
    total_reviews = Column(Integer, nullable=False, server_default=text("0"))
    avatar_url = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

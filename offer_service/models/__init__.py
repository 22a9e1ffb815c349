# offer_service/models/__init__.py
# Import all models to ensure SQLAlchemy can resolve relationships

from offer_service.db.base_class import Base
from offer_service.models.trip_request import TripRequest
from offer_service.models.vendor import Vendor
from offer_service.models.offer import Offer
from offer_service.models.counter_offer import CounterOffer
from offer_service.models.saved_offer import SavedOffer
from offer_service.models.offer_share import OfferShare

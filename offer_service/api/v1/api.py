# offer_service/api/v1/api.py

from fastapi import APIRouter
from offer_service.api.v1.endpoints import (
    offers,
    saved_offers,
    trip_requests,
)

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(trip_requests.router, prefix="/trip-requests", tags=["trip-requests"])
api_router.include_router(offers.router, prefix="/offers", tags=["offers"])
api_router.include_router(saved_offers.router, prefix="/saved-offers", tags=["saved-offers"])

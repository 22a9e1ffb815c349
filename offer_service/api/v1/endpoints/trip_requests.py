# offer_service/api/v1/endpoints/trip_requests.py
from typing import List

from fastapi import APIRouter, Depends

from offer_service.api import deps
from offer_service.schemas.token import TokenPayload
from offer_service.schemas.trip_request import TripRequestWithOffers
from offer_service.services.trip_requests import TripRequestService

router = APIRouter()


@router.get("", response_model=List[TripRequestWithOffers])
def list_trip_requests(
    trip_requests: TripRequestService = Depends(deps.get_trip_request_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    List the caller's trip requests, newest first, with the offers received.
    """
    return trip_requests.load_trip_requests(current_user.sub)

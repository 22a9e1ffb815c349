# offer_service/api/v1/endpoints/saved_offers.py
from fastapi import APIRouter, Depends

from offer_service.api import deps
from offer_service.schemas.saved_offer import SavedOffersResult
from offer_service.schemas.token import TokenPayload
from offer_service.services.offer_bookmarks import OfferBookmarkService

router = APIRouter()


@router.get("", response_model=SavedOffersResult)
def list_saved_offers(
    status_filter: str = "all",
    sort_by: str = "saved_at",
    bookmarks: OfferBookmarkService = Depends(deps.get_bookmark_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    The caller's saved offers with their current status. `status_filter` is
    one of all, active, expired; `sort_by` one of saved_at, price, expiry.
    """
    return bookmarks.load_saved_offers(current_user.sub, status_filter, sort_by)

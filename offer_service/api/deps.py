# offer_service/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from offer_service.core.clock import Clock, system_clock
from offer_service.core.config import settings
from offer_service.db.adapter import PersistenceAdapter
from offer_service.db.session import get_db
from offer_service.db.sqlalchemy_adapter import SQLAlchemyAdapter
from offer_service.schemas.token import TokenPayload
from offer_service.services.counter_offers import CounterOfferService
from offer_service.services.offer_bookmarks import OfferBookmarkService
from offer_service.services.offer_lifecycle import OfferLifecycleService
from offer_service.services.trip_requests import TripRequestService

# The `tokenUrl` is only used for the OpenAPI docs; tokens are issued by the
# user service.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def get_clock() -> Clock:
    return system_clock


def get_adapter(db: Session = Depends(get_db)) -> PersistenceAdapter:
    return SQLAlchemyAdapter(db)


# --- Services, built per request ---

def get_lifecycle_service(
    adapter: PersistenceAdapter = Depends(get_adapter),
    clock: Clock = Depends(get_clock),
) -> OfferLifecycleService:
    return OfferLifecycleService(adapter, clock)


def get_counter_offer_service(
    adapter: PersistenceAdapter = Depends(get_adapter),
    clock: Clock = Depends(get_clock),
) -> CounterOfferService:
    return CounterOfferService(adapter, clock)


def get_bookmark_service(
    adapter: PersistenceAdapter = Depends(get_adapter),
    clock: Clock = Depends(get_clock),
) -> OfferBookmarkService:
    return OfferBookmarkService(adapter, clock)


def get_trip_request_service(
    adapter: PersistenceAdapter = Depends(get_adapter),
    clock: Clock = Depends(get_clock),
) -> TripRequestService:
    return TripRequestService(adapter, clock)

# offer_service/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from offer_service.api.error_handlers import offer_service_error_handler
from offer_service.api.v1.api import api_router
from offer_service.core.config import settings
from offer_service.core.exceptions import OfferServiceError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Offer negotiation service starting (env={settings.ENV}, "
        f"atomic_accept={settings.OFFER_ACCEPT_ATOMIC})"
    )
    yield
    logger.info("Offer negotiation service shutting down")


app = FastAPI(
    title="Offer Negotiation Service",
    version="1.0.0",
    description="""
        Travelers review vendor offers on their trip requests.

        ## Features

        * **Lifecycle**: Accept, reject or counter an offer
        * **Browsing**: Filter, sort and compare offers side by side
        * **Bookmarks**: Save offers for later and share them with a group

        ## Authentication

        All endpoints require JWT authentication via the `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(OfferServiceError, offer_service_error_handler)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Offer Negotiation Service is running"}

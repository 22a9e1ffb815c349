# offer_service/services/counter_offers.py
import logging
import uuid
from typing import Optional

from offer_service.core.clock import Clock, system_clock
from offer_service.core.exceptions import ConflictError, ValidationError
from offer_service.db.adapter import COUNTER_OFFERS, OFFERS, PersistenceAdapter
from offer_service.schemas.offer import CounterOfferRead, CounterOfferResult
from offer_service.services.offer_lifecycle import (
    COUNTER_OFFERED,
    PENDING,
    check_owner,
    ensure_can_transition,
    get_offer_or_404,
    get_trip_request_or_404,
)
from offer_service.services.offer_views import build_offer_view

logger = logging.getLogger(__name__)

TEXT_MAX_LENGTH = 2000


def validate_counter_terms(
    proposed_price, message: Optional[str], modifications: Optional[str]
) -> None:
    # bool is an int subclass; True is not a price.
    if isinstance(proposed_price, bool) or not isinstance(proposed_price, int):
        raise ValidationError("Proposed price must be a whole number", field="proposed_price")
    if proposed_price <= 0:
        raise ValidationError("Proposed price must be greater than zero", field="proposed_price")
    if message is not None and len(message) > TEXT_MAX_LENGTH:
        raise ValidationError(
            f"Message must be at most {TEXT_MAX_LENGTH} characters", field="message"
        )
    if modifications is not None and len(modifications) > TEXT_MAX_LENGTH:
        raise ValidationError(
            f"Modifications must be at most {TEXT_MAX_LENGTH} characters",
            field="modifications",
        )


class CounterOfferService:
    def __init__(self, adapter: PersistenceAdapter, clock: Clock = system_clock):
        self.adapter = adapter
        self.clock = clock

    def submit_counteroffer(
        self,
        offer_id: str,
        proposed_price: int,
        message: Optional[str] = None,
        modifications: Optional[str] = None,
        *,
        user_id: Optional[str] = None,
    ) -> CounterOfferResult:
        """
        Propose different terms for a pending offer.

        The offer moves to counter_offered and a pending counter offer is
        recorded in the same transaction. The trip request is not touched.
        """
        validate_counter_terms(proposed_price, message, modifications)

        now = self.clock.now()
        offer = get_offer_or_404(self.adapter, offer_id)
        if user_id is not None:
            check_owner(get_trip_request_or_404(self.adapter, offer.trip_request_id), user_id)
        ensure_can_transition(offer, COUNTER_OFFERED, now)

        counter_id = f"cof_{uuid.uuid4().hex[:12]}"
        with self.adapter.transaction():
            won = self.adapter.update(
                OFFERS, offer_id, {"status": COUNTER_OFFERED}, expected_status=PENDING
            )
            if not won:
                raise ConflictError(
                    f"Offer {offer_id} changed status before it could be countered",
                    details={"offer_id": offer_id},
                )
            counter = self.adapter.insert(
                COUNTER_OFFERS,
                {
                    "id": counter_id,
                    "original_offer_id": offer_id,
                    "proposed_price": proposed_price,
                    "message": message,
                    "modifications": modifications,
                    "status": PENDING,
                    "created_at": now,
                },
            )
            counter_read = CounterOfferRead.model_validate(counter)

        logger.info(
            f"Counter offer {counter_id} submitted on offer {offer_id} at {proposed_price}"
        )
        return CounterOfferResult(
            counter_offer=counter_read,
            offer=build_offer_view(get_offer_or_404(self.adapter, offer_id), now),
        )

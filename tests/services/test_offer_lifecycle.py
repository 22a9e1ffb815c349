# tests/services/test_offer_lifecycle.py
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from offer_service.core.exceptions import (
    AdapterError,
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OfferExpiredError,
    PartialFailureError,
    ValidationError,
)
from offer_service.db.adapter import OFFERS, TRIP_REQUESTS
from offer_service.db.sqlalchemy_adapter import SQLAlchemyAdapter
from offer_service.models.offer import Offer
from offer_service.schemas.offer import RejectionReason
from offer_service.services.offer_lifecycle import OfferLifecycleService, validate_transition
from tests.utils.offers import (
    NOW,
    OTHER_USER_ID,
    USER_ID,
    create_random_offer,
    create_random_trip_request,
)


class FailingRejectAdapter(SQLAlchemyAdapter):
    """Fails the sibling rejection of selected offers."""

    def __init__(self, db, fail_ids):
        super().__init__(db)
        self.fail_ids = set(fail_ids)

    def update(self, collection, record_id, patch, expected_status=None):
        if (
            collection == OFFERS
            and record_id in self.fail_ids
            and patch.get("status") == "rejected"
        ):
            raise AdapterError("Storage write failed", operation="update")
        return super().update(collection, record_id, patch, expected_status=expected_status)


@pytest.fixture
def three_offers(db):
    trip_request = create_random_trip_request(db)
    offers = [
        create_random_offer(
            db,
            trip_request,
            proposed_price=price,
            created_at=NOW - timedelta(days=5 - i),
        )
        for i, price in enumerate([120000, 100000, 90000])
    ]
    return trip_request.id, [o.id for o in offers]


def _status(adapter, offer_id):
    return adapter.get(OFFERS, offer_id).status


def test_transition_table():
    assert validate_transition("pending", "accepted")
    assert validate_transition("pending", "counter_offered")
    assert not validate_transition("accepted", "rejected")
    assert not validate_transition("rejected", "pending")
    assert not validate_transition("expired", "accepted")


def test_accept_rejects_pending_siblings(adapter, clock, three_offers):
    trip_request_id, (first, second, third) = three_offers
    service = OfferLifecycleService(adapter, clock, atomic_accept=False)

    result = service.accept_offer(second, USER_ID)

    assert result.offer.id == second
    assert result.offer.status == "accepted"
    assert result.offer.accepted_at == NOW
    assert result.rejected_offer_ids == [first, third]
    assert result.trip_request.status == "accepted"
    assert result.trip_request.selected_vendor_id == result.offer.vendor_id

    assert _status(adapter, first) == "rejected"
    assert _status(adapter, third) == "rejected"
    trip_request = adapter.get(TRIP_REQUESTS, trip_request_id)
    assert trip_request.status == "accepted"


def test_only_one_offer_is_ever_accepted(db, adapter, clock, three_offers):
    trip_request_id, (first, second, _) = three_offers
    service = OfferLifecycleService(adapter, clock)

    service.accept_offer(second, USER_ID)
    with pytest.raises(InvalidTransitionError):
        service.accept_offer(first, USER_ID)

    accepted = (
        db.query(Offer)
        .filter(Offer.trip_request_id == trip_request_id, Offer.status == "accepted")
        .count()
    )
    assert accepted == 1


def test_storage_guard_turns_second_accept_into_conflict(db, adapter, clock):
    trip_request = create_random_trip_request(db)
    create_random_offer(db, trip_request, status="accepted")
    pending = create_random_offer(db, trip_request)
    pending_id = pending.id

    service = OfferLifecycleService(adapter, clock)
    with pytest.raises(ConflictError):
        service.accept_offer(pending_id, USER_ID)

    assert _status(adapter, pending_id) == "pending"


def test_lost_race_stops_before_sibling_writes(clock):
    offer = SimpleNamespace(
        id="ofr_1",
        status="pending",
        valid_until=NOW + timedelta(days=3),
        trip_request_id="trq_1",
        vendor_id="vnd_1",
    )
    trip_request = SimpleNamespace(id="trq_1", user_id=USER_ID, status="open")
    records = {OFFERS: offer, TRIP_REQUESTS: trip_request}

    adapter = MagicMock()
    adapter.get.side_effect = lambda collection, record_id, joins=(): records[collection]
    adapter.update.return_value = False

    service = OfferLifecycleService(adapter, clock, atomic_accept=False)
    with pytest.raises(ConflictError):
        service.accept_offer("ofr_1", USER_ID)

    adapter.update.assert_called_once()
    adapter.query_joined.assert_not_called()


def test_partial_failure_keeps_the_accept(db, clock, three_offers):
    trip_request_id, (first, second, third) = three_offers
    adapter = FailingRejectAdapter(db, fail_ids=[third])
    service = OfferLifecycleService(adapter, clock, atomic_accept=False)

    with pytest.raises(PartialFailureError) as exc_info:
        service.accept_offer(first, USER_ID)

    error = exc_info.value
    assert error.completed == {"accepted_offer_id": first, "rejected_offer_ids": [second]}
    assert len(error.failed) == 1
    assert error.failed[0]["operation"] == "reject_sibling"
    assert error.failed[0]["offer_id"] == third
    assert error.failed[0]["error_code"] == "ADAPTER_ERROR"

    assert _status(adapter, first) == "accepted"
    assert _status(adapter, second) == "rejected"
    assert _status(adapter, third) == "pending"
    assert adapter.get(TRIP_REQUESTS, trip_request_id).status == "accepted"


def test_atomic_accept_rolls_back_on_sibling_failure(db, clock, three_offers):
    trip_request_id, (first, second, third) = three_offers
    adapter = FailingRejectAdapter(db, fail_ids=[third])
    service = OfferLifecycleService(adapter, clock, atomic_accept=True)

    with pytest.raises(AdapterError):
        service.accept_offer(first, USER_ID)

    assert _status(adapter, first) == "pending"
    assert _status(adapter, second) == "pending"
    assert _status(adapter, third) == "pending"
    assert adapter.get(TRIP_REQUESTS, trip_request_id).status == "open"


def test_atomic_accept_commits_everything(adapter, clock, three_offers):
    trip_request_id, (first, second, third) = three_offers
    service = OfferLifecycleService(adapter, clock, atomic_accept=True)

    result = service.accept_offer(third, USER_ID)

    assert result.rejected_offer_ids == [first, second]
    assert adapter.get(TRIP_REQUESTS, trip_request_id).status == "accepted"


def test_accept_expired_offer_is_refused(db, adapter, clock):
    trip_request = create_random_trip_request(db)
    offer = create_random_offer(
        db, trip_request, valid_until=NOW - timedelta(milliseconds=1)
    )
    offer_id = offer.id

    service = OfferLifecycleService(adapter, clock)
    with pytest.raises(OfferExpiredError) as exc_info:
        service.accept_offer(offer_id, USER_ID)

    assert isinstance(exc_info.value, InvalidTransitionError)
    assert exc_info.value.error_code == "OFFER_EXPIRED"
    assert _status(adapter, offer_id) == "pending"


def test_accept_offer_expiring_later_today(db, adapter, clock):
    trip_request = create_random_trip_request(db)
    offer = create_random_offer(db, trip_request, valid_until=NOW + timedelta(hours=1))

    result = OfferLifecycleService(adapter, clock).accept_offer(offer.id, USER_ID)

    assert result.offer.status == "accepted"


def test_accept_requires_trip_request_owner(db, adapter, clock):
    trip_request = create_random_trip_request(db, user_id=OTHER_USER_ID)
    offer = create_random_offer(db, trip_request)
    offer_id = offer.id

    with pytest.raises(ForbiddenError):
        OfferLifecycleService(adapter, clock).accept_offer(offer_id, USER_ID)
    assert _status(adapter, offer_id) == "pending"


def test_accept_on_closed_trip_request(db, adapter, clock):
    trip_request = create_random_trip_request(db, status="cancelled")
    offer = create_random_offer(db, trip_request)

    with pytest.raises(InvalidTransitionError):
        OfferLifecycleService(adapter, clock).accept_offer(offer.id, USER_ID)


def test_accept_unknown_offer(adapter, clock):
    with pytest.raises(NotFoundError):
        OfferLifecycleService(adapter, clock).accept_offer("ofr_missing", USER_ID)


def test_reject_leaves_siblings_alone(adapter, clock, three_offers):
    trip_request_id, (first, second, third) = three_offers
    service = OfferLifecycleService(adapter, clock)

    view = service.reject_offer(first, "price_too_high", user_id=USER_ID)

    assert view.status == "rejected"
    assert view.rejection_reason == "price_too_high"
    assert view.rejected_at == NOW
    assert view.can_respond is False
    assert _status(adapter, second) == "pending"
    assert _status(adapter, third) == "pending"
    assert adapter.get(TRIP_REQUESTS, trip_request_id).status == "open"


def test_reject_accepts_free_text_and_no_reason(adapter, clock, three_offers):
    _, (first, second, _) = three_offers
    service = OfferLifecycleService(adapter, clock)

    assert service.reject_offer(first, "  Dates moved  ").rejection_reason == "Dates moved"
    assert service.reject_offer(second).rejection_reason is None


def test_reject_with_reason_code(adapter, clock, three_offers):
    _, (first, _, _) = three_offers

    view = OfferLifecycleService(adapter, clock).reject_offer(first, RejectionReason.TIMING_ISSUES)

    assert view.rejection_reason == "timing_issues"
    assert adapter.get(OFFERS, first).rejection_reason == "timing_issues"


def test_reject_reason_too_long(adapter, clock, three_offers):
    _, (first, _, _) = three_offers

    with pytest.raises(ValidationError):
        OfferLifecycleService(adapter, clock).reject_offer(first, "x" * 501)
    assert _status(adapter, first) == "pending"


def test_reject_accepted_offer_is_invalid(db, adapter, clock):
    trip_request = create_random_trip_request(db)
    offer = create_random_offer(db, trip_request, status="accepted")

    with pytest.raises(InvalidTransitionError):
        OfferLifecycleService(adapter, clock).reject_offer(offer.id)


def test_reject_lost_race(clock):
    offer = SimpleNamespace(
        id="ofr_1",
        status="pending",
        valid_until=NOW + timedelta(days=3),
        trip_request_id="trq_1",
    )
    adapter = MagicMock()
    adapter.get.return_value = offer
    adapter.update.return_value = False

    with pytest.raises(ConflictError):
        OfferLifecycleService(adapter, clock).reject_offer("ofr_1")

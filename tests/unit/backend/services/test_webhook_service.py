"""
Unit Tests for Stripe Webhook Service.

Event dispatch, idempotent purchase recording, Connect status changes,
and refunds.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from snack.backend.models.user import StripeAccountStatus
from snack.backend.services.webhook import DEFAULT_REFUND_REASON, StripeWebhookService


def _event(event_type, obj):
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}


def _payment_intent(**overrides):
    values = {
        "id": "pi_1",
        "amount": 499,
        "currency": "usd",
        "metadata": {"type": "list_purchase", "list_id": "list-1", "buyer_id": "buyer-1"},
        "latest_charge": {"id": "ch_1", "receipt_url": "https://pay.stripe.com/receipts/1"},
    }
    values.update(overrides)
    return values


@pytest.fixture
def service(mock_db_session, mock_app_config):
    with patch("snack.backend.domain.pricing.get_app_config", return_value=mock_app_config):
        service = StripeWebhookService(mock_db_session)
        service.purchases.create = AsyncMock()
        service.purchases.update = AsyncMock()
        service.purchases.get_by_payment_intent = AsyncMock(return_value=None)
        service.purchases.get_by_charge = AsyncMock(return_value=None)
        service.users.get_by_stripe_account = AsyncMock(return_value=None)
        service.users.update = AsyncMock()
        yield service


class TestPaymentSucceeded:
    @pytest.mark.asyncio
    async def test_records_purchase_with_fee_split(self, service):
        await service.handle_event(_event("payment_intent.succeeded", _payment_intent()))

        service.purchases.create.assert_awaited_once_with(
            user_id="buyer-1",
            list_id="list-1",
            amount_paid=499,
            currency="usd",
            platform_fee=100,
            creator_earnings=399,
            stripe_payment_intent_id="pi_1",
            stripe_charge_id="ch_1",
            stripe_receipt_url="https://pay.stripe.com/receipts/1",
        )

    @pytest.mark.asyncio
    async def test_charge_id_given_as_string(self, service):
        intent = _payment_intent(
            latest_charge="ch_9",
            charges={"data": [{"receipt_url": "https://pay.stripe.com/receipts/9"}]},
        )

        await service.handle_event(_event("payment_intent.succeeded", intent))

        kwargs = service.purchases.create.await_args.kwargs
        assert kwargs["stripe_charge_id"] == "ch_9"
        assert kwargs["stripe_receipt_url"] == "https://pay.stripe.com/receipts/9"

    @pytest.mark.asyncio
    async def test_duplicate_delivery_is_ignored(self, service):
        service.purchases.get_by_payment_intent.return_value = SimpleNamespace(id="purchase-1")

        await service.handle_event(_event("payment_intent.succeeded", _payment_intent()))

        service.purchases.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_payment_types_are_ignored(self, service):
        intent = _payment_intent(metadata={"type": "donation"})

        await service.handle_event(_event("payment_intent.succeeded", intent))

        service.purchases.get_by_payment_intent.assert_not_called()
        service.purchases.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_metadata_is_logged_not_recorded(self, service):
        intent = _payment_intent(metadata={"type": "list_purchase", "list_id": "list-1"})

        with patch.object(service, "_logger") as logger:
            await service.handle_event(_event("payment_intent.succeeded", intent))

        logger.error.assert_called_once()
        service.purchases.create.assert_not_called()


class TestAccountUpdated:
    @pytest.mark.asyncio
    async def test_fully_enabled_account_becomes_active(self, service):
        service.users.get_by_stripe_account.return_value = SimpleNamespace(id="creator-1")
        account = {
            "id": "acct_1",
            "charges_enabled": True,
            "payouts_enabled": True,
            "details_submitted": True,
        }

        await service.handle_event(_event("account.updated", account))

        service.users.update.assert_awaited_once_with(
            "creator-1", stripe_account_status=StripeAccountStatus.ACTIVE
        )

    @pytest.mark.asyncio
    async def test_incomplete_account_stays_pending(self, service):
        service.users.get_by_stripe_account.return_value = SimpleNamespace(id="creator-1")
        account = {"id": "acct_1", "charges_enabled": True, "payouts_enabled": False}

        await service.handle_event(_event("account.updated", account))

        service.users.update.assert_awaited_once_with(
            "creator-1", stripe_account_status=StripeAccountStatus.PENDING
        )

    @pytest.mark.asyncio
    async def test_unknown_account_is_ignored(self, service):
        await service.handle_event(_event("account.updated", {"id": "acct_unknown"}))

        service.users.update.assert_not_called()


class TestChargeRefunded:
    @pytest.mark.asyncio
    async def test_marks_purchase_refunded_with_reason(self, service):
        service.purchases.get_by_charge.return_value = SimpleNamespace(id="purchase-1")
        charge = {"id": "ch_1", "refunds": {"data": [{"reason": "requested_by_customer"}]}}

        await service.handle_event(_event("charge.refunded", charge))

        kwargs = service.purchases.update.await_args.kwargs
        assert service.purchases.update.await_args.args == ("purchase-1",)
        assert kwargs["refund_reason"] == "requested_by_customer"
        assert kwargs["refunded_at"] is not None

    @pytest.mark.asyncio
    async def test_falls_back_to_payment_intent_lookup(self, service):
        service.purchases.get_by_payment_intent.return_value = SimpleNamespace(id="purchase-2")

        await service.handle_event(_event("charge.refunded", {"id": "ch_2", "payment_intent": "pi_2"}))

        service.purchases.get_by_payment_intent.assert_awaited_once_with("pi_2")
        assert service.purchases.update.await_args.kwargs["refund_reason"] == DEFAULT_REFUND_REASON

    @pytest.mark.asyncio
    async def test_unknown_charge_is_ignored(self, service):
        await service.handle_event(_event("charge.refunded", {"id": "ch_3"}))

        service.purchases.update.assert_not_called()


class TestOtherEvents:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event_type",
        ["checkout.session.completed", "payment_intent.payment_failed", "customer.created"],
    )
    async def test_no_state_changes(self, service, event_type):
        await service.handle_event(_event(event_type, {"id": "obj_1"}))

        service.purchases.create.assert_not_called()
        service.purchases.update.assert_not_called()
        service.users.update.assert_not_called()

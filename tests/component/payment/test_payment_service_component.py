"""
Payment Service Component Tests

PaymentService against the order service's invoice repository, with a
controllable authorizer.
"""

import asyncio
from decimal import Decimal

import pytest

from parcelflow.core.exceptions import (
    DuplicatePaymentError, InvalidTransitionError, NotFoundError,
    PaymentDeclinedError, ValidationError,
)
from parcelflow.services.order_service.models import OrderStatus
from parcelflow.services.payment_service.models import Payment, PaymentStatus
from parcelflow.services.payment_service.payment_repository import InMemoryPaymentRepository
from parcelflow.services.payment_service.payment_service import PaymentService
from parcelflow.services.payment_service.providers.simulated import SimulatedPaymentAuthorizer

from tests.fixtures import make_admin_id, make_card, make_cash, make_declined_card

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


def build_payment_service(order_service, authorizer, locks, clock, event_bus, timeout=0.2):
    return PaymentService(
        repository=InMemoryPaymentRepository(),
        invoice_repository=order_service.invoice_repository,
        order_repository=order_service.repository,
        authorizer=authorizer,
        locks=locks,
        clock=clock,
        event_bus=event_bus,
        authorization_timeout_seconds=timeout,
    )


@pytest.fixture
def payment_service(order_service, mock_authorizer, locks, clock, mock_event_bus):
    return build_payment_service(order_service, mock_authorizer, locks, clock, mock_event_bus)


@pytest.fixture
def invoice(order_service, pricing_engine, user_id, origin, destination, package):
    async def _invoice():
        breakdown = pricing_engine.price_package(package, Decimal("15"))
        _, created = await order_service.create(user_id, origin, destination, package, Decimal("15"), breakdown)
        return created
    return _invoice


class TestPaymentApproval:
    """Successful payments"""

    async def test_approved_payment(self, payment_service, invoice, mock_event_bus):
        inv = await invoice()

        payment = await payment_service.process_payment(inv.invoice_id, make_card())

        assert payment.status == PaymentStatus.APPROVED
        assert payment.amount == inv.total_amount
        assert payment.order_id == inv.order_id
        assert payment.receipt_id
        assert payment.payment_method.account_reference == "**** 1111"
        assert mock_event_bus.get_published("payment.approved")[0]["data"]["payment_id"] == payment.payment_id

    async def test_accepts_request_payload(self, payment_service, invoice):
        inv = await invoice()

        payment = await payment_service.process_payment(
            inv.invoice_id,
            {"method_type": "debit_card", "provider": "mastercard", "account_number": "5500 0000 0000 0004"},
        )

        assert payment.payment_method.account_reference == "**** 0004"

    async def test_malformed_method(self, payment_service, invoice):
        inv = await invoice()

        with pytest.raises(ValidationError):
            await payment_service.process_payment(inv.invoice_id, {"method_type": "barter"})

    async def test_unknown_invoice(self, payment_service, mock_authorizer):
        with pytest.raises(NotFoundError):
            await payment_service.process_payment("inv_missing", make_card())

        assert mock_authorizer.get_call_count() == 0


class TestDuplicatePayments:
    """At most one approved payment per invoice"""

    async def test_second_payment_rejected(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        await payment_service.process_payment(inv.invoice_id, make_card())

        with pytest.raises(DuplicatePaymentError):
            await payment_service.process_payment(inv.invoice_id, make_cash())

        assert mock_authorizer.get_call_count() == 1
        assert len(await payment_service.list_payments_for_invoice(inv.invoice_id)) == 1

    async def test_payment_in_flight_blocks_second_attempt(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        mock_authorizer.hold_until_released()

        first = asyncio.ensure_future(payment_service.process_payment(inv.invoice_id, make_card()))
        while mock_authorizer.get_call_count() == 0:
            await asyncio.sleep(0)

        with pytest.raises(DuplicatePaymentError):
            await payment_service.process_payment(inv.invoice_id, make_card())

        mock_authorizer.release.set()
        payment = await first
        assert payment.status == PaymentStatus.APPROVED

    async def test_concurrent_attempts_approve_once(self, payment_service, invoice):
        inv = await invoice()

        results = await asyncio.gather(
            *(payment_service.process_payment(inv.invoice_id, make_card()) for _ in range(5)),
            return_exceptions=True,
        )

        approved = [r for r in results if not isinstance(r, Exception)]
        assert len(approved) == 1
        assert all(isinstance(r, DuplicatePaymentError) for r in results if isinstance(r, Exception))


class TestDeclines:
    """Declined, failed and timed-out authorizations"""

    async def test_declined(self, payment_service, invoice, mock_authorizer, mock_event_bus):
        inv = await invoice()
        mock_authorizer.decline("Insufficient funds")

        with pytest.raises(PaymentDeclinedError) as exc_info:
            await payment_service.process_payment(inv.invoice_id, make_card())

        payment = exc_info.value.payment
        assert payment.status == PaymentStatus.FAILED
        assert payment.failure_reason == "Insufficient funds"
        assert (await payment_service.get_payment(payment.payment_id)).status == PaymentStatus.FAILED
        assert len(mock_event_bus.get_published("payment.failed")) == 1

    async def test_retry_after_decline(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        mock_authorizer.decline()
        with pytest.raises(PaymentDeclinedError):
            await payment_service.process_payment(inv.invoice_id, make_card())

        mock_authorizer.approve()
        payment = await payment_service.process_payment(inv.invoice_id, make_card())

        assert payment.status == PaymentStatus.APPROVED
        statuses = sorted(p.status.value for p in await payment_service.list_payments_for_invoice(inv.invoice_id))
        assert statuses == ["approved", "failed"]

    async def test_timeout(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        mock_authorizer.stall(1.0)

        with pytest.raises(PaymentDeclinedError) as exc_info:
            await payment_service.process_payment(inv.invoice_id, make_card())

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.payment.status == PaymentStatus.FAILED
        assert await payment_service.get_approved_payment(inv.invoice_id) is None

    async def test_authorizer_error(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        mock_authorizer.set_error(ConnectionError("gateway down"))

        with pytest.raises(PaymentDeclinedError):
            await payment_service.process_payment(inv.invoice_id, make_card())


async def start_held_payment(payment_service, mock_authorizer, invoice_id):
    """Start a payment whose authorization blocks until released"""
    mock_authorizer.hold_until_released()
    calls = mock_authorizer.get_call_count()
    task = asyncio.ensure_future(payment_service.process_payment(invoice_id, make_card()))
    while mock_authorizer.get_call_count() == calls:
        await asyncio.sleep(0)
    return task


class TestOrderStateGuard:
    """Payments only land on orders that are still awaiting payment"""

    async def test_cancelled_order_refuses_payment(
        self, payment_service, order_service, invoice, mock_authorizer, user_id
    ):
        inv = await invoice()
        await order_service.cancel(inv.order_id, user_id, "Changed my mind")

        with pytest.raises(InvalidTransitionError):
            await payment_service.process_payment(inv.invoice_id, make_card())

        assert mock_authorizer.get_call_count() == 0
        assert await payment_service.list_payments_for_invoice(inv.invoice_id) == []

    async def test_rejected_order_refuses_payment(self, payment_service, order_service, invoice, mock_authorizer):
        inv = await invoice()
        await order_service.record_payment_confirmed(inv.order_id, "pay_elsewhere")
        await order_service.reject(inv.order_id, make_admin_id(), "Prohibited contents")

        with pytest.raises(InvalidTransitionError):
            await payment_service.process_payment(inv.invoice_id, make_card())

        assert mock_authorizer.get_call_count() == 0

    async def test_cancellation_during_authorization_fails_payment(
        self, payment_service, order_service, invoice, mock_authorizer, mock_event_bus, user_id
    ):
        inv = await invoice()
        task = await start_held_payment(payment_service, mock_authorizer, inv.invoice_id)

        await order_service.cancel(inv.order_id, user_id, "Changed my mind")
        mock_authorizer.release.set()

        with pytest.raises(PaymentDeclinedError) as exc_info:
            await task

        payment = exc_info.value.payment
        assert payment.status == PaymentStatus.FAILED
        assert "cancelled" in payment.failure_reason
        assert payment.receipt_id is None
        assert await payment_service.get_approved_payment(inv.invoice_id) is None
        assert (await order_service.get_order(inv.order_id)).status == OrderStatus.CANCELLED
        assert mock_event_bus.get_published("payment.approved") == []
        assert len(mock_event_bus.get_published("payment.failed")) == 1


class TestAbortedAttempts:
    """PENDING never outlives the attempt that created it"""

    async def test_cancelled_attempt_marked_failed(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        task = await start_held_payment(payment_service, mock_authorizer, inv.invoice_id)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        payments = await payment_service.list_payments_for_invoice(inv.invoice_id)
        assert [p.status for p in payments] == [PaymentStatus.FAILED]
        assert "aborted" in payments[0].failure_reason

    async def test_retry_after_cancelled_attempt(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        task = await start_held_payment(payment_service, mock_authorizer, inv.invoice_id)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        mock_authorizer.release.set()
        payment = await payment_service.process_payment(inv.invoice_id, make_card())

        assert payment.status == PaymentStatus.APPROVED

    async def test_stale_pending_payment_expired(self, payment_service, invoice, clock, mock_event_bus):
        inv = await invoice()
        stale = Payment(
            payment_id="pay_stale",
            invoice_id=inv.invoice_id,
            order_id=inv.order_id,
            user_id=inv.user_id,
            payment_method=make_card().to_payment_method(),
            amount=inv.total_amount,
            created_at=clock.now(),
            updated_at=clock.now(),
        )
        await payment_service.repository.save_payment(stale)
        with pytest.raises(DuplicatePaymentError):
            await payment_service.process_payment(inv.invoice_id, make_card())

        clock.advance(1)
        expired = await payment_service.expire_stale_payments()

        assert [p.payment_id for p in expired] == ["pay_stale"]
        assert (await payment_service.get_payment("pay_stale")).status == PaymentStatus.FAILED
        assert mock_event_bus.get_published("payment.failed")[0]["data"]["payment_id"] == "pay_stale"
        payment = await payment_service.process_payment(inv.invoice_id, make_card())
        assert payment.status == PaymentStatus.APPROVED

    async def test_in_flight_payment_not_expired(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        task = await start_held_payment(payment_service, mock_authorizer, inv.invoice_id)

        assert await payment_service.expire_stale_payments() == []

        mock_authorizer.release.set()
        assert (await task).status == PaymentStatus.APPROVED

    async def test_authorization_returning_after_expiry(
        self, payment_service, invoice, mock_authorizer, clock, mock_event_bus
    ):
        inv = await invoice()
        task = await start_held_payment(payment_service, mock_authorizer, inv.invoice_id)
        clock.advance(1)
        await payment_service.expire_stale_payments()

        mock_authorizer.release.set()
        with pytest.raises(PaymentDeclinedError):
            await task

        assert await payment_service.get_approved_payment(inv.invoice_id) is None
        assert len(mock_event_bus.get_published("payment.failed")) == 1


class TestUserPayments:
    """Listing payments by user"""

    async def test_lists_only_that_users_payments(self, payment_service, invoice, user_id):
        inv = await invoice()
        await payment_service.process_payment(inv.invoice_id, make_card())

        assert len(await payment_service.list_payments_for_user(user_id)) == 1
        assert await payment_service.list_payments_for_user("usr_someone_else") == []

    async def test_receipts_skip_failed_attempts(self, payment_service, invoice, mock_authorizer, user_id):
        inv = await invoice()
        mock_authorizer.decline()
        with pytest.raises(PaymentDeclinedError):
            await payment_service.process_payment(inv.invoice_id, make_card())
        mock_authorizer.approve()
        approved = await payment_service.process_payment(inv.invoice_id, make_card())
        await payment_service.refund(approved.payment_id)

        receipts = await payment_service.list_receipts_for_user(user_id)

        assert [p.payment_id for p in receipts] == [approved.payment_id]
        assert receipts[0].status == PaymentStatus.REFUNDED
        assert len(await payment_service.list_payments_for_user(user_id, PaymentStatus.FAILED)) == 1

    async def test_user_required(self, payment_service):
        with pytest.raises(ValidationError):
            await payment_service.list_payments_for_user("")


class TestRefunds:
    """Explicit refunds"""

    async def test_refund_approved(self, payment_service, invoice, clock, mock_event_bus):
        inv = await invoice()
        payment = await payment_service.process_payment(inv.invoice_id, make_card())

        refunded = await payment_service.refund(payment.payment_id)

        assert refunded.status == PaymentStatus.REFUNDED
        assert refunded.refunded_at == clock.now()
        assert len(mock_event_bus.get_published("payment.refunded")) == 1

    async def test_refund_twice_rejected(self, payment_service, invoice):
        inv = await invoice()
        payment = await payment_service.process_payment(inv.invoice_id, make_card())
        await payment_service.refund(payment.payment_id)

        with pytest.raises(InvalidTransitionError):
            await payment_service.refund(payment.payment_id)

    async def test_refund_failed_payment_rejected(self, payment_service, invoice, mock_authorizer):
        inv = await invoice()
        mock_authorizer.decline()
        with pytest.raises(PaymentDeclinedError) as exc_info:
            await payment_service.process_payment(inv.invoice_id, make_card())

        with pytest.raises(InvalidTransitionError):
            await payment_service.refund(exc_info.value.payment.payment_id)

    async def test_refund_unknown_payment(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.refund("pay_missing")


class TestSimulatedAuthorizer:
    """Default authorizer rules"""

    @pytest.fixture
    def simulated_service(self, order_service, locks, clock, mock_event_bus):
        return build_payment_service(
            order_service, SimulatedPaymentAuthorizer(["0002"]), locks, clock, mock_event_bus
        )

    async def test_card_approved(self, simulated_service, invoice):
        inv = await invoice()

        assert (await simulated_service.process_payment(inv.invoice_id, make_card())).status == PaymentStatus.APPROVED

    async def test_cash_approved(self, simulated_service, invoice):
        inv = await invoice()

        assert (await simulated_service.process_payment(inv.invoice_id, make_cash())).status == PaymentStatus.APPROVED

    async def test_declined_suffix(self, simulated_service, invoice):
        inv = await invoice()

        with pytest.raises(PaymentDeclinedError):
            await simulated_service.process_payment(inv.invoice_id, make_declined_card())

    async def test_card_without_account_declined(self, simulated_service, invoice):
        inv = await invoice()

        with pytest.raises(PaymentDeclinedError):
            await simulated_service.process_payment(
                inv.invoice_id, {"method_type": "credit_card", "provider": "visa"}
            )

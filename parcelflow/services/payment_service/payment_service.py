"""
Payment Service Business Logic

Records payment attempts against invoices. The order lock and then the
invoice lock are taken twice per attempt: once to record the PENDING
payment and once to apply the authorizer's outcome. Authorization itself
runs outside the locks with a bounded wait. An attempt that never reaches
the second phase is marked FAILED, either on the way out of the aborted
call or later by expire_stale_payments.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, List, Optional
import asyncio
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from ...core.clock import ClockProtocol, SystemClock
from ...core.entity_locks import EntityLockRegistry, invoice_key, order_key
from ...core.exceptions import (
    DuplicatePaymentError, InvalidTransitionError, NotFoundError,
    PaymentDeclinedError, ValidationError,
)
from ..order_service.models import OrderStatus
from ..order_service.protocols import InvoiceRepositoryProtocol, OrderRepositoryProtocol
from .models import (
    AuthorizationResult, Payment, PaymentMethod, PaymentMethodRequest, PaymentStatus,
)
from .protocols import PaymentAuthorizerProtocol, PaymentRepositoryProtocol
from .events.publishers import (
    publish_payment_approved,
    publish_payment_failed,
    publish_payment_refunded,
)

logger = logging.getLogger(__name__)

ABORTED_REASON = "Payment attempt aborted before authorization completed"
ABANDONED_REASON = "Authorization abandoned"


def _to_payment_method(value: Any) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, PaymentMethodRequest):
        return value.to_payment_method()
    try:
        return PaymentMethodRequest.model_validate(value).to_payment_method()
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid payment method: {e.errors()[0].get('msg', e)}")


class PaymentService:
    """
    Payment record management

    Never retries a declined or timed-out authorization; the caller may
    submit a new attempt.
    """

    def __init__(
        self,
        repository: PaymentRepositoryProtocol,
        invoice_repository: InvoiceRepositoryProtocol,
        order_repository: OrderRepositoryProtocol,
        authorizer: PaymentAuthorizerProtocol,
        locks: Optional[EntityLockRegistry] = None,
        clock: Optional[ClockProtocol] = None,
        event_bus=None,
        authorization_timeout_seconds: float = 10.0,
    ):
        self.repository = repository
        self.invoice_repository = invoice_repository
        self.order_repository = order_repository
        self.authorizer = authorizer
        self.locks = locks or EntityLockRegistry()
        self.clock = clock or SystemClock()
        self.event_bus = event_bus
        self.authorization_timeout_seconds = authorization_timeout_seconds

        logger.info("✅ PaymentService initialized")

    async def process_payment(self, invoice_id: str, payment_method: Any) -> Payment:
        """
        Pay an invoice.

        The owning order must be AWAITING_PAYMENT both when the attempt is
        recorded and when an approval is applied. If the order moved on
        while the authorizer was running, the attempt is marked FAILED.

        Returns:
            The APPROVED payment

        Raises:
            NotFoundError: unknown invoice or order
            DuplicatePaymentError: invoice already paid or being paid
            InvalidTransitionError: the order no longer accepts payment
            PaymentDeclinedError: authorization declined, failed or timed out
        """
        method = _to_payment_method(payment_method)

        invoice = await self.invoice_repository.get_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)

        # Phase 1: record the attempt
        async with self._hold(invoice.order_id, invoice_id):
            for existing in await self.repository.list_payments_for_invoice(invoice_id):
                if existing.status == PaymentStatus.APPROVED:
                    raise DuplicatePaymentError(
                        f"Invoice {invoice_id} already paid by {existing.payment_id}"
                    )
                if existing.status == PaymentStatus.PENDING:
                    raise DuplicatePaymentError(
                        f"Invoice {invoice_id} has a payment in progress ({existing.payment_id})"
                    )

            order = await self.order_repository.get_order(invoice.order_id)
            if not order:
                raise NotFoundError("Order", invoice.order_id)
            if order.status != OrderStatus.AWAITING_PAYMENT:
                raise InvalidTransitionError(
                    f"Order {order.order_id} is {order.status.value} and no longer accepts payment",
                    current_status=order.status.value,
                    requested=OrderStatus.PENDING_APPROVAL.value,
                )

            now = self.clock.now()
            payment = Payment(
                payment_id=f"pay_{uuid.uuid4().hex[:16]}",
                invoice_id=invoice_id,
                order_id=invoice.order_id,
                user_id=invoice.user_id,
                payment_method=method,
                amount=invoice.total_amount,
                currency=invoice.currency,
                status=PaymentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            await self.repository.save_payment(payment)

        logger.info(f"Payment {payment.payment_id} pending for invoice {invoice_id} ({payment.amount})")

        try:
            # Authorization, outside the locks
            result = await self._authorize(payment, method)
            # Phase 2: apply the outcome
            payment, applied = await self._apply_outcome(payment, result)
        except BaseException:
            await asyncio.shield(self._fail_pending(payment, ABORTED_REASON))
            raise

        if payment.status == PaymentStatus.FAILED:
            if applied:
                logger.warning(f"Payment {payment.payment_id} failed: {payment.failure_reason}")
                await publish_payment_failed(self.event_bus, payment)
            raise PaymentDeclinedError(payment.failure_reason or "Payment declined", payment=payment)

        logger.info(f"Payment {payment.payment_id} approved for order {payment.order_id}")
        await publish_payment_approved(self.event_bus, payment)
        return payment

    async def refund(self, payment_id: str) -> Payment:
        """APPROVED -> REFUNDED"""
        payment = await self._load(payment_id)

        async with self.locks.hold(invoice_key(payment.invoice_id)):
            payment = await self._load(payment_id)
            if payment.status != PaymentStatus.APPROVED:
                raise InvalidTransitionError(
                    f"Payment {payment_id} in {payment.status.value} cannot be refunded",
                    current_status=payment.status.value,
                    requested=PaymentStatus.REFUNDED.value,
                )
            now = self.clock.now()
            payment.status = PaymentStatus.REFUNDED
            payment.updated_at = now
            payment.refunded_at = now
            await self.repository.save_payment(payment)

        logger.info(f"Payment {payment_id} refunded")
        await publish_payment_refunded(self.event_bus, payment)
        return payment

    async def expire_stale_payments(self) -> List[Payment]:
        """
        Mark FAILED every PENDING payment older than the authorization timeout.

        Such an attempt outlived any authorizer call it could have been
        waiting on, so its process is gone. Each expiry publishes
        payment.failed and frees the invoice for a new attempt.
        """
        cutoff = self.clock.now() - timedelta(seconds=self.authorization_timeout_seconds)
        expired = []
        for pending in await self.repository.list_payments(status=PaymentStatus.PENDING):
            if pending.created_at > cutoff:
                continue
            payment = await self._fail_pending(pending, ABANDONED_REASON)
            if payment:
                await publish_payment_failed(self.event_bus, payment)
                expired.append(payment)
        return expired

    # Queries

    async def get_payment(self, payment_id: str) -> Payment:
        return await self._load(payment_id)

    async def list_payments_for_invoice(self, invoice_id: str) -> List[Payment]:
        return await self.repository.list_payments_for_invoice(invoice_id)

    async def list_payments_for_user(
        self,
        user_id: str,
        status: Optional[PaymentStatus] = None,
    ) -> List[Payment]:
        """A user's payment attempts, oldest first"""
        if not user_id:
            raise ValidationError("user_id is required")
        return await self.repository.list_payments(status=status, user_id=user_id)

    async def list_receipts_for_user(self, user_id: str) -> List[Payment]:
        """Payments that produced a receipt: approved ones and later refunds"""
        return [
            payment for payment in await self.list_payments_for_user(user_id)
            if payment.receipt_id and payment.status in (PaymentStatus.APPROVED, PaymentStatus.REFUNDED)
        ]

    async def get_approved_payment(self, invoice_id: str) -> Optional[Payment]:
        for payment in await self.repository.list_payments_for_invoice(invoice_id):
            if payment.status == PaymentStatus.APPROVED:
                return payment
        return None

    async def get_pending_payment(self, invoice_id: str) -> Optional[Payment]:
        for payment in await self.repository.list_payments_for_invoice(invoice_id):
            if payment.status == PaymentStatus.PENDING:
                return payment
        return None

    # Internals

    @asynccontextmanager
    async def _hold(self, order_id: str, invoice_id: str) -> AsyncIterator[None]:
        # Order before invoice, the same order the cancellation cascade uses
        async with self.locks.hold(order_key(order_id)):
            async with self.locks.hold(invoice_key(invoice_id)):
                yield

    async def _load(self, payment_id: str) -> Payment:
        payment = await self.repository.get_payment(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def _apply_outcome(self, pending: Payment, result: AuthorizationResult):
        """Returns the stored payment and whether this call decided its outcome"""
        async with self._hold(pending.order_id, pending.invoice_id):
            payment = await self._load(pending.payment_id)
            if payment.status != PaymentStatus.PENDING:
                logger.warning(
                    f"Payment {payment.payment_id} was already {payment.status.value} "
                    f"when its authorization returned"
                )
                return payment, False

            payment.updated_at = self.clock.now()
            order = await self.order_repository.get_order(payment.order_id)
            if not result.approved:
                payment.status = PaymentStatus.FAILED
                payment.failure_reason = result.decline_reason or "Payment declined"
            elif not order or order.status != OrderStatus.AWAITING_PAYMENT:
                state = order.status.value if order else "missing"
                logger.error(
                    f"Payment {payment.payment_id} authorized but order {payment.order_id} "
                    f"is {state}; authorization {result.receipt_id} must be voided"
                )
                payment.status = PaymentStatus.FAILED
                payment.failure_reason = f"Order {payment.order_id} became {state} during authorization"
            else:
                payment.status = PaymentStatus.APPROVED
                payment.receipt_id = result.receipt_id
            await self.repository.save_payment(payment)
        return payment, True

    async def _fail_pending(self, pending: Payment, reason: str) -> Optional[Payment]:
        async with self._hold(pending.order_id, pending.invoice_id):
            payment = await self.repository.get_payment(pending.payment_id)
            if not payment or payment.status != PaymentStatus.PENDING:
                return None
            payment.status = PaymentStatus.FAILED
            payment.failure_reason = reason
            payment.updated_at = self.clock.now()
            await self.repository.save_payment(payment)

        logger.warning(f"Payment {payment.payment_id} marked failed: {reason}")
        return payment

    async def _authorize(self, payment: Payment, method: PaymentMethod) -> AuthorizationResult:
        try:
            return await asyncio.wait_for(
                self.authorizer.authorize(payment, method),
                timeout=self.authorization_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Authorization for payment {payment.payment_id} exceeded "
                f"{self.authorization_timeout_seconds}s"
            )
            return AuthorizationResult(approved=False, decline_reason="Authorization timed out")
        except Exception as e:
            logger.error(f"Authorization error for payment {payment.payment_id}: {e}")
            return AuthorizationResult(approved=False, decline_reason=f"Authorization error: {e}")

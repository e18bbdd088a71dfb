"""Payment workflow: checkout orders, signature reconciliation, manual entries, refunds."""

import logging
from datetime import UTC, datetime

from acadvizen.core.ids import random_base36
from acadvizen.core.result import OperationResult, service_operation
from acadvizen.exceptions import (
    DependencyFailure,
    ErrorCode,
    ResourceNotFoundError,
    SignatureVerificationError,
    StateError,
    ValidationError,
)
from acadvizen.payments.gateway import PaymentGateway
from acadvizen.payments.schemas import OrderResponse
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import (
    AccountPaymentStatus,
    Enrollment,
    EnrollmentStatus,
    Payment,
    PaymentMode,
    PaymentStatus,
    Profile,
)


logger = logging.getLogger(__name__)

MANUAL_MODES = frozenset(
    {PaymentMode.BANK_TRANSFER, PaymentMode.CASH, PaymentMode.UPI, PaymentMode.CARD, PaymentMode.OTHER}
)


def _check_amount(amount: float) -> None:
    if amount < 0:
        msg = "Amount must be zero or greater"
        raise ValidationError(msg, {"amount": msg})


def _cascade_failure(step: str, result: OperationResult) -> DependencyFailure:
    return DependencyFailure(f"Payment recorded but failed to {step}: {result.error}")


class PaymentService:
    def __init__(self, store: EntityStore, gateway: PaymentGateway, default_currency: str = "INR") -> None:
        self.store = store
        self.gateway = gateway
        self.default_currency = default_currency

    @service_operation("Create payment order")
    async def create_order(
        self,
        student_id: str,
        amount: float,
        enrollment_id: str | None = None,
        currency: str | None = None,
        notes: str | None = None,
    ) -> OrderResponse:
        """Create a gateway order and a pending payment carrying its reference."""
        _check_amount(amount)
        await self._check_enrollment_owner(student_id, enrollment_id)
        currency = currency or self.default_currency
        receipt = f"rcpt_{random_base36(10)}"
        order_notes = {"student_id": student_id}
        if enrollment_id:
            order_notes["enrollment_id"] = enrollment_id

        order_id = await self.gateway.create_order(amount, currency, receipt, order_notes)
        payment = (
            await self.store.create(
                Payment,
                {
                    "student_id": student_id,
                    "enrollment_id": enrollment_id,
                    "amount": amount,
                    "currency": currency,
                    "payment_mode": PaymentMode.RAZORPAY,
                    "status": PaymentStatus.PENDING,
                    "razorpay_order_id": order_id,
                    "notes": notes,
                },
            )
        ).unwrap()

        logger.info(f"Created order {order_id} (payment {payment.id}) for student {student_id}")
        return OrderResponse(
            order_id=order_id,
            payment_id=payment.id,
            amount=amount,
            currency=currency,
            key_id=self.gateway.key_id,
        )

    @service_operation("Verify payment")
    async def verify(self, order_id: str, payment_id: str, signature: str) -> Payment:
        """Mark the order's payment completed once the checkout signature checks out.

        Re-verifying an already completed payment with the same gateway payment
        id re-applies the enrollment/profile updates and succeeds, so a caller
        can retry after a partial cascade failure.
        """
        if not self.gateway.verify_signature(order_id, payment_id, signature):
            logger.warning(f"Invalid signature for order {order_id}")
            raise SignatureVerificationError

        payment = (await self.store.find_one(Payment, {"razorpay_order_id": order_id})).unwrap()
        if payment is None:
            raise ResourceNotFoundError("Payment order not found", "Payment", order_id)

        if payment.status == PaymentStatus.COMPLETED and payment.razorpay_payment_id == payment_id:
            logger.info(f"Payment {payment.id} already completed, re-applying cascade")
            await self._apply_completion_cascade(payment)
            return payment
        if payment.status != PaymentStatus.PENDING:
            msg = f"Payment is already {payment.status}"
            raise StateError(msg)

        updated = await self.store.update(
            Payment,
            payment.id,
            {
                "status": PaymentStatus.COMPLETED,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
                "transaction_id": payment_id,
                "payment_date": datetime.now(UTC),
            },
            where={"status": PaymentStatus.PENDING},
        )
        if updated.code == ErrorCode.NOT_FOUND:
            msg = "Payment is no longer pending"
            raise StateError(msg)
        payment = updated.unwrap()

        await self._apply_completion_cascade(payment)
        logger.info(f"Payment {payment.id} verified for order {order_id}")
        return payment

    @service_operation("Record manual payment")
    async def record_manual(
        self,
        student_id: str,
        amount: float,
        mode: PaymentMode,
        enrollment_id: str | None = None,
        transaction_id: str | None = None,
        notes: str | None = None,
    ) -> Payment:
        """Record an offline payment as completed and apply the same cascade as checkout."""
        _check_amount(amount)
        await self._check_enrollment_owner(student_id, enrollment_id)
        if mode not in MANUAL_MODES:
            msg = f"Unsupported manual payment mode: {mode}"
            raise ValidationError(msg, {"payment_mode": msg})

        payment = (
            await self.store.create(
                Payment,
                {
                    "student_id": student_id,
                    "enrollment_id": enrollment_id,
                    "amount": amount,
                    "currency": self.default_currency,
                    "payment_mode": mode,
                    "status": PaymentStatus.COMPLETED,
                    "transaction_id": transaction_id,
                    "payment_date": datetime.now(UTC),
                    "notes": notes,
                },
            )
        ).unwrap()

        await self._apply_completion_cascade(payment)
        logger.info(f"Recorded manual {mode} payment {payment.id} for student {student_id}")
        return payment

    @service_operation("Refund payment")
    async def refund(self, payment_id: str, reason: str | None = None) -> Payment:
        """Refund a completed payment. The enrollment keeps its status."""
        found = await self.store.get_by_id(Payment, payment_id)
        if found.code == ErrorCode.NOT_FOUND:
            raise ResourceNotFoundError("Payment not found", "Payment", payment_id)
        payment = found.unwrap()
        if payment.status != PaymentStatus.COMPLETED:
            msg = "Only completed payments can be refunded"
            raise StateError(msg)

        notes = payment.notes
        if reason:
            refund_note = f"Refund reason: {reason}"
            notes = f"{notes}\n{refund_note}" if notes else refund_note

        updated = await self.store.update(
            Payment,
            payment_id,
            {"status": PaymentStatus.REFUNDED, "notes": notes},
            where={"status": PaymentStatus.COMPLETED},
        )
        if updated.code == ErrorCode.NOT_FOUND:
            msg = "Only completed payments can be refunded"
            raise StateError(msg)
        payment = updated.unwrap()

        profile = await self.store.update(
            Profile, payment.student_id, {"payment_status": AccountPaymentStatus.REFUNDED}
        )
        if not profile.success:
            raise DependencyFailure(f"Payment refunded but failed to update profile: {profile.error}")

        logger.info(f"Refunded payment {payment_id}")
        return payment

    @service_operation("Fetch payment history")
    async def history(self, student_id: str) -> list[Payment]:
        options = ListOptions(filters={"student_id": student_id}, order_by="created_at")
        return (await self.store.list(Payment, options)).unwrap()

    async def _check_enrollment_owner(self, student_id: str, enrollment_id: str | None) -> None:
        if not enrollment_id:
            return
        found = await self.store.get_by_id(Enrollment, enrollment_id)
        if found.code == ErrorCode.NOT_FOUND or found.unwrap().student_id != student_id:
            raise ResourceNotFoundError("Enrollment not found", "Enrollment", enrollment_id)

    async def _apply_completion_cascade(self, payment: Payment) -> None:
        if payment.enrollment_id:
            result = await self.store.update(Enrollment, payment.enrollment_id, {"status": EnrollmentStatus.ACTIVE})
            if not result.success:
                raise _cascade_failure("activate enrollment", result)
        if payment.student_id:
            result = await self.store.update(Profile, payment.student_id, {"payment_status": AccountPaymentStatus.PAID})
            if not result.success:
                raise _cascade_failure("update profile", result)

"""Payment API endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, status

from acadvizen.auth.dependencies import AdminUserId, CurrentUserId
from acadvizen.container import ServicesDep
from acadvizen.payments.schemas import (
    ManualPaymentRequest,
    OrderRequest,
    OrderResponse,
    RefundRequest,
    VerifyRequest,
)
from acadvizen.store.records import Payment


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(data: OrderRequest, user_id: CurrentUserId, services: ServicesDep) -> OrderResponse:
    """Start a checkout for the current student."""
    result = await services.payments.create_order(
        user_id,
        data.amount,
        enrollment_id=data.enrollment_id,
        currency=data.currency,
        notes=data.notes,
    )
    return result.unwrap()


@router.post("/verify")
async def verify_payment(
    data: VerifyRequest,
    _user_id: CurrentUserId,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> Payment:
    """Checkout callback: check the signature and complete the payment."""
    payment = (
        await services.payments.verify(data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature)
    ).unwrap()
    background_tasks.add_task(services.notifications.payment_completed, payment)
    return payment


@router.get("/history")
async def payment_history(user_id: CurrentUserId, services: ServicesDep) -> list[Payment]:
    return (await services.payments.history(user_id)).unwrap()


@router.post("/manual", status_code=status.HTTP_201_CREATED)
async def record_manual_payment(
    data: ManualPaymentRequest,
    admin_id: AdminUserId,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> Payment:
    payment = (
        await services.payments.record_manual(
            data.student_id,
            data.amount,
            data.payment_mode,
            enrollment_id=data.enrollment_id,
            transaction_id=data.transaction_id,
            notes=data.notes,
        )
    ).unwrap()
    logger.info(f"Admin {admin_id} recorded payment {payment.id}")
    background_tasks.add_task(services.notifications.payment_completed, payment)
    return payment


@router.post("/{payment_id}/refund")
async def refund_payment(
    payment_id: str, data: RefundRequest, admin_id: AdminUserId, services: ServicesDep
) -> Payment:
    payment = (await services.payments.refund(payment_id, data.reason)).unwrap()
    logger.info(f"Admin {admin_id} refunded payment {payment_id}")
    return payment

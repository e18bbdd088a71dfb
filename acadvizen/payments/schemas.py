"""Request and response models for payments."""

from pydantic import BaseModel, Field

from acadvizen.store.records import PaymentMode


class OrderRequest(BaseModel):
    amount: float = Field(..., ge=0)
    enrollment_id: str | None = None
    currency: str | None = None
    notes: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    payment_id: str
    amount: float
    currency: str
    key_id: str


class VerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class ManualPaymentRequest(BaseModel):
    student_id: str
    amount: float = Field(..., ge=0)
    payment_mode: PaymentMode
    enrollment_id: str | None = None
    transaction_id: str | None = None
    notes: str | None = None


class RefundRequest(BaseModel):
    reason: str | None = None

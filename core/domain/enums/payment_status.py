"""
Payment Enums.

Status and method values for payments.
"""
from enum import Enum


class PaymentStatus(str, Enum):
    """Payment status values."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    CARD = "card"
    WALLET = "wallet"
    CASH_ON_DELIVERY = "cash_on_delivery"
    DIGITAL_WALLET = "digital_wallet"
    UPI = "upi"
    QR_CODE = "qr_code"

"""
Fee Schedule

Quotes empanelment fees with the SOP discount and GST. The engine never
talks to a payment processor; these quotes only tell the applicant (and the
officer reconciling NEFT/RTGS transfers) what each settlement should be.

Example from the SOP: 5 APCD types = 25,000 + (65,000 x 5) = 3,50,000 before GST.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict

from core.config.runtime import FeeConfig


class PaymentType(str, Enum):
    APPLICATION_FEE = "APPLICATION_FEE"
    EMPANELMENT_FEE = "EMPANELMENT_FEE"  # per APCD type
    FIELD_VERIFICATION = "FIELD_VERIFICATION"
    ANNUAL_RENEWAL = "ANNUAL_RENEWAL"


# MSEs, Class-I local suppliers and DPIIT startups; benefits cannot be combined.
DISCOUNT_ELIGIBLE_FEE_TYPES: frozenset[PaymentType] = frozenset(
    {
        PaymentType.APPLICATION_FEE,
        PaymentType.EMPANELMENT_FEE,
        PaymentType.ANNUAL_RENEWAL,
    }
)


class FeeCalculation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    payment_type: PaymentType
    base_amount: int
    quantity: int
    subtotal: int
    discount_percent: int
    discount_amount: int
    amount_after_discount: int
    gst_rate: int
    gst_amount: int
    total_amount: int


class ApplicationFeeQuote(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    application_fee: FeeCalculation
    empanelment_fee: FeeCalculation
    grand_total: int
    discount_eligible: bool


def _round_rupees(value: float) -> int:
    # Half-up to whole rupees; all amounts are non-negative
    return int(math.floor(value + 0.5))


def _base_amount(payment_type: PaymentType, fees: FeeConfig) -> int:
    return {
        PaymentType.APPLICATION_FEE: fees.application_fee,
        PaymentType.EMPANELMENT_FEE: fees.empanelment_fee,
        PaymentType.FIELD_VERIFICATION: fees.field_verification_fee,
        PaymentType.ANNUAL_RENEWAL: fees.annual_renewal_fee,
    }[payment_type]


def calculate_fee(
    payment_type: PaymentType,
    quantity: int = 1,
    discount_eligible: bool = False,
    fees: FeeConfig | None = None,
) -> FeeCalculation:
    """Calculate one fee line with discount (where eligible) and GST."""
    if quantity < 0:
        raise ValueError(f"quantity must be non-negative, got {quantity}")
    fees = fees or FeeConfig()

    base_amount = _base_amount(payment_type, fees)
    subtotal = base_amount * quantity

    can_discount = discount_eligible and payment_type in DISCOUNT_ELIGIBLE_FEE_TYPES
    discount_percent = fees.discount_percent if can_discount else 0
    discount_amount = _round_rupees(subtotal * discount_percent / 100)
    amount_after_discount = subtotal - discount_amount

    gst_amount = _round_rupees(amount_after_discount * fees.gst_rate / 100)

    return FeeCalculation(
        payment_type=payment_type,
        base_amount=base_amount,
        quantity=quantity,
        subtotal=subtotal,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        amount_after_discount=amount_after_discount,
        gst_rate=fees.gst_rate,
        gst_amount=gst_amount,
        total_amount=amount_after_discount + gst_amount,
    )


def calculate_application_fees(
    device_type_count: int,
    discount_eligible: bool = False,
    fees: FeeConfig | None = None,
) -> ApplicationFeeQuote:
    """Application fee plus the per-type empanelment fee (at least one type)."""
    application_fee = calculate_fee(PaymentType.APPLICATION_FEE, 1, discount_eligible, fees)
    empanelment_fee = calculate_fee(
        PaymentType.EMPANELMENT_FEE, max(device_type_count, 1), discount_eligible, fees
    )
    return ApplicationFeeQuote(
        application_fee=application_fee,
        empanelment_fee=empanelment_fee,
        grand_total=application_fee.total_amount + empanelment_fee.total_amount,
        discount_eligible=discount_eligible,
    )

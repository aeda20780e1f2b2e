"""
Payment Gate

Per device-type fee settlement. Settlement notices arrive from the payment
collaborator (processor webhook or officer reconciliation); this module
only records them and answers whether every selected type is paid.
"""
from __future__ import annotations

from datetime import datetime

from core.schemas.application import Application, PaymentRecord
from core.schemas.errors import DuplicatePaymentException, UnknownDeviceTypeException


def record_payment(
    application: Application,
    device_type_id: str,
    amount: float,
    reference: str,
    settled_at: datetime | None = None,
) -> dict[str, PaymentRecord]:
    """Return the payments mapping with `device_type_id` settled."""
    if device_type_id not in application.selected_device_types:
        raise UnknownDeviceTypeException(device_type_id, known=sorted(application.selected_device_types))

    existing = application.payments.get(device_type_id)
    if existing is not None:
        raise DuplicatePaymentException(device_type_id, existing.reference)

    payments = dict(application.payments)
    payments[device_type_id] = PaymentRecord(
        device_type_id=device_type_id,
        amount=amount,
        reference=reference,
        settled_at=settled_at,
    )
    return payments


def outstanding(application: Application) -> list[str]:
    return sorted(application.selected_device_types - application.settled_device_types)


def is_satisfied(application: Application) -> bool:
    """Every selected device type has a settled payment."""
    return not outstanding(application)

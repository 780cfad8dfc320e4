# status_classifier.py
# Maps backend status spellings to canonical DeliveryStatus values and
# each canonical status to its progress-bar metadata.

import logging
import re
from dataclasses import replace
from typing import Dict, Optional

from .models import DeliveryStatus, StatusDetails

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Backend spelling → canonical status
# ---------------------------------------------------------------------------

# Keys are normalised: lower case, single spaces.
STATUS_MAP: Dict[str, DeliveryStatus] = {
    "pending":            DeliveryStatus.PENDING,
    "ordered":            DeliveryStatus.PENDING,
    "confirmed":          DeliveryStatus.CONFIRMED,
    "preparing":          DeliveryStatus.PREPARING,
    "ready":              DeliveryStatus.READY_FOR_PICKUP,
    "ready for delivery": DeliveryStatus.READY_FOR_PICKUP,
    "ready for pickup":   DeliveryStatus.READY_FOR_PICKUP,
    "on the way":         DeliveryStatus.ON_THE_WAY,
    "out for delivery":   DeliveryStatus.ON_THE_WAY,
    "delivered":          DeliveryStatus.DELIVERED,
    "cancelled":          DeliveryStatus.CANCELLED,
    "refunded":           DeliveryStatus.REFUNDED,
}

# porter_agent_assign_status values that move the status forward
ASSIGNMENT_MAP: Dict[str, DeliveryStatus] = {
    "assigned":  DeliveryStatus.ON_THE_WAY,
    "delivered": DeliveryStatus.DELIVERED,
}

TERMINAL_STATUSES = frozenset({
    DeliveryStatus.DELIVERED,
    DeliveryStatus.CANCELLED,
    DeliveryStatus.REFUNDED,
})


# ---------------------------------------------------------------------------
# Canonical status → presentation metadata
# ---------------------------------------------------------------------------

_ACTIVE = "#FF7A33"

STATUS_DETAILS: Dict[DeliveryStatus, StatusDetails] = {
    DeliveryStatus.PENDING: StatusDetails(
        1, _ACTIVE, "receipt-outline", "Order placed", "Your order has been received"),
    DeliveryStatus.ORDERED: StatusDetails(
        1, _ACTIVE, "receipt-outline", "Order placed", "Your order has been received"),
    DeliveryStatus.CONFIRMED: StatusDetails(
        1, _ACTIVE, "checkmark-circle-outline", "Order confirmed", "The restaurant accepted your order"),
    DeliveryStatus.PREPARING: StatusDetails(
        2, _ACTIVE, "restaurant-outline", "Preparing your order", "Being prepared"),
    DeliveryStatus.READY_FOR_PICKUP: StatusDetails(
        2, _ACTIVE, "bag-check-outline", "Ready for pickup", "Waiting for the delivery partner"),
    DeliveryStatus.ON_THE_WAY: StatusDetails(
        3, _ACTIVE, "bicycle-outline", "On the way", "Your order is on its way"),
    DeliveryStatus.DELIVERED: StatusDetails(
        4, "#4CAF50", "checkmark-done-outline", "Delivered", "Your order has arrived"),
    DeliveryStatus.CANCELLED: StatusDetails(
        0, "#F44336", "close-circle-outline", "Order cancelled", "This order was cancelled"),
    DeliveryStatus.REFUNDED: StatusDetails(
        0, "#9E9E9E", "cash-outline", "Order refunded", "Your payment has been refunded"),
}


def _normalise(raw: Optional[str]) -> str:
    return re.sub(r"[\s_\-]+", " ", (raw or "").strip().lower())


def classify(raw_status: Optional[str]) -> DeliveryStatus:
    """
    Canonical status for a backend status string.

    Unknown spellings fall back to PENDING so a new backend value never
    breaks the screen.
    """
    key = _normalise(raw_status)
    status = STATUS_MAP.get(key)
    if status is None:
        logger.warning(f"Unrecognised order status {raw_status!r}, treating as Pending.")
        return DeliveryStatus.PENDING
    return status


def classify_assignment(agent_assign_status: Optional[str]) -> Optional[DeliveryStatus]:
    """Status implied by the live feed's courier assignment, or None for no change."""
    return ASSIGNMENT_MAP.get(_normalise(agent_assign_status))


def metadata(status: DeliveryStatus) -> StatusDetails:
    return STATUS_DETAILS[status]


def is_terminal(status: DeliveryStatus) -> bool:
    return status in TERMINAL_STATUSES


def has_assigned_agent(agent_assign_status: Optional[str]) -> bool:
    """True when the live feed reports a courier actually assigned to the order."""
    return classify_assignment(agent_assign_status) is not None


def describe(
    status: DeliveryStatus,
    restaurant_name: Optional[str] = None,
    partner_name: Optional[str] = None,
) -> StatusDetails:
    """Metadata with the description filled in from the order where it names someone."""
    details = metadata(status)
    if status == DeliveryStatus.PREPARING and restaurant_name:
        return replace(details, description=f"At {restaurant_name}")
    if status == DeliveryStatus.ON_THE_WAY and partner_name:
        return replace(details, description=f"With {partner_name}")
    return details

# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate with a map label."""
    latitude: float
    longitude: float
    label: str = ""

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "label": self.label,
        }

    @staticmethod
    def from_dict(d: Optional[dict], label: str) -> Optional["GeoPoint"]:
        """Read a backend ``{"lat": .., "lng": ..}`` pair; None when either half is missing."""
        if not d or d.get("lat") is None or d.get("lng") is None:
            return None
        return GeoPoint(float(d["lat"]), float(d["lng"]), label)


RESTAURANT_LABEL = "Restaurant"
DESTINATION_LABEL = "Your Location"
AGENT_LABEL = "Delivery Partner"


# ---------------------------------------------------------------------------
# Delivery status
# ---------------------------------------------------------------------------

class DeliveryStatus(Enum):
    PENDING          = "Pending"
    ORDERED          = "Ordered"
    CONFIRMED        = "Confirmed"
    PREPARING        = "Preparing"
    READY_FOR_PICKUP = "Ready for Pickup"
    ON_THE_WAY       = "On the Way"
    DELIVERED        = "Delivered"
    CANCELLED        = "Cancelled"
    REFUNDED         = "Refunded"


@dataclass(frozen=True)
class StatusDetails:
    """Presentation metadata for one canonical status."""
    step: int                    # position on the 0-4 progress bar
    color_token: str
    icon_token: str
    title: str
    description: str


# ---------------------------------------------------------------------------
# Order snapshot
# ---------------------------------------------------------------------------

def _to_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Backend timestamps come as ``YYYY-MM-DD HH:MM:SS`` or ISO 8601."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int
    unit_price: float
    buy_one_get_one_free: bool = False

    @staticmethod
    def from_dict(d: dict) -> "OrderItem":
        return OrderItem(
            name=d.get("item_name", ""),
            quantity=int(d.get("quantity") or 0),
            unit_price=_to_float(d.get("unit_price")),
            buy_one_get_one_free=bool(d.get("buy_one_get_one_free")),
        )


@dataclass(frozen=True)
class DeliveryAddress:
    address: str = ""
    home_type: str = "Home"
    landmark: Optional[str] = None
    phone_number: Optional[str] = None

    @staticmethod
    def from_dict(d: Optional[dict]) -> "DeliveryAddress":
        d = d or {}
        return DeliveryAddress(
            address=d.get("address") or "",
            home_type=d.get("home_type") or "Home",
            landmark=d.get("landmark") or None,
            phone_number=d.get("phone_number") or None,
        )


@dataclass(frozen=True)
class RestaurantInfo:
    restaurant_id: Optional[str] = None
    name: str = ""
    image: Optional[str] = None


@dataclass(frozen=True)
class PaymentBreakdown:
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    coupon_code: Optional[str] = None
    coupon_discount: float = 0.0
    total: float = 0.0
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class OrderSnapshot:
    """Immutable copy of one order-details response. Replaced wholesale on every fetch."""
    order_number: str
    raw_status: str
    placed_on: Optional[datetime] = None
    estimated_delivery: Optional[datetime] = None
    items: Tuple[OrderItem, ...] = ()
    delivery_address: DeliveryAddress = field(default_factory=DeliveryAddress)
    restaurant: RestaurantInfo = field(default_factory=RestaurantInfo)
    payment: PaymentBreakdown = field(default_factory=PaymentBreakdown)

    @property
    def promised_minutes(self) -> Optional[int]:
        """Minutes between placement and promised delivery, if both are known."""
        if self.placed_on is None or self.estimated_delivery is None:
            return None
        try:
            return int((self.estimated_delivery - self.placed_on).total_seconds() // 60)
        except TypeError:
            # naive vs aware timestamps
            return None

    @staticmethod
    def from_dict(d: dict) -> "OrderSnapshot":
        details = d.get("restaurant_details") or {}
        return OrderSnapshot(
            order_number=str(d.get("order_number", "")),
            raw_status=d.get("status") or "",
            placed_on=parse_timestamp(d.get("placed_on")),
            estimated_delivery=parse_timestamp(d.get("estimated_delivery")),
            items=tuple(OrderItem.from_dict(i) for i in d.get("items") or []),
            delivery_address=DeliveryAddress.from_dict(d.get("delivery_address")),
            restaurant=RestaurantInfo(
                restaurant_id=details.get("restaurant_id"),
                name=d.get("restaurant_name") or details.get("restaurant_name") or "",
                image=d.get("restaurant_image"),
            ),
            payment=PaymentBreakdown(
                subtotal=_to_float(d.get("subtotal")),
                delivery_fee=_to_float(d.get("delivery_fee")),
                coupon_code=d.get("coupon_code_text") or None,
                coupon_discount=_to_float(d.get("coupon_discount")),
                total=_to_float(d.get("total")),
                payment_method=d.get("payment_method"),
            ),
        )


# ---------------------------------------------------------------------------
# Live tracking snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeliveryPartner:
    name: str = "Delivery Partner"
    phone: Optional[str] = None
    vehicle: str = "Bike"
    rating: float = 4.5

    def merged(self, details: Optional[dict]) -> "DeliveryPartner":
        """Overlay courier details from the live feed; missing fields keep their value."""
        if not details:
            return self
        return replace(
            self,
            name=details.get("delivery_person_name") or self.name,
            phone=details.get("delivery_person_contact") or self.phone,
            vehicle=details.get("vehicle_type") or self.vehicle,
            rating=_to_float(details.get("rating"), self.rating) or self.rating,
        )


@dataclass(frozen=True)
class LiveTrackingSnapshot:
    """Immutable copy of one live-location response. Replaced wholesale on every poll."""
    restaurant_location: Optional[GeoPoint]
    user_destination: Optional[GeoPoint]
    agent_location: Optional[GeoPoint] = None
    estimated_minutes: Optional[int] = None
    agent_assign_status: Optional[str] = None
    partner_details: Optional[Dict[str, Any]] = None   # raw porter_tracking_details

    @staticmethod
    def from_dict(d: dict) -> "LiveTrackingSnapshot":
        minutes = d.get("estimated_time_minutes")
        return LiveTrackingSnapshot(
            restaurant_location=GeoPoint.from_dict(d.get("restaurant_location"), RESTAURANT_LABEL),
            user_destination=GeoPoint.from_dict(d.get("user_destination"), DESTINATION_LABEL),
            agent_location=GeoPoint.from_dict(d.get("deliver_agent_location"), AGENT_LABEL),
            # decimal fields arrive as strings such as "12.50"
            estimated_minutes=int(float(minutes)) if minutes else None,
            agent_assign_status=d.get("porter_agent_assign_status") or None,
            partner_details=d.get("porter_tracking_details") or None,
        )


# ---------------------------------------------------------------------------
# Derived view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrackingCoordinates:
    restaurant: Optional[GeoPoint] = None
    destination: Optional[GeoPoint] = None
    agent: Optional[GeoPoint] = None

    def points(self) -> List[GeoPoint]:
        return [p for p in (self.restaurant, self.destination, self.agent) if p is not None]


@dataclass(frozen=True)
class MapRegion:
    """Viewport that fits every marker: centre plus lat/lon spans in degrees."""
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


class SessionState(Enum):
    IDLE     = "idle"
    LOADING  = "loading"
    ACTIVE   = "active"
    TERMINAL = "terminal"
    STOPPED  = "stopped"


@dataclass(frozen=True)
class TrackingViewModel:
    """Everything a tracking screen renders. Rebuilt from the snapshots on every read."""
    state: SessionState
    status: DeliveryStatus
    details: StatusDetails
    coordinates: TrackingCoordinates
    distance_km: Optional[float]
    eta_label: str
    route: List[GeoPoint]
    agent_bearing_degrees: float
    region: Optional[MapRegion]
    delivery_partner: DeliveryPartner
    estimated_at: Optional[datetime] = None
    order: Optional[OrderSnapshot] = None
    has_error: bool = False
    error: Optional[str] = None

    @property
    def distance_label(self) -> str:
        if self.distance_km is None:
            return ""
        return f"{self.distance_km:.1f} km away"

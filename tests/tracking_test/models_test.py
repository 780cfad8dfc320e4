from datetime import datetime, timezone

import pytest

from delivery.tracking.models import (
    DeliveryPartner,
    GeoPoint,
    LiveTrackingSnapshot,
    OrderSnapshot,
    parse_timestamp,
)


@pytest.mark.parametrize("raw, expected", [
    ("2024-05-01 12:30:45", datetime(2024, 5, 1, 12, 30, 45)),
    ("2024-05-01T12:30:45", datetime(2024, 5, 1, 12, 30, 45)),
    ("2024-05-01T12:30:45Z", datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)),
    ("", None),
    (None, None),
    ("yesterday", None),
])
def test_parse_timestamp(raw, expected):
    assert parse_timestamp(raw) == expected


def test_promised_minutes_needs_both_timestamps():
    order = OrderSnapshot("A1", "Pending", placed_on=datetime(2024, 5, 1, 12, 0))
    assert order.promised_minutes is None


def test_promised_minutes_mixed_timezones():
    order = OrderSnapshot(
        "A1", "Pending",
        placed_on=datetime(2024, 5, 1, 12, 0),
        estimated_delivery=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )
    assert order.promised_minutes is None


def test_order_from_sparse_payload():
    order = OrderSnapshot.from_dict({"order_number": 42})
    assert order.order_number == "42"
    assert order.raw_status == ""
    assert order.items == ()
    assert order.delivery_address.home_type == "Home"
    assert order.payment.total == 0.0


def test_geo_point_requires_both_halves():
    assert GeoPoint.from_dict({"lat": 1.0, "lng": None}, "x") is None
    assert GeoPoint.from_dict(None, "x") is None
    assert GeoPoint.from_dict({"lat": 0, "lng": 0}, "x") == GeoPoint(0.0, 0.0, "x")


def test_partner_merge_keeps_missing_fields():
    partner = DeliveryPartner().merged({"delivery_person_name": "Asha", "rating": None})
    assert partner.name == "Asha"
    assert partner.vehicle == "Bike"
    assert partner.rating == 4.5
    assert DeliveryPartner().merged(None) == DeliveryPartner()


def test_live_snapshot_keeps_raw_feed_fields():
    snapshot = LiveTrackingSnapshot.from_dict({
        "deliver_agent_location": {"lat": 1, "lng": 1},
        "estimated_time_minutes": "7.90",
        "porter_agent_assign_status": "",
        "porter_tracking_details": {},
    })
    assert snapshot.agent_location == GeoPoint(1.0, 1.0, "Delivery Partner")
    assert snapshot.estimated_minutes == 7
    assert snapshot.agent_assign_status is None
    assert snapshot.partner_details is None
    assert snapshot.restaurant_location is None

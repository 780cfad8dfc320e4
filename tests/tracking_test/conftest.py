from datetime import datetime
from typing import Callable, List, Optional

import pytest

from delivery.tracking.models import (
    AGENT_LABEL,
    DESTINATION_LABEL,
    RESTAURANT_LABEL,
    GeoPoint,
    LiveTrackingSnapshot,
    OrderSnapshot,
)
from delivery.tracking.track_config import TrackConfig
from delivery.tracking.tracking_session import TrackingSession

RESTAURANT = GeoPoint(12.97, 77.59, RESTAURANT_LABEL)
DESTINATION = GeoPoint(12.935, 77.625, DESTINATION_LABEL)
AGENT = GeoPoint(12.93, 77.60, AGENT_LABEL)


class ScriptedFetcher:
    """Returns (or raises) the scripted results in order, repeating the last one."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls: List[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class ManualScheduler:
    """Stands in for PollScheduler; ticks only when the test calls fire()."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.cancelled = False

    @property
    def is_running(self) -> bool:
        return self.callback is not None and not self.cancelled

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.is_running:
            self.callback()


@pytest.fixture()
def scripted():
    return ScriptedFetcher


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def make_order():
    def _make(raw_status: str = "Preparing", minutes: Optional[int] = 45, **kwargs) -> OrderSnapshot:
        placed = datetime(2024, 5, 1, 12, 0, 0)
        estimated = placed.replace(minute=minutes) if minutes is not None else None
        return OrderSnapshot(
            order_number=kwargs.pop("order_number", "ORD123"),
            raw_status=raw_status,
            placed_on=placed,
            estimated_delivery=estimated,
            **kwargs,
        )
    return _make


@pytest.fixture()
def make_live():
    def _make(
        assign: Optional[str] = None,
        agent: Optional[GeoPoint] = None,
        minutes: Optional[int] = None,
        restaurant: Optional[GeoPoint] = RESTAURANT,
        destination: Optional[GeoPoint] = DESTINATION,
        partner_details: Optional[dict] = None,
    ) -> LiveTrackingSnapshot:
        return LiveTrackingSnapshot(
            restaurant_location=restaurant,
            user_destination=destination,
            agent_location=agent,
            estimated_minutes=minutes,
            agent_assign_status=assign,
            partner_details=partner_details,
        )
    return _make


@pytest.fixture()
def make_session(scheduler):
    def _make(order_fetcher, live_fetcher, **kwargs) -> TrackingSession:
        return TrackingSession(
            "ORD123",
            order_fetcher,
            live_fetcher,
            user_id=7,
            config=kwargs.pop("config", TrackConfig()),
            scheduler_factory=lambda: scheduler,
            **kwargs,
        )
    return _make

# route_builder.py
# Turns the two or three known points of an order into the polyline
# and viewport the map collaborator draws.

from typing import List, Optional, Sequence

import numpy as np

from .models import DeliveryStatus, GeoPoint, MapRegion, TrackingCoordinates
from .status_classifier import is_terminal
from .track_config import TrackConfig


def build_route(coords: TrackingCoordinates, status: DeliveryStatus) -> List[GeoPoint]:
    """
    Ordered waypoints for the route polyline.

    Returns:
        [] for terminal orders or when restaurant/destination is unknown,
        [restaurant, agent, destination] while a courier is on the way,
        [restaurant, destination] otherwise.
    """
    if is_terminal(status):
        return []
    if coords.restaurant is None or coords.destination is None:
        return []
    if status == DeliveryStatus.ON_THE_WAY and coords.agent is not None:
        return [coords.restaurant, coords.agent, coords.destination]
    return [coords.restaurant, coords.destination]


def fit_region(
    points: Sequence[GeoPoint], config: Optional[TrackConfig] = None
) -> Optional[MapRegion]:
    """
    Smallest padded viewport containing every point.

    Args:
        points: Markers to keep on screen.
        config: Padding factor and minimum delta.

    Returns:
        MapRegion, or None when there is nothing to show.
    """
    if not points:
        return None
    config = config or TrackConfig()

    latlon = np.array([(p.latitude, p.longitude) for p in points], dtype=float)
    lo = latlon.min(axis=0)
    hi = latlon.max(axis=0)
    center = (lo + hi) / 2
    delta = np.maximum((hi - lo) * config.region_padding, config.min_region_delta)

    return MapRegion(
        latitude=float(center[0]),
        longitude=float(center[1]),
        latitude_delta=float(delta[0]),
        longitude_delta=float(delta[1]),
    )

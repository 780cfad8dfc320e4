# api_client.py
# HTTP collaborators for the two backend feeds a tracking session polls.
# Every failure leaves this module as a FetchFailure.

import logging
from typing import Callable, Optional, TypeVar

import requests

from .exceptions import FetchFailure
from .models import LiveTrackingSnapshot, OrderSnapshot
from .track_config import TrackConfig

logger = logging.getLogger(__name__)

ORDER_DETAILS_PATH = "/order/track-order-details/"
LIVE_LOCATION_PATH = "/order/live-location-details/"

T = TypeVar("T")


class TrackingApiClient:
    """
    Thin wrapper over the order and live-location endpoints.

    Usage:
        client = TrackingApiClient(config)
        session = TrackingSession(
            "ORD123", client.fetch_order_details, client.fetch_live_location, user_id=7,
        )

    Args:
        config:  TrackConfig with base URL, timeout and access token.
        session: Optional requests.Session to reuse connections.
    """

    def __init__(
        self,
        config: Optional[TrackConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or TrackConfig()
        self._http = session or requests.Session()
        self._http.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if self.config.access_token:
            self._http.headers["Authorization"] = f"Bearer {self.config.access_token}"

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def fetch_order_details(self, order_number: str, user_id: Optional[int] = None) -> OrderSnapshot:
        """
        Fetch the order record.

        Raises:
            FetchFailure: transport error, bad status, bad JSON, malformed payload or no order.
        """
        data = self._post("order", ORDER_DETAILS_PATH, {
            "order_number": order_number,
            "user_id": user_id,
        })
        orders = data.get("orders") or []
        if not orders:
            raise FetchFailure("order", "No order data available")
        return self._parse("order", OrderSnapshot.from_dict, orders[0])

    def fetch_live_location(self, order_number: str) -> LiveTrackingSnapshot:
        """
        Fetch the courier feed for an order.

        Raises:
            FetchFailure: transport error, bad status, bad JSON or malformed payload.
        """
        data = self._post("live", LIVE_LOCATION_PATH, {"order_id": order_number})
        return self._parse("live", LiveTrackingSnapshot.from_dict, data)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _post(self, kind: str, path: str, payload: dict) -> dict:
        url = self.config.endpoint(path)
        try:
            response = self._http.post(url, json=payload, timeout=self.config.request_timeout_s)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise FetchFailure(kind, f"timed out after {self.config.request_timeout_s}s") from e
        except requests.RequestException as e:
            raise FetchFailure(kind, str(e)) from e
        except ValueError as e:
            raise FetchFailure(kind, f"invalid JSON from {url}") from e

        if not isinstance(data, dict):
            raise FetchFailure(kind, f"unexpected payload from {url}")
        logger.debug(f"POST {url} -> {response.status_code}")
        return data

    @staticmethod
    def _parse(kind: str, parser: Callable[[dict], T], payload: dict) -> T:
        try:
            return parser(payload)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise FetchFailure(kind, f"malformed payload: {e}") from e

# tracking_session.py
# Live tracking for a single order.
# Fuses the order record and the live-location feed into one view model,
# drives the delivery-status state machine and owns the polling schedule.

import logging
import threading
from typing import Callable, List, Optional, Set

from .exceptions import FetchFailure
from .geo_utils import bearing_degrees, distance_km
from .models import (
    DeliveryPartner,
    DeliveryStatus,
    LiveTrackingSnapshot,
    OrderSnapshot,
    SessionState,
    TrackingCoordinates,
    TrackingViewModel,
)
from .route_builder import build_route, fit_region
from .scheduler import PollScheduler
from .status_classifier import (
    classify,
    classify_assignment,
    describe,
    has_assigned_agent,
    is_terminal,
    metadata,
)
from .track_config import TrackConfig

logger = logging.getLogger(__name__)

OrderFetcher = Callable[[str, Optional[int]], OrderSnapshot]
LiveFetcher = Callable[[str], LiveTrackingSnapshot]
ViewModelListener = Callable[[TrackingViewModel], None]

ORDER = "order"
LIVE = "live"

_CLOSED_STATES = (SessionState.TERMINAL, SessionState.STOPPED)


class TrackingSession:
    """
    Stateful tracker for one order number.

    Usage:
        session = TrackingSession(order_number, client.fetch_order_details,
                                  client.fetch_live_location, user_id=user_id)
        session.on_view_model_change(render)
        session.start()
        ...
        session.refresh()   # pull-to-refresh
        session.stop()      # screen closed

    States: IDLE -> LOADING -> ACTIVE -> TERMINAL, or STOPPED on teardown.
    TERMINAL and STOPPED are absorbing: the schedule is cancelled and no
    further network call is made.

    At most one fetch per kind (order, live) is in flight at a time; a tick
    or refresh that finds one outstanding is skipped, not queued.

    Args:
        order_number:        Order to track.
        fetch_order_details: Collaborator returning an OrderSnapshot or raising FetchFailure.
        fetch_live_location: Collaborator returning a LiveTrackingSnapshot or raising FetchFailure.
        user_id:             Passed through to the order fetcher.
        config:              TrackConfig; defaults to TrackConfig().
        scheduler_factory:   Builds the repeating poll task; defaults to PollScheduler.
    """

    def __init__(
        self,
        order_number: str,
        fetch_order_details: OrderFetcher,
        fetch_live_location: LiveFetcher,
        user_id: Optional[int] = None,
        config: Optional[TrackConfig] = None,
        scheduler_factory: Optional[Callable[[], PollScheduler]] = None,
    ) -> None:
        self.order_number = order_number
        self.user_id = user_id
        self.config = config or TrackConfig()

        self._fetch_order = fetch_order_details
        self._fetch_live = fetch_live_location
        self._scheduler_factory = scheduler_factory or (
            lambda: PollScheduler(self.config.poll_interval_s, name=f"track-{order_number}")
        )
        self._scheduler: Optional[PollScheduler] = None

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._status = DeliveryStatus.PENDING
        self._order: Optional[OrderSnapshot] = None
        self._live: Optional[LiveTrackingSnapshot] = None
        self._partner = DeliveryPartner()
        self._error: Optional[str] = None
        self._generation = 0
        self._in_flight: Set[str] = set()
        self._listeners: List[ViewModelListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Fetch the order once, then start live polling unless it is already finished."""
        with self._lock:
            if self._state != SessionState.IDLE:
                return
            self._state = SessionState.LOADING
        logger.info(f"[{self.order_number}] Tracking started.")

        if self._run_fetch(ORDER):
            self._begin_polling()

    def refresh(self) -> None:
        """
        Re-fetch the order and the live location now, outside the timer.

        No-op once the session is terminal or stopped. Retries a failed
        initial load.
        """
        with self._lock:
            state = self._state
        if state == SessionState.IDLE:
            self.start()
            return
        if state in _CLOSED_STATES:
            logger.debug(f"[{self.order_number}] Refresh ignored, session is {state.value}.")
            return

        self._run_fetch(ORDER)
        with self._lock:
            if self._order is None or self._state in _CLOSED_STATES:
                return
        self._begin_polling()

    def stop(self) -> None:
        """Cancel polling. Idempotent; results of fetches still in flight are discarded."""
        with self._lock:
            was = self._state
            if was not in _CLOSED_STATES:
                self._state = SessionState.STOPPED
            self._generation += 1
            scheduler = self._scheduler
        if scheduler is not None:
            scheduler.cancel()
        if was not in _CLOSED_STATES:
            logger.info(f"[{self.order_number}] Tracking stopped.")

    def __enter__(self) -> "TrackingSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def on_view_model_change(self, callback: ViewModelListener) -> Callable[[], None]:
        """
        Register a listener called after every successful merge and when
        a fetch fails while no error was showing.

        Returns:
            A function that unregisters the listener.
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> DeliveryStatus:
        return self._status

    @property
    def has_error(self) -> bool:
        return self._error is not None

    @property
    def order(self) -> Optional[OrderSnapshot]:
        return self._order

    @property
    def live(self) -> Optional[LiveTrackingSnapshot]:
        return self._live

    @property
    def is_polling(self) -> bool:
        scheduler = self._scheduler
        return scheduler is not None and scheduler.is_running

    @property
    def view_model(self) -> TrackingViewModel:
        """Current view, derived from the latest snapshots."""
        with self._lock:
            status = self._status
            coords = self._coordinates()
            agent = coords.agent

            dist = None
            if coords.restaurant is not None and coords.destination is not None:
                dist = distance_km(coords.restaurant, coords.destination)

            bearing = 0.0
            if coords.restaurant is not None and agent is not None:
                bearing = bearing_degrees(coords.restaurant, agent)

            return TrackingViewModel(
                state=self._state,
                status=status,
                details=describe(
                    status,
                    restaurant_name=self._order.restaurant.name if self._order else None,
                    partner_name=self._partner.name,
                ),
                coordinates=coords,
                distance_km=dist,
                eta_label=self._eta_label(),
                route=build_route(coords, status),
                agent_bearing_degrees=bearing,
                region=fit_region(coords.points(), self.config),
                delivery_partner=self._partner,
                estimated_at=self._order.estimated_delivery if self._order else None,
                order=self._order,
                has_error=self._error is not None,
                error=self._error,
            )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _begin_polling(self) -> None:
        """Immediate live fetch, then the repeating schedule (started once)."""
        with self._lock:
            if self._state in _CLOSED_STATES:
                return
        self._run_fetch(LIVE)

        with self._lock:
            if self._state in _CLOSED_STATES or self._scheduler is not None:
                return
            self._scheduler = self._scheduler_factory()
            scheduler = self._scheduler
        scheduler.start(self._tick)

    def _tick(self) -> None:
        with self._lock:
            if self._state in _CLOSED_STATES:
                return
        self._run_fetch(LIVE)

    # ------------------------------------------------------------------
    # Fetch + merge
    # ------------------------------------------------------------------

    def _run_fetch(self, kind: str) -> bool:
        """
        Single-flight fetch of one kind followed by a merge.

        Returns:
            True if a fresh snapshot was merged.
        """
        with self._lock:
            if self._state in _CLOSED_STATES:
                return False
            if kind in self._in_flight:
                logger.debug(f"[{self.order_number}] {kind} fetch already in flight, skipped.")
                return False
            self._in_flight.add(kind)
            generation = self._generation

        try:
            try:
                if kind == ORDER:
                    result = self._fetch_order(self.order_number, self.user_id)
                else:
                    result = self._fetch_live(self.order_number)
            except FetchFailure as e:
                with self._lock:
                    first_failure = generation == self._generation and self._error is None
                    if generation == self._generation:
                        self._error = str(e)
                logger.warning(f"[{self.order_number}] {e}")
                if first_failure:
                    self._notify()
                return False

            with self._lock:
                if generation != self._generation:
                    logger.debug(f"[{self.order_number}] Stale {kind} result discarded.")
                    return False
                if kind == ORDER:
                    self._merge_order(result)
                else:
                    self._merge_live(result)
                self._error = None
                entered_terminal = self._advance_state()
        finally:
            with self._lock:
                self._in_flight.discard(kind)

        if entered_terminal:
            logger.info(f"[{self.order_number}] Reached {self._status.value}, tracking finished.")
            self.stop()
        self._notify()
        return True

    def _merge_order(self, order: OrderSnapshot) -> None:
        self._order = order
        self._status = classify(order.raw_status)

    def _merge_live(self, live: LiveTrackingSnapshot) -> None:
        self._live = live
        self._partner = self._partner.merged(live.partner_details)
        override = classify_assignment(live.agent_assign_status)
        if override is not None:
            self._status = override

    def _advance_state(self) -> bool:
        """Apply state transitions after a merge. Returns True on entering TERMINAL."""
        if is_terminal(self._status):
            self._state = SessionState.TERMINAL
            self._generation += 1
            return True
        if self._state == SessionState.LOADING and self._order is not None and self._live is not None:
            self._state = SessionState.ACTIVE
        return False

    def _notify(self) -> None:
        view = self.view_model
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback(view)
            except Exception:
                logger.exception(f"[{self.order_number}] View model listener failed.")

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    def _coordinates(self) -> TrackingCoordinates:
        live = self._live
        if live is None:
            return TrackingCoordinates()
        return TrackingCoordinates(
            restaurant=live.restaurant_location,
            destination=live.user_destination,
            agent=live.agent_location if has_assigned_agent(live.agent_assign_status) else None,
        )

    def _eta_label(self) -> str:
        if is_terminal(self._status):
            return metadata(self._status).title

        buffer = self.config.eta_buffer_minutes
        if self._live is not None and self._live.estimated_minutes is not None:
            return f"~{self._live.estimated_minutes + buffer} mins"

        promised = self._order.promised_minutes if self._order is not None else None
        if promised is not None:
            return f"{max(promised - buffer, 0)}-{promised} mins"
        return self.config.default_eta_label

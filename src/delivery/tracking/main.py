# main.py
# Entry point — tracks one order from the command line and prints every update.
# In the app, a screen owns the TrackingSession instead and renders the view model.

import argparse
import logging
import threading
from typing import List, Optional

from .api_client import TrackingApiClient
from .models import SessionState, TrackingViewModel
from .track_config import TrackConfig, API_BASE_URL, POLL_INTERVAL_S
from .tracking_session import TrackingSession


def format_view(view: TrackingViewModel) -> str:
    """One status line for a terminal."""
    parts = [
        f"[{view.state.name}]",
        f"{view.details.title} (step {view.details.step}/4)",
        f"ETA {view.eta_label}",
    ]
    if view.distance_km is not None:
        parts.append(view.distance_label)
    if view.coordinates.agent is not None:
        agent = view.coordinates.agent
        parts.append(
            f"partner {view.delivery_partner.name} at "
            f"({agent.latitude:.5f}, {agent.longitude:.5f}) heading {view.agent_bearing_degrees:.0f}°"
        )
    if view.route:
        parts.append(f"route {len(view.route)} pts")
    if view.has_error:
        parts.append(f"! {view.error}")
    return " | ".join(parts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Follow a food order until it is delivered.")
    parser.add_argument("order_number",
                        help="Order number to track")
    parser.add_argument("--user-id",   type=int, default=None,
                        help="Customer id sent with the order lookup")
    parser.add_argument("--base-url",  default=API_BASE_URL,
                        help=f"API base URL (default: {API_BASE_URL})")
    parser.add_argument("--token",     default="",
                        help="Bearer access token")
    parser.add_argument("--interval",  type=float, default=POLL_INTERVAL_S,
                        help=f"Seconds between live-location polls (default: {POLL_INTERVAL_S:g})")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # ------------------------------------------------------------------
    # Logging setup — configure once here, all modules inherit
    # ------------------------------------------------------------------
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = TrackConfig(
        poll_interval_s=args.interval,
        api_base_url=args.base_url,
        access_token=args.token,
    )
    client = TrackingApiClient(config)
    session = TrackingSession(
        args.order_number,
        client.fetch_order_details,
        client.fetch_live_location,
        user_id=args.user_id,
        config=config,
    )

    finished = threading.Event()

    def on_change(view: TrackingViewModel) -> None:
        print(format_view(view))
        if view.state == SessionState.TERMINAL:
            finished.set()

    session.on_view_model_change(on_change)

    print("\n--- Tracking active (Ctrl+C to stop) ---")
    try:
        session.start()
        if session.has_error and session.order is None:
            print(f"[Main] Could not load order: {session.view_model.error}")
            return
        while not finished.wait(1.0):
            pass
    except KeyboardInterrupt:
        print("\n[Main] Interrupted.")
    finally:
        session.stop()
        client.close()

    print("--- Session complete ---")


if __name__ == "__main__":
    main()

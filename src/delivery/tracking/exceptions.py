# exceptions.py
# Errors raised by the HTTP collaborators and handled by TrackingSession.


class TrackingError(Exception):
    """Base class for order-tracking errors."""


class FetchFailure(TrackingError):
    """
    A fetch from the order or live-location API did not produce a snapshot.

    Covers connection errors, timeouts, non-2xx responses, undecodable bodies
    and empty order lists alike; the session treats them all the same way.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind} fetch failed: {message}")
        self.kind = kind
        self.message = message

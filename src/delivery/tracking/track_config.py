# track_config.py
# All tuneable constants in one place.
# Pass a TrackConfig instance to every module that needs settings.

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

POLL_INTERVAL_S: float = 60.0          # seconds between live-location polls
ETA_BUFFER_MINUTES: int = 10           # added to the courier's estimate
DEFAULT_ETA_LABEL: str = "30-40 mins"  # shown before any estimate is known

API_BASE_URL: str = "http://127.0.0.1:8000/api"


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class TrackConfig:
    # Polling
    poll_interval_s: float = POLL_INTERVAL_S

    # ETA
    eta_buffer_minutes: int = ETA_BUFFER_MINUTES
    default_eta_label: str = DEFAULT_ETA_LABEL

    # HTTP collaborators
    api_base_url: str = API_BASE_URL
    request_timeout_s: float = 10.0
    access_token: str = ""

    # Map region
    region_padding: float = 1.5            # multiplier applied to the point span
    min_region_delta: float = 0.01         # degrees, keeps a single point zoomable

    def endpoint(self, path: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"

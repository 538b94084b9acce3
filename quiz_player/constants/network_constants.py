"""Network configuration constants for the quiz player."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
SCORING_SERVICE_URL: str = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"
REQUEST_TIMEOUT_SECONDS: float = 15.0

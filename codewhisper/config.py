"""
Runtime configuration.

Plain module constants with environment-variable overrides.  Nothing here
performs I/O beyond reading ``os.environ``; callers decide what to do with a
missing value.

Environment variables
---------------------
``CODEWHISPER_PROVIDER``          provider used by the Try-It window.
``CODEWHISPER_TIMEOUT``           per-request HTTP timeout in seconds.
``CODEWHISPER_LOG_LEVEL``         logging level name (``DEBUG``, ``INFO`` …).
``CODEWHISPER_<NAME>_BASE_URL``   base URL override for provider *NAME*.
``<NAME>_API_KEY``                key that seeds the session at start-up.
"""

import logging
import os

#: Sampling temperature sent with every request (deterministic-leaning).
TEMPERATURE: float = 0.2

#: Upper bound on generated tokens for every request.
MAX_OUTPUT_TOKENS: int = 2_000

#: Seconds before ``requests`` gives up on connect / read.
DEFAULT_TIMEOUT: float = 120.0

DEFAULT_PROVIDER: str = "cerebras"

DEFAULT_LOG_LEVEL: str = "WARNING"


def default_provider() -> str:
    return os.environ.get("CODEWHISPER_PROVIDER", "").strip().lower() or DEFAULT_PROVIDER


def request_timeout() -> float:
    """HTTP timeout in seconds; invalid overrides fall back to the default."""
    raw = os.environ.get("CODEWHISPER_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logging.getLogger("codewhisper").warning(
            "[CONFIG] Ignoring invalid CODEWHISPER_TIMEOUT=%r", raw,
        )
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def log_level(debug: bool = False) -> int:
    if debug:
        return logging.DEBUG
    name = os.environ.get("CODEWHISPER_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def base_url_override(provider_name: str) -> str | None:
    value = os.environ.get(f"CODEWHISPER_{provider_name.upper()}_BASE_URL", "").strip()
    return value or None


def env_api_key(provider_name: str) -> str | None:
    """Return ``<NAME>_API_KEY`` from the environment, or ``None``."""
    value = os.environ.get(f"{provider_name.upper()}_API_KEY", "").strip()
    return value or None

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _list_env(name: str) -> list[str]:
    raw = os.getenv(name) or ""
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


# Some origins (Amazon included) refuse requests that don't look like a browser.
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
)

REQUEST_TIMEOUT = _float_env("REQUEST_TIMEOUT", 10.0)
PROBE_TIMEOUT = _float_env("PROBE_TIMEOUT", 5.0)
MAX_EXTRACTED_IMAGES = _int_env("MAX_EXTRACTED_IMAGES", 20)
RESOLVE_MAX_WORKERS = max(1, _int_env("RESOLVE_MAX_WORKERS", 8))

# Outbound request guard
ALLOWED_HOSTS = _list_env("ALLOWED_HOSTS")
ALLOW_PRIVATE_NETWORKS = _bool_env("ALLOW_PRIVATE_NETWORKS", False)

# Gemini (chat proxy)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("VITE_GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL") or os.getenv("VITE_GEMINI_MODEL") or "gemini-1.5-pro-latest"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Set up root logging once for the serverless function / local server."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

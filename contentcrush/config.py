"""Content Crush Backend Configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default

# Package root (contentcrush/)
PACKAGE_ROOT = Path(__file__).resolve().parent

# Stage registry, alias table, milestones and bonuses ship as one versioned file
DEFAULT_STATUS_MODEL_PATH = PACKAGE_ROOT / "workflow" / "status_model.yaml"
STATUS_MODEL_PATH = Path(os.getenv("CONTENTCRUSH_STATUS_MODEL_PATH", str(DEFAULT_STATUS_MODEL_PATH)))

# Observability
OTEL_ENABLED = _env_bool("CONTENTCRUSH_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("CONTENTCRUSH_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("CONTENTCRUSH_OTEL_SERVICE_NAME", "contentcrush-backend")
PROM_PORT = _env_int("CONTENTCRUSH_PROM_PORT", 9464)

# Server settings
HOST = os.getenv("CONTENTCRUSH_HOST", "0.0.0.0")
PORT = _env_int("CONTENTCRUSH_PORT", 8000)

# CORS
FRONTEND_ORIGIN = os.getenv("CONTENTCRUSH_FRONTEND_ORIGIN", "http://localhost:5173")

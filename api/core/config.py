"""
Application configuration using environment variables.
Uses simple module-level configuration with dynaconf-style approach.
"""
import json
import os
import sys
from pathlib import Path
from typing import List

from config.settings import DEFAULT_RUN_CONFIG

# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
LOGS_DIR = ROOT_DIR / "logs"


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.getenv(key, default)


def _get_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


def _get_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_json(key: str, default):
    """Get JSON environment variable, falling back to default when unset or invalid."""
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        return default


# =============================================================================
# API Configuration
# =============================================================================
APP_NAME = _get_env("APP_NAME", "Table Detection API")
APP_VERSION = _get_env("APP_VERSION", "1.0.0")
DEBUG = _get_bool("DEBUG", False)
HOST = _get_env("HOST", "0.0.0.0")
PORT = _get_int("PORT", 8000)

# =============================================================================
# Processing Configuration
# =============================================================================
MAX_WORKERS = _get_int("MAX_WORKERS", 4)
MAX_FILE_SIZE_MB = _get_int("MAX_FILE_SIZE_MB", 50)
TABLE_DETECTION_CONFIG: List[dict] = _get_json("TABLE_DETECTION_CONFIG", DEFAULT_RUN_CONFIG)

# =============================================================================
# Detector Configuration
# =============================================================================
DETECTOR_PYTHON = _get_env("DETECTOR_PYTHON", sys.executable)
DETECTOR_TIMEOUT_SECONDS = _get_int("DETECTOR_TIMEOUT_SECONDS", 300)

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
LOG_FORMAT = _get_env("LOG_FORMAT", "json")  # json or text
LOG_FILE_ENABLED = _get_bool("LOG_FILE_ENABLED", True)
LOG_FILE_PATH = _get_env("LOG_FILE_PATH", str(LOGS_DIR / "app.log"))
LOG_MAX_BYTES = _get_int("LOG_MAX_BYTES", 10 * 1024 * 1024)  # 10MB
LOG_BACKUP_COUNT = _get_int("LOG_BACKUP_COUNT", 5)

# =============================================================================
# Build/Deploy Information
# =============================================================================
GIT_COMMIT = _get_env("GIT_COMMIT", "development")
BUILD_DATE = _get_env("BUILD_DATE", "unknown")
ENVIRONMENT = _get_env("ENVIRONMENT", "development")


def get_config_dict() -> dict:
    """Get all configuration as dictionary (for debugging)."""
    return {
        "app_name": APP_NAME,
        "app_version": APP_VERSION,
        "debug": DEBUG,
        "environment": ENVIRONMENT,
        "detector_python": DETECTOR_PYTHON,
        "detector_timeout_seconds": DETECTOR_TIMEOUT_SECONDS,
        "table_detection_config": TABLE_DETECTION_CONFIG,
        "log_level": LOG_LEVEL,
        "max_workers": MAX_WORKERS,
    }

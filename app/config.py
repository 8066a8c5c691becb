"""
Configuration for the Farm Management backend
=============================================
Main application runtime settings, scheduler cadences and domain defaults.
Every value can be overridden through a ``FARM_*`` environment variable.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


def _is_hhmm(value: str) -> bool:
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return False
    hour, minute = int(parts[0]), int(parts[1])
    return 0 <= hour < 24 and 0 <= minute < 60


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("FARM_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("FARM_SECRET_KEY", "FarmDevSecretKey"))
    socketio_cors_origins: str = field(default_factory=lambda: os.getenv("FARM_SOCKETIO_CORS", "*"))
    # Engine.IO transports, comma separated; polling avoids Werkzeug websocket upgrades
    socketio_transports: str = field(default_factory=lambda: os.getenv("FARM_SOCKETIO_TRANSPORTS", "polling"))

    DEBUG: bool = field(default_factory=lambda: _env_bool("FARM_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("FARM_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("FARM_LOG_DIR", "logs"))

    # Wall-clock zone used to match irrigation schedule start times
    timezone: str = field(default_factory=lambda: os.getenv("FARM_TIMEZONE", "UTC"))

    # Scheduler
    scheduler_enabled: bool = field(default_factory=lambda: _env_bool("FARM_SCHEDULER_ENABLED", True))
    scheduler_check_interval: float = field(
        default_factory=lambda: _env_float("FARM_SCHEDULER_CHECK_INTERVAL", 1.0)
    )
    scheduler_max_workers: int = field(default_factory=lambda: _env_int("FARM_SCHEDULER_MAX_WORKERS", 4))

    # Irrigation
    irrigation_monitor_interval: int = field(
        default_factory=lambda: _env_int("FARM_IRRIGATION_MONITOR_INTERVAL", 60)
    )
    sensor_offline_minutes: int = field(default_factory=lambda: _env_int("FARM_SENSOR_OFFLINE_MINUTES", 30))
    sensor_reading_limit: int = field(default_factory=lambda: _env_int("FARM_SENSOR_READING_LIMIT", 1000))

    # Daily jobs
    recurring_transactions_time: str = field(
        default_factory=lambda: os.getenv("FARM_RECURRING_TRANSACTIONS_TIME", "00:05")
    )
    crop_monitor_time: str = field(default_factory=lambda: os.getenv("FARM_CROP_MONITOR_TIME", "06:00"))

    eventbus_queue_size: int = field(default_factory=lambda: _env_int("FARM_EVENTBUS_QUEUE_SIZE", 1024))
    eventbus_worker_count: int = field(default_factory=lambda: _env_int("FARM_EVENTBUS_WORKER_COUNT", 2))

    # Weather forecast provider (Open-Meteo compatible)
    weather_api_url: str = field(
        default_factory=lambda: os.getenv("FARM_WEATHER_API_URL", "https://api.open-meteo.com/v1/forecast")
    )
    weather_timeout: int = field(default_factory=lambda: _env_int("FARM_WEATHER_TIMEOUT", 10))
    latitude: float = field(default_factory=lambda: _env_float("FARM_LATITUDE", 41.8781))
    longitude: float = field(default_factory=lambda: _env_float("FARM_LONGITUDE", -87.6298))

    # Financial KPIs divide by this acreage
    total_acreage: float = field(default_factory=lambda: _env_float("FARM_TOTAL_ACREAGE", 100.0))

    # Default insecure secret key - used only for detection
    _DEFAULT_SECRET_KEY: str = field(default="FarmDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set FARM_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )

        for name in ("recurring_transactions_time", "crop_monitor_time"):
            value = getattr(self, name)
            if not _is_hhmm(value):
                raise ValueError(f"{name} must be formatted as HH:MM, got {value!r}")

        if self.irrigation_monitor_interval <= 0:
            raise ValueError("irrigation_monitor_interval must be positive")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        if not self.secret_key:
            raise RuntimeError(
                "Missing FARM_SECRET_KEY environment variable. "
                "Production systems must set an explicit secret key."
            )

        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DEBUG": self.DEBUG,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "FARM_TIMEZONE": self.timezone,
            "SCHEDULER_ENABLED": self.scheduler_enabled,
        }


def setup_logging(debug: bool = False, log_dir: str = "logs") -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "farm_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "farm_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "farm_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "farm.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "farm_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"farm_console", "farm_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()

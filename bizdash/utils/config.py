"""
BizDash Analytics - Configuration Management

This module handles loading and validating configuration from environment
variables, with .env file support.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


CACHE_BACKENDS = ("memory", "redis")


@dataclass
class CacheConfig:
    """Configuration for the result cache."""
    backend: str = "memory"
    default_ttl_ms: int = 5 * 60 * 1000
    cleanup_interval_seconds: float = 60.0
    redis_url: Optional[str] = None


@dataclass
class DashboardConfig:
    """Configuration for the dashboard web server."""
    host: str = "127.0.0.1"
    port: int = 8050
    refresh_interval_ms: int = 60000


@dataclass
class AnalyticsConfig:
    """Configuration for payload computation."""
    mock_data_seed: Optional[int] = None
    moving_average_window: int = 3
    history_days: int = 365


@dataclass
class Config:
    """
    Main configuration class that aggregates all configuration sections.

    Loads configuration from environment variables with .env file support.
    Every variable is optional; defaults match the dataclass defaults.
    """
    cache: CacheConfig = field(default_factory=CacheConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    log_level: str = "INFO"

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("data"))
    log_dir: Path = field(default_factory=lambda: Path("data/logs"))

    load_env_file: bool = True

    def __post_init__(self):
        """Load configuration from environment after initialization."""
        env_file = Path(".env")
        if self.load_env_file and env_file.exists():
            load_dotenv(env_file)

        backend = os.getenv("CACHE_BACKEND", "memory").strip().lower()
        if backend not in CACHE_BACKENDS:
            raise ValueError(
                f"CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, got '{backend}'"
            )

        self.cache = CacheConfig(
            backend=backend,
            default_ttl_ms=self._get_int_env("CACHE_DEFAULT_TTL_MS", 5 * 60 * 1000),
            cleanup_interval_seconds=self._get_float_env("CACHE_CLEANUP_INTERVAL_S", 60.0),
            redis_url=self._build_redis_url()
        )

        self.dashboard = DashboardConfig(
            host=os.getenv("DASH_HOST", "127.0.0.1"),
            port=self._get_int_env("DASH_PORT", 8050),
            refresh_interval_ms=self._get_int_env("DASH_REFRESH_INTERVAL_MS", 60000)
        )

        seed = os.getenv("MOCK_DATA_SEED")
        self.analytics = AnalyticsConfig(
            mock_data_seed=self._parse_int("MOCK_DATA_SEED", seed) if seed else None,
            moving_average_window=self._get_int_env("MOVING_AVERAGE_WINDOW", 3),
            history_days=self._get_int_env("HISTORY_DAYS", 365)
        )

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def _build_redis_url(self) -> Optional[str]:
        """Resolve the Redis URL from REDIS_URL or REDIS_HOST/REDIS_PORT."""
        if os.getenv("REDIS_URL"):
            return os.environ["REDIS_URL"]
        if os.getenv("REDIS_HOST"):
            return f"redis://{os.environ['REDIS_HOST']}:{os.getenv('REDIS_PORT', '6379')}"
        return None

    def _get_int_env(self, key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        return self._parse_int(key, value)

    def _get_float_env(self, key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be a number, got '{value}'") from None

    @staticmethod
    def _parse_int(key: str, value: str) -> int:
        """
        Parse an integer environment value.

        Raises:
            ValueError: If the value is not an integer
        """
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got '{value}'") from None

    def ensure_directories(self) -> None:
        """Create data directories if they don't exist."""
        for directory in [self.data_dir, self.log_dir]:
            directory.mkdir(parents=True, exist_ok=True)

#!/usr/bin/env python3
"""Configuration loader that reads from config files."""
import os
from pathlib import Path
from typing import Any

import tomllib

DEFAULT_CONFIG: dict[str, Any] = {
    "service": {
        "url": "wss://stream.watsonplatform.net/speech-to-text/api",
        "model": "en-US_BroadbandModel",
    },
    "streaming": {
        # Unsent bytes allowed in the socket's write buffer before input is paused
        "watermark": 16384,
        "poll_interval": 0.01,
        "chunk_size": 8192,
        "structured": False,
    },
    "transport": {"verify_tls": True, "open_timeout": 10.0},
    "logging": {"level": "INFO"},
}


class ConfigLoader:
    """Load configuration from config files."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = self._default_config_path()

        self.config_file = str(config_path)
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, "rb") as f:
                full_config = tomllib.load(f)
            recognize_config = full_config.get("recognize", {})
        else:
            recognize_config = {}

        self._config = self._merge_dicts(DEFAULT_CONFIG, recognize_config)

    def _default_config_path(self) -> Path:
        env_path = os.environ.get("RECOGNIZE_STREAM_CONFIG")
        if env_path:
            return Path(env_path)
        return Path.home() / ".recognize-stream" / "config.toml"

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_dicts(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a value using dot notation (e.g., 'service.url')"""
        keys = key_path.split(".")
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    @property
    def service_url(self) -> str:
        env_url = os.environ.get("RECOGNIZE_URL")
        if env_url:
            return env_url
        return str(self.get("service.url", DEFAULT_CONFIG["service"]["url"]))

    @property
    def default_model(self) -> str:
        env_model = os.environ.get("RECOGNIZE_MODEL")
        if env_model:
            return env_model
        return str(self.get("service.model", DEFAULT_CONFIG["service"]["model"]))

    @property
    def watermark(self) -> int:
        return int(self.get("streaming.watermark", 16384))

    @property
    def poll_interval(self) -> float:
        return float(self.get("streaming.poll_interval", 0.01))

    @property
    def chunk_size(self) -> int:
        return int(self.get("streaming.chunk_size", 8192))

    @property
    def structured(self) -> bool:
        return bool(self.get("streaming.structured", False))

    @property
    def verify_tls(self) -> bool:
        return bool(self.get("transport.verify_tls", True))

    @property
    def open_timeout(self) -> float | None:
        value = self.get("transport.open_timeout", 10.0)
        if value is None or float(value) <= 0:
            return None
        return float(value)

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "INFO")).upper()


# Global singleton instance
_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


# Re-export logging functions
from .logging import configure_logging, get_logger, setup_logging  # noqa: E402, F401

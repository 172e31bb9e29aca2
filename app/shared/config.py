"""
Process-wide settings source for the signaling hub.

Values are layered, later sources winning:
1) `env.example`, committed defaults with no secrets (SOCKET_JWT_SECRET stays empty)
2) `env.local`, per-developer overrides, never committed
3) the process environment, which is how deployments inject the socket secret

Typed access goes through `app.app_config.AppEnvironConfig`; this module only
collects raw strings.
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

ROOT_DIR = Path(__file__).parent.parent.parent
ENV_FILES = ("env.example", "env.local")


class EnvironConfig:
    """Singleton mapping of raw setting names to string values."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config: dict[str, str | None] = {}
            self._load_config()
            EnvironConfig._initialized = True

    def _load_config(self):
        for name in ENV_FILES:
            path = ROOT_DIR / name
            if path.exists():
                self._config.update(dotenv_values(path))
                logger.info("Loaded settings from {}", path)

        self._config.update(os.environ)

    def get(self, key, default=None):
        """Value for ``key``; ``default`` when unset. Empty strings are returned as-is."""
        value = self._config.get(key)
        return default if value is None else value

    def __contains__(self, key):
        return key in self._config


config = EnvironConfig()

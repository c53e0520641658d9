"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No playback logic
- No protocol constants (see spec.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from spec import (
    HTTP_HOST_DEFAULT,
    HTTP_PORT_DEFAULT,
    PUBLISH_HOST_DEFAULT,
    PUBLISH_PORT_DEFAULT,
    UPLOAD_DIR_DEFAULT,
)


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the app factory, source store and publisher.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # HTTP surface
    # ------------------------------------------------------------------

    http_host: str
    http_port: int

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    upload_dir: Path

    # ------------------------------------------------------------------
    # Publish transport
    # ------------------------------------------------------------------

    publish_host: str
    publish_port: int
    publish_bind: bool

    @property
    def publish_address(self) -> str:
        """ZeroMQ endpoint the publisher connects (or binds) to."""
        return f"tcp://{self.publish_host}:{self.publish_port}"

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable is malformed.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            http_host=os.environ.get("HOST", HTTP_HOST_DEFAULT),
            http_port=int(os.environ.get("PORT", HTTP_PORT_DEFAULT)),

            upload_dir=Path(os.environ.get("UPLOAD_DIR", UPLOAD_DIR_DEFAULT)),

            publish_host=os.environ.get("ZMQ_HOST", PUBLISH_HOST_DEFAULT),
            publish_port=int(os.environ.get("ZMQ_PORT", PUBLISH_PORT_DEFAULT)),
            publish_bind=os.environ.get("ZMQ_BIND", "0") == "1",
        )

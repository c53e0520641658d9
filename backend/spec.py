"""
SPEC-AS-CONSTANTS
-----------------
Single source of truth for all behavioral invariants in the system.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final, Tuple

# =============================================================================
# Sample format (float32 mono, little-endian)
# =============================================================================

SAMPLE_DTYPE: Final[str] = "<f4"
SAMPLE_WIDTH_BYTES: Final[int] = 4
PUBLISH_CHANNEL_INDEX: Final[int] = 0  # first channel only, no mixing

# =============================================================================
# Chunk emission
# =============================================================================

CHUNK_SIZE_SAMPLES: Final[int] = 1024
CHUNK_MAX_BYTES: Final[int] = CHUNK_SIZE_SAMPLES * SAMPLE_WIDTH_BYTES

EMIT_INTERVAL_MS: Final[int] = 10
EMIT_RATE_HZ: Final[int] = 1000 // EMIT_INTERVAL_MS

# Upper bound for an in-flight send to finish after stop before the
# emission task is cancelled outright.
STOP_DRAIN_TIMEOUT_MS: Final[int] = 500

# =============================================================================
# Publish transport
# =============================================================================

PUBLISH_HOST_DEFAULT: Final[str] = "127.0.0.1"
PUBLISH_PORT_DEFAULT: Final[int] = 5555

# =============================================================================
# Sources
# =============================================================================

SOURCE_EXTENSIONS: Final[Tuple[str, ...]] = (".wav",)
UPLOAD_DIR_DEFAULT: Final[str] = "uploads"

# =============================================================================
# Observers
# =============================================================================

WELCOME_VERSION: Final[str] = "zmq-integration"
OBSERVER_QUEUE_MAX: Final[int] = 256

# =============================================================================
# HTTP surface
# =============================================================================

HTTP_HOST_DEFAULT: Final[str] = "0.0.0.0"
HTTP_PORT_DEFAULT: Final[int] = 3001

"""Centralized configurable defaults for Parley.

All tunable parameters in one place. Values are read from the environment
once, at import time.
"""

from __future__ import annotations

import os

# Transport
DEFAULT_TRANSPORT = os.environ.get("PARLEY_TRANSPORT", "memory")
API_URL = os.environ.get("PARLEY_API_URL", "http://localhost:8080")
API_TOKEN = os.environ.get("PARLEY_API_TOKEN", "")
REQUEST_TIMEOUT = float(os.environ.get("PARLEY_REQUEST_TIMEOUT", "10"))

# Logging
LOG_LEVEL = os.environ.get("PARLEY_LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get("PARLEY_LOG_FORMAT", "text")  # text | json

# Wire
PRIVACY_PATH = "/privacy"

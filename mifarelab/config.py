"""Application configuration."""

import os

# HTTP server
HOST = os.getenv("MIFARELAB_HOST", "0.0.0.0")
PORT = int(os.getenv("MIFARELAB_PORT", "8000"))

LOG_LEVEL = os.getenv("MIFARELAB_LOG_LEVEL", "INFO").upper()

"""Global pytest configuration."""

import os

# Keep the module-level app fast in tests before any imports
os.environ.setdefault("UNIT_LATENCY_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

"""Finance Manager UI: headless view models over the Finance Manager API."""

__version__ = "0.1.0"

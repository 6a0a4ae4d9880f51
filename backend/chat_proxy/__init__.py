"""Claude Chat Proxy - session-aware chat backend for the Anthropic Messages API."""

__version__ = "1.0.0"

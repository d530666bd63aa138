"""Reverse proxy forwarding requests to named upstream LLM API providers."""

__version__ = "0.1.0"

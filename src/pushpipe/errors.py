from __future__ import annotations


class PushpipeError(Exception):
    """Base class for errors raised by pushpipe itself."""


class ConfigurationError(PushpipeError, ValueError):
    """Invalid node configuration, raised at construction time."""

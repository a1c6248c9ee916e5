# linecommander/transport/errors.py
from __future__ import annotations

class TransportError(Exception):
    """Base class for transport-layer failures."""

class TransportOpenError(TransportError):
    pass

class TransportUnknownHostError(TransportOpenError):
    pass

class TransportIOError(TransportError):
    pass

class TransportEOFError(TransportError):
    """The peer closed the stream."""

# backend/errors.py
"""Failure kinds for a render job. None of them are retried."""


class RenderError(Exception):
    """Base exception for all render job failures."""
    pass


class LaunchError(RenderError):
    """Raised when the browser engine cannot be started."""
    pass


class NavigationError(RenderError):
    """Raised when the sketch page does not finish loading."""
    pass


class RecordingTimeoutError(RenderError):
    """Raised when the page never reports the recording as finished."""
    pass


class SessionLostError(RenderError):
    """Raised when a round-trip into the page fails mid-job."""
    pass


class NoPayloadError(RenderError):
    """Raised when the page has no recorded video to hand over."""
    pass


class ExtractionError(RenderError):
    """Raised when the recorded blob cannot be turned into bytes."""
    pass


class PersistenceError(RenderError):
    """Raised when the video cannot be written to disk."""
    pass

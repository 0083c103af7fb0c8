"""
Error taxonomy for the shutdown tracker.

Every failure path of a core operation raises one of these types.
They subclass the closest built-in exception so callers that only
know about ValueError / PermissionError / LookupError still work.
"""


class ShutdownError(Exception):
    """Base class for all shutdown tracker errors"""


class ShutdownValidationError(ShutdownError, ValueError):
    """Malformed input, rejected before any external call"""


class InvalidTransitionError(ShutdownValidationError):
    """The requested change is not allowed in the record's current state"""


class GeocodingError(ShutdownError):
    """The geocoding lookup failed or returned incomplete data"""


class ShutdownPermissionError(ShutdownError, PermissionError):
    """The caller's effective access level does not allow the operation"""


class RecordNotFoundError(ShutdownError, LookupError):
    """The targeted record is no longer present in storage"""

    def __init__(self, record_id: str, kind: str = "shutdown"):
        super().__init__(f"{kind} {record_id} not found")
        self.record_id = record_id
        self.kind = kind

"""
Custom Exception Hierarchy for POI Sync Service
================================================

Typed errors raised by the resolution engine, the sync pipeline and the
rate limiters. The HTTP layer maps each one to a status code through
``http_status``; ``CacheError`` is always recovered where it happens.

Usage:
    from poi_sync.common.exceptions import ExternalSourceError, StoreError

    try:
        docs = list(collection.find(query))
    except PyMongoError as e:
        raise StoreError("Failed to query POIs") from e
"""


class PoiSyncError(Exception):
    """
    Root of the service error tree.

    Attributes:
        message: Text returned to the client
        code: Stable machine-readable code (VAL001, EXT001, ...)
        details: Extra context merged into the JSON body
    """

    http_status = 500

    def __init__(self, message: str, code: str = "PS000", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """JSON body for the error response."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details
        }


# ============================================
# Request Input
# ============================================

class ValidationError(PoiSyncError):
    """Malformed coordinates, radius or required field."""

    http_status = 400

    def __init__(self, message: str, field: str = None, details: dict = None):
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, code="VAL001", details=details)


# ============================================
# Upstream Places API
# ============================================

class ExternalSourceError(PoiSyncError):
    """Upstream places API call failed."""

    http_status = 503

    def __init__(self, message: str, service_name: str = None, cause: Exception = None, details: dict = None):
        details = details or {}
        if service_name:
            details["service"] = service_name
        self.service_name = service_name
        self.cause = cause
        super().__init__(message, code="EXT001", details=details)


# ============================================
# Store and Cache
# ============================================

class StoreError(PoiSyncError):
    """Place store (MongoDB) operation failed."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="DB001", details=details)


class CacheError(PoiSyncError):
    """Cache tier (Redis) operation failed."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="CACHE001", details=details)


# ============================================
# Access
# ============================================

class UnauthorizedError(PoiSyncError):
    """API key header missing or wrong."""

    http_status = 401

    def __init__(self, message: str = "Unauthorized (API key missing or invalid)", details: dict = None):
        super().__init__(message, code="AUTH001", details=details)


# ============================================
# Throttling
# ============================================

class RateLimitExceeded(PoiSyncError):
    """Caller exhausted its request window."""

    http_status = 429

    def __init__(self, message: str, retry_after: int = None, details: dict = None):
        details = details or {}
        if retry_after:
            details["retry_after"] = retry_after
        self.retry_after = retry_after
        super().__init__(message, code="RATE001", details=details)


# ============================================
# Lookups
# ============================================

class NotFoundError(PoiSyncError):
    """Job or place id is unknown."""

    http_status = 404

    def __init__(self, resource: str, identifier: str = None, details: dict = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        details = details or {}
        details["resource"] = resource
        if identifier:
            details["identifier"] = identifier
        super().__init__(message, code="NF001", details=details)

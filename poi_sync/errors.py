import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .common.exceptions import PoiSyncError, RateLimitExceeded

logger = logging.getLogger(__name__)


def handle_exception(e):
    """Map exceptions to JSON error responses."""
    if isinstance(e, PoiSyncError):
        if e.http_status >= 500:
            logger.error(f"[ERROR] {e.__class__.__name__}: {e.message}")
        response = jsonify(e.to_dict())
        response.status_code = e.http_status
        if isinstance(e, RateLimitExceeded) and e.retry_after:
            response.headers["Retry-After"] = str(e.retry_after)
        return response

    if isinstance(e, HTTPException):
        response = jsonify({
            "error": e.name,
            "message": e.description,
            "code": f"HTTP{e.code}",
            "details": {}
        })
        response.status_code = e.code
        return response

    logger.error(f"[ERROR] Unhandled exception: {e}", exc_info=True)
    response = jsonify({
        "error": "InternalServerError",
        "message": "An unexpected error occurred",
        "code": "PS000",
        "details": {}
    })
    response.status_code = 500
    return response

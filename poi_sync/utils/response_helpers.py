"""
Response helper functions.

Builders for the standardized API response envelope.
"""
from flask import jsonify
from pydantic import BaseModel


def build_success_response(message, result_code, data=None, status_code=200):
    """
    Build standardized success response.

    Args:
        message: Human-readable message
        result_code: Application result code
        data: Optional dict merged into the body
        status_code: HTTP status code (default 200)

    Returns:
        tuple: (json_response, status_code)

    Example:
        return build_success_response(
            "Sync job accepted",
            "SYNC_ACCEPTED",
            data={"jobId": job_id},
            status_code=202
        )
    """
    response = {
        "resultMessage": message,
        "resultCode": result_code
    }
    if data:
        response.update(data)
    return jsonify(response), status_code


def dump_model(model: BaseModel) -> dict:
    """JSON-ready dict in the upstream camelCase shape."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)

"""
Per-request correlation id.

Taken from the ``X-Correlation-ID`` request header or generated, kept on
``flask.g`` for the log filter, and echoed on the response.
"""
import uuid

from flask import Flask, g, has_request_context, request

CORRELATION_ID_HEADER = "X-Correlation-ID"
NO_CORRELATION_ID = "-"


def get_correlation_id() -> str:
    """Correlation id of the current request, ``-`` outside a request."""
    if has_request_context():
        return g.get("correlation_id", NO_CORRELATION_ID)
    return NO_CORRELATION_ID


def init_correlation_id(app: Flask):
    @app.before_request
    def assign_correlation_id():
        g.correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())

    @app.after_request
    def echo_correlation_id(response):
        response.headers[CORRELATION_ID_HEADER] = get_correlation_id()
        return response

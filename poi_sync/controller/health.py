"""Health check controller."""

from flask import Blueprint, jsonify


def init_app():
    """Initialize health check blueprint."""
    health_api = Blueprint('health', __name__)

    @health_api.route('/health', methods=['GET'])
    def health_check():
        """Liveness probe. Does not touch MongoDB, Redis or Google."""
        return jsonify({"status": "ok"}), 200

    return health_api

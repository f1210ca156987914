"""
Places Controller Package
Flask Blueprint for POI lookup endpoints
"""

from flask import Blueprint


def init_app(container):
    """Build the places blueprint for one application."""
    from .places_controller import PlacesController

    places_bp = Blueprint("places", __name__, url_prefix="/places")
    PlacesController(places_bp, container)
    return places_bp

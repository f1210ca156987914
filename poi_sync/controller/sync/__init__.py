"""
Sync Controller Package
Flask Blueprint for background location sync
"""

from flask import Blueprint


def init_app(container):
    """Build the sync blueprint for one application."""
    from .sync_controller import SyncController

    sync_bp = Blueprint("sync", __name__, url_prefix="/sync")
    SyncController(sync_bp, container)
    return sync_bp

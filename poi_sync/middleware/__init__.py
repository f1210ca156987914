"""
Middleware package for Flask request/response interceptors.
"""

from .api_key_middleware import api_key_required
from .correlation_id import CORRELATION_ID_HEADER, get_correlation_id, init_correlation_id

__all__ = [
    'api_key_required',
    'CORRELATION_ID_HEADER',
    'get_correlation_id',
    'init_correlation_id'
]

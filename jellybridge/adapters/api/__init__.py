"""
Adaptateur du catalogue distant Jellyseerr.
"""

from .endpoints import ENDPOINTS, Endpoint, EndpointConfig
from .jellyseerr_client import JellyseerrClient
from .retry import request_with_retry, with_retry

__all__ = [
    "ENDPOINTS",
    "Endpoint",
    "EndpointConfig",
    "JellyseerrClient",
    "request_with_retry",
    "with_retry",
]

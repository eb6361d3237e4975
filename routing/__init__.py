"""
Routing helpers for endpoints: service accessors and the response factory.
"""

from routing.factory import ResponseFactory
from routing.helpers import (
    Helpers,
    ServiceNotRegisteredError,
    get_auth,
    get_current_user,
    get_response_factory,
    register_services,
)

__all__ = [
    "ResponseFactory",
    "Helpers",
    "ServiceNotRegisteredError",
    "get_auth",
    "get_current_user",
    "get_response_factory",
    "register_services",
]

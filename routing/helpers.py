"""
Accessors for the services endpoints commonly need.

The auth service and the response factory are registered once on the
application state; endpoints reach them either through the FastAPI
dependencies below or, in class-based endpoints, through the Helpers
mixin.

Example:
    register_services(app, auth=TokenAuth())

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user
"""

from typing import Any, Optional

from fastapi import Request

from routing.factory import ResponseFactory

AUTH_STATE_KEY = "api_auth"
RESPONSE_STATE_KEY = "api_response"


class ServiceNotRegisteredError(RuntimeError):
    """Raised when a service is requested before it was registered."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Service [{key}] is not registered on the application state")


def register_services(
    app,
    auth: Optional[Any] = None,
    response_factory: Optional[ResponseFactory] = None,
) -> None:
    """
    Register the auth service and response factory on the application.

    Args:
        app: The FastAPI application instance
        auth: Auth service exposing ``user()``
        response_factory: Response factory, a default one is created if omitted
    """
    if auth is not None:
        setattr(app.state, AUTH_STATE_KEY, auth)
    setattr(app.state, RESPONSE_STATE_KEY, response_factory or ResponseFactory())


def _resolve(request: Request, key: str) -> Any:
    service = getattr(request.app.state, key, None)
    if service is None:
        raise ServiceNotRegisteredError(key)
    return service


def get_auth(request: Request) -> Any:
    return _resolve(request, AUTH_STATE_KEY)


def get_current_user(request: Request) -> Any:
    """Return the authenticated user, as reported by the auth service."""
    return get_auth(request).user()


def get_response_factory(request: Request) -> ResponseFactory:
    return _resolve(request, RESPONSE_STATE_KEY)


class Helpers:
    """
    Mixin for class-based endpoints holding the current request.

    Subclasses must set ``self.request``.
    """

    request: Request

    def user(self) -> Any:
        return get_current_user(self.request)

    def auth(self) -> Any:
        return get_auth(self.request)

    def response(self) -> ResponseFactory:
        return get_response_factory(self.request)

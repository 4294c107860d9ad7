"""Request-level failures raised inside the gateway pipeline.

Each error carries the HTTP status it maps to. The application turns any
``GatewayError`` into the failure JSON body in a single exception handler,
so pipeline code only has to raise.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors that terminate a request before execution."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(GatewayError):
    """The request body is not valid JSON of the expected shape."""

    status_code = 400


class PermissionDenied(GatewayError):
    """The request supplied a field the route does not allow."""

    status_code = 403

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} param is not allowed")
        self.field = field


class RouteNotFound(GatewayError):
    status_code = 404

    def __init__(self, path: str) -> None:
        super().__init__("handler not found")
        self.path = path


class MethodNotAllowed(GatewayError):
    status_code = 405

    def __init__(self, method: str) -> None:
        super().__init__("invalid request method")
        self.method = method


class InternalConfigMissing(GatewayError):
    """No route table is attached to the application."""

    status_code = 500

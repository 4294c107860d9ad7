"""Command gateway module for cmdgate.

Turns HTTP requests on configured paths into external process runs:
authorizes request overrides against a route's allow-list, merges them
into the route's command template, executes the result and reports it
inline or to a callback URL.

Public API:
    create_app -- FastAPI application factory
    CommandExecutor -- Runs an EffectiveCommand
    CallbackDispatcher -- Background execution and webhook delivery
"""

from cmdgate.gateway.authorizer import authorize, parse_request_param
from cmdgate.gateway.dispatcher import CallbackDispatcher
from cmdgate.gateway.errors import (
    BadRequest,
    GatewayError,
    InternalConfigMissing,
    MethodNotAllowed,
    PermissionDenied,
    RouteNotFound,
)
from cmdgate.gateway.executor import CommandExecutor
from cmdgate.gateway.merger import merge
from cmdgate.gateway.server import create_app

__all__ = [
    "BadRequest",
    "CallbackDispatcher",
    "CommandExecutor",
    "GatewayError",
    "InternalConfigMissing",
    "MethodNotAllowed",
    "PermissionDenied",
    "RouteNotFound",
    "authorize",
    "create_app",
    "merge",
    "parse_request_param",
]

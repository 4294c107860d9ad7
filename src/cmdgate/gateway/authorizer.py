"""Request body parsing and allow-list enforcement."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from cmdgate.domain.models import CommandSpec, ParamField, RequestParam
from cmdgate.gateway.errors import BadRequest, PermissionDenied

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def parse_request_param(body: bytes) -> RequestParam:
    """Decode a raw request body into a RequestParam.

    An empty body, whitespace only, or a JSON ``null`` are all equivalent
    to a request with no overrides. Anything else must be a JSON object
    matching the RequestParam shape.

    Raises:
        BadRequest: If the body is not valid JSON or has the wrong shape.
    """
    if not body.strip():
        return RequestParam()
    try:
        # Only the first JSON value counts; trailing data is ignored
        data, _ = _decoder.raw_decode(body.decode("utf-8").lstrip())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequest(f"invalid JSON body: {e}") from e
    if data is None:
        return RequestParam()
    if not isinstance(data, dict):
        raise BadRequest(f"invalid JSON body: expected an object, got {type(data).__name__}")
    try:
        return RequestParam.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise BadRequest(f"invalid JSON body: {errors}") from e


def authorize(spec: CommandSpec, param: RequestParam) -> None:
    """Check request overrides against the route's allow-list.

    Fields are checked in ParamField declaration order and the first
    disallowed non-empty field aborts the check.

    Raises:
        PermissionDenied: Naming the first offending field.
    """
    for field in ParamField:
        if param.supplies(field) and not spec.is_allowed(field):
            logger.debug(
                "Rejected %s: allow-list is %s",
                field.value, sorted(f.value for f in spec.allow),
            )
            raise PermissionDenied(field.value)

"""Domain models for cmdgate.

This package contains the data structures passed between the gateway
stages. All models use Pydantic v2 for validation and serialization.
"""

from cmdgate.domain.models import (
    CallbackAck,
    CommandSpec,
    EffectiveCommand,
    ExecutionOutcome,
    ParamField,
    RequestContext,
    RequestParam,
    Result,
)

__all__ = [
    "CallbackAck",
    "CommandSpec",
    "EffectiveCommand",
    "ExecutionOutcome",
    "ParamField",
    "RequestContext",
    "RequestParam",
    "Result",
]

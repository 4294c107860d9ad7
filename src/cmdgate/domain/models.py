"""Core domain models for the cmdgate system.

These models represent the data flowing through one gateway invocation:
the route-bound command template loaded at startup, the per-request
overrides sent by the caller, the merged command that actually runs, and
the result or acknowledgement sent back.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ParamField(str, enum.Enum):
    """Request fields a route may whitelist in its allow-list.

    Declaration order is the order in which the authorizer checks them.
    """

    ARGS = "args"
    ENVS = "envs"
    STDIN = "stdin"
    DIR = "dir"
    CALLBACK = "callback"


# ---------------------------------------------------------------------------
# Route / Request Models
# ---------------------------------------------------------------------------


class CommandSpec(BaseModel):
    """Startup-defined template for one invocable route.

    Loaded once from the route file and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(min_length=1, description="Program name or path to execute")
    args: tuple[str, ...] = Field(default=(), description="Default arguments, in order")
    envs: tuple[str, ...] = Field(
        default=(), description="Default environment as ordered KEY=VAL strings"
    )
    dir: str = Field(default="", description="Default working directory")
    stdin: str = Field(default="", description="Default standard input")
    allow: frozenset[ParamField] = Field(
        default=frozenset(), description="Request fields callers may supply"
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # YAML keys written without a value load as None
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def is_allowed(self, field: ParamField) -> bool:
        return field in self.allow


class RequestParam(BaseModel):
    """Per-request JSON payload optionally overriding or extending a CommandSpec.

    Every field is optional. An empty string or list means the same as
    the field being absent.
    """

    model_config = ConfigDict(frozen=True)

    args: list[str] = Field(default_factory=list)
    envs: list[str] = Field(default_factory=list)
    stdin: str = Field(default="")
    dir: str = Field(default="")
    callback: str = Field(default="", description="URL to POST the result to")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def supplies(self, field: ParamField) -> bool:
        """Whether the caller supplied a non-empty value for ``field``."""
        return bool(getattr(self, field.value))


class EffectiveCommand(BaseModel):
    """Merged, execution-ready command for a single invocation."""

    model_config = ConfigDict(frozen=True)

    command: str
    args: tuple[str, ...] = ()
    envs: tuple[str, ...] = ()
    dir: str = ""
    stdin: str = ""

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


# ---------------------------------------------------------------------------
# Execution / Response Models
# ---------------------------------------------------------------------------


class ExecutionOutcome(BaseModel):
    """What the executor observed: combined output plus an error message.

    ``error`` is empty when the process started and exited with status 0.
    """

    model_config = ConfigDict(frozen=True)

    output: str = ""
    error: str = ""
    exit_code: int | None = Field(
        default=None, description="Process exit code, None if it never started"
    )

    @property
    def succeeded(self) -> bool:
        return not self.error


class Result(BaseModel):
    """The JSON body describing one handled request."""

    request_id: str
    output: str = ""
    error: str = ""
    status: int


class CallbackAck(BaseModel):
    """Immediate acknowledgement returned in callback mode."""

    request_id: str
    url: str


class RequestContext(BaseModel):
    """Request-scoped values resolved once at the top of the pipeline."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    method: str
    path: str
    remote_addr: str = ""
    user_agent: str = ""

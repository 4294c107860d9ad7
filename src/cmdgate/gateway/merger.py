"""Combine a route's CommandSpec with request overrides."""

from __future__ import annotations

from cmdgate.domain.models import CommandSpec, EffectiveCommand, RequestParam


def merge(spec: CommandSpec, param: RequestParam) -> EffectiveCommand:
    """Build the EffectiveCommand for one invocation.

    Request args and envs are appended after the route defaults. A
    non-empty request dir or stdin replaces the default. Duplicate env
    names are kept as-is here; the executor decides how they apply.

    Callers must run ``authorize`` first.
    """
    return EffectiveCommand(
        command=spec.command,
        args=(*spec.args, *param.args),
        envs=(*spec.envs, *param.envs),
        dir=param.dir or spec.dir,
        stdin=param.stdin or spec.stdin,
    )

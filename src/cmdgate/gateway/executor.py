"""External process execution for the gateway.

Spawns one process per EffectiveCommand using asyncio subprocesses so
that waiting on a long-running command only occupies the awaiting task,
never the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import signal

from cmdgate.domain.models import EffectiveCommand, ExecutionOutcome

logger = logging.getLogger(__name__)


def build_environment(envs: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Turn ordered ``KEY=VAL`` strings into a process environment.

    Entries are applied in order, so a repeated name takes the value of
    its last occurrence. Entries without ``=`` are skipped.
    """
    env: dict[str, str] = {}
    for entry in envs:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            logger.warning("Ignoring malformed env entry %r (expected KEY=VAL)", entry)
            continue
        env.pop(key, None)
        env[key] = value
    return env


def describe_exit(returncode: int) -> str:
    """Error text for a finished process, empty for a clean exit."""
    if returncode == 0:
        return ""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal: {name}"
    return f"exit status {returncode}"


class CommandExecutor:
    """Runs EffectiveCommands and captures their combined output.

    The child environment is exactly the command's ``envs``; nothing is
    inherited from the gateway process. The program name itself is looked
    up on the gateway's own ``PATH`` (or ``search_path`` if given).

    Standard output and standard error share one pipe, so their
    interleaving is whatever the OS delivers for a single pipe.
    """

    def __init__(self, search_path: str | None = None) -> None:
        self._search_path = search_path

    async def run(self, command: EffectiveCommand) -> ExecutionOutcome:
        """Execute ``command`` and wait for it to finish.

        Never raises for process-level problems: start failures and
        non-zero exits are both reported through ``ExecutionOutcome.error``.
        """
        program = self._resolve(command.command)
        if program is None:
            error = f'exec: "{command.command}": executable file not found in $PATH'
            logger.info("Cannot start %s: %s", command.command, error)
            return ExecutionOutcome(error=error)

        stdin_data = command.stdin.encode() if command.stdin else None
        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *command.args,
                stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=command.dir or None,
                env=build_environment(command.envs),
            )
        except OSError as e:
            logger.info("Failed to start %s: %s", command.command, e)
            return ExecutionOutcome(error=_start_error(command, e))
        except ValueError as e:
            # Raised for NUL bytes in argv, env or cwd
            logger.info("Failed to start %s: %s", command.command, e)
            return ExecutionOutcome(error=f'exec: "{command.command}": invalid argument')

        logger.debug("Started %s (pid=%d)", command.argv, process.pid)
        # communicate() tolerates a child that exits without reading stdin
        output, _ = await process.communicate(input=stdin_data)
        returncode = process.returncode
        error = describe_exit(returncode)
        if error:
            logger.debug("%s finished with %s", command.command, error)
        return ExecutionOutcome(
            output=output.decode("utf-8", errors="replace"),
            error=error,
            exit_code=returncode,
        )

    def _resolve(self, name: str) -> str | None:
        if os.sep in name:
            return name
        path = self._search_path if self._search_path is not None else os.environ.get("PATH", os.defpath)
        return shutil.which(name, path=path)


def _start_error(command: EffectiveCommand, exc: OSError) -> str:
    if isinstance(exc, FileNotFoundError) and command.dir and not os.path.isdir(command.dir):
        return f"chdir {command.dir}: no such file or directory"
    return f'exec: "{command.command}": {exc.strerror or exc}'

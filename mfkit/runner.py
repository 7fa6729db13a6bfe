"""Run a child process with configurable standard streams and track its state."""

from __future__ import annotations

import datetime
import enum
import os
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

from mfkit.choices import (
    InputChoice,
    OutputChoice,
    input_from_console,
    output_to_console,
)

Timeout = Union[float, int, datetime.timedelta, None]


class CommandStateError(RuntimeError):
    """Raised when a runner is asked for something its current state cannot do."""


@dataclass
class CommandCall:
    """Everything needed to start a child process."""

    executable: str | os.PathLike[str]
    arguments: list[str] = field(default_factory=list)
    working_directory: str | os.PathLike[str] = ""
    stdout_choice: OutputChoice = field(default_factory=output_to_console)
    stderr_choice: OutputChoice = field(default_factory=output_to_console)
    stdin_choice: InputChoice = field(default_factory=input_from_console)


@dataclass(frozen=True)
class CommandOver:
    """Outcome of a terminated child process."""

    exit_code: int

    def has_succeeded(self) -> bool:
        """Return True when the child exited with status 0."""
        return self.exit_code == 0


class _State(enum.Enum):
    NOT_STARTED = "not started"
    RUNNING = "running"
    OVER = "over"


def _unquote(argument: str) -> str:
    if len(argument) >= 2 and argument[0] == '"' and argument[-1] == '"':
        return argument[1:-1]
    return argument


def _to_seconds(timeout: Timeout) -> float | None:
    if timeout is None:
        return None
    if isinstance(timeout, datetime.timedelta):
        seconds = timeout.total_seconds()
    else:
        seconds = float(timeout)
    if seconds < 0:
        raise ValueError(f"Timeout cannot be negative: {timeout}.")
    return None if seconds == 0 else seconds


class CommandRunner:
    """Controls one child process through its not-started, running and over states."""

    def __init__(self, call: CommandCall) -> None:
        self._call = call
        self._argv = [os.fspath(call.executable), *(_unquote(arg) for arg in call.arguments)]
        self._state = _State.NOT_STARTED
        self._process: subprocess.Popen[bytes] | None = None
        self._over: CommandOver | None = None

    def _unexpected(self, name: str) -> CommandStateError:
        return CommandStateError(
            f"Unexpected call to {name} while the command is {self._state.value}."
        )

    def _choices(self) -> Iterator[InputChoice | OutputChoice]:
        seen: set[int] = set()
        for choice in (
            self._call.stdin_choice,
            self._call.stdout_choice,
            self._call.stderr_choice,
        ):
            if id(choice) not in seen:
                seen.add(id(choice))
                yield choice

    def start(self) -> CommandRunner:
        """Start the child process and return this runner."""
        if self._state is not _State.NOT_STARTED:
            raise self._unexpected("start")
        for choice in self._choices():
            choice.before_start()
        cwd = os.fspath(self._call.working_directory) or None
        self._process = subprocess.Popen(
            self._argv,
            stdin=self._call.stdin_choice.stdin_source(),
            stdout=self._call.stdout_choice.stdout_target(),
            stderr=self._call.stderr_choice.stderr_target(),
            cwd=cwd,
        )
        self._state = _State.RUNNING
        for choice in self._choices():
            choice.after_start()
        return self

    def _finish(self) -> None:
        assert self._process is not None
        self._state = _State.OVER
        for choice in self._choices():
            choice.after_stop()
        code = self._process.returncode
        self._over = CommandOver(code if code >= 0 else -code)

    def kill(self) -> CommandRunner:
        """Kill the child with SIGKILL and return once it has terminated."""
        if self._state is not _State.RUNNING:
            raise self._unexpected("kill")
        assert self._process is not None
        self._process.kill()
        self._process.wait()
        self._finish()
        return self

    def is_running(self) -> bool:
        """Return True if the child has been started and has not finished yet."""
        if self._state is not _State.RUNNING:
            return False
        assert self._process is not None
        return self._process.poll() is None

    def is_done(self) -> bool:
        """Return True if the child has been started and has finished."""
        if self._state is _State.OVER:
            return True
        if self._state is _State.RUNNING:
            return not self.is_running()
        return False

    def wait_for(self, timeout: Timeout) -> bool:
        """Wait up to ``timeout`` (seconds or timedelta; 0 means forever).

        Return True once the child has finished, False if it is still running.
        """
        if self._state is not _State.RUNNING:
            raise self._unexpected("wait_for")
        assert self._process is not None
        try:
            self._process.wait(_to_seconds(timeout))
        except subprocess.TimeoutExpired:
            return False
        self._finish()
        return True

    def wait(self) -> None:
        """Block until the child finishes."""
        self.wait_for(0)

    def command_over(self) -> CommandOver:
        """Return the outcome of the finished child."""
        if self._state is not _State.OVER or self._over is None:
            raise self._unexpected("command_over")
        return self._over

    def handle(self) -> int:
        """Return the child's process id, or -1 if it has not been started."""
        return -1 if self._process is None else self._process.pid


def run_command_async(call: CommandCall) -> CommandRunner:
    """Prepare a runner for ``call`` without starting it."""
    return CommandRunner(call)


def run_command_and_wait(call: CommandCall) -> CommandOver:
    """Start ``call``, wait for it to finish and return its outcome."""
    runner = run_command_async(call)
    runner.start().wait()
    return runner.command_over()
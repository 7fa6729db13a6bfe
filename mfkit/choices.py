"""Where a child process reads its standard input and writes its outputs."""

from __future__ import annotations

import abc
import enum
import io
import os
import threading
from typing import IO, Any

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2

_CHUNK_SIZE = 4096
_FILE_MODE = 0o666


class _Stage(enum.Enum):
    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"


def _close_fd(fd: int | None) -> None:
    if fd is not None and fd >= 0:
        os.close(fd)


def _require_open(fd: int | None, what: str) -> int:
    if fd is None:
        raise ValueError(f"The {what} has already been closed.")
    return fd


class OutputChoice(abc.ABC):
    """Destination of a child's standard output or standard error."""

    _stage: _Stage = _Stage.CREATED

    def before_start(self) -> None:
        """Called right before the child is started."""
        self._stage = _Stage.STARTING

    def after_start(self) -> None:
        """Called right after the child is started."""
        self._stage = _Stage.RUNNING

    def after_stop(self) -> None:
        """Called once the child has terminated."""
        self._stage = _Stage.STOPPED

    @abc.abstractmethod
    def stdout_target(self) -> int:
        """Return the file descriptor the child writes its standard output to."""

    def stderr_target(self) -> int:
        """Return the file descriptor the child writes its standard error to."""
        return self.stdout_target()


class InputChoice(abc.ABC):
    """Source of a child's standard input."""

    _stage: _Stage = _Stage.CREATED

    def before_start(self) -> None:
        """Called right before the child is started."""
        self._stage = _Stage.STARTING

    def after_start(self) -> None:
        """Called right after the child is started."""
        self._stage = _Stage.RUNNING

    def after_stop(self) -> None:
        """Called once the child has terminated."""
        self._stage = _Stage.STOPPED

    @abc.abstractmethod
    def stdin_source(self) -> int:
        """Return the file descriptor the child reads its standard input from."""


class _ConsoleOutput(OutputChoice):
    def stdout_target(self) -> int:
        return STDOUT_FILENO

    def stderr_target(self) -> int:
        return STDERR_FILENO


class _FdOutput(OutputChoice):
    """Output written straight to a file descriptor owned by this choice."""

    def __init__(self, fd: int) -> None:
        self._fd: int | None = fd

    def after_stop(self) -> None:
        super().after_stop()
        self._release()

    def stdout_target(self) -> int:
        return _require_open(self._fd, "output file")

    def _release(self) -> None:
        fd, self._fd = getattr(self, "_fd", None), None
        _close_fd(fd)

    def __del__(self) -> None:
        self._release()


class _StreamOutput(OutputChoice):
    """Output collected through a pipe and appended to a Python stream."""

    def __init__(self, stream: IO[Any]) -> None:
        self._stream = stream
        self._read_fd: int | None
        self._write_fd: int | None
        self._read_fd, self._write_fd = os.pipe()
        self._chunks: list[bytes] = []
        self._error: OSError | None = None
        self._reader: threading.Thread | None = None

    def _drain(self, fd: int) -> None:
        try:
            while chunk := os.read(fd, _CHUNK_SIZE):
                self._chunks.append(chunk)
        except OSError as exc:
            self._error = exc

    def after_start(self) -> None:
        super().after_start()
        write_fd, self._write_fd = self._write_fd, None
        _close_fd(write_fd)
        read_fd = _require_open(self._read_fd, "output pipe")
        self._reader = threading.Thread(target=self._drain, args=(read_fd,), daemon=True)
        self._reader.start()

    def after_stop(self) -> None:
        super().after_stop()
        if self._reader is None:
            write_fd, self._write_fd = self._write_fd, None
            _close_fd(write_fd)
            if self._read_fd is not None:
                self._drain(self._read_fd)
        else:
            self._reader.join()
            self._reader = None
        read_fd, self._read_fd = self._read_fd, None
        _close_fd(read_fd)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        data = b"".join(self._chunks)
        self._chunks.clear()
        if isinstance(self._stream, io.TextIOBase):
            self._stream.write(data.decode("utf-8", errors="replace"))
        else:
            self._stream.write(data)

    def stdout_target(self) -> int:
        return _require_open(self._write_fd, "output pipe")

    def __del__(self) -> None:
        reader = getattr(self, "_reader", None)
        if reader is not None:
            reader.join()
        for name in ("_read_fd", "_write_fd"):
            fd = getattr(self, name, None)
            setattr(self, name, None)
            _close_fd(fd)


class _ConsoleInput(InputChoice):
    def stdin_source(self) -> int:
        return STDIN_FILENO


class _FileInput(InputChoice):
    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._fd: int | None = os.open(filename, os.O_RDONLY)

    def after_stop(self) -> None:
        super().after_stop()
        self._release()

    def stdin_source(self) -> int:
        return _require_open(self._fd, "input file")

    def _release(self) -> None:
        fd, self._fd = getattr(self, "_fd", None), None
        _close_fd(fd)

    def __del__(self) -> None:
        self._release()


class _StreamInput(InputChoice):
    """Input fed to the child through a pipe from a Python stream."""

    def __init__(self, stream: IO[Any]) -> None:
        self._stream = stream
        self._read_fd: int | None
        self._write_fd: int | None
        self._read_fd, self._write_fd = os.pipe()
        self._writer: threading.Thread | None = None
        self._error: OSError | None = None

    def _feed(self, fd: int, data: bytes) -> None:
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view[:_CHUNK_SIZE])
                view = view[written:]
        except BrokenPipeError:
            pass
        except OSError as exc:
            self._error = exc
        finally:
            os.close(fd)

    def after_start(self) -> None:
        super().after_start()
        read_fd, self._read_fd = self._read_fd, None
        _close_fd(read_fd)
        content = self._stream.read()
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        write_fd = _require_open(self._write_fd, "input pipe")
        self._write_fd = None
        self._writer = threading.Thread(target=self._feed, args=(write_fd, data), daemon=True)
        self._writer.start()

    def after_stop(self) -> None:
        super().after_stop()
        if self._writer is not None:
            self._writer.join()
            self._writer = None
        for name in ("_read_fd", "_write_fd"):
            fd = getattr(self, name)
            setattr(self, name, None)
            _close_fd(fd)
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def stdin_source(self) -> int:
        return _require_open(self._read_fd, "input pipe")

    def __del__(self) -> None:
        writer = getattr(self, "_writer", None)
        if writer is not None:
            writer.join()
        for name in ("_read_fd", "_write_fd"):
            fd = getattr(self, name, None)
            setattr(self, name, None)
            _close_fd(fd)


def output_to_file(filename: str | os.PathLike[str]) -> OutputChoice:
    """Write the child's output into a file, creating it if needed."""
    return _FdOutput(os.open(filename, os.O_WRONLY | os.O_CREAT, _FILE_MODE))


def output_to_stream(stream: IO[Any]) -> OutputChoice:
    """Collect the child's output and append it to a text or binary stream."""
    return _StreamOutput(stream)


def output_to_console() -> OutputChoice:
    """Let the child write to this process's own standard output and error."""
    return _ConsoleOutput()


def output_ignored() -> OutputChoice:
    """Discard the child's output."""
    return _FdOutput(os.open(os.devnull, os.O_WRONLY))


def input_from_file(filename: str | os.PathLike[str]) -> InputChoice:
    """Feed the child with the content of an existing file."""
    return _FileInput(filename)


def input_from_string(string: str | bytes) -> InputChoice:
    """Feed the child with the given text."""
    stream: IO[Any] = io.BytesIO(string) if isinstance(string, bytes) else io.StringIO(string)
    return _StreamInput(stream)


def input_from_stream(stream: IO[Any]) -> InputChoice:
    """Feed the child with what remains to be read from a text or binary stream."""
    return _StreamInput(stream)


def input_from_console() -> InputChoice:
    """Let the child read this process's own standard input."""
    return _ConsoleInput()


def input_empty() -> InputChoice:
    """Give the child an input that is immediately at its end."""
    return input_from_string("")
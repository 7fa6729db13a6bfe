import io
import os
import subprocess
import sys

import pytest

from mfkit.choices import (
    input_empty,
    input_from_console,
    input_from_file,
    input_from_stream,
    input_from_string,
    output_ignored,
    output_to_console,
    output_to_file,
    output_to_stream,
)

HELLO_WORLD = "Hello, World!"

ECHO_STDIN = "import sys; sys.stdout.write(sys.stdin.read())"
FIRST_WORD_LENGTH = "import sys; data = sys.stdin.read().split(); sys.exit(len(data[0]) if data else 0)"
ONE_FOR_EACH_STREAM = (
    "import sys\n"
    "line = sys.stdin.readline()\n"
    "sys.stdout.write(line + '\\n')\n"
    "for i, arg in enumerate(sys.argv[1:], 1):\n"
    "    sys.stderr.write(f'{i}: {arg}\\n')\n"
    "sys.exit(len(sys.argv))\n"
)


def _run(code, stdin=None, stdout=None, stderr=None, args=()):
    stdin = stdin if stdin is not None else input_empty()
    stdout = stdout if stdout is not None else output_ignored()
    stderr = stderr if stderr is not None else output_ignored()
    choices = (stdin, stdout, stderr)
    for choice in choices:
        choice.before_start()
    proc = subprocess.Popen(
        [sys.executable, "-c", code, *args],
        stdin=stdin.stdin_source(),
        stdout=stdout.stdout_target(),
        stderr=stderr.stderr_target(),
    )
    for choice in choices:
        choice.after_start()
    code = proc.wait()
    for choice in choices:
        choice.after_stop()
    return code


def test_console_output_targets_standard_descriptors():
    choice = output_to_console()
    assert choice.stdout_target() == 1
    assert choice.stderr_target() == 2


def test_console_input_source_is_standard_input():
    assert input_from_console().stdin_source() == 0


def test_output_to_text_stream():
    stream = io.StringIO()
    assert _run(f"import sys; sys.stdout.write({HELLO_WORLD!r})", stdout=output_to_stream(stream)) == 0
    assert stream.getvalue() == HELLO_WORLD


def test_output_to_binary_stream():
    stream = io.BytesIO()
    _run(f"import sys; sys.stdout.write({HELLO_WORLD!r})", stdout=output_to_stream(stream))
    assert stream.getvalue() == HELLO_WORLD.encode()


def test_outputs_are_kept_apart():
    out_stream = io.StringIO()
    out_stream.write("1")
    err_stream = io.StringIO()
    err_stream.write("2")
    code = _run(
        f"import sys; sys.stderr.write({HELLO_WORLD!r})",
        stdout=output_to_stream(out_stream),
        stderr=output_to_stream(err_stream),
    )
    assert code == 0
    assert out_stream.getvalue() == "1"
    assert err_stream.getvalue() == "2" + HELLO_WORLD


def test_large_output_does_not_block():
    stream = io.StringIO()
    size = 200_000
    _run(f"import sys; sys.stdout.write('a' * {size})", stdout=output_to_stream(stream))
    assert stream.getvalue() == "a" * size


def test_stream_output_closed_after_stop():
    choice = output_to_stream(io.StringIO())
    _run("pass", stdout=choice)
    with pytest.raises(ValueError):
        choice.stdout_target()


def test_stream_output_stderr_defaults_to_stdout():
    choice = output_to_stream(io.StringIO())
    assert choice.stderr_target() == choice.stdout_target()
    choice.after_stop()


def test_output_to_file(tmp_path):
    path = tmp_path / "hello.txt"
    choice = output_to_file(path)
    assert _run(f"import sys; sys.stdout.write({HELLO_WORLD!r})", stdout=choice) == 0
    assert path.read_text() == HELLO_WORLD
    with pytest.raises(ValueError):
        choice.stdout_target()


def test_output_to_file_in_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        output_to_file(tmp_path / "missing" / "out.txt")


def test_output_ignored_targets_null_device():
    choice = output_ignored()
    target = choice.stdout_target()
    assert os.fstat(target).st_rdev == os.stat(os.devnull).st_rdev
    assert choice.stderr_target() == target
    assert _run("print('discarded')", stdout=choice) == 0


def test_input_from_string_first_word_length():
    assert _run(FIRST_WORD_LENGTH, stdin=input_from_string("abcde\nfghij\n")) == 5


def test_input_from_string_is_passed_whole():
    stream = io.StringIO()
    _run(ECHO_STDIN, stdin=input_from_string("abcde\nfghij\n"), stdout=output_to_stream(stream))
    assert stream.getvalue() == "abcde\nfghij\n"


def test_input_from_bytes():
    stream = io.BytesIO()
    _run(ECHO_STDIN, stdin=input_from_string(b"raw bytes"), stdout=output_to_stream(stream))
    assert stream.getvalue() == b"raw bytes"


def test_input_from_stream():
    source = io.StringIO()
    source.write("abcde\n")
    source.write("fghij\n")
    source.seek(0)
    assert _run(FIRST_WORD_LENGTH, stdin=input_from_stream(source)) == 5


def test_input_empty_does_not_block():
    stream = io.StringIO()
    assert _run(ECHO_STDIN, stdin=input_empty(), stdout=output_to_stream(stream)) == 0
    assert stream.getvalue() == ""


def test_input_from_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("first line\nsecond line\n")
    stream = io.StringIO()
    choice = input_from_file(path)
    _run(ECHO_STDIN, stdin=choice, stdout=output_to_stream(stream))
    assert stream.getvalue() == "first line\nsecond line\n"
    with pytest.raises(ValueError):
        choice.stdin_source()


def test_input_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        input_from_file(tmp_path / "absent.txt")


def test_one_for_each_stream():
    args = ("one1", "two222")
    input_arg = "input0123"
    out_stream = io.StringIO()
    err_stream = io.StringIO()
    code = _run(
        ONE_FOR_EACH_STREAM,
        stdin=input_from_string(input_arg),
        stdout=output_to_stream(out_stream),
        stderr=output_to_stream(err_stream),
        args=args,
    )
    assert code == 3
    assert out_stream.getvalue() == input_arg + "\n"
    assert err_stream.getvalue() == f"1: {args[0]}\n2: {args[1]}\n"


def test_stream_input_closed_after_stop():
    choice = input_from_string("abc")
    _run(ECHO_STDIN, stdin=choice)
    with pytest.raises(ValueError):
        choice.stdin_source()
# mfkit

A small toolbox of three independent parts:

- `mfkit.bytes`: fixed-size byte buffers with typed, bounds-checked access,
  plus byte swapping and endianness conversion.
- `mfkit.ctime`: thin helpers in the spirit of the C time functions
  (`time_now`, `difftime`, `localtime`, `gmtime`, `mktime`, `strftime`,
  `strptime`, ...).
- `mfkit.choices` and `mfkit.runner`: start a child program and choose where
  its standard input, output and error come from or go to.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

## Byte buffers

```python
from mfkit.bytes import (
    Endianness, convert, make_buffer_with_size, swap_buffer, swap_bytes,
)

buf = make_buffer_with_size(8)  # zero-filled, owns its memory
buf.set_at(0, 0x1234, "H")      # items use struct format codes
buf.get_at(0, "H")              # 0x1234
buf.get_at(100, "B")            # raises IndexError
len(buf)                        # 8

swap_bytes(0x1234, 2)           # 0x3412; width must be 1, 2, 4 or 8
convert(0x1234, 2, Endianness.LITTLE, Endianness.BIG)   # 0x3412
reversed_buf = swap_buffer(buf) # new buffer with the bytes in reverse order
```

`make_buffer(data, size)` wraps the first `size` bytes of an existing
writable buffer (such as a `bytearray`) without copying; passing `None`
raises `ValueError`. `Buffer.get()` returns the underlying `memoryview` and
`Buffer.cast(fmt)` views it as items of a struct format.
`current_endianness()` returns the machine's byte order and
`network_endianness()` returns `Endianness.BIG`. `convert_buffer` returns the
same buffer when both byte orders match, and a reversed copy otherwise.

## Time helpers

```python
from mfkit.ctime import gmtime, gmtime_reversed, localtime, strftime, strptime, time_now

now = localtime()               # defaults to the current time
text = strftime(now)            # "%c" by default
parsed = strptime(text)         # raises ValueError when the text does not match
gmtime_reversed(gmtime(1000))   # 1000
```

`strftime` returns an empty string when the formatted result is longer than
25 characters. `mktime` and `localtime_reversed` read a `struct_time` as local
time; `gmtime_reversed` reads it as UTC.

## Running commands

```python
import io
from mfkit.choices import input_from_string, output_to_stream
from mfkit.runner import CommandCall, run_command_and_wait

out = io.StringIO()
call = CommandCall(
    executable="cat",
    stdin_choice=input_from_string("hello"),
    stdout_choice=output_to_stream(out),
)
result = run_command_and_wait(call)
result.has_succeeded()          # True
result.exit_code                # 0
out.getvalue()                  # "hello"
```

Input choices: `input_from_console()` (the default), `input_from_string`,
`input_from_stream`, `input_from_file` and `input_empty()`.
Output choices: `output_to_console()` (the default), `output_to_stream`,
`output_to_file` and `output_ignored()`. Output collected with
`output_to_stream` is written to the stream once the child has finished; text
streams receive it decoded as UTF-8.

An argument wrapped in double quotes, such as `'"a"'`, is passed to the child
without them. An empty `working_directory` keeps the current one.

For finer control, `run_command_async(call)` returns a `CommandRunner` that is
not yet started, with `start()`, `wait()`, `wait_for(timeout)`, `kill()`,
`is_running()`, `is_done()`, `command_over()` and `handle()`. `wait_for`
takes seconds or a `timedelta`; a timeout of 0 waits until the child ends.
`kill()` sends SIGKILL; the exit code of a child ended by a signal is the
signal number. `handle()` is the child's process id, or -1 before it starts.
Calling a method in the wrong state raises `CommandStateError`.

## Tests

```
pip install .[test]
pytest
```
# composetools

Small, dependency-free building blocks for tools that drive groups of
containers.

## What is in the package

- **Progress events** (`composetools.events`, `composetools.spinner`):
  `Event` with an `EventStatus` (`WORKING`, `DONE`, `ERROR`), factories such
  as `creating_event`, `started_event`, `stopping_event`, `removed_event` or
  `error_message_event`, and a `Spinner` that animates a working line.
- **Progress writers** (`composetools.writers`): `TtyWriter` redraws an
  animated, colourised block of progress lines every 100 ms on a terminal;
  `PlainWriter` prints one line per event when output is redirected;
  `NoopWriter` discards everything. `new_writer(out)` picks the terminal or
  plain writer for a stream, `with_context_writer` / `context_writer` make a
  writer current for a block of code, and `run` / `run_with_status` run a
  function while a writer draws to standard error (or a given stream).
  `line_text`, `align` and `num_done` are the line-rendering helpers.
- **Log printing** (`composetools.printer`): `LogPrinter` collects
  `ContainerEvent`s (attach, log line, exit, stop, user cancel), passes them
  to a log consumer with `register`, `status` and `log` methods, and decides
  when a run is over and which exit code it ends with, including
  cascade-stop handling.
- **Registry streams** (`composetools.registry_events`): `decode_messages`
  turns a stream of concatenated JSON objects (bytes, text or a file-like
  object) into `JSONMessage`s; `to_pull_progress_event` and
  `to_push_progress_event` turn them into progress events;
  `consume_pull_stream` follows a whole pull stream and raises `PullFailure`
  on an error message or malformed input, and `consume_push_stream` does the
  same for a push stream, raising `RuntimeError`.
- **Restart policies** (`composetools.restart_policy`): `RestartPolicy` and
  `will_container_restart` tell whether an exited container will be
  restarted.
- **Utilities**: `linewriter.LineWriter` / `get_writer` split a byte stream
  into lines, `stringutils.string_contains` tests membership,
  `prompt.User` asks selection, text, yes/no and password questions on a
  terminal or given streams, and `scan_suggest.display_scan_suggest_msg`
  prints a suggestion to scan images when a `docker-scan` CLI plugin is
  installed and the scan configuration records no opt-in.
- **End-to-end helpers** (`composetools.e2e`): `new_e2e_cli` creates an
  `E2eCLI` that runs the `docker` CLI (and `docker compose`, as a plugin or a
  standalone binary) against a fresh, isolated configuration directory, with
  polling helpers `wait_for_cmd_result` and `wait_for_condition`, and the
  functions `stdout_contains`, `lines`, `find_executable`, `copy_file`,
  `dir_contents` and `http_get_with_retry`.

## Examples

Splitting a stream of bytes into lines:

```python
from composetools.linewriter import get_writer

lines = []
writer = get_writer(lines.append)
writer.write(b"hel")
writer.write(b"lo\nworld!\n")
writer.close()
assert lines == ["hello", "world!"]
```

Building progress events:

```python
from composetools.events import EventStatus, removing_event, removed_event

event = removing_event("Container web-1")
assert event.status_text == "Removing"
assert removed_event("Container web-1").status is EventStatus.DONE
```

Collecting container events with cascade stop:

```python
from composetools.printer import ContainerEvent, ContainerEventType, LogPrinter

class Consumer:
    def register(self, container): print("attached", container)
    def status(self, container, message): print(container, message)
    def log(self, container, service, line): print(container, "|", line)

printer = LogPrinter(Consumer())
printer.handle_event(ContainerEvent(ContainerEventType.ATTACH, container="web-1", service="web"))
printer.handle_event(
    ContainerEvent(ContainerEventType.EXIT, container="web-1", service="web", exit_code=3)
)
assert printer.run(cascade_stop=True, exit_code_from="", stop_fn=lambda: None) == 3
```

Deciding whether a container restarts:

```python
from composetools.restart_policy import RestartPolicy, will_container_restart

policy = RestartPolicy(name="on-failure", maximum_retry_count=3)
assert will_container_restart(policy, exit_code=1, restarted=0)
assert not will_container_restart(policy, exit_code=0, restarted=0)
```

## What it does not do

The package has no command-line program and no client for a container
engine. It does not create, start, stop, pull or push containers or images
itself: the pull and push helpers only decode progress streams that the
caller obtained, and `LogPrinter` only reacts to events the caller feeds it.
The end-to-end helpers run an already installed `docker` CLI as a
subprocess.

## Requirements

Python 3.10 or later. The package uses only the standard library; the tests
use pytest (`pip install composetools[test]`).
"""Helpers for end to end tests that drive the docker CLI."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
import time
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

PLUGIN_NAME = "compose"

_EXE_SUFFIX = ".exe" if sys.platform == "win32" else ""
DOCKER_EXECUTABLE_NAME = "docker" + _EXE_SUFFIX
DOCKER_COMPOSE_EXECUTABLE_NAME = "docker-" + PLUGIN_NAME + _EXE_SUFFIX
DOCKER_SCAN_EXECUTABLE_NAME = "docker-scan" + _EXE_SUFFIX

COMPOSE_STANDALONE_MODE = os.environ.get("COMPOSE_E2E_STANDALONE", "") in ("1", "true")

_PLUGIN_SEARCH_PATHS = ("../../bin", "../../../bin")

Result = subprocess.CompletedProcess


@dataclass
class _Cmd:
    command: list[str]
    env: dict[str, str] = field(default_factory=dict)


def _combined(result: Result) -> str:
    return (result.stdout or "") + (result.stderr or "")


def _execute(cmd: _Cmd) -> Result:
    return subprocess.run(
        cmd.command, env=cmd.env, capture_output=True, text=True, check=False
    )


def _poll(check: Callable[[], tuple[bool, str]], timeout: float, delay: float) -> None:
    deadline = time.monotonic() + timeout
    while True:
        done, message = check()
        if done:
            return
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError(f"timeout hit after {timeout}s: {message}")
        time.sleep(min(delay, remaining))


@dataclass
class E2eCLI:
    """Runs docker and compose commands against an isolated config directory."""

    bin_dir: str
    config_dir: str
    name: str = ""
    standalone: bool = COMPOSE_STANDALONE_MODE

    def __enter__(self) -> E2eCLI:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            config = os.path.join(self.config_dir, "config.json")
            try:
                with open(config, encoding="utf-8") as handle:
                    content = handle.read()
            except OSError:
                content = ""
            print(f"Config: {content}", file=sys.stderr)
            print("Contents of config dir:", file=sys.stderr)
            for path in dir_contents(self.config_dir):
                print(path, file=sys.stderr)
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the configuration directory."""
        shutil.rmtree(self.config_dir, ignore_errors=True)

    def new_cmd(self, command: str, *args: str) -> _Cmd:
        """Build a command that runs with the test environment."""
        env = dict(os.environ)
        env["DOCKER_CONFIG"] = self.config_dir
        env["KUBECONFIG"] = "invalid"
        return _Cmd(command=[command, *args], env=env)

    def metrics_socket(self) -> str:
        """Path where test metrics are sent."""
        return os.path.join(self.config_dir, "docker-cli.sock")

    def new_docker_cmd(self, *args: str) -> _Cmd:
        return self.new_cmd(DOCKER_EXECUTABLE_NAME, *args)

    def _log(self, text: str) -> None:
        print(f"\t[{self.name}] {text}")

    def run_docker_or_exit_error(self, *args: str) -> Result:
        """Run a docker command and return its result, whatever its exit code."""
        self._log("docker " + " ".join(args))
        return _execute(self.new_docker_cmd(*args))

    def run_cmd(self, *args: str) -> Result:
        """Run a command; raise CalledProcessError if it fails."""
        self._log(" ".join(args))
        if len(args) < 1:
            raise ValueError("require at least one command in parameters")
        result = _execute(self.new_cmd(args[0], *args[1:]))
        result.check_returncode()
        return result

    def run_docker_cmd(self, *args: str) -> Result:
        """Run a docker command; raise CalledProcessError if it fails."""
        if args and args[0] == PLUGIN_NAME:
            raise ValueError(
                "This test called 'run_docker_cmd' for 'compose'. Please prefer "
                "'run_docker_compose_cmd' to be able to test as a plugin and standalone"
            )
        result = self.run_docker_or_exit_error(*args)
        result.check_returncode()
        return result

    def run_docker_compose_cmd(self, *args: str) -> Result:
        """Run a compose command as a plugin or standalone; it must succeed."""
        if self.standalone:
            binary = find_executable(DOCKER_COMPOSE_EXECUTABLE_NAME, _PLUGIN_SEARCH_PATHS)
            result = _execute(self.new_cmd(binary, *args))
        else:
            result = _execute(self.new_cmd(DOCKER_EXECUTABLE_NAME, PLUGIN_NAME, *args))
        result.check_returncode()
        return result

    def wait_for_cmd_result(
        self,
        command: _Cmd,
        predicate: Callable[[Result], bool],
        timeout: float,
        delay: float,
    ) -> Result:
        """Run ``command`` until its result satisfies ``predicate``."""
        if timeout <= delay:
            raise ValueError("timeout must be greater than delay")
        holder: list[Result] = []

        def check() -> tuple[bool, str]:
            self._log(" ".join(command.command))
            result = _execute(command)
            holder[:] = [result]
            if not predicate(result):
                return False, f"Cmd output did not match requirement: {_combined(result)!r}"
            return True, ""

        _poll(check, timeout, delay)
        return holder[0]

    def wait_for_condition(
        self, predicate: Callable[[], tuple[bool, str]], timeout: float, delay: float
    ) -> None:
        """Call ``predicate`` until it reports success."""

        def check() -> tuple[bool, str]:
            passed, description = predicate()
            if not passed:
                return False, f"Condition not met: {description!r}"
            return True, ""

        _poll(check, timeout, delay)


def new_e2e_cli(bin_dir: str) -> E2eCLI:
    """Create a CLI wrapper with a fresh config directory and plugins installed."""
    config_dir = tempfile.mkdtemp()
    plugins = os.path.join(config_dir, "cli-plugins")
    os.makedirs(plugins, exist_ok=True)
    try:
        plugin = find_executable(DOCKER_COMPOSE_EXECUTABLE_NAME, _PLUGIN_SEARCH_PATHS)
    except FileNotFoundError:
        print("WARNING: docker-compose cli-plugin not found")
    else:
        copy_file(plugin, os.path.join(plugins, DOCKER_COMPOSE_EXECUTABLE_NAME))
        # A valid plugin binary is enough for the scan plugin.
        copy_file(plugin, os.path.join(plugins, DOCKER_SCAN_EXECUTABLE_NAME))
    return E2eCLI(bin_dir=bin_dir, config_dir=config_dir)


def dir_contents(directory: str | os.PathLike[str]) -> list[str]:
    """List ``directory`` and everything below it in lexical order."""
    root = os.fspath(directory)
    result = [root]

    def walk(path: str) -> None:
        try:
            names = sorted(os.listdir(path))
        except OSError:
            return
        for name in names:
            full = os.path.join(path, name)
            result.append(full)
            if os.path.isdir(full) and not os.path.islink(full):
                walk(full)

    walk(root)
    return result


def find_executable(executable_name: str, paths: Iterable[str]) -> str:
    """Return the absolute path of the first ``paths`` entry holding the executable."""
    for path in paths:
        candidate = os.path.abspath(os.path.join(path, executable_name))
        if os.path.exists(candidate):
            return candidate
    raise FileNotFoundError("executable not found")


def copy_file(source_file: str, destination_file: str) -> None:
    """Copy a file and make the copy executable (mode 0755)."""
    shutil.copyfile(source_file, destination_file)
    os.chmod(destination_file, 0o755)


def stdout_contains(expected: str) -> Callable[[Result], bool]:
    """Predicate on a command result expecting ``expected`` in its stdout."""
    return lambda result: expected in (result.stdout or "")


def lines(output: str) -> list[str]:
    """Split trimmed output into lines."""
    return output.strip().split("\n")


def _http_get(endpoint: str, timeout: float) -> tuple[int, bytes]:
    try:
        with urllib.request.urlopen(endpoint, timeout=timeout) as response:
            return response.status, response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.code, exc.read()


def http_get_with_retry(
    endpoint: str, expected_status: int, retry_delay: float, timeout: float
) -> str:
    """GET ``endpoint`` until it answers ``expected_status``; return the body."""
    print(f"\tGET {endpoint}")
    body: list[bytes] = []

    def check() -> tuple[bool, str]:
        try:
            status, content = _http_get(endpoint, retry_delay)
        except OSError as exc:
            return False, f"reaching {endpoint!r}: Error {exc}"
        if status == expected_status:
            body[:] = [content]
            return True, ""
        return False, f"reaching {endpoint!r}: {status} != {expected_status}"

    _poll(check, timeout, retry_delay)
    return body[0].decode("utf-8", errors="replace") if body else ""


__all__: Sequence[str] = ()
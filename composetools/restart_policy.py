"""Decide whether the engine will restart a container that terminated."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RestartPolicy:
    """A container's restart policy."""

    name: str = ""
    maximum_retry_count: int = 0

    def is_always(self) -> bool:
        return self.name == "always"

    def is_unless_stopped(self) -> bool:
        return self.name == "unless-stopped"

    def is_on_failure(self) -> bool:
        return self.name == "on-failure"


def will_container_restart(policy: RestartPolicy, exit_code: int, restarted: int) -> bool:
    """Return True if a container that exited with ``exit_code`` will restart."""
    if policy.is_always() or policy.is_unless_stopped():
        return True
    if policy.is_on_failure():
        return exit_code != 0 and policy.maximum_retry_count > restarted
    return False
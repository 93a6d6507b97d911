import pytest

from composetools.restart_policy import RestartPolicy, will_container_restart


@pytest.mark.parametrize("name", ["always", "unless-stopped"])
def test_always_restarts(name):
    assert will_container_restart(RestartPolicy(name), 0, 100) is True


@pytest.mark.parametrize("name", ["", "no"])
def test_no_policy_never_restarts(name):
    assert will_container_restart(RestartPolicy(name), 1, 0) is False


def test_on_failure_restarts_below_limit():
    policy = RestartPolicy("on-failure", maximum_retry_count=3)
    assert will_container_restart(policy, 1, 0) is True
    assert will_container_restart(policy, 1, 2) is True


def test_on_failure_stops_at_limit():
    policy = RestartPolicy("on-failure", maximum_retry_count=3)
    assert will_container_restart(policy, 1, 3) is False


def test_on_failure_success_does_not_restart():
    policy = RestartPolicy("on-failure", maximum_retry_count=3)
    assert will_container_restart(policy, 0, 0) is False


def test_policy_predicates():
    assert RestartPolicy("always").is_always()
    assert not RestartPolicy("always").is_on_failure()
    assert RestartPolicy("unless-stopped").is_unless_stopped()
    assert RestartPolicy("on-failure").is_on_failure()
    assert not RestartPolicy("on-failure").is_always()
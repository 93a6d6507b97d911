import time

import pytest

from composetools import events
from composetools.events import Event, EventStatus
from composetools.spinner import Spinner

W, D, E = EventStatus.WORKING, EventStatus.DONE, EventStatus.ERROR


@pytest.mark.parametrize(
    "factory, status, text",
    [
        (events.error_event, E, "Error"),
        (events.creating_event, W, "Creating"),
        (events.starting_event, W, "Starting"),
        (events.started_event, D, "Started"),
        (events.waiting, W, "Waiting"),
        (events.healthy, D, "Healthy"),
        (events.exited, D, "Exited"),
        (events.restarting_event, W, "Restarting"),
        (events.restarted_event, D, "Restarted"),
        (events.running_event, D, "Running"),
        (events.created_event, D, "Created"),
        (events.stopping_event, W, "Stopping"),
        (events.stopped_event, D, "Stopped"),
        (events.killing_event, W, "Killing"),
        (events.killed_event, D, "Killed"),
        (events.removing_event, W, "Removing"),
        (events.removed_event, D, "Removed"),
    ],
)
def test_factories(factory, status, text):
    event = factory("Container web")
    assert event.id == "Container web"
    assert event.status == status
    assert event.status_text == text
    assert event.text == ""
    assert event.parent_id == ""


def test_error_message_event_keeps_message():
    event = events.error_message_event("web", "pull access denied")
    assert event.status == EventStatus.ERROR
    assert event.status_text == "pull access denied"


def test_new_event_fields():
    event = events.new_event("db", EventStatus.DONE, "Pulled")
    assert event == Event(id="db", status=EventStatus.DONE, status_text="Pulled")


@pytest.mark.parametrize("value, expected", [(0, W), (1, D), (2, E)])
def test_new_event_status_from_value(value, expected):
    event = events.new_event("x", EventStatus(value), "t")
    assert event.status is expected


def test_stop_sets_end_time_and_stops_spinner():
    spinner = Spinner(chars=["."], done="*")
    event = Event(id="id", spinner=spinner, start_time=time.monotonic())
    assert event.end_time is None
    event.stop()
    assert event.end_time >= event.start_time
    assert str(spinner) == "*"


def test_stop_without_spinner():
    event = events.creating_event("web")
    before = time.monotonic()
    event.stop()
    assert event.end_time >= before
import json

import pytest

from composetools.events import EventStatus
from composetools.registry_events import (
    JSONMessage,
    PullFailure,
    consume_pull_stream,
    consume_push_stream,
    decode_messages,
    to_pull_progress_event,
    to_push_progress_event,
)


class Recorder:
    def __init__(self):
        self.recorded = []

    def event(self, event):
        self.recorded.append(event)


class SlowReader:
    def __init__(self, data, size=3):
        self.data = data
        self.size = size

    def read(self, _n=-1):
        chunk, self.data = self.data[: self.size], self.data[self.size :]
        return chunk


def stream_of(*objects):
    return "\n".join(json.dumps(o) for o in objects).encode("utf-8")


def test_decode_concatenated_objects():
    messages = list(decode_messages(b'{"id":"a","status":"Downloading"}{"id":"b"}\n'))
    assert [m.id for m in messages] == ["a", "b"]
    assert messages[0].status == "Downloading"


def test_decode_in_small_chunks_matches_whole():
    data = stream_of(
        {"id": "layer", "status": "Downloading", "progressDetail": {"current": 5, "total": 10}},
        {"status": "Digest: ok"},
    )
    whole = list(decode_messages(data))
    chunked = list(decode_messages(SlowReader(data)))
    assert chunked == whole
    assert len(whole) == 2


def test_decode_invalid_json_raises():
    with pytest.raises(ValueError):
        list(decode_messages(b'{"id": "a"} {broken'))


def test_from_dict_reads_error_detail():
    jm = JSONMessage.from_dict({"errorDetail": {"message": "denied"}, "error": "denied"})
    assert jm.error == "denied"
    assert JSONMessage.from_dict({"error": "denied"}).error is None


def test_empty_progress_renders_empty():
    jm = JSONMessage.from_dict({"id": "a", "progressDetail": {}})
    assert jm.progress is not None
    assert str(jm.progress) == ""


def test_pull_event_skipped_without_id_or_progress():
    writer = Recorder()
    to_pull_progress_event("svc", JSONMessage(id="", status="x"), writer)
    to_pull_progress_event("svc", JSONMessage(id="layer", status="x"), writer)
    assert writer.recorded == []


def test_pull_complete_is_done_with_parent():
    writer = Recorder()
    jm = JSONMessage.from_dict(
        {"id": "layer", "status": "Pull complete", "progressDetail": {"current": 4, "total": 8}}
    )
    to_pull_progress_event("svc", jm, writer)
    (event,) = writer.recorded
    assert event.status == EventStatus.DONE
    assert event.parent_id == "svc"
    assert event.text == "Pull complete"
    assert event.status_text == str(jm.progress)


def test_pull_error_uses_message():
    writer = Recorder()
    jm = JSONMessage.from_dict(
        {"id": "layer", "status": "Downloading", "progressDetail": {}, "errorDetail": {"message": "boom"}}
    )
    to_pull_progress_event("svc", jm, writer)
    assert writer.recorded[0].status == EventStatus.ERROR
    assert writer.recorded[0].status_text == "boom"


def test_push_event_id_is_prefixed():
    writer = Recorder()
    to_push_progress_event("web", JSONMessage(id="layer", status="Pushing"), writer)
    (event,) = writer.recorded
    assert event.id == "Pushing web: layer"
    assert event.status == EventStatus.WORKING
    assert event.text == "Pushing"


def test_push_event_skipped_without_id():
    writer = Recorder()
    to_push_progress_event("web", JSONMessage(status="Pushing"), writer)
    assert writer.recorded == []


def test_consume_pull_stream_reports_pulling_then_pulled():
    writer = Recorder()
    data = stream_of(
        {"id": "layer", "status": "Downloading", "progressDetail": {"current": 1, "total": 2}},
        {"id": "layer", "status": "Pull complete", "progressDetail": {}},
    )
    consume_pull_stream("svc", data, writer, False)
    assert [e.text for e in writer.recorded] == ["Pulling", "Downloading", "Pull complete", "Pulled"]
    assert writer.recorded[-1].status == EventStatus.DONE
    assert writer.recorded[-1].id == "svc"


def test_consume_pull_stream_quiet_skips_layers():
    writer = Recorder()
    data = stream_of({"id": "layer", "status": "Downloading", "progressDetail": {}})
    consume_pull_stream("svc", data, writer, True)
    assert [e.text for e in writer.recorded] == ["Pulling", "Pulled"]


def test_consume_pull_stream_error_raises_pull_failure():
    writer = Recorder()
    data = stream_of({"errorDetail": {"message": "pull access denied"}})
    with pytest.raises(PullFailure, match="pull access denied"):
        consume_pull_stream("svc", data, writer, False)


def test_consume_pull_stream_bad_json_is_pull_failure():
    with pytest.raises(PullFailure):
        consume_pull_stream("svc", b"{nope", Recorder(), False)


def test_consume_push_stream_error_raises():
    writer = Recorder()
    data = stream_of({"id": "layer", "status": "Pushing"}, {"errorDetail": {"message": "denied"}})
    with pytest.raises(RuntimeError, match="denied"):
        consume_push_stream("web", data, writer)
    assert len(writer.recorded) == 1
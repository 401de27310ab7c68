import io
from dataclasses import dataclass

import pytest

from cfdot.errors import BBSError
from cfdot.events import (
    lrp_events,
    print_lrp_group_events_warning,
    task_events,
    validate_lrp_events_arguments,
)


@dataclass
class FakeEvent:
    event_type: str
    guid: str


class FakeSource:
    def __init__(self, items):
        self.items = list(items)
        self.closed = 0

    def __iter__(self):
        for item in self.items:
            if isinstance(item, BaseException):
                raise item
            yield item

    def close(self):
        self.closed += 1


class FakeBBS:
    def __init__(self, groups=None, instances=None, tasks=None, subscribe_error=None):
        self.groups = groups
        self.instances = instances
        self.tasks = tasks
        self.subscribe_error = subscribe_error
        self.group_subscriptions = 0

    def subscribe_to_events_by_cell_id(self, cell_id):
        self.group_subscriptions += 1
        if self.subscribe_error:
            raise self.subscribe_error
        return self.groups

    def subscribe_to_instance_events_by_cell_id(self, cell_id):
        return self.instances

    def subscribe_to_task_events(self):
        if self.subscribe_error:
            raise self.subscribe_error
        return self.tasks


GROUP_CREATED = FakeEvent("actual_lrp_created", "some-actual")
GROUP_REMOVED = FakeEvent("actual_lrp_removed", "some-actual")
INSTANCE_CREATED = FakeEvent("actual_lrp_instance_created", "some-actual")
INSTANCE_REMOVED = FakeEvent("actual_lrp_instance_removed", "some-actual")


def _line(kind):
    return f'{{"type":"{kind}","data":{{"event_type":"{kind}","guid":"some-actual"}}}}'


def _client():
    return FakeBBS(
        groups=FakeSource([GROUP_CREATED, GROUP_REMOVED]),
        instances=FakeSource([INSTANCE_CREATED, INSTANCE_REMOVED]),
    )


def test_prints_every_event():
    out = io.StringIO()
    lrp_events(out, io.StringIO(), _client(), "", False)
    lines = out.getvalue().strip().split("\n")
    assert sorted(lines) == sorted(
        _line(k)
        for k in (
            "actual_lrp_created",
            "actual_lrp_removed",
            "actual_lrp_instance_created",
            "actual_lrp_instance_removed",
        )
    )


def test_excluding_groups_prints_only_instance_events():
    out = io.StringIO()
    client = _client()
    lrp_events(out, io.StringIO(), client, "", True)
    lines = out.getvalue().strip().split("\n")
    assert sorted(lines) == sorted(
        [_line("actual_lrp_instance_created"), _line("actual_lrp_instance_removed")]
    )
    assert client.group_subscriptions == 0


@pytest.mark.parametrize(
    "kind", ["desired_lrp_created", "desired_lrp_changed", "desired_lrp_removed"]
)
def test_dedups_desired_lrp_events(kind):
    event = FakeEvent(kind, "some-actual")
    client = FakeBBS(groups=FakeSource([event]), instances=FakeSource([event]))
    out = io.StringIO()
    lrp_events(out, io.StringIO(), client, "", False)
    assert out.getvalue().strip() == _line(kind)


def test_closes_event_streams():
    client = _client()
    lrp_events(io.StringIO(), io.StringIO(), client, "", False)
    assert client.groups.closed == 1
    assert client.instances.closed == 1


def test_subscribe_failure():
    client = FakeBBS(
        instances=FakeSource([]), subscribe_error=RuntimeError("failed to connect")
    )
    with pytest.raises(BBSError) as info:
        lrp_events(io.StringIO(), io.StringIO(), client, "", False)
    assert "failed to connect" in str(info.value)
    assert info.value.type_code == 0


def test_stream_failure_is_raised_after_streams_end():
    client = FakeBBS(
        groups=FakeSource([RuntimeError("boom")]),
        instances=FakeSource([INSTANCE_CREATED]),
    )
    out = io.StringIO()
    with pytest.raises(Exception) as info:
        lrp_events(out, io.StringIO(), client, "", False)
    assert "boom" in str(info.value)
    assert out.getvalue().strip() == _line("actual_lrp_instance_created")


def test_warning_text():
    err = io.StringIO()
    print_lrp_group_events_warning(err)
    assert err.getvalue() == (
        'Event types "actual_lrp_created", "actual_lrp_changed" and "actual_lrp_removed" '
        'are deprecated. Use "--exclude-actual-lrp-groups" flag to exclude them.\n'
    )


def test_validate_lrp_events_arguments():
    with pytest.raises(ValueError, match="Too many arguments specified"):
        validate_lrp_events_arguments(["x"])


TASK_EVENT = FakeEvent("task_created", "some-task")
TASK_LINE = '{"type":"task_created","data":{"event_type":"task_created","guid":"some-task"}}'


def test_task_events_prints_json():
    out = io.StringIO()
    task_events(out, io.StringIO(), FakeBBS(tasks=FakeSource([TASK_EVENT, TASK_EVENT])), "")
    assert out.getvalue().split("\n") == [TASK_LINE, TASK_LINE, ""]


def test_task_events_closes_stream():
    client = FakeBBS(tasks=FakeSource([TASK_EVENT]))
    task_events(io.StringIO(), io.StringIO(), client, "")
    assert client.tasks.closed == 1


def test_task_events_subscribe_failure():
    client = FakeBBS(subscribe_error=RuntimeError("failed to connect"))
    with pytest.raises(BBSError) as info:
        task_events(io.StringIO(), io.StringIO(), client, "")
    assert "failed to connect" in str(info.value)


def test_task_events_receive_failure():
    client = FakeBBS(tasks=FakeSource([RuntimeError("boom")]))
    with pytest.raises(RuntimeError, match="boom"):
        task_events(io.StringIO(), io.StringIO(), client, "")
    assert client.tasks.closed == 1
"""Commands that subscribe to BBS LRP and task event streams.

An event source is an iterable of events with a ``close()`` method; the
stream ends when iteration stops (or raises ``EOFError``). Each event
has an ``event_type`` attribute, or a method of that name.

The BBS client offers ``subscribe_to_events_by_cell_id(cell_id)``,
``subscribe_to_instance_events_by_cell_id(cell_id)`` and
``subscribe_to_task_events()``, each returning an event source.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Optional, TextIO

from .common import write_json
from .errors import BBSError, extra_arguments, missing_arguments

__all__ = [
    "LRPEvent",
    "TaskEvent",
    "validate_lrp_events_arguments",
    "lrp_events",
    "print_lrp_group_events_warning",
    "task_events",
]

_log = logging.getLogger("cfdot")

_GROUP_EVENT_TYPES = frozenset(
    {"actual_lrp_created", "actual_lrp_changed", "actual_lrp_removed"}
)
_GROUPS = "groups"
_INSTANCES = "instances"


@dataclass
class LRPEvent:
    """An LRP event as written to the output: its type and its payload."""

    type: str
    data: Any


@dataclass
class TaskEvent:
    """A task event as written to the output: its type and its payload."""

    type: str
    data: Any


class _StreamErrors(Exception):
    """Failures collected from one or more event streams."""

    def __init__(self, errors: list[BaseException]) -> None:
        super().__init__(errors)
        self.errors = errors

    def __str__(self) -> str:
        points = [f"* {err}" for err in self.errors]
        if len(points) == 1:
            return f"1 error occurred:\n\t{points[0]}\n\n"
        return f"{len(points)} errors occurred:\n\t" + "\n\t".join(points) + "\n\n"


def _convert_error(exc: BaseException) -> BBSError:
    if isinstance(exc, BBSError):
        return exc
    return BBSError(0, "UnknownError", str(exc))


def _event_type(event: Any) -> str:
    kind = event.event_type
    return kind() if callable(kind) else kind


def _pump(source: Iterable[Any], tag: str, out: "queue.Queue[tuple]") -> None:
    try:
        for event in source:
            out.put((tag, event, None))
    except EOFError as exc:
        out.put((tag, None, exc))
    except Exception as exc:
        out.put((tag, None, exc))
    else:
        out.put((tag, None, EOFError()))


def _emit(stdout: TextIO, record: Any, session: str) -> None:
    try:
        write_json(stdout, record)
    except (TypeError, ValueError, OSError) as exc:
        _log.error("%s.failed-to-marshal: %s", session, exc)


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def validate_lrp_events_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def lrp_events(
    stdout: TextIO,
    stderr: TextIO,
    bbs_client: Any,
    cell_id: str,
    exclude_actual_lrp_groups: bool,
) -> None:
    """Write LRP events as JSON lines until every subscribed stream ends.

    Unless excluded, the deprecated actual LRP group events are merged in;
    other events from that stream are dropped. Stream failures are raised
    together once all streams have ended.
    """
    with ExitStack() as stack:
        sources: list[tuple[str, Any]] = []
        if not exclude_actual_lrp_groups:
            try:
                groups = bbs_client.subscribe_to_events_by_cell_id(cell_id)
            except Exception as exc:
                raise _convert_error(exc) from exc
            stack.callback(groups.close)
            sources.append((_GROUPS, groups))
        try:
            instances = bbs_client.subscribe_to_instance_events_by_cell_id(cell_id)
        except Exception as exc:
            raise _convert_error(exc) from exc
        stack.callback(instances.close)
        sources.append((_INSTANCES, instances))

        received: "queue.Queue[tuple]" = queue.Queue()
        for tag, source in sources:
            threading.Thread(target=_pump, args=(source, tag, received), daemon=True).start()

        finished = 0
        errors: list[BaseException] = []
        while finished < len(sources):
            tag, event, error = received.get()
            if error is not None:
                finished += 1
                if not isinstance(error, EOFError):
                    errors.append(error)
                continue
            kind = _event_type(event)
            if tag == _GROUPS and kind not in _GROUP_EVENT_TYPES:
                continue
            _emit(stdout, LRPEvent(type=kind, data=event), "lrp-events")

    if errors:
        raise _StreamErrors(errors)


def print_lrp_group_events_warning(stderr: TextIO) -> None:
    """Warn that actual LRP group events are deprecated."""
    stderr.write(
        'Event types "actual_lrp_created", "actual_lrp_changed" and "actual_lrp_removed" '
        'are deprecated. Use "--exclude-actual-lrp-groups" flag to exclude them.\n'
    )


def task_events(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, cell_id: Optional[str]
) -> None:
    """Write task events as JSON lines until the stream ends."""
    try:
        source = bbs_client.subscribe_to_task_events()
    except Exception as exc:
        raise _convert_error(exc) from exc
    try:
        for event in source:
            _emit(stdout, TaskEvent(type=_event_type(event), data=event), "task-events")
    except EOFError:
        pass
    finally:
        source.close()
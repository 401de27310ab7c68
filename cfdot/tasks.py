"""Commands that show, list, create, cancel and delete tasks in the BBS.

The BBS client is any object offering these methods, each taking the
trace id first:

* ``task_by_guid(trace_id, task_guid)``
* ``tasks_with_filter(trace_id, task_filter)``
* ``cancel_task(trace_id, task_guid)``
* ``desire_task(trace_id, task_guid, domain, task_definition)``
* ``resolving_task(trace_id, task_guid)``
* ``delete_task(trace_id, task_guid)``

Failures raised by the client propagate unchanged.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from .common import generate_trace_id, write_json
from .errors import extra_arguments, invalid_process_guid, missing_arguments

__all__ = [
    "TaskFilter",
    "validate_task_args",
    "task_by_guid",
    "validate_tasks_args",
    "tasks",
    "validate_cancel_task_args",
    "cancel_task_by_guid",
    "validate_create_task_arguments",
    "create_task",
    "validate_delete_task_arguments",
    "delete_task",
]

_log = logging.getLogger("cfdot")


@dataclass(frozen=True)
class TaskFilter:
    """Restricts a task listing; empty fields match everything."""

    domain: str = ""
    cell_id: str = ""


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def _single_guid(args: Sequence[str]) -> str:
    if not args or args[0] == "":
        raise missing_arguments()
    if len(args) > 1:
        raise extra_arguments()
    return args[0]


def validate_task_args(args: Sequence[str]) -> str:
    """Return the single non-empty task guid."""
    return _single_guid(args)


def task_by_guid(
    stdout: TextIO, stderr: Optional[TextIO], bbs_client: Any, task_guid: str
) -> None:
    """Write the task with the given guid as a JSON line."""
    trace_id = generate_trace_id()
    task = bbs_client.task_by_guid(trace_id, task_guid)
    try:
        write_json(stdout, task)
    except (TypeError, ValueError, OSError) as exc:
        _log.error("task-by-guid.failed-to-marshal trace-id=%s: %s", trace_id, exc)


def validate_tasks_args(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def tasks(
    stdout: TextIO,
    stderr: Optional[TextIO],
    bbs_client: Any,
    domain: str,
    cell_id: str,
) -> None:
    """Write every task matching the filters as a JSON line; write failures are raised."""
    trace_id = generate_trace_id()
    found = bbs_client.tasks_with_filter(trace_id, TaskFilter(domain=domain, cell_id=cell_id))
    for task in found or ():
        write_json(stdout, task)


def validate_cancel_task_args(args: Sequence[str]) -> str:
    """Return the single non-empty task guid."""
    return _single_guid(args)


def cancel_task_by_guid(
    stdout: TextIO, stderr: Optional[TextIO], bbs_client: Any, task_guid: str
) -> None:
    """Cancel the task with the given guid."""
    trace_id = generate_trace_id()
    bbs_client.cancel_task(trace_id, task_guid)


def _parse_task(spec: Union[bytes, str]) -> Optional[dict]:
    task = json.loads(spec)
    if task is not None and not isinstance(task, dict):
        raise ValueError("spec must be a JSON object")
    return task


def validate_create_task_arguments(args: Sequence[str]) -> bytes:
    """Return the task spec given inline or as ``@FILE``; it must be JSON."""
    if len(args) != 1:
        raise ValueError("missing spec argument")
    value = args[0]
    if value.startswith("@"):
        spec = Path(value[1:]).read_bytes()
    else:
        spec = value.encode("utf-8")
    try:
        _parse_task(spec)
    except ValueError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
    return spec


def create_task(
    stdout: TextIO, stderr: Optional[TextIO], bbs_client: Any, spec: Union[bytes, str]
) -> None:
    """Ask the BBS to desire the task described by the JSON ``spec``."""
    trace_id = generate_trace_id()
    task = _parse_task(spec)
    if not isinstance(task, Mapping):
        raise ValueError("task spec is empty")
    bbs_client.desire_task(
        trace_id,
        task.get("task_guid", ""),
        task.get("domain", ""),
        task.get("task_definition"),
    )


def validate_delete_task_arguments(args: Sequence[str]) -> str:
    """Return the single non-empty task guid."""
    if not args:
        raise missing_arguments()
    if len(args) > 1:
        raise extra_arguments()
    if args[0] == "":
        raise invalid_process_guid()
    return args[0]


def delete_task(
    stdout: TextIO, stderr: Optional[TextIO], bbs_client: Any, task_guid: str
) -> None:
    """Resolve and then delete the task with the given guid."""
    trace_id = generate_trace_id()
    bbs_client.resolving_task(trace_id, task_guid)
    bbs_client.delete_task(trace_id, task_guid)
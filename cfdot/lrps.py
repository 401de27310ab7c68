"""Commands that list and show actual and desired LRPs held by the BBS.

The BBS client is any object offering these methods, each taking the
trace id first:

* ``actual_lrp_groups(trace_id, lrp_filter)``
* ``actual_lrp_groups_by_process_guid(trace_id, process_guid)``
* ``actual_lrp_group_by_process_guid_and_index(trace_id, process_guid, index)``
* ``actual_lrps(trace_id, lrp_filter)``
* ``desired_lrp_by_process_guid(trace_id, process_guid)``
* ``desired_lrps(trace_id, lrp_filter)``
* ``desired_lrp_scheduling_infos(trace_id, lrp_filter)``

Failures raised by the client propagate unchanged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional, TextIO

from .common import generate_trace_id, write_json
from .errors import extra_arguments, invalid_index, invalid_process_guid, missing_arguments

__all__ = [
    "ActualLRPFilter",
    "DesiredLRPFilter",
    "validate_actual_lrp_groups_arguments",
    "actual_lrp_groups",
    "validate_actual_lrp_groups_for_guid_args",
    "actual_lrp_groups_for_guid",
    "validate_actual_lrps_arguments",
    "actual_lrps",
    "validate_desired_lrp_arguments",
    "desired_lrp",
    "validate_desired_lrps_arguments",
    "desired_lrps",
    "validate_desired_lrp_scheduling_infos_arguments",
    "desired_lrp_scheduling_infos",
]

_log = logging.getLogger("cfdot")
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class ActualLRPFilter:
    """Restricts an actual LRP listing; empty fields match everything."""

    domain: str = ""
    cell_id: str = ""
    process_guid: str = ""
    index: Optional[int] = None


@dataclass(frozen=True)
class DesiredLRPFilter:
    """Restricts a desired LRP listing to a domain; empty matches every domain."""

    domain: str = ""


def _write_each(stdout: TextIO, items: Iterable[Any], session: str, trace_id: str) -> None:
    for item in items or ():
        try:
            write_json(stdout, item)
        except (TypeError, ValueError, OSError) as exc:
            _log.error("%s.failed-to-marshal trace-id=%s: %s", session, trace_id, exc)


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def _single_process_guid(args: Sequence[str]) -> str:
    if not args:
        raise missing_arguments()
    if len(args) > 1:
        raise extra_arguments()
    if args[0] == "":
        raise invalid_process_guid()
    return args[0]


def validate_actual_lrp_groups_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def actual_lrp_groups(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, domain: str, cell_id: str
) -> None:
    """Write every actual LRP group matching the filters as a JSON line."""
    trace_id = generate_trace_id()
    groups = bbs_client.actual_lrp_groups(
        trace_id, ActualLRPFilter(domain=domain, cell_id=cell_id)
    )
    _write_each(stdout, groups, "actual-lrp-groups", trace_id)


def validate_actual_lrp_groups_for_guid_args(
    args: Sequence[str], index_flag: str
) -> tuple[str, int]:
    """Return the process guid and index; the index is -1 when not given."""
    process_guid = _single_process_guid(args)
    index = -1
    if index_flag != "":
        if not _INTEGER.fullmatch(index_flag):
            raise invalid_index()
        index = int(index_flag)
        if index < 0:
            raise invalid_index()
    return process_guid, index


def actual_lrp_groups_for_guid(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, process_guid: str, index: int
) -> None:
    """Write the actual LRP groups of a process, or only one when index >= 0."""
    trace_id = generate_trace_id()
    if index < 0:
        groups = bbs_client.actual_lrp_groups_by_process_guid(trace_id, process_guid)
        _write_each(stdout, groups, "actual-lrp-groups-for-guid", trace_id)
        return
    group = bbs_client.actual_lrp_group_by_process_guid_and_index(
        trace_id, process_guid, index
    )
    write_json(stdout, group)


def validate_actual_lrps_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def actual_lrps(
    stdout: TextIO,
    stderr: TextIO,
    bbs_client: Any,
    domain: str,
    cell_id: str,
    process_guid: str,
    index: Optional[int],
) -> None:
    """Write every actual LRP matching the filters as a JSON line."""
    trace_id = generate_trace_id()
    lrp_filter = ActualLRPFilter(
        domain=domain, cell_id=cell_id, process_guid=process_guid, index=index
    )
    _write_each(stdout, bbs_client.actual_lrps(trace_id, lrp_filter), "actual-lrps", trace_id)


def validate_desired_lrp_arguments(args: Sequence[str]) -> str:
    """Return the single non-empty process guid."""
    return _single_process_guid(args)


def desired_lrp(stdout: TextIO, stderr: TextIO, bbs_client: Any, process_guid: str) -> None:
    """Write the desired LRP with the given process guid as a JSON line."""
    trace_id = generate_trace_id()
    lrp = bbs_client.desired_lrp_by_process_guid(trace_id, process_guid)
    write_json(stdout, lrp)


def validate_desired_lrps_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def desired_lrps(stdout: TextIO, stderr: TextIO, bbs_client: Any, domain: str) -> None:
    """Write every desired LRP in the domain as a JSON line."""
    trace_id = generate_trace_id()
    lrps = bbs_client.desired_lrps(trace_id, DesiredLRPFilter(domain=domain))
    _write_each(stdout, lrps, "desired-lrps", trace_id)


def validate_desired_lrp_scheduling_infos_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def desired_lrp_scheduling_infos(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, domain: str
) -> None:
    """Write the scheduling info of every desired LRP in the domain as a JSON line."""
    trace_id = generate_trace_id()
    infos = bbs_client.desired_lrp_scheduling_infos(trace_id, DesiredLRPFilter(domain=domain))
    _write_each(stdout, infos, "desired-lrp-scheduling-infos", trace_id)
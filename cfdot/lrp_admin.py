"""Commands that create, delete and retire LRPs in the BBS.

The BBS client is any object offering these methods, each taking the
trace id first:

* ``desire_lrp(trace_id, desired_lrp)``
* ``remove_desired_lrp(trace_id, process_guid)``
* ``desired_lrp_by_process_guid(trace_id, process_guid)``
* ``retire_actual_lrp(trace_id, actual_lrp_key)``

Failures raised by the client propagate unchanged.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO, Union

from .common import generate_trace_id
from .errors import extra_arguments, invalid_index, invalid_process_guid, missing_arguments

__all__ = [
    "ActualLRPKey",
    "validate_create_desired_lrp_arguments",
    "create_desired_lrp",
    "validate_delete_desired_lrp_arguments",
    "delete_desired_lrp",
    "validate_retire_actual_lrp_args",
    "retire_actual_lrp",
]

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


@dataclass(frozen=True)
class ActualLRPKey:
    """Identifies one instance of a process."""

    process_guid: str
    index: int
    domain: str


def _parse_desired_lrp(spec: Union[bytes, str]) -> Any:
    desired = json.loads(spec)
    if desired is not None and not isinstance(desired, dict):
        raise ValueError("spec must be a JSON object")
    return desired


def validate_create_desired_lrp_arguments(args: Sequence[str]) -> bytes:
    """Return the desired LRP spec given inline or as ``@FILE``; it must be JSON."""
    if len(args) != 1:
        raise ValueError("missing spec argument")
    value = args[0]
    if value.startswith("@"):
        spec = Path(value[1:]).read_bytes()
    else:
        spec = value.encode("utf-8")
    try:
        _parse_desired_lrp(spec)
    except ValueError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
    return spec


def create_desired_lrp(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, spec: Union[bytes, str]
) -> None:
    """Ask the BBS to desire the LRP described by the JSON ``spec``."""
    trace_id = generate_trace_id()
    desired = _parse_desired_lrp(spec)
    bbs_client.desire_lrp(trace_id, desired)


def validate_delete_desired_lrp_arguments(args: Sequence[str]) -> str:
    """Return the single non-empty process guid."""
    if not args:
        raise missing_arguments()
    if len(args) > 1:
        raise extra_arguments()
    if args[0] == "":
        raise invalid_process_guid()
    return args[0]


def delete_desired_lrp(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, process_guid: str
) -> None:
    """Remove the desired LRP with the given process guid."""
    trace_id = generate_trace_id()
    bbs_client.remove_desired_lrp(trace_id, process_guid)


def validate_retire_actual_lrp_args(args: Sequence[str]) -> tuple[str, int]:
    """Return the process guid and the non-negative index."""
    if len(args) < 2:
        raise missing_arguments()
    if len(args) > 2:
        raise extra_arguments()
    process_guid, raw_index = args
    if process_guid == "":
        raise invalid_process_guid()
    if not _INTEGER.fullmatch(raw_index):
        raise invalid_index()
    index = int(raw_index)
    if index < 0 or not _INT64_MIN <= index <= _INT64_MAX:
        raise invalid_index()
    return process_guid, index


def _domain_of(desired: Any) -> str:
    if isinstance(desired, Mapping):
        return desired.get("domain", "") or ""
    return getattr(desired, "domain", "") or ""


def retire_actual_lrp(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, process_guid: str, index: int
) -> None:
    """Retire one instance of a process, looking up its domain first."""
    trace_id = generate_trace_id()
    desired = bbs_client.desired_lrp_by_process_guid(trace_id, process_guid)
    key = ActualLRPKey(process_guid=process_guid, index=index, domain=_domain_of(desired))
    bbs_client.retire_actual_lrp(trace_id, key)
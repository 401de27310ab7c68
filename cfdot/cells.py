"""Commands that show cell presences and the state reported by each cell's rep.

The BBS client is any object offering ``cells(trace_id)``, returning the
registered cell presences. A presence is a mapping or an object with
``cell_id``, ``rep_address`` and ``rep_url``.

A rep client factory offers ``create_client(rep_address, rep_url, trace_id)``.
The client it returns offers ``state()``, which returns the cell state.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, TextIO

from .common import generate_trace_id, write_json
from .errors import component_error, extra_arguments, missing_arguments

__all__ = [
    "validate_cell_arguments",
    "cell",
    "validate_cells_arguments",
    "cells",
    "validate_cell_state_arguments",
    "fetch_cell_registration",
    "fetch_cell_state",
    "validate_cell_states_arguments",
    "fetch_cell_states",
]

_log = logging.getLogger("cfdot")
_ENCODE_ERRORS = (TypeError, ValueError, OSError)


def _field(presence: Any, name: str) -> Any:
    if isinstance(presence, Mapping):
        return presence.get(name, "")
    return getattr(presence, name, "")


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def _find_cell(presences: Any, cell_id: str) -> Any:
    for presence in presences or ():
        if _field(presence, "cell_id") == cell_id:
            return presence
    raise LookupError("Cell not found")


def validate_cell_arguments(args: Sequence[str]) -> None:
    """Require exactly one argument, the cell id."""
    _check_count(args, minimum=1, maximum=1)


def cell(stdout: TextIO, stderr: TextIO, bbs_client: Any, cell_id: str) -> None:
    """Write the presence of the cell with the given id as a JSON line."""
    trace_id = generate_trace_id()
    presence = _find_cell(bbs_client.cells(trace_id), cell_id)
    try:
        write_json(stdout, presence)
    except _ENCODE_ERRORS as exc:
        _log.error("cell-presence.failed-to-marshal trace-id=%s: %s", trace_id, exc)
        raise


def validate_cells_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def cells(stdout: TextIO, stderr: TextIO, bbs_client: Any) -> None:
    """Write every registered cell presence as a JSON line."""
    trace_id = generate_trace_id()
    for presence in bbs_client.cells(trace_id) or ():
        try:
            write_json(stdout, presence)
        except _ENCODE_ERRORS as exc:
            _log.error("cell-presences.failed-to-marshal trace-id=%s: %s", trace_id, exc)


def validate_cell_state_arguments(args: Sequence[str]) -> None:
    """Require exactly one argument, the cell id."""
    _check_count(args, minimum=1, maximum=1)


def fetch_cell_registration(bbs_client: Any, trace_id: str, cell_id: str) -> Any:
    """Return the presence of the cell with the given id."""
    return _find_cell(bbs_client.cells(trace_id), cell_id)


def fetch_cell_state(
    stdout: TextIO,
    stderr: TextIO,
    client_factory: Any,
    registration: Any,
    trace_id: str,
) -> None:
    """Ask the rep of a registered cell for its state and write it as a JSON line."""
    rep_client = client_factory.create_client(
        _field(registration, "rep_address"), _field(registration, "rep_url"), trace_id
    )
    try:
        state = rep_client.state()
    except Exception as exc:
        _log.error("cell-state.failed-to-fetch-cell-state trace-id=%s: %s", trace_id, exc)
        raise
    try:
        write_json(stdout, state)
    except _ENCODE_ERRORS as exc:
        _log.error("cell-state.failed-to-marshal trace-id=%s: %s", trace_id, exc)
        raise


def validate_cell_states_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def fetch_cell_states(
    stdout: TextIO, stderr: TextIO, client_factory: Any, bbs_client: Any
) -> None:
    """Write the state of every registered cell; failures are collected and raised."""
    trace_id = generate_trace_id()
    try:
        registrations = bbs_client.cells(trace_id)
    except Exception as exc:
        raise component_error(
            RuntimeError(f"BBS error: Failed to get cell registrations from BBS: {exc}")
        ) from exc

    failures = []
    for registration in registrations or ():
        try:
            fetch_cell_state(stdout, stderr, client_factory, registration, trace_id)
        except Exception as exc:
            failures.append(
                "Rep error: Failed to get cell state for cell "
                f"{_field(registration, 'cell_id')}: {exc}\n"
            )
    if failures:
        raise component_error(RuntimeError("".join(failures)))
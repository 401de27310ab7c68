import io
import json
from types import SimpleNamespace

import pytest

from cfdot.errors import BBSError
from cfdot.lrp_admin import (
    ActualLRPKey,
    create_desired_lrp,
    delete_desired_lrp,
    retire_actual_lrp,
    validate_create_desired_lrp_arguments,
    validate_delete_desired_lrp_arguments,
    validate_retire_actual_lrp_args,
)

UNKNOWN = BBSError(0, "UnknownError", "unknown error")


def _is_trace_id(value):
    return len(value) == 32 and int(value, 16) >= 0


class FakeBBS:
    def __init__(self, desired=None, error=None, retire_error=None, desired_error=None):
        self.desired = desired
        self.error = error
        self.retire_error = retire_error
        self.desired_error = desired_error
        self.desire_calls = []
        self.remove_calls = []
        self.lookup_calls = []
        self.retire_calls = []

    def desire_lrp(self, trace_id, desired):
        self.desire_calls.append((trace_id, desired))
        if self.error:
            raise self.error

    def remove_desired_lrp(self, trace_id, process_guid):
        self.remove_calls.append((trace_id, process_guid))
        if self.error:
            raise self.error

    def desired_lrp_by_process_guid(self, trace_id, process_guid):
        self.lookup_calls.append((trace_id, process_guid))
        if self.desired_error:
            raise self.desired_error
        return self.desired

    def retire_actual_lrp(self, trace_id, key):
        self.retire_calls.append((trace_id, key))
        if self.retire_error:
            raise self.retire_error


SPEC = json.dumps({"process_guid": "some-desired-lrp"}).encode()


def test_create_desired_lrp_sends_spec():
    client = FakeBBS()
    create_desired_lrp(io.StringIO(), io.StringIO(), client, SPEC)
    assert len(client.desire_calls) == 1
    trace_id, lrp = client.desire_calls[0]
    assert _is_trace_id(trace_id)
    assert lrp == {"process_guid": "some-desired-lrp"}


def test_validate_create_reads_file(tmp_path):
    spec_file = tmp_path / "spec_file"
    spec_file.write_bytes(SPEC)
    assert validate_create_desired_lrp_arguments(["@" + str(spec_file)]) == SPEC


def test_validate_create_inline_spec():
    assert validate_create_desired_lrp_arguments(['{"process_guid":"g"}']) == b'{"process_guid":"g"}'


def test_validate_create_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        validate_create_desired_lrp_arguments(["@" + str(tmp_path / "absent")])


def test_validate_create_invalid_json():
    with pytest.raises(ValueError, match="^Invalid JSON"):
        validate_create_desired_lrp_arguments(["{not json"])


def test_validate_create_requires_one_argument():
    with pytest.raises(ValueError, match="missing spec argument"):
        validate_create_desired_lrp_arguments([])


def test_create_desired_lrp_bbs_error():
    client = FakeBBS(error=UNKNOWN)
    with pytest.raises(BBSError) as info:
        create_desired_lrp(io.StringIO(), io.StringIO(), client, b"{}")
    assert info.value == UNKNOWN


def test_delete_desired_lrp():
    client = FakeBBS()
    delete_desired_lrp(io.StringIO(), io.StringIO(), client, "")
    trace_id, guid = client.remove_calls[0]
    assert _is_trace_id(trace_id)
    assert guid == ""


def test_delete_desired_lrp_bbs_error():
    client = FakeBBS(error=UNKNOWN)
    with pytest.raises(BBSError) as info:
        delete_desired_lrp(io.StringIO(), io.StringIO(), client, "the-process-guid")
    assert info.value == UNKNOWN


def test_validate_delete_arguments():
    assert validate_delete_desired_lrp_arguments(["guid"]) == "guid"
    with pytest.raises(ValueError, match="Missing arguments"):
        validate_delete_desired_lrp_arguments([])
    with pytest.raises(ValueError, match="Too many arguments"):
        validate_delete_desired_lrp_arguments(["a", "b"])
    with pytest.raises(ValueError, match="Process guid"):
        validate_delete_desired_lrp_arguments([""])


def test_validate_retire_returns_guid_and_index():
    assert validate_retire_actual_lrp_args(["guid", "1"]) == ("guid", 1)


@pytest.mark.parametrize(
    "args, message",
    [
        (["guid", "1", "3"], "Too many arguments specified"),
        ([], "Missing arguments"),
        (["", "1"], "Process guid should be non empty string"),
        (["guid", "-1"], "Index must be a non-negative integer"),
        (["guid", "not-a-number"], "Index must be a non-negative integer"),
    ],
)
def test_validate_retire_errors(args, message):
    with pytest.raises(ValueError) as info:
        validate_retire_actual_lrp_args(args)
    assert str(info.value) == message


def test_retire_actual_lrp():
    client = FakeBBS(desired={"domain": "test-domain.com"})
    retire_actual_lrp(io.StringIO(), io.StringIO(), client, "process-guid", 1)
    assert len(client.lookup_calls) == 1
    trace_id, guid = client.lookup_calls[0]
    assert _is_trace_id(trace_id)
    assert guid == "process-guid"
    assert len(client.retire_calls) == 1
    trace_id2, key = client.retire_calls[0]
    assert trace_id2 == trace_id
    assert key == ActualLRPKey(process_guid="process-guid", index=1, domain="test-domain.com")


def test_retire_actual_lrp_reads_domain_attribute():
    client = FakeBBS(desired=SimpleNamespace(domain="attr-domain"))
    retire_actual_lrp(io.StringIO(), io.StringIO(), client, "pg", 3)
    assert client.retire_calls[0][1].domain == "attr-domain"


def test_retire_actual_lrp_retire_fails():
    client = FakeBBS(desired={"domain": "d"}, retire_error=UNKNOWN)
    with pytest.raises(BBSError) as info:
        retire_actual_lrp(io.StringIO(), io.StringIO(), client, "process-guid", 2)
    assert info.value == UNKNOWN


def test_retire_actual_lrp_lookup_fails():
    client = FakeBBS(desired_error=UNKNOWN)
    with pytest.raises(BBSError) as info:
        retire_actual_lrp(io.StringIO(), io.StringIO(), client, "process-guid", 2)
    assert info.value == UNKNOWN
    assert len(client.lookup_calls) == 1
    assert client.retire_calls == []
from datetime import datetime

import pytest
import pytz

from services.document_sync import StatusMapper
from shared.models.document import Chunk, Document, DocumentStatus


@pytest.mark.parametrize("raw, expected", [(0.75, 75.0), (1.0, 100.0), (0.0, 0.0), (42, 42), (100, 100)])
def test_normalize_progress(raw, expected):
    assert StatusMapper.normalize_progress(raw) == expected


class TestConvertTimestamp:
    def test_millisecond_epoch_and_date_string_agree(self):
        millis = 1700000000000

        assert StatusMapper.convert_timestamp(millis) == 1700000000
        assert StatusMapper.convert_timestamp("2023-11-14 22:13:20") == 1700000000
        assert StatusMapper.convert_timestamp("2023-11-14T22:13:20Z") == 1700000000
        assert StatusMapper.convert_timestamp("Tue, 14 Nov 2023 22:13:20 GMT") == 1700000000

    def test_numeric_string_is_milliseconds(self):
        assert StatusMapper.convert_timestamp("1700000000999") == 1700000000

    @pytest.mark.parametrize("value", ["not a date", "", None, True, {"ts": 1}, [1], 10**400])
    def test_unparseable_values_are_epoch_zero(self, value):
        assert StatusMapper.convert_timestamp(value) == 0

    def test_extract_timestamp_distinguishes_absent_from_unparseable(self):
        assert StatusMapper.extract_timestamp({}, "create_time") is None
        assert StatusMapper.extract_timestamp({"create_time": "garbage"}, "create_time") == datetime(1970, 1, 1, tzinfo=pytz.utc)


class TestScalarExtractors:
    def test_numbers_and_numeric_strings(self):
        payload = {"a": "12", "b": 3.9, "c": " 7 ", "d": "x", "e": True}

        assert StatusMapper.extract_int(payload, "a") == 12
        assert StatusMapper.extract_int(payload, "b") == 3
        assert StatusMapper.extract_float(payload, "c") == 7.0
        assert StatusMapper.extract_int(payload, "d") is None
        assert StatusMapper.extract_int(payload, "e") is None
        assert StatusMapper.extract_float(payload, "missing") is None

    def test_integers_beyond_float_range_are_not_numbers(self):
        payload = {"n": 10**400, "progress": -(10**400), "create_time": 10**400}

        assert StatusMapper.parse_number(10**400) is None
        assert StatusMapper.extract_float(payload, "n") is None
        assert StatusMapper.extract_float(payload, "progress") is None
        assert StatusMapper.extract_timestamp(payload, "create_time") == datetime(1970, 1, 1, tzinfo=pytz.utc)

    def test_string_requires_str(self):
        assert StatusMapper.extract_string({"id": 17}, "id") is None
        assert StatusMapper.extract_string({"id": "r-1"}, "id") == "r-1"


class TestArrayExtractors:
    def test_wrong_elements_are_dropped(self):
        payload = {"keywords": ["tax", 3, None, "2024"], "vector": [0.1, "0.2", "x", False]}

        assert StatusMapper.extract_string_list(payload, "keywords") == ["tax", "2024"]
        assert StatusMapper.extract_float_list(payload, "vector") == [0.1, 0.2]

    def test_all_invalid_is_empty_not_absent(self):
        assert StatusMapper.extract_string_list({"keywords": [1, 2]}, "keywords") == []
        assert StatusMapper.extract_list({"positions": ["a"]}, "positions") == []
        assert StatusMapper.extract_mapping({"metadata": {1: "x"}}, "metadata") == {}

    def test_absent_or_wrong_container_is_none(self):
        assert StatusMapper.extract_string_list({}, "keywords") is None
        assert StatusMapper.extract_string_list({"keywords": "tax"}, "keywords") is None
        assert StatusMapper.extract_mapping({"metadata": []}, "metadata") is None


@pytest.mark.parametrize(
    "run, status",
    [
        ("UNSTART", DocumentStatus.UPLOADED),
        ("RUNNING", DocumentStatus.PROCESSING),
        ("CANCEL", DocumentStatus.PENDING),
        ("DONE", DocumentStatus.COMPLETED),
        ("FAIL", DocumentStatus.SYNC_FAILED),
        ("parsed", DocumentStatus.COMPLETED),
        ("3", DocumentStatus.COMPLETED),
        (4, DocumentStatus.SYNC_FAILED),
        ("bogus", None),
        (None, None),
    ],
)
def test_map_run_status(run, status):
    assert StatusMapper.map_run_status(run) is status


def test_apply_document_payload():
    document = Document(dataset_id=1, name="old", size=10)

    StatusMapper.apply_document_payload(
        document,
        {
            "id": "r-9",
            "name": "contract.pdf",
            "location": "contract.pdf",
            "type": "pdf",
            "size": "not a size",
            "chunk_count": 12,
            "progress": 0.5,
            "progress_msg": "embedding",
            "run": "RUNNING",
            "create_time": 1700000000000,
        },
    )

    assert document.remote_id == "r-9"
    assert document.name == "contract.pdf"
    assert document.filename == "contract.pdf"
    assert document.size == 10
    assert document.chunk_count == 12
    assert document.progress == 50.0
    assert document.status is DocumentStatus.PROCESSING
    assert document.remote_create_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=pytz.utc)
    assert document.remote_update_time is None


def test_apply_chunk_payload():
    chunk = Chunk(remote_id="c-1", document_id=1)

    StatusMapper.apply_chunk_payload(
        chunk,
        {
            "content": "Total due: 420 EUR",
            "important_keywords": ["invoice", 1],
            "positions": [[1, 10, 20, 30, 40], "bad"],
            "token_count": "6",
        },
    )

    assert chunk.content == "Total due: 420 EUR"
    assert chunk.keywords == ["invoice"]
    assert chunk.positions == [[1, 10, 20, 30, 40]]
    assert chunk.token_count == 6
    assert chunk.embedding_vector is None


def test_build_chunk_requires_remote_id():
    assert StatusMapper.build_chunk(1, {"content": "no id"}) is None
    assert StatusMapper.build_chunk(1, "not a mapping") is None
    assert StatusMapper.build_chunk(1, {"id": "c-1"}).remote_id == "c-1"

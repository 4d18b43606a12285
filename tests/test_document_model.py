from datetime import datetime

import pydantic
import pytest
import pytz

from shared.models.document import Document, DocumentStatus, DocumentTransition


def test_dataset_id_is_fixed_after_creation():
    document = Document(dataset_id=1, name="a.pdf")

    with pytest.raises(pydantic.ValidationError):
        document.dataset_id = 2

    assert document.dataset_id == 1


@pytest.mark.parametrize("remote_id, expected", [(None, True), ("", True), ("r-1", False)])
def test_upload_required_until_remote_id_is_known(remote_id, expected):
    assert Document(dataset_id=1, remote_id=remote_id).is_upload_required() is expected


@pytest.mark.parametrize(
    "transition, status",
    [
        (DocumentTransition.UPLOAD_STARTED, DocumentStatus.UPLOADING),
        (DocumentTransition.UPLOAD_SUCCEEDED, DocumentStatus.UPLOADED),
        (DocumentTransition.UPLOAD_FAILED, DocumentStatus.SYNC_FAILED),
        (DocumentTransition.PARSE_STARTED, DocumentStatus.PROCESSING),
        (DocumentTransition.PARSE_STOPPED, DocumentStatus.PENDING),
    ],
)
def test_every_transition_has_a_target(transition, status):
    assert transition.target_status is status


def test_parse_transitions_reset_progress():
    document = Document(dataset_id=1, progress=55.0, progress_msg="chunking")

    document.apply_transition(DocumentTransition.PARSE_STARTED)
    assert (document.status, document.progress, document.progress_msg) == (DocumentStatus.PROCESSING, 0.0, "reparsing")

    document.apply_transition(DocumentTransition.PARSE_STOPPED)
    assert (document.status, document.progress, document.progress_msg) == (DocumentStatus.PENDING, None, "parsing stopped")


def test_upload_success_records_sync_time():
    now = datetime(2024, 5, 1, 12, 0, tzinfo=pytz.utc)
    document = Document(dataset_id=1)

    document.apply_transition(DocumentTransition.UPLOAD_SUCCEEDED, now=now)

    assert document.status is DocumentStatus.UPLOADED
    assert document.last_sync_time == now


def test_status_predicates():
    assert DocumentStatus.SYNC_FAILED.is_failed()
    assert DocumentStatus.PROCESSING.is_processing()
    assert DocumentStatus.UPLOADING.is_processing()
    assert DocumentStatus.COMPLETED.is_completed()
    assert not DocumentStatus.UPLOADED.is_completed()
    assert DocumentStatus.SYNC_FAILED.label == "Sync failed"

import pytest

from services.document_sync.DocumentRetryHandler import DocumentRetryHandler
from shared.models.document import Dataset, Document, DocumentStatus
from shared.models.errors import DocumentOperationError, RAGClientError


@pytest.fixture
def handler(helper_config, rag_client, document_repository) -> DocumentRetryHandler:
    return DocumentRetryHandler(helper_config, rag_client, document_repository)


class TestShouldRetry:
    @pytest.mark.parametrize("file_path", [None, "", "/does/not/exist", "stored"])
    def test_uploaded_documents_are_never_retried(self, handler, stored_file, file_path):
        document = Document(dataset_id=1, remote_id="r-1", file_path=stored_file if file_path == "stored" else file_path)

        assert handler.should_retry(document) is False

    def test_failed_document_with_file_is_retried(self, handler, failed_document):
        assert handler.should_retry(failed_document) is True

    @pytest.mark.parametrize("file_path", [None, "", "/does/not/exist"])
    def test_missing_file_is_not_retried(self, handler, file_path):
        assert handler.should_retry(Document(dataset_id=1, file_path=file_path)) is False


class TestProcessRetry:
    def test_successful_retry(self, handler, rag_client, dataset, failed_document, stored_file):
        rag_client.do_upload_document.return_value = {"code": 0, "data": [{"id": "remote123", "name": "test.txt"}]}

        handler.process_retry(failed_document, dataset)

        rag_client.do_upload_document.assert_called_once_with("ds-remote", stored_file, filename="test.txt")
        assert failed_document.status is DocumentStatus.UPLOADED
        assert failed_document.remote_id == "remote123"
        assert failed_document.last_sync_time is not None

    def test_empty_response_still_marks_uploaded(self, handler, rag_client, dataset, failed_document):
        rag_client.do_upload_document.return_value = {"data": []}

        handler.process_retry(failed_document, dataset)

        assert failed_document.status is DocumentStatus.UPLOADED
        assert failed_document.remote_id is None

    def test_already_uploaded_document_is_not_uploaded_again(self, handler, rag_client, dataset, uploaded_document):
        with pytest.raises(DocumentOperationError):
            handler.process_retry(uploaded_document, dataset)

        rag_client.do_upload_document.assert_not_called()
        assert uploaded_document.status is DocumentStatus.UPLOADED

    def test_dataset_without_remote_id(self, handler, rag_client, failed_document):
        with pytest.raises(DocumentOperationError):
            handler.process_retry(failed_document, Dataset(id=5, name="local only"))

        rag_client.do_upload_document.assert_not_called()

    def test_upload_failure_propagates(self, handler, rag_client, dataset, failed_document):
        rag_client.do_upload_document.side_effect = RAGClientError("quota exceeded")

        with pytest.raises(RAGClientError):
            handler.process_retry(failed_document, dataset)

        assert failed_document.status is DocumentStatus.UPLOADING


class TestUpdateAfterRetry:
    @pytest.mark.parametrize(
        "result",
        [{}, {"data": None}, {"data": ["r-1"]}, {"data": [{"id": 42}]}, {"data": [{"id": ""}]}, {"data": {"id": "r-1"}}],
    )
    def test_malformed_responses_leave_remote_id_unset(self, handler, failed_document, result):
        handler.update_after_retry(failed_document, result)

        assert failed_document.remote_id is None
        assert failed_document.status is DocumentStatus.UPLOADED

    def test_takes_first_entry(self, handler, failed_document):
        handler.update_after_retry(failed_document, {"data": [{"id": "first"}, {"id": "second"}]})

        assert failed_document.remote_id == "first"


def test_handle_error_marks_document_failed(handler, document_repository, failed_document):
    failed_document.status = DocumentStatus.UPLOADING

    message = handler.handle_error(failed_document, RAGClientError("quota exceeded"))

    assert message == "Retry of document 'test.txt' failed: quota exceeded"
    assert document_repository.find(failed_document.id).status is DocumentStatus.SYNC_FAILED

"""Upload retry for documents that never reached the remote service."""

from datetime import datetime
import os

import pytz

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Dataset, Document, DocumentTransition
from shared.models.errors import DocumentOperationError
from shared.repositories.RepositoryInterface import DocumentRepositoryInterface


class DocumentRetryHandler:
    """
    Re-uploads documents whose upload failed or never happened.

    A document with a remote id is never uploaded again, so a retry can not
    create a second remote copy of the same file.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        document_repository: DocumentRepositoryInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._documents = document_repository

    def should_retry(self, document: Document) -> bool:
        """True if the document still needs an upload and its stored file exists."""
        return document.is_upload_required() and self._has_local_file(document)

    def process_retry(self, document: Document, dataset: Dataset) -> None:
        """Uploads the document's stored file into the dataset's remote counterpart.

        Args:
            document (Document): The document to upload.
            dataset (Dataset): The owning dataset.

        Raises:
            DocumentOperationError: If the document is already uploaded, has no stored
                file, or the dataset has no remote id.
            RAGClientError | httpx.HTTPError | OSError: If the upload itself fails.
        """
        if not document.is_upload_required():
            raise DocumentOperationError.already_uploaded(document.name, document.remote_id)
        if not self._has_local_file(document):
            raise DocumentOperationError.upload_failed(document.name, "stored file is missing")
        if not dataset.has_remote_id():
            raise DocumentOperationError.dataset_not_found(str(dataset.id))

        document.apply_transition(DocumentTransition.UPLOAD_STARTED)
        self._documents.save(document)

        filename = document.filename or document.name or None
        self.logging.info("Uploading document %s from %s", document.id, document.file_path)
        result = self._rag_client.do_upload_document(dataset.remote_id, document.file_path, filename=filename)
        self.update_after_retry(document, result)

    def update_after_retry(self, document: Document, result: dict) -> None:
        """Records a finished upload on the document.

        The remote id is taken from the first entry of result["data"]. The
        document is marked UPLOADED even if no id could be read, so it will not
        be picked up for another upload by status alone.
        """
        data = result.get("data") if isinstance(result, dict) else None
        first = data[0] if isinstance(data, list) and data else None
        remote_id = first.get("id") if isinstance(first, dict) else None

        if isinstance(remote_id, str) and remote_id:
            document.remote_id = remote_id
        else:
            self.logging.warning("Upload of document %s returned no remote id; marking it uploaded anyway", document.id)

        document.apply_transition(DocumentTransition.UPLOAD_SUCCEEDED, now=datetime.now(pytz.utc))
        self._documents.save(document)

    def handle_error(self, document: Document, error: Exception) -> str:
        """Marks the document as failed and returns the error line reported to the caller."""
        document.apply_transition(DocumentTransition.UPLOAD_FAILED)
        self._documents.save(document)
        message = f"Retry of document '{document.name}' failed: {error}"
        self.logging.error(message)
        return message

    @staticmethod
    def _has_local_file(document: Document) -> bool:
        return bool(document.file_path) and os.path.isfile(document.file_path)

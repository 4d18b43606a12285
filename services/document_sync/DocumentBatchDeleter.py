"""Deletion of documents from the local store, mirrored best-effort to the remote service."""

import os

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Document
from shared.models.errors import DocumentOperationError
from shared.models.results import BatchDeleteResult
from shared.repositories.RepositoryInterface import (
    ChunkRepositoryInterface,
    DatasetRepositoryInterface,
    DocumentRepositoryInterface,
)


class DocumentBatchDeleter:
    """
    Deletes documents by id. The local delete is authoritative: a document is
    removed locally even when the remote service could not be reached.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        dataset_repository: DatasetRepositoryInterface,
        document_repository: DocumentRepositoryInterface,
        chunk_repository: ChunkRepositoryInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._datasets = dataset_repository
        self._documents = document_repository
        self._chunks = chunk_repository

    def batch_delete(self, dataset_id: int, document_ids: list[int]) -> BatchDeleteResult:
        """Deletes the given documents of a dataset.

        Every id ends up either counted as deleted or reported as an error; a
        failing item never aborts the batch.

        Args:
            dataset_id (int): Local id of the dataset the documents must belong to.
            document_ids (list[int]): Local ids of the documents, processed in order.

        Returns:
            BatchDeleteResult: Number of deleted documents and one error line per failed id.
        """
        result = BatchDeleteResult()
        for document_id in document_ids:
            document = self._documents.find(document_id)
            if document is None:
                result.errors.append(str(DocumentOperationError.document_not_found(document_id)))
                continue
            if document.dataset_id != dataset_id:
                result.errors.append(f"Document {document_id} not belongs to this dataset")
                continue
            try:
                self.delete_document(document)
                result.deleted_count += 1
            except Exception as e:
                self.logging.error("Deleting document %s failed: %s", document_id, e)
                result.errors.append(f"Delete document {document_id} failed: {e}")

        self.logging.info("Batch delete in dataset %s: %d deleted, %d errors", dataset_id, result.deleted_count, len(result.errors))
        return result

    def delete_document(self, document: Document) -> None:
        """Deletes one document: its remote copy and stored file best-effort, then its chunks and record.

        Raises:
            Exception: Only if removing the local chunks or record fails.
        """
        dataset = self._datasets.find(document.dataset_id)
        if document.has_remote_id() and dataset is not None and dataset.has_remote_id():
            try:
                self._rag_client.do_delete_document(dataset.remote_id, document.remote_id)
            except Exception as e:
                self.logging.warning("Remote delete of document %s (%s) failed, deleting locally only: %s", document.id, document.remote_id, e)

        self._delete_stored_file(document)
        removed_chunks = self._chunks.delete_for_document(document.id)
        self._documents.delete(document)
        self.logging.debug("Deleted document %s and %d chunks", document.id, removed_chunks)

    def _delete_stored_file(self, document: Document) -> None:
        if not document.file_path or not os.path.isfile(document.file_path):
            return
        try:
            os.remove(document.file_path)
        except OSError as e:
            self.logging.warning("Could not remove stored file %s of document %s: %s", document.file_path, document.id, e)

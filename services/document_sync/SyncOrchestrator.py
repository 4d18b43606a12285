"""Document synchronisation service.

Wires the single-document components (retry, parse control, chunk sync,
deletion) to one RAG client and the local repositories, and runs them over
whole datasets. Items are processed strictly in order; a failing item is
recorded in the batch result and the batch moves on.
"""

from datetime import datetime
import mimetypes
import os
from typing import Callable

import pytz

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Dataset, Document
from shared.models.errors import DocumentOperationError
from shared.models.results import BatchDeleteResult, BatchSyncResult, DatasetDocumentStats, OperationResult
from shared.repositories.RepositoryInterface import (
    ChunkRepositoryInterface,
    DatasetRepositoryInterface,
    DocumentRepositoryInterface,
)
from services.document_sync import StatusMapper
from services.document_sync.DocumentBatchDeleter import DocumentBatchDeleter
from services.document_sync.DocumentChunkSyncer import DocumentChunkSyncer
from services.document_sync.DocumentRetryHandler import DocumentRetryHandler
from services.document_sync.DocumentStatusUpdater import DocumentStatusUpdater

ShouldContinue = Callable[[], bool] | None


class SyncOrchestrator:
    """Runs the document sync operations for one remote service over the local store."""

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

        self.status_updater = DocumentStatusUpdater(helper_config, rag_client, document_repository)
        self.retry_handler = DocumentRetryHandler(helper_config, rag_client, document_repository)
        self.chunk_syncer = DocumentChunkSyncer(helper_config, rag_client, document_repository, chunk_repository)
        self.batch_deleter = DocumentBatchDeleter(
            helper_config, rag_client, dataset_repository, document_repository, chunk_repository
        )

    ##########################################
    ################# UPLOAD #################
    ##########################################

    def retry_failed_documents(self, dataset: Dataset, should_continue: ShouldContinue = None) -> BatchSyncResult:
        """Re-uploads every document of the dataset that still needs an upload and has its file.

        Args:
            dataset (Dataset): The dataset to process.
            should_continue (Callable[[], bool] | None): Checked before each item; returning False stops the batch.

        Returns:
            BatchSyncResult: Retried documents in synced_count, one error line per failed document.
        """
        result = BatchSyncResult()
        if not dataset.has_remote_id():
            return result.add_error(f"Dataset '{dataset.name}' has no remote counterpart")

        candidates = [doc for doc in self._documents.find_by_dataset(dataset.id) if self.retry_handler.should_retry(doc)]
        self.logging.info("Retrying %d documents of dataset %s", len(candidates), dataset.id)

        for document in candidates:
            if not self._may_continue(should_continue):
                break
            try:
                self.retry_handler.process_retry(document, dataset)
                result.add_success()
            except Exception as e:
                result.add_error(self.retry_handler.handle_error(document, e))

        self.logging.info("Retry of dataset %s finished: %d retried, %d errors", dataset.id, result.synced_count, len(result.errors))
        return result

    def retry_document(self, document: Document, dataset: Dataset) -> OperationResult:
        """Retries the upload of a single document if it is eligible."""
        if not dataset.has_remote_id():
            return OperationResult(success=False, message=f"Dataset '{dataset.name}' has no remote counterpart")
        if not self.retry_handler.should_retry(document):
            return OperationResult(success=False, message=f"Document '{document.name}' is already uploaded or has no stored file")
        try:
            self.retry_handler.process_retry(document, dataset)
        except Exception as e:
            return OperationResult(success=False, message=self.retry_handler.handle_error(document, e), error=str(e))
        return OperationResult(success=True, message=f"Document '{document.name}' uploaded", data={"remote_id": document.remote_id})

    def upload_document(self, dataset: Dataset, file_path: str, filename: str | None = None) -> OperationResult:
        """Registers a new local file as a PENDING document of the dataset and uploads it.

        The document is stored before the upload starts, so a failed upload leaves a
        SYNC_FAILED document that retry_failed_documents() picks up later.

        Args:
            dataset (Dataset): The target dataset.
            file_path (str): Path of the stored file.
            filename (str | None): Original filename. Defaults to the file's basename.

        Returns:
            OperationResult: The local document id (and remote id on success) in data.
        """
        if not dataset.has_remote_id():
            return OperationResult(success=False, message=f"Dataset '{dataset.name}' has no remote counterpart")
        if not os.path.isfile(file_path):
            return OperationResult(success=False, message=str(DocumentOperationError.upload_failed(filename or file_path, "stored file is missing")))

        filename = filename or os.path.basename(file_path)
        document = self._documents.save(
            Document(
                dataset_id=dataset.id,
                name=filename,
                filename=filename,
                file_path=file_path,
                mime_type=mimetypes.guess_type(filename)[0],
                size=os.path.getsize(file_path),
            )
        )
        try:
            self.retry_handler.process_retry(document, dataset)
        except Exception as e:
            message = self.retry_handler.handle_error(document, e)
            return OperationResult(success=False, message=message, data={"document_id": document.id}, error=str(e))
        return OperationResult(
            success=True,
            message=f"Document '{filename}' uploaded",
            data={"document_id": document.id, "remote_id": document.remote_id},
        )

    ##########################################
    ############## REMOTE STATE ##############
    ##########################################

    def sync_dataset_documents(self, dataset: Dataset, should_continue: ShouldContinue = None) -> BatchSyncResult:
        """Ingests the remote document listing of a dataset, upserting local documents by remote id.

        Entries without a usable id are skipped.
        """
        result = BatchSyncResult()
        if not dataset.has_remote_id():
            return result.add_error(f"Dataset '{dataset.name}' has no remote counterpart")

        try:
            listing = self._rag_client.do_fetch_documents(dataset.remote_id)
        except Exception as e:
            self.logging.error("Listing documents of dataset %s failed: %s", dataset.remote_id, e)
            return result.add_error(f"Listing documents of dataset '{dataset.name}' failed: {e}")

        now = datetime.now(pytz.utc)
        for payload in listing:
            if not self._may_continue(should_continue):
                break
            remote_id = StatusMapper.extract_string(payload, "id") if isinstance(payload, dict) else None
            if not remote_id:
                result.add_skip()
                continue
            try:
                document = self._documents.find_by_remote_id(dataset.id, remote_id)
                if document is None:
                    document = Document(dataset_id=dataset.id)
                StatusMapper.apply_document_payload(document, payload)
                document.last_sync_time = now
                self._documents.save(document)
                result.add_success()
            except Exception as e:
                self.logging.error("Ingesting remote document %s failed: %s", remote_id, e)
                result.add_error(f"Ingest of remote document {remote_id} failed: {e}")

        self.logging.info("Ingested %d remote documents of dataset %s (%d skipped)", result.synced_count, dataset.id, result.skipped_count)
        return result

    def poll_dataset_status(self, dataset: Dataset, should_continue: ShouldContinue = None) -> int:
        """Polls the parse status of every uploaded document of the dataset.

        Returns:
            int: Number of documents polled.
        """
        if not dataset.has_remote_id():
            return 0
        polled = 0
        for document in self._documents.find_by_dataset(dataset.id):
            if not self._may_continue(should_continue):
                break
            if not document.has_remote_id():
                continue
            self.status_updater.update_from_api(document, dataset)
            polled += 1
        return polled

    def sync_all_chunks(self, dataset: Dataset, should_continue: ShouldContinue = None) -> BatchSyncResult:
        """Mirrors the remote chunks of every uploaded document of the dataset.

        Documents without a remote id are counted as skipped.
        """
        result = BatchSyncResult()
        if not dataset.has_remote_id():
            return result.add_error(f"Dataset '{dataset.name}' has no remote counterpart")

        for document in self._documents.find_by_dataset(dataset.id):
            if not self._may_continue(should_continue):
                break
            if not document.has_remote_id():
                result.add_skip()
                continue
            try:
                self.chunk_syncer.sync_chunks(document, dataset)
                result.add_success()
            except Exception as e:
                self.logging.error("Chunk sync of document %s failed: %s", document.id, e)
                result.add_error(f"Chunk sync of document '{document.name}' failed: {e}")

        self.logging.info("Chunk sync of dataset %s finished: %d synced, %d errors", dataset.id, result.synced_count, len(result.errors))
        return result

    ##########################################
    ################# STATS ##################
    ##########################################

    def get_dataset_stats(self, dataset: Dataset) -> DatasetDocumentStats:
        """Counts the local documents of a dataset per status, plus their total size in bytes."""
        stats = DatasetDocumentStats()
        for document in self._documents.find_by_dataset(dataset.id):
            stats.add(document)
        return stats

    ##########################################
    ################ DELETION ################
    ##########################################

    def delete_document(self, document: Document) -> None:
        self.batch_deleter.delete_document(document)

    def batch_delete(self, dataset_id: int, document_ids: list[int]) -> BatchDeleteResult:
        return self.batch_deleter.batch_delete(dataset_id, document_ids)

    @staticmethod
    def _may_continue(should_continue: ShouldContinue) -> bool:
        return should_continue is None or should_continue()

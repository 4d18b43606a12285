"""Mirroring of remote chunks into the local chunk store."""

from datetime import datetime

import pytz

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Dataset, Document
from shared.models.errors import DocumentOperationError
from shared.models.results import OperationResult
from shared.repositories.RepositoryInterface import ChunkRepositoryInterface, DocumentRepositoryInterface
from services.document_sync import StatusMapper


class DocumentChunkSyncer:
    """Replaces the local chunk set of a document with the chunks the remote service currently holds."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        document_repository: DocumentRepositoryInterface,
        chunk_repository: ChunkRepositoryInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._documents = document_repository
        self._chunks = chunk_repository

    def sync_chunks(self, document: Document, dataset: Dataset) -> tuple[int, int]:
        """Fetches all remote chunks of a document and stores them locally.

        Args:
            document (Document): An uploaded document.
            dataset (Dataset): The owning dataset.

        Returns:
            tuple[int, int]: Number of chunks stored and number of chunks the service returned.

        Raises:
            RAGClientError | httpx.HTTPError: If the chunks can not be fetched.
        """
        raw_chunks = self._rag_client.do_fetch_chunks(dataset.remote_id, document.remote_id)
        now = datetime.now(pytz.utc)

        chunks = []
        for raw in raw_chunks:
            chunk = StatusMapper.build_chunk(document.id, raw, now=now)
            if chunk is None:
                self.logging.debug("Skipping chunk without id of document %s", document.id)
                continue
            chunks.append(chunk)

        self._chunks.replace_for_document(document.id, chunks)
        document.chunk_count = len(chunks)
        document.last_sync_time = now
        self._documents.save(document)
        return len(chunks), len(raw_chunks)

    def sync_document_chunks(self, document: Document, dataset: Dataset) -> OperationResult:
        """Like sync_chunks(), reporting preconditions and remote failures as a result instead of raising."""
        if not document.has_remote_id():
            return OperationResult(success=False, message=f"Document '{document.name}' is not uploaded to the remote service")
        if not dataset.has_remote_id():
            return OperationResult(success=False, message=f"Dataset '{dataset.name}' has no remote counterpart")

        try:
            synced, total = self.sync_chunks(document, dataset)
        except Exception as e:
            message = str(DocumentOperationError.sync_failed(document.id, str(e)))
            self.logging.error(message)
            return OperationResult(success=False, message=message, error=str(e))

        self.logging.info("Synced %d chunks of document %s", synced, document.id)
        return OperationResult(
            success=True,
            message=f"Synced {synced} chunks",
            data={"synced_count": synced, "total_count": total},
        )

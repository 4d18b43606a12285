"""Parse control and parse status polling for single documents."""

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Dataset, Document, DocumentTransition
from shared.models.errors import DocumentOperationError
from shared.models.results import OperationResult, RemoteResult
from shared.repositories.RepositoryInterface import DocumentRepositoryInterface
from services.document_sync import StatusMapper


class DocumentStatusUpdater:
    """Starts and stops remote parsing and reconciles the reported progress into the local store."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        document_repository: DocumentRepositoryInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._documents = document_repository

    ##########################################
    ############# PARSE CONTROL ##############
    ##########################################

    def reparse(self, document: Document, dataset: Dataset) -> OperationResult:
        """Asks the remote service to (re)parse an uploaded document.

        On success the document moves to PROCESSING with its progress reset.
        Failures are reported in the result; the document status is left untouched.

        Args:
            document (Document): The document to parse.
            dataset (Dataset): The owning dataset.

        Returns:
            OperationResult: success plus the raw remote payload in data, or the failure.
        """
        precondition = self._check_preconditions(document, dataset)
        if precondition is not None:
            return precondition

        try:
            payload = self._rag_client.do_parse_chunks(dataset.remote_id, [document.remote_id])
        except Exception as e:
            message = str(DocumentOperationError.parse_failed(str(document.id), str(e)))
            self.logging.error(message)
            return OperationResult(success=False, message=message, error=str(e))

        document.apply_transition(DocumentTransition.PARSE_STARTED)
        self._documents.save(document)
        self.logging.info("Started parsing of document %s (%s)", document.id, document.remote_id)
        return OperationResult(success=True, message="Parsing started", data=payload)

    def stop_parsing(self, document: Document, dataset: Dataset) -> OperationResult:
        """Asks the remote service to stop parsing a document. On success the document returns to PENDING."""
        precondition = self._check_preconditions(document, dataset)
        if precondition is not None:
            return precondition

        try:
            payload = self._rag_client.do_stop_parsing(dataset.remote_id, [document.remote_id])
        except Exception as e:
            self.logging.error("Stopping parsing of document %s failed: %s", document.id, e)
            return OperationResult(success=False, message="Failed to stop parsing", error=str(e))

        document.apply_transition(DocumentTransition.PARSE_STOPPED)
        self._documents.save(document)
        self.logging.info("Stopped parsing of document %s (%s)", document.id, document.remote_id)
        return OperationResult(success=True, message="Parsing stopped", data=payload)

    ##########################################
    ################ POLLING #################
    ##########################################

    def update_from_api(self, document: Document, dataset: Dataset) -> None:
        """Copies the remote parse progress onto the document.

        Polling never changes the document status and never raises: a failed
        remote call is logged and dropped, leaving the document as it was.
        """
        if not document.has_remote_id() or not dataset.has_remote_id():
            return

        result = self.fetch_parse_status(document, dataset)
        if not result.ok:
            self.logging.warning("Polling parse status of document %s failed: %s", document.id, result.error)
            return

        StatusMapper.apply_parse_status(document, result.value)
        self._documents.save(document)
        self.logging.debug("Polled document %s: progress=%s chunks=%s", document.id, document.progress, document.chunk_count)

    def fetch_parse_status(self, document: Document, dataset: Dataset) -> RemoteResult:
        """Fetches the parse status of a document. Any failure of the call is captured in the result, never raised."""
        try:
            status = self._rag_client.do_fetch_parse_status(dataset.remote_id, document.remote_id)
        except Exception as e:
            return RemoteResult(error=f"{type(e).__name__}: {e}")
        if not isinstance(status, dict):
            return RemoteResult(error=f"unexpected parse status payload: {status!r}")
        return RemoteResult(value=status)

    ##########################################
    ################ HELPERS #################
    ##########################################

    def _check_preconditions(self, document: Document, dataset: Dataset) -> OperationResult | None:
        if not document.has_remote_id():
            return OperationResult(success=False, message=f"Document '{document.name}' is not uploaded to the remote service")
        if not dataset.has_remote_id():
            return OperationResult(success=False, message=f"Dataset '{dataset.name}' has no remote counterpart")
        return None

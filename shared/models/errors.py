"""Error types shared by the RAG client and the document sync services."""


class RAGClientError(Exception):
    """
    Raised when the remote RAG service answers with a non-2xx status, a body that is not
    JSON, or a JSON envelope whose ``code`` is not 0.

    Attributes:
        status_code (int | None): HTTP status of the response, if one was received.
        error_code (int | None): The ``code`` field of the RAGFlow envelope, if present.
        details (str | None): Raw response text for diagnostics.
    """

    def __init__(self, message: str, status_code: int | None = None, error_code: int | None = None, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.details = details


class DocumentOperationError(Exception):
    """
    A document operation could not run because a local precondition does not hold
    (missing remote id, missing file, unknown dataset).

    Attributes:
        document_id (int | str | None): Local id of the affected document, if known.
        operation (str | None): Short name of the failed operation (e.g. "upload").
    """

    def __init__(self, message: str, document_id: int | str | None = None, operation: str | None = None):
        super().__init__(message)
        self.document_id = document_id
        self.operation = operation

    @classmethod
    def upload_failed(cls, document_name: str, reason: str) -> "DocumentOperationError":
        return cls(f"Upload of document '{document_name}' failed: {reason}", operation="upload")

    @classmethod
    def already_uploaded(cls, document_name: str, remote_id: str) -> "DocumentOperationError":
        return cls(f"Document '{document_name}' is already uploaded as '{remote_id}'", operation="upload")

    @classmethod
    def parse_failed(cls, document_id: int | str, reason: str) -> "DocumentOperationError":
        return cls(f"Parsing of document {document_id} failed: {reason}", document_id=document_id, operation="parse")

    @classmethod
    def sync_failed(cls, document_id: int | str, reason: str) -> "DocumentOperationError":
        return cls(f"Sync of document {document_id} failed: {reason}", document_id=document_id, operation="sync")

    @classmethod
    def dataset_not_found(cls, dataset_id: int | str) -> "DocumentOperationError":
        return cls(f"Dataset {dataset_id} has no remote counterpart", operation="dataset_lookup")

    @classmethod
    def document_not_found(cls, document_id: int | str) -> "DocumentOperationError":
        return cls(f"Document {document_id} not found", document_id=document_id, operation="document_lookup")

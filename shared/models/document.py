"""Local store-of-record models for datasets, documents and their chunks."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DocumentStatus(str, Enum):
    """
    Lifecycle of a document between the local store and the remote RAG service.

    PENDING -> UPLOADING -> UPLOADED -> PROCESSING -> COMPLETED, with SYNC_FAILED
    reachable from UPLOADING / PROCESSING and PENDING reachable from PROCESSING
    through an explicit stop.
    """

    PENDING = "pending"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SYNC_FAILED = "sync_failed"

    @property
    def label(self) -> str:
        match self:
            case DocumentStatus.PENDING:
                return "Pending"
            case DocumentStatus.UPLOADING:
                return "Uploading"
            case DocumentStatus.UPLOADED:
                return "Uploaded"
            case DocumentStatus.PROCESSING:
                return "Processing"
            case DocumentStatus.COMPLETED:
                return "Completed"
            case DocumentStatus.SYNC_FAILED:
                return "Sync failed"

    def is_failed(self) -> bool:
        return self is DocumentStatus.SYNC_FAILED

    def is_processing(self) -> bool:
        return self in (DocumentStatus.UPLOADING, DocumentStatus.PROCESSING)

    def is_completed(self) -> bool:
        return self is DocumentStatus.COMPLETED


class DocumentTransition(str, Enum):
    """
    The status changes the sync engine is allowed to apply to a document.

    There is no polling transition: reading the remote parse status never moves
    a document to another state.
    """

    UPLOAD_STARTED = "upload_started"
    UPLOAD_SUCCEEDED = "upload_succeeded"
    UPLOAD_FAILED = "upload_failed"
    PARSE_STARTED = "parse_started"
    PARSE_STOPPED = "parse_stopped"

    @property
    def target_status(self) -> DocumentStatus:
        match self:
            case DocumentTransition.UPLOAD_STARTED:
                return DocumentStatus.UPLOADING
            case DocumentTransition.UPLOAD_SUCCEEDED:
                return DocumentStatus.UPLOADED
            case DocumentTransition.UPLOAD_FAILED:
                return DocumentStatus.SYNC_FAILED
            case DocumentTransition.PARSE_STARTED:
                return DocumentStatus.PROCESSING
            case DocumentTransition.PARSE_STOPPED:
                return DocumentStatus.PENDING


PROGRESS_MSG_REPARSING = "reparsing"
PROGRESS_MSG_STOPPED = "parsing stopped"


class Dataset(BaseModel):
    """
    Ownership boundary for documents. The remote id scopes every per-document remote call.
    """
    id: int | None = None
    remote_id: str | None = None
    name: str = ""
    description: str | None = None

    def has_remote_id(self) -> bool:
        return bool(self.remote_id)


class Document(BaseModel):
    """
    A file and its processing lifecycle, paired with an optional remote counterpart.

    The owning dataset is fixed at creation time; assigning dataset_id afterwards raises.
    """
    # identity
    id: int | None = None
    remote_id: str | None = None
    dataset_id: int = Field(frozen=True)

    # descriptive
    name: str = ""
    filename: str | None = None
    file_path: str | None = None
    mime_type: str | None = None
    type: str | None = None
    size: int | None = None
    language: str | None = None
    summary: str | None = None

    # lifecycle
    status: DocumentStatus = DocumentStatus.PENDING
    progress: float | None = None
    progress_msg: str | None = None
    chunk_count: int | None = None

    # sync bookkeeping
    remote_create_time: datetime | None = None
    remote_update_time: datetime | None = None
    last_sync_time: datetime | None = None

    def has_remote_id(self) -> bool:
        return bool(self.remote_id)

    def is_upload_required(self) -> bool:
        """True while the remote service has not confirmed an id for this document."""
        return not self.has_remote_id()

    def apply_transition(self, transition: DocumentTransition, now: datetime | None = None) -> None:
        """Apply one of the allowed status transitions together with its side effects.

        Args:
            transition (DocumentTransition): The transition to apply.
            now (datetime | None): Timestamp recorded as last_sync_time on a successful upload.
        """
        self.status = transition.target_status
        match transition:
            case DocumentTransition.UPLOAD_SUCCEEDED:
                self.last_sync_time = now
            case DocumentTransition.PARSE_STARTED:
                self.progress = 0.0
                self.progress_msg = PROGRESS_MSG_REPARSING
            case DocumentTransition.PARSE_STOPPED:
                self.progress = None
                self.progress_msg = PROGRESS_MSG_STOPPED
            case DocumentTransition.UPLOAD_STARTED | DocumentTransition.UPLOAD_FAILED:
                pass


class Chunk(BaseModel):
    """
    A fragment of a parsed document. Always derived from the remote service, never authored locally.
    """
    id: int | None = None
    remote_id: str
    document_id: int

    content: str = ""
    content_with_weight: str | None = None
    position: int | None = None
    size: int | None = None
    page_number: int | None = None
    start_pos: int | None = None
    end_pos: int | None = None
    token_count: int | None = None
    similarity_score: float | None = None

    # list fields: None = absent in the payload, [] = present but empty
    positions: list | None = None
    embedding_vector: list[float] | None = None
    keywords: list[str] | None = None
    metadata: dict | None = None

    remote_create_time: datetime | None = None
    remote_update_time: datetime | None = None
    last_sync_time: datetime | None = None

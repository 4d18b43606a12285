"""Structured outcomes returned by the document sync operations."""

from typing import Any

from pydantic import BaseModel, Field

from shared.models.document import Document, DocumentStatus


class OperationResult(BaseModel):
    """
    Outcome of a single-document operation such as reparse or stop parsing.

    Attributes:
        success: Whether the operation reached its target state.
        message: Human-readable summary for the caller.
        data: Raw remote payload (or operation details) on success.
        error: Underlying error text when a remote call failed.
    """
    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None


class BatchDeleteResult(BaseModel):
    """Per-item outcome of a batch delete. deleted_count + len(errors) == number of requested ids."""
    deleted_count: int = 0
    errors: list[str] = []


class BatchSyncResult(BaseModel):
    """
    Accumulated outcome of a dataset-wide operation (bulk retry, chunk sync, listing ingestion).

    The batch call itself never fails; only individual items do.
    """
    synced_count: int = 0
    skipped_count: int = 0
    errors: list[str] = []

    def add_success(self) -> "BatchSyncResult":
        self.synced_count += 1
        return self

    def add_skip(self) -> "BatchSyncResult":
        self.skipped_count += 1
        return self

    def add_error(self, error: str) -> "BatchSyncResult":
        self.errors.append(error)
        return self


class RemoteResult(BaseModel):
    """
    Value-or-error wrapper for remote calls whose failure the caller decides to discard.

    Attributes:
        value: The payload returned by the remote call, if it succeeded.
        error: The error text, if it failed.
    """
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DatasetDocumentStats(BaseModel):
    """
    Document counts of one dataset.

    Attributes:
        total: Number of documents.
        pending / processing / completed / failed: Documents per lifecycle group;
            processing covers both UPLOADING and PROCESSING.
        total_size: Sum of the known file sizes in bytes.
        by_status: Count per status, every status present.
    """
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    total_size: int = 0
    by_status: dict[DocumentStatus, int] = Field(default_factory=lambda: {status: 0 for status in DocumentStatus})

    def add(self, document: Document) -> "DatasetDocumentStats":
        status = document.status
        self.total += 1
        self.by_status[status] += 1
        if status is DocumentStatus.PENDING:
            self.pending += 1
        elif status.is_processing():
            self.processing += 1
        elif status.is_completed():
            self.completed += 1
        elif status.is_failed():
            self.failed += 1
        self.total_size += document.size or 0
        return self

    def by_label(self) -> dict[str, int]:
        return {status.label: count for status, count in self.by_status.items()}

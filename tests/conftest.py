import logging
from unittest.mock import MagicMock

import pytest

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Dataset, Document, DocumentStatus
from shared.repositories.memory.RepositoryMemory import (
    ChunkRepositoryMemory,
    DatasetRepositoryMemory,
    DocumentRepositoryMemory,
)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("ragflow_bridge.tests"))


@pytest.fixture
def rag_client() -> MagicMock:
    return MagicMock(spec=RAGClientInterface)


@pytest.fixture
def dataset_repository() -> DatasetRepositoryMemory:
    return DatasetRepositoryMemory()


@pytest.fixture
def document_repository() -> DocumentRepositoryMemory:
    return DocumentRepositoryMemory()


@pytest.fixture
def chunk_repository() -> ChunkRepositoryMemory:
    return ChunkRepositoryMemory()


@pytest.fixture
def dataset(dataset_repository) -> Dataset:
    return dataset_repository.save(Dataset(remote_id="ds-remote", name="Contracts"))


@pytest.fixture
def other_dataset(dataset_repository) -> Dataset:
    return dataset_repository.save(Dataset(remote_id="ds-other", name="Invoices"))


@pytest.fixture
def stored_file(tmp_path) -> str:
    path = tmp_path / "test.txt"
    path.write_text("quarterly report", encoding="utf-8")
    return str(path)


@pytest.fixture
def failed_document(document_repository, dataset, stored_file) -> Document:
    """A document whose upload failed: no remote id, stored file on disk."""
    return document_repository.save(
        Document(
            dataset_id=dataset.id,
            name="test.txt",
            filename="test.txt",
            file_path=stored_file,
            status=DocumentStatus.SYNC_FAILED,
        )
    )


@pytest.fixture
def uploaded_document(document_repository, dataset) -> Document:
    return document_repository.save(
        Document(
            dataset_id=dataset.id,
            remote_id="doc-remote",
            name="contract.pdf",
            status=DocumentStatus.UPLOADED,
        )
    )

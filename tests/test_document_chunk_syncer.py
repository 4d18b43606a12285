import pytest

from services.document_sync.DocumentChunkSyncer import DocumentChunkSyncer
from shared.models.document import Chunk, Document
from shared.models.errors import RAGClientError


@pytest.fixture
def syncer(helper_config, rag_client, document_repository, chunk_repository) -> DocumentChunkSyncer:
    return DocumentChunkSyncer(helper_config, rag_client, document_repository, chunk_repository)


def test_replaces_local_chunk_set(syncer, rag_client, chunk_repository, dataset, uploaded_document):
    chunk_repository.replace_for_document(uploaded_document.id, [Chunk(remote_id="stale", document_id=uploaded_document.id)])
    rag_client.do_fetch_chunks.return_value = [
        {"id": "c-1", "content": "first", "important_keywords": ["a"]},
        {"content": "no id"},
        {"id": "c-2", "content": "second"},
    ]

    result = syncer.sync_document_chunks(uploaded_document, dataset)

    rag_client.do_fetch_chunks.assert_called_once_with("ds-remote", "doc-remote")
    assert result.success is True
    assert result.data == {"synced_count": 2, "total_count": 3}
    stored = chunk_repository.find_by_document(uploaded_document.id)
    assert [chunk.remote_id for chunk in stored] == ["c-1", "c-2"]
    assert stored[0].keywords == ["a"]
    assert uploaded_document.chunk_count == 2
    assert uploaded_document.last_sync_time is not None


def test_requires_remote_ids(syncer, rag_client, dataset, document_repository):
    document = document_repository.save(Document(dataset_id=dataset.id, name="draft.pdf"))

    result = syncer.sync_document_chunks(document, dataset)

    assert result.success is False
    rag_client.do_fetch_chunks.assert_not_called()


def test_remote_failure_keeps_existing_chunks(syncer, rag_client, chunk_repository, dataset, uploaded_document):
    chunk_repository.replace_for_document(uploaded_document.id, [Chunk(remote_id="kept", document_id=uploaded_document.id)])
    rag_client.do_fetch_chunks.side_effect = RAGClientError("You don't own the document")

    result = syncer.sync_document_chunks(uploaded_document, dataset)

    assert result.success is False
    assert result.error == "You don't own the document"
    assert result.message == f"Sync of document {uploaded_document.id} failed: You don't own the document"
    assert [chunk.remote_id for chunk in chunk_repository.find_by_document(uploaded_document.id)] == ["kept"]

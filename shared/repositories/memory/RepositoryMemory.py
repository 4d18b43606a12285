"""In-process implementations of the repository interfaces.

Entities are stored by reference; ids are assigned from a per-repository counter.
"""

from itertools import count

from shared.models.document import Chunk, Dataset, Document
from shared.repositories.RepositoryInterface import (
    ChunkRepositoryInterface,
    DatasetRepositoryInterface,
    DocumentRepositoryInterface,
)


class DatasetRepositoryMemory(DatasetRepositoryInterface):
    def __init__(self) -> None:
        self._items: dict[int, Dataset] = {}
        self._ids = count(1)

    def find(self, dataset_id: int) -> Dataset | None:
        return self._items.get(dataset_id)

    def find_by_remote_id(self, remote_id: str) -> Dataset | None:
        for dataset in self._items.values():
            if dataset.remote_id == remote_id:
                return dataset
        return None

    def save(self, dataset: Dataset) -> Dataset:
        if dataset.id is None:
            dataset.id = next(self._ids)
        self._items[dataset.id] = dataset
        return dataset


class DocumentRepositoryMemory(DocumentRepositoryInterface):
    def __init__(self) -> None:
        self._items: dict[int, Document] = {}
        self._ids = count(1)

    def find(self, document_id: int) -> Document | None:
        return self._items.get(document_id)

    def find_by_dataset(self, dataset_id: int) -> list[Document]:
        return [doc for _, doc in sorted(self._items.items()) if doc.dataset_id == dataset_id]

    def find_by_remote_id(self, dataset_id: int, remote_id: str) -> Document | None:
        for document in self.find_by_dataset(dataset_id):
            if document.remote_id == remote_id:
                return document
        return None

    def save(self, document: Document) -> Document:
        if document.id is None:
            document.id = next(self._ids)
        self._items[document.id] = document
        return document

    def delete(self, document: Document) -> None:
        if document.id is not None:
            self._items.pop(document.id, None)


class ChunkRepositoryMemory(ChunkRepositoryInterface):
    def __init__(self) -> None:
        self._by_document: dict[int, list[Chunk]] = {}
        self._ids = count(1)

    def find_by_document(self, document_id: int) -> list[Chunk]:
        return list(self._by_document.get(document_id, []))

    def replace_for_document(self, document_id: int, chunks: list[Chunk]) -> list[Chunk]:
        for chunk in chunks:
            if chunk.id is None:
                chunk.id = next(self._ids)
        self._by_document[document_id] = list(chunks)
        return list(chunks)

    def delete_for_document(self, document_id: int) -> int:
        return len(self._by_document.pop(document_id, []))

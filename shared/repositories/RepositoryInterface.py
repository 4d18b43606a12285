from abc import ABC, abstractmethod

from shared.models.document import Chunk, Dataset, Document


class DatasetRepositoryInterface(ABC):
    """Lookup and persistence of datasets by local identity."""

    @abstractmethod
    def find(self, dataset_id: int) -> Dataset | None:
        """
        Returns the dataset with the given local id, or None.
        """
        pass

    @abstractmethod
    def find_by_remote_id(self, remote_id: str) -> Dataset | None:
        """
        Returns the dataset mapped to the given remote container id, or None.
        """
        pass

    @abstractmethod
    def save(self, dataset: Dataset) -> Dataset:
        """
        Persists the dataset, assigning a local id on first save. Durable once the call returns.
        """
        pass


class DocumentRepositoryInterface(ABC):
    """Lookup and persistence of documents by local identity."""

    @abstractmethod
    def find(self, document_id: int) -> Document | None:
        """
        Returns the document with the given local id, or None.
        """
        pass

    @abstractmethod
    def find_by_dataset(self, dataset_id: int) -> list[Document]:
        """
        Returns all documents of a dataset, ordered by local id.
        """
        pass

    @abstractmethod
    def find_by_remote_id(self, dataset_id: int, remote_id: str) -> Document | None:
        """
        Returns the document of a dataset mapped to the given remote id, or None.
        """
        pass

    @abstractmethod
    def save(self, document: Document) -> Document:
        """
        Persists the document, assigning a local id on first save. Durable once the call returns.
        """
        pass

    @abstractmethod
    def delete(self, document: Document) -> None:
        """
        Removes the document from the store.
        """
        pass


class ChunkRepositoryInterface(ABC):
    """Storage of the chunks derived from each document."""

    @abstractmethod
    def find_by_document(self, document_id: int) -> list[Chunk]:
        """
        Returns the chunks of a document in their stored order.
        """
        pass

    @abstractmethod
    def replace_for_document(self, document_id: int, chunks: list[Chunk]) -> list[Chunk]:
        """
        Replaces the whole chunk set of a document. Returns the stored chunks with ids assigned.
        """
        pass

    @abstractmethod
    def delete_for_document(self, document_id: int) -> int:
        """
        Removes all chunks of a document. Returns the number of removed chunks.
        """
        pass

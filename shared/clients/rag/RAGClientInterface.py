from abc import abstractmethod
import os

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.ChunkPage import ChunkPage
from shared.clients.rag.models.DocumentPage import DocumentPage
from shared.models.errors import RAGClientError

from shared.helper.HelperConfig import HelperConfig


class RAGClientInterface(ClientInterface):
    """
    Document API of a remote RAG service: upload, parse control, parse status,
    chunk listing and deletion, all scoped under a remote dataset id.

    Engine subclasses provide endpoints, payload builders and response parsers;
    this class owns the request flow, envelope checking and pagination.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    def get_page_size(self) -> int:
        """
        Returns the page size used for paginated listings (documents and chunks).
        """
        return 100

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_documents(self, dataset_remote_id: str) -> str:
        """
        Returns the endpoint path for uploading, listing and deleting documents of a dataset.

        Args:
            dataset_remote_id (str): The remote id of the dataset.

        Returns:
            str: The endpoint path (e.g. "/api/v1/datasets/{id}/documents")
        """
        pass

    @abstractmethod
    def _get_endpoint_parse(self, dataset_remote_id: str) -> str:
        """
        Returns the endpoint path for starting (POST) and stopping (DELETE) parsing.

        Args:
            dataset_remote_id (str): The remote id of the dataset.

        Returns:
            str: The endpoint path (e.g. "/api/v1/datasets/{id}/chunks")
        """
        pass

    @abstractmethod
    def _get_endpoint_document_chunks(self, dataset_remote_id: str, document_remote_id: str) -> str:
        """
        Returns the endpoint path for listing the chunks of a single document.

        Args:
            dataset_remote_id (str): The remote id of the dataset.
            document_remote_id (str): The remote id of the document.

        Returns:
            str: The endpoint path (e.g. "/api/v1/datasets/{id}/documents/{doc}/chunks")
        """
        pass

    ########### PAYLOAD BUILDER ##############
    @abstractmethod
    def get_parse_payload(self, document_remote_ids: list[str]) -> dict:
        """
        Builds the request body used to start or stop parsing a set of documents.

        Args:
            document_remote_ids (list[str]): Remote ids of the documents.

        Returns:
            dict: The JSON body.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, document_remote_ids: list[str]) -> dict:
        """
        Builds the request body used to delete a set of documents.

        Args:
            document_remote_ids (list[str]): Remote ids of the documents.

        Returns:
            dict: The JSON body.
        """
        pass

    @abstractmethod
    def get_listing_params(self, page: int, page_size: int, document_remote_id: str | None = None) -> dict:
        """
        Builds the query parameters for a paginated listing request.

        Args:
            page (int): One-based page number.
            page_size (int): Number of items per page.
            document_remote_id (str | None): Restrict a document listing to a single id.

        Returns:
            dict: The query parameters.
        """
        pass

    ########### RESPONSE PARSER ##############
    @abstractmethod
    def extract_response_data(self, envelope: dict) -> dict | list | None:
        """
        Extracts the payload from a successful response envelope.

        Args:
            envelope (dict): The decoded JSON response.

        Returns:
            dict | list | None: The payload carried by the envelope.
        """
        pass

    @abstractmethod
    def extract_response_error(self, envelope: dict) -> str | None:
        """
        Returns the error message of an envelope the service marked as failed, or None.

        Args:
            envelope (dict): The decoded JSON response.

        Returns:
            str | None: The error message, or None if the envelope reports success.
        """
        pass

    @abstractmethod
    def parse_documents_page(self, data: dict | list | None) -> DocumentPage:
        """
        Parses the payload of a document listing page.

        Args:
            data (dict | list | None): Payload returned by extract_response_data().

        Returns:
            DocumentPage: The documents of this page and the overall total, if reported.
        """
        pass

    @abstractmethod
    def parse_chunks_page(self, data: dict | list | None) -> ChunkPage:
        """
        Parses the payload of a chunk listing page.

        Args:
            data (dict | list | None): Payload returned by extract_response_data().

        Returns:
            ChunkPage: The chunks of this page and the overall total, if reported.
        """
        pass

    @abstractmethod
    def parse_status_from_document(self, document: dict) -> dict:
        """
        Builds the parse status of a document from its listing entry.

        Args:
            document (dict): A single raw document as listed by the service.

        Returns:
            dict: A dict with keys "progress", "progress_msg", "chunk_num" and "run".
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def do_upload_document(self, dataset_remote_id: str, file_path: str, filename: str | None = None) -> dict:
        """Uploads a local file into a remote dataset.

        Args:
            dataset_remote_id (str): The remote id of the target dataset.
            file_path (str): Path of the stored file.
            filename (str | None): Display name sent to the service. Defaults to the file's basename.

        Returns:
            dict: The decoded response envelope, e.g. {"code": 0, "data": [{"id": "...", "name": "..."}]}

        Raises:
            OSError: If the file cannot be opened.
            RAGClientError: If the service rejects the upload.
        """
        filename = filename or os.path.basename(file_path)
        with open(file_path, "rb") as fh:
            response = self.do_request(
                method="POST",
                endpoint=self._get_endpoint_documents(dataset_remote_id),
                files={"file": (filename, fh)},
            )
        envelope = self._unwrap(response)
        self.logging.info("Uploaded '%s' into dataset %s", filename, dataset_remote_id)
        return envelope

    def do_parse_chunks(self, dataset_remote_id: str, document_remote_ids: list[str]) -> dict:
        """Starts parsing (chunking and embedding) of the given documents.

        Returns:
            dict: The decoded response envelope.
        """
        response = self.do_request(
            method="POST",
            endpoint=self._get_endpoint_parse(dataset_remote_id),
            json=self.get_parse_payload(document_remote_ids),
        )
        return self._unwrap(response)

    def do_stop_parsing(self, dataset_remote_id: str, document_remote_ids: list[str]) -> dict:
        """Stops parsing of the given documents.

        Returns:
            dict: The decoded response envelope.
        """
        response = self.do_request(
            method="DELETE",
            endpoint=self._get_endpoint_parse(dataset_remote_id),
            json=self.get_parse_payload(document_remote_ids),
        )
        return self._unwrap(response)

    def do_delete_document(self, dataset_remote_id: str, document_remote_id: str) -> None:
        """Deletes a single document from a remote dataset."""
        response = self.do_request(
            method="DELETE",
            endpoint=self._get_endpoint_documents(dataset_remote_id),
            json=self.get_delete_payload([document_remote_id]),
        )
        self._unwrap(response)

    def do_fetch_documents(self, dataset_remote_id: str, document_remote_id: str | None = None) -> list[dict]:
        """Fetches all documents of a remote dataset, page by page.

        Args:
            dataset_remote_id (str): The remote id of the dataset.
            document_remote_id (str | None): Restrict the listing to a single document.

        Returns:
            list[dict]: Raw document entries in the order the service lists them.
        """
        documents: list[dict] = []
        page = 1
        page_size = self.get_page_size()
        while True:
            response = self.do_request(
                method="GET",
                endpoint=self._get_endpoint_documents(dataset_remote_id),
                params=self.get_listing_params(page=page, page_size=page_size, document_remote_id=document_remote_id),
            )
            doc_page = self.parse_documents_page(self.extract_response_data(self._unwrap(response)))
            documents.extend(doc_page.documents)
            self.logging.debug("Fetched documents page %d of dataset %s, %d documents so far", page, dataset_remote_id, len(documents))
            if not self._has_next_page(len(doc_page.documents), len(documents), page_size, doc_page.total):
                break
            page += 1
        return documents

    def do_fetch_parse_status(self, dataset_remote_id: str, document_remote_id: str) -> dict:
        """Fetches the current parse status of a single document.

        Returns:
            dict: A dict with keys "progress", "progress_msg", "chunk_num" and "run".

        Raises:
            RAGClientError: If the service does not list the document.
        """
        documents = self.do_fetch_documents(dataset_remote_id, document_remote_id=document_remote_id)
        for document in documents:
            if isinstance(document, dict) and document.get("id") == document_remote_id:
                return self.parse_status_from_document(document)
        raise RAGClientError(f"Document {document_remote_id} not found in dataset {dataset_remote_id}")

    def do_fetch_chunks(self, dataset_remote_id: str, document_remote_id: str) -> list[dict]:
        """Fetches all chunks of a parsed document, page by page.

        Returns:
            list[dict]: Raw chunk entries in remote order.
        """
        chunks: list[dict] = []
        page = 1
        page_size = self.get_page_size()
        while True:
            response = self.do_request(
                method="GET",
                endpoint=self._get_endpoint_document_chunks(dataset_remote_id, document_remote_id),
                params=self.get_listing_params(page=page, page_size=page_size),
            )
            chunk_page = self.parse_chunks_page(self.extract_response_data(self._unwrap(response)))
            chunks.extend(chunk_page.chunks)
            if not self._has_next_page(len(chunk_page.chunks), len(chunks), page_size, chunk_page.total):
                break
            page += 1
        self.logging.debug("Fetched %d chunks of document %s", len(chunks), document_remote_id)
        return chunks

    ##########################################
    ################ HELPER ##################
    ##########################################

    def _unwrap(self, response: httpx.Response) -> dict:
        """Validates a response and returns its decoded envelope.

        Raises:
            RAGClientError: On a non-2xx status, a non-JSON body or an envelope marked as failed.
        """
        if response.status_code >= 300:
            raise RAGClientError(
                f"{response.request.method} {response.request.url.path} failed with status {response.status_code}",
                status_code=response.status_code,
                details=response.text,
            )
        try:
            envelope = response.json()
        except ValueError:
            raise RAGClientError("Invalid JSON response", status_code=response.status_code, details=response.text)
        if not isinstance(envelope, dict):
            raise RAGClientError("Invalid response format: expected a JSON object", status_code=response.status_code, details=response.text)

        error = self.extract_response_error(envelope)
        if error is not None:
            code = envelope.get("code")
            raise RAGClientError(error, status_code=response.status_code, error_code=code if isinstance(code, int) else None, details=response.text)
        return envelope

    @staticmethod
    def _has_next_page(page_len: int, collected: int, page_size: int, total: int | None) -> bool:
        if page_len == 0:
            return False
        if total is not None:
            return collected < total
        return page_len >= page_size

import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.ChunkPage import ChunkPage
from shared.clients.rag.models.DocumentPage import DocumentPage
from shared.models.config import EnvConfig


class RAGClientRagflow(RAGClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._retries = int(self.get_config_val("RETRIES", default=3, val_type="number"))
        self._page_size = int(self.get_config_val("CHUNK_PAGE_SIZE", default=1024, val_type="number"))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ragflow"

    def get_page_size(self) -> int:
        return self._page_size

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="RETRIES", val_type="number", default=3),
            EnvConfig(env_key="CHUNK_PAGE_SIZE", val_type="number", default=1024),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ TRANSPORT ##################
    def _get_transport(self) -> httpx.BaseTransport | None:
        # retries only cover connection failures; requests that reached the server are never replayed
        return httpx.HTTPTransport(retries=self._retries)

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/v1/datasets?page=1&page_size=1"

    def _get_endpoint_documents(self, dataset_remote_id: str) -> str:
        return f"/api/v1/datasets/{dataset_remote_id}/documents"

    def _get_endpoint_parse(self, dataset_remote_id: str) -> str:
        return f"/api/v1/datasets/{dataset_remote_id}/chunks"

    def _get_endpoint_document_chunks(self, dataset_remote_id: str, document_remote_id: str) -> str:
        return f"/api/v1/datasets/{dataset_remote_id}/documents/{document_remote_id}/chunks"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_parse_payload(self, document_remote_ids: list[str]) -> dict:
        return {"document_ids": list(document_remote_ids)}

    def get_delete_payload(self, document_remote_ids: list[str]) -> dict:
        return {"ids": list(document_remote_ids)}

    def get_listing_params(self, page: int, page_size: int, document_remote_id: str | None = None) -> dict:
        params = {"page": page, "page_size": page_size}
        if document_remote_id:
            params["id"] = document_remote_id
        return params

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_response_data(self, envelope: dict) -> dict | list | None:
        return envelope.get("data")

    def extract_response_error(self, envelope: dict) -> str | None:
        code = envelope.get("code")
        if code == 0:
            return None
        message = envelope.get("message")
        return message if isinstance(message, str) and message else f"RAGFlow API error (code {code})"

    def parse_documents_page(self, data: dict | list | None) -> DocumentPage:
        if isinstance(data, dict):
            docs = data.get("docs", [])
            total = data.get("total")
        else:
            docs = data if isinstance(data, list) else []
            total = None
        return DocumentPage(
            documents=[doc for doc in docs if isinstance(doc, dict)] if isinstance(docs, list) else [],
            total=total if isinstance(total, int) and not isinstance(total, bool) else None,
        )

    def parse_chunks_page(self, data: dict | list | None) -> ChunkPage:
        if isinstance(data, dict):
            chunks = data.get("chunks", [])
            total = data.get("total")
        else:
            chunks = data if isinstance(data, list) else []
            total = None
        return ChunkPage(
            chunks=[chunk for chunk in chunks if isinstance(chunk, dict)] if isinstance(chunks, list) else [],
            total=total if isinstance(total, int) and not isinstance(total, bool) else None,
        )

    def parse_status_from_document(self, document: dict) -> dict:
        # RAGFlow reports the chunk count as chunk_count in listings; older builds use chunk_num
        chunk_num = document.get("chunk_count", document.get("chunk_num"))
        return {
            "progress": document.get("progress"),
            "progress_msg": document.get("progress_msg"),
            "chunk_num": chunk_num,
            "run": document.get("run"),
        }

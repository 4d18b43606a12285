from pydantic import BaseModel


class DocumentPage(BaseModel):
    """One page of a remote document listing.

    Attributes:
        documents: Raw document entries of this page.
        total:     Overall number of documents in the dataset, if the service reports it.
    """

    documents: list[dict] = []
    total: int | None = None

from pydantic import BaseModel


class ChunkPage(BaseModel):
    """One page of a remote chunk listing.

    Attributes:
        chunks: Raw chunk entries of this page.
        total:  Overall number of chunks of the document, if the service reports it.
    """

    chunks: list[dict] = []
    total: int | None = None

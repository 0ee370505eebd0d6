"""
Remote vault API payloads.

The vault API speaks camelCase JSON; these models accept either the
camelCase wire names or the snake_case field names.

Dependencies: pydantic
System role: Typed contract of the remote processing service
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VaultModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Vault(VaultModel):
    id: str
    name: str
    description: str | None = None


class StorageTarget(VaultModel):
    """Presigned upload destination for one object."""

    object_id: str
    upload_url: str
    expires_in: int = 3600


class VaultObject(VaultModel):
    id: str
    filename: str = ""
    content_type: str | None = None
    size_bytes: int | None = None
    ingestion_status: str | None = None
    page_count: int | None = None
    chunk_count: int | None = None


class IngestionJob(VaultModel):
    object_id: str | None = None
    workflow_id: str | None = None
    status: str = "processing"
    message: str | None = None


class ObjectText(VaultModel):
    object_id: str | None = None
    filename: str | None = None
    text: str = ""
    text_length: int = 0
    page_count: int | None = None


class SearchChunk(VaultModel):
    text: str
    object_id: str
    chunk_index: int
    hybrid_score: float = 0.0
    vector_score: float = 0.0
    bm25_score: float = 0.0


class SearchSource(VaultModel):
    id: str
    filename: str = ""
    page_count: int | None = None


class VaultSearchResult(VaultModel):
    method: str = "hybrid"
    query: str = ""
    chunks: list[SearchChunk] = Field(default_factory=list)
    sources: list[SearchSource] = Field(default_factory=list)
    response: str | None = None

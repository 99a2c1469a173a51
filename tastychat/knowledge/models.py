"""Knowledge base document and search result models."""

from typing import Any

from pydantic import BaseModel, Field


class KnowledgeDocument(BaseModel):
    """A chunk of knowledge base text with its embedding."""

    id: str = Field(..., description="Unique chunk id (source:index)")
    text: str = Field(..., description="Chunk text")
    vector: list[float] = Field(..., description="Embedding vector")
    source: str = Field(..., description="Source document name")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class SearchResult(BaseModel):
    """A retrieved chunk and its similarity score."""

    id: str
    text: str
    source: str
    score: float = Field(..., description="Cosine similarity, higher is better")
    metadata: dict[str, Any] = Field(default_factory=dict)

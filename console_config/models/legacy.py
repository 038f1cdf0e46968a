"""Pre-versioning project registry entry (flat, no version envelope)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LegacyTheme(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    primary: str
    background: str = "#FFFFFF"
    surface: str = "#F8F9FA"
    base_font_px: int = Field(default=16, alias="baseFontPx")


class LegacyRagIndex(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    index_name: str = Field(alias="indexName")
    chunking_strategy: str | None = Field(default=None, alias="chunkingStrategy")
    chunk_size_tokens: int | None = Field(default=None, alias="chunkSizeTokens")
    overlap_tokens: int | None = Field(default=None, alias="overlapTokens")


class LegacyRegistryEntry(BaseModel):
    """One row of the old project registry.

    Only the fields the migration carries forward are typed; retrieval,
    guardrail and gateway settings are kept loosely for reference.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    label: str
    domain: str = ""
    owner: str = ""
    cost_centre: str = Field(default="", alias="costCentre")
    description: str = ""
    rag_profile: str | None = Field(default=None, alias="ragProfile")
    theme: LegacyTheme
    rag_index: LegacyRagIndex = Field(alias="ragIndex")
    rag_retrieval: dict[str, Any] | None = Field(default=None, alias="ragRetrieval")
    guardrails: dict[str, Any] | None = None
    suggested_questions: list[dict[str, str]] = Field(
        default_factory=list, alias="suggestedQuestions"
    )
    apim: Any = None

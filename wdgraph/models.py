"""Payload models for the Wikidata services.

Field aliases match the textifier JSON ("QID", "PID", "property_label").
Lists that the service sends as null decode to empty lists, and null
elements inside a list are dropped. The remaining models describe the
MediaWiki and query service bodies; decode_payload() validates a response
against one of them and reports a mismatch as DecodeError.
"""

from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, field_validator

from wdgraph.errors import DecodeError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _drop_nulls(items: list) -> list:
    return [_drop_nulls(item) if isinstance(item, list) else item for item in items if item is not None]


class _Payload(BaseModel):
    """Lenient base for remote payloads: unknown fields are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info) -> Any:
        field = cls.model_fields[info.field_name]
        if value is None:
            if field.default_factory is not None:
                return field.default_factory()
            return field.default
        if field.default_factory is list and isinstance(value, list):
            return _drop_nulls(value)
        return value


def decode_payload(model: type[PayloadT], payload: Any) -> PayloadT:
    """Validate a decoded JSON body against ``model``; a null body counts as empty."""
    try:
        return model.model_validate({} if payload is None else payload)
    except ValidationError as e:
        raise DecodeError(f"failed to decode response json: {e}") from e


class QualifierValue(_Payload):
    """One value of a qualifier or reference entry."""

    value: Any = Field(default=None, description="Polymorphic value payload.")


class Qualifier(_Payload):
    """A qualifier on a claim value. Reference entries share this shape."""

    pid: str = Field(default="", alias="PID")
    property_label: str = Field(default="")
    datatype: str = Field(default="")
    values: list[QualifierValue] = Field(default_factory=list)


class ClaimValue(_Payload):
    """One asserted value of a claim, with its rank and provenance."""

    value: Any = Field(default=None, description="Entity reference, quantity, scalar or mapping.")
    rank: str = Field(default="", description="Claim rank; blank means 'normal'.")
    qualifiers: list[Qualifier] = Field(default_factory=list)
    references: list[list[Qualifier]] = Field(
        default_factory=list,
        description="Reference groups, each an ordered list of entries.",
    )


class Claim(_Payload):
    """All values an entity has for a single property."""

    pid: str = Field(default="", alias="PID")
    property_label: str = Field(default="")
    datatype: str = Field(default="")
    values: list[ClaimValue] = Field(default_factory=list)


class Entity(_Payload):
    """An item or property as returned by the textifier service."""

    qid: str = Field(default="", alias="QID")
    pid: str = Field(default="", alias="PID")
    label: str = Field(default="")
    description: str = Field(default="")
    claims: list[Claim] = Field(default_factory=list)


class SearchSource(str, Enum):
    """Which backend produced a search response."""

    VECTOR = "vector"
    KEYWORD = "keyword"


class SearchResult(BaseModel):
    id: str
    label: str = ""
    description: str = ""


class SearchResponse(BaseModel):
    source: SearchSource
    results: list[SearchResult] = Field(default_factory=list)


class HierarchyResult(BaseModel):
    """Either a rendered hierarchy tree or a not-found message."""

    tree: Optional[dict[str, Any]] = Field(default=None)
    message: Optional[str] = Field(default=None)


class SPARQLResult(BaseModel):
    """Rows of a SPARQL query, or the cleaned error message of a rejected query."""

    vars: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)
    csv: str = ""
    message: Optional[str] = Field(default=None)


# --- MediaWiki action API bodies ---


class LangValue(_Payload):
    """A monolingual term such as {"language": "en", "value": "human"}."""

    language: str = ""
    value: str = ""


class KeywordSearchDisplay(_Payload):
    label: LangValue = Field(default_factory=LangValue)
    description: LangValue = Field(default_factory=LangValue)


class KeywordSearchMatch(_Payload):
    """One hit of wbsearchentities; ``display`` holds the language-resolved terms."""

    id: str = ""
    label: str = ""
    description: str = ""
    display: KeywordSearchDisplay = Field(default_factory=KeywordSearchDisplay)


class KeywordSearchResponse(_Payload):
    search: list[KeywordSearchMatch] = Field(default_factory=list)


class EntityTerms(_Payload):
    labels: dict[str, LangValue] = Field(default_factory=dict)
    descriptions: dict[str, LangValue] = Field(default_factory=dict)


class GetEntitiesResponse(_Payload):
    """Body of wbgetentities with props=labels|descriptions."""

    entities: dict[str, EntityTerms] = Field(default_factory=dict)


# --- Vector search and query service bodies ---


class VectorSearchHit(_Payload):
    qid: str = Field(default="", alias="QID")
    pid: str = Field(default="", alias="PID")


class VectorSearchResponse(RootModel[list[VectorSearchHit]]):
    root: list[VectorSearchHit] = Field(default_factory=list)


class SPARQLBinding(_Payload):
    type: str = ""
    value: str = ""


class SPARQLHead(_Payload):
    vars: list[str] = Field(default_factory=list)


class SPARQLBindings(_Payload):
    bindings: list[dict[str, SPARQLBinding]] = Field(default_factory=list)


class SPARQLResponse(_Payload):
    """SPARQL 1.1 JSON results: variable names plus one binding map per row."""

    head: SPARQLHead = Field(default_factory=SPARQLHead)
    results: SPARQLBindings = Field(default_factory=SPARQLBindings)

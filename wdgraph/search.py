"""Item and property search.

Vector (semantic) search is tried first; if it fails or finds nothing, the
MediaWiki keyword search (wbsearchentities) is used instead. The response
records which backend produced the results.
"""

from wdgraph.client import WikidataClient
from wdgraph.config import first_non_empty
from wdgraph.errors import InputError, WikidataError
from wdgraph.logging import setup_logging
from wdgraph.models import (
    GetEntitiesResponse,
    KeywordSearchResponse,
    LangValue,
    SearchResponse,
    SearchResult,
    SearchSource,
    VectorSearchResponse,
    decode_payload,
)

logger = setup_logging()

ITEM = "item"
PROPERTY = "property"
DEFAULT_LIMIT = 10
# wbgetentities accepts at most 50 IDs per request
LABEL_BATCH_SIZE = 50


def search_items(
    client: WikidataClient,
    query: str,
    lang: str = "en",
    limit: int = DEFAULT_LIMIT,
    disable_vector: bool = False,
) -> SearchResponse:
    return search(client, query, lang, limit, ITEM, disable_vector)


def search_properties(
    client: WikidataClient,
    query: str,
    lang: str = "en",
    limit: int = DEFAULT_LIMIT,
    disable_vector: bool = False,
) -> SearchResponse:
    return search(client, query, lang, limit, PROPERTY, disable_vector)


def search(
    client: WikidataClient,
    query: str,
    lang: str,
    limit: int,
    kind: str,
    disable_vector: bool = False,
) -> SearchResponse:
    """Search for items or properties matching ``query``.

    Args:
        kind: "item" or "property".
        disable_vector: Skip vector search and go straight to keyword search.

    Raises:
        InputError: ``query`` is blank.
        WikidataError: keyword search failed. Vector search failures are
            logged and trigger the keyword fallback.
    """
    query = query.strip()
    if not query:
        raise InputError("query cannot be empty")
    lang = lang or "en"
    if limit <= 0:
        limit = DEFAULT_LIMIT

    if not disable_vector:
        try:
            results = vector_search(client, query, lang, limit, kind)
        except WikidataError as e:
            logger.debug({"message": "vector search failed, using keyword search", "query": query, "error": str(e)})
            results = []
        if results:
            return SearchResponse(source=SearchSource.VECTOR, results=results)

    return SearchResponse(
        source=SearchSource.KEYWORD,
        results=keyword_search(client, query, lang, limit, kind),
    )


def vector_search(
    client: WikidataClient,
    query: str,
    lang: str,
    limit: int,
    kind: str,
) -> list[SearchResult]:
    """Query the vector search service, then resolve labels and descriptions."""
    headers = {}
    if client.config.vector_api_secret:
        headers["x-api-secret"] = client.config.vector_api_secret

    endpoint = f"{client.config.vector_search_url.rstrip('/')}/{kind}/query/"
    response = client.get_json(endpoint, {"query": query, "k": str(limit)}, headers)
    hits = decode_payload(VectorSearchResponse, [] if response is None else response).root

    ids: list[str] = []
    for hit in hits:
        entity_id = (hit.qid if kind == ITEM else hit.pid).strip()
        if entity_id and entity_id not in ids:
            ids.append(entity_id)
    if not ids:
        return []

    terms = get_labels_and_descriptions(client, ids, lang)
    results = [
        SearchResult(id=entity_id, **terms.get(entity_id, {}))
        for entity_id in ids
    ]
    return results[:limit]


def keyword_search(
    client: WikidataClient,
    query: str,
    lang: str,
    limit: int,
    kind: str,
) -> list[SearchResult]:
    params = {
        "action": "wbsearchentities",
        "type": kind,
        "search": query,
        "limit": str(limit),
        "language": lang,
        "format": "json",
        "origin": "*",
    }
    response = decode_payload(KeywordSearchResponse, client.get_json(client.config.wikidata_api_url, params))

    return [
        SearchResult(
            id=match.id,
            label=first_non_empty(match.display.label.value, match.label),
            description=first_non_empty(match.display.description.value, match.description),
        )
        for match in response.search
    ]


def get_labels_and_descriptions(
    client: WikidataClient,
    ids: list[str],
    lang: str,
) -> dict[str, dict[str, str]]:
    """Fetch labels and descriptions for ``ids`` in batches of 50.

    Each value prefers ``lang``, then "mul", then "en".
    """
    result: dict[str, dict[str, str]] = {}
    for start in range(0, len(ids), LABEL_BATCH_SIZE):
        chunk = ids[start : start + LABEL_BATCH_SIZE]
        params = {
            "action": "wbgetentities",
            "ids": "|".join(chunk),
            "languages": "|".join([lang, "mul", "en"]),
            "props": "labels|descriptions",
            "format": "json",
            "origin": "*",
        }
        response = decode_payload(GetEntitiesResponse, client.get_json(client.config.wikidata_api_url, params))
        for entity_id, entity in response.entities.items():
            result[entity_id] = {
                "label": pick_lang_value(entity.labels, lang),
                "description": pick_lang_value(entity.descriptions, lang),
            }
    return result


def pick_lang_value(values: dict[str, LangValue], lang: str) -> str:
    for code in (lang, "mul", "en"):
        term = values.get(code)
        if term is not None and term.value.strip():
            return term.value.strip()
    return ""

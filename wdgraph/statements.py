"""Statement lookups for a single entity."""

import threading
from typing import Optional

from wdgraph.client import WikidataClient
from wdgraph.errors import DecodeError, InputError
from wdgraph.fetcher import FetchOptions, RelationFetcherInterface
from wdgraph.format import triplet_values_to_string


def get_statements(
    client: WikidataClient,
    entity_id: str,
    include_external_ids: bool = False,
    lang: str = "en",
) -> str:
    """Return the textifier's triplet text for all direct statements of an entity."""
    entity_id = entity_id.strip()
    if not entity_id:
        raise InputError("entity ID cannot be empty")
    lang = lang.strip() or "en"

    params = {
        "id": entity_id,
        "external_ids": "true" if include_external_ids else "false",
        "all_ranks": "false",
        "qualifiers": "false",
        "lang": lang,
        "format": "triplet",
    }
    response = client.get_json(client.config.textifier_url, params)
    if response is None:
        response = {}
    if not isinstance(response, dict):
        raise DecodeError("failed to decode response json: expected an object")

    text = response.get(entity_id)
    text = text.strip() if isinstance(text, str) else ""
    if not text:
        return f"Entity {entity_id} not found"
    return text


def get_statement_values(
    fetcher: RelationFetcherInterface,
    entity_id: str,
    property_id: str,
    lang: str = "en",
    cancel: Optional[threading.Event] = None,
) -> str:
    """Render every value of one property of an entity, with ranks, qualifiers and references.

    Returns a not-found message (not an exception) when the entity is missing
    or has no statement for the property. A set ``cancel`` event aborts the
    fetch with FetchCancelledError.
    """
    entity_id = entity_id.strip()
    property_id = property_id.strip()
    if not entity_id:
        raise InputError("entity ID cannot be empty")
    if not property_id:
        raise InputError("property ID cannot be empty")

    options = FetchOptions(
        include_external_ids=True,
        include_all_ranks=True,
        include_references=True,
        include_qualifiers=True,
        lang=lang.strip() or "en",
    )
    result = fetcher.fetch([entity_id], [property_id], options, cancel)

    entity = result.get(entity_id)
    if entity is None:
        return f"Entity {entity_id} not found"

    text = triplet_values_to_string(entity_id, property_id, entity)
    if not text.strip():
        return f"No statement found for {entity_id} with property {property_id}"
    return text

"""Relation fetcher: batched access to entity labels and claims.

The hierarchy builder and the statement renderer depend only on
RelationFetcherInterface, so they can be exercised against an in-memory
fetcher in tests. TextifierRelationFetcher is the production implementation
backed by the textifier service.
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from wdgraph.client import WikidataClient
from wdgraph.errors import DecodeError, FetchCancelledError
from wdgraph.logging import setup_logging
from wdgraph.models import Entity

logger = setup_logging()


class FetchOptions(BaseModel, frozen=True):
    """What the textifier should include for each entity."""

    include_external_ids: bool = Field(default=False, description="Include external-identifier claims.")
    include_all_ranks: bool = Field(default=False, description="Include deprecated/normal ranks, not just preferred.")
    include_references: bool = Field(default=False)
    include_qualifiers: bool = Field(default=False)
    lang: str = Field(default="en", description="Language code for labels.")


class RelationFetcherInterface(ABC):
    """Fetch entities and their claims by ID."""

    @abstractmethod
    def fetch(
        self,
        ids: Sequence[str],
        properties: Sequence[str],
        options: FetchOptions,
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, Entity]:
        """Fetch a batch of entities, keyed by ID.

        Args:
            ids: Entity IDs to fetch. An empty sequence returns an empty dict
                without contacting the service.
            properties: Property IDs to restrict claims to; empty means all.
            options: Inclusion flags and label language.
            cancel: If set before the request is sent, the fetch raises
                FetchCancelledError.

        Returns:
            Entities found by the service. IDs unknown to the service are
            simply absent.
        """


def check_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise FetchCancelledError()


class TextifierRelationFetcher(RelationFetcherInterface):
    """Fetch entities from the textifier service in JSON format."""

    def __init__(self, client: WikidataClient):
        self.client = client

    def fetch(
        self,
        ids: Sequence[str],
        properties: Sequence[str],
        options: FetchOptions,
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, Entity]:
        if not ids:
            return {}
        check_cancelled(cancel)

        params = {
            "id": ",".join(ids),
            "external_ids": _bool_param(options.include_external_ids),
            "all_ranks": _bool_param(options.include_all_ranks),
            "references": _bool_param(options.include_references),
            "qualifiers": _bool_param(options.include_qualifiers),
            "lang": options.lang.strip() or "en",
            "format": "json",
        }
        if properties:
            params["pid"] = ",".join(properties)

        payload = self.client.get_json(self.client.config.textifier_url, params)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise DecodeError(f"failed to decode response json: expected an object, got {type(payload).__name__}")

        entities: dict[str, Entity] = {}
        try:
            for entity_id, raw in payload.items():
                if raw is None:
                    continue
                entities[entity_id] = Entity.model_validate(raw)
        except ValidationError as e:
            raise DecodeError(f"failed to decode response json: {e}") from e

        logger.debug(
            {
                "message": "fetched entities",
                "requested": len(ids),
                "found": len(entities),
                "properties": list(properties),
            }
        )
        return entities


def _bool_param(value: bool) -> str:
    return "true" if value else "false"

"""Test fixtures for the Wikidata client.

This module provides:
- StaticRelationFetcher, an in-memory RelationFetcherInterface that serves
  canned entities and records every fetch (IDs, properties, options)
- Factory fixtures for building hierarchy entities and fetchers from a
  compact {id: (label, [P31 targets], [P279 targets])} description
- A factory fixture that builds a WikidataClient on top of
  httpx.MockTransport, so HTTP-level code runs without a network
"""

import threading
from typing import Callable, Optional, Sequence

import httpx
import pytest

from wdgraph.client import WikidataClient
from wdgraph.config import WikidataConfig
from wdgraph.fetcher import FetchOptions, RelationFetcherInterface, check_cancelled
from wdgraph.models import Claim, ClaimValue, Entity

TEST_CONFIG = WikidataConfig(
    wikidata_api_url="http://wikidata.test/w/api.php",
    wikidata_query_url="http://query.test/sparql",
    textifier_url="http://textify.test",
    vector_search_url="http://vector.test",
    user_agent="wdgraph-tests/1.0",
    timeout=5.0,
)


class StaticRelationFetcher(RelationFetcherInterface):
    """Serve entities from a dict; IDs not in the dict are absent from responses."""

    def __init__(self, entities: dict[str, Entity]):
        self.entities = entities
        self.calls: list[tuple[list[str], list[str], FetchOptions]] = []

    def fetch(
        self,
        ids: Sequence[str],
        properties: Sequence[str],
        options: FetchOptions,
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, Entity]:
        check_cancelled(cancel)
        self.calls.append((list(ids), list(properties), options))
        return {entity_id: self.entities[entity_id] for entity_id in ids if entity_id in self.entities}

    @property
    def fetched_ids(self) -> list[list[str]]:
        return [ids for ids, _, _ in self.calls]


def make_hierarchy_entity(
    qid: str,
    label: str = "",
    instance_of: Sequence[str] = (),
    subclass_of: Sequence[str] = (),
    target_labels: Optional[dict[str, str]] = None,
) -> Entity:
    """Build an entity with P31/P279 claims pointing at the given IDs."""
    target_labels = target_labels or {}

    def claim(pid: str, label_text: str, targets: Sequence[str]) -> Claim:
        return Claim(
            pid=pid,
            property_label=label_text,
            datatype="wikibase-item",
            values=[
                ClaimValue(value={"QID": target, "label": target_labels.get(target, "")})
                for target in targets
            ],
        )

    claims = []
    if instance_of:
        claims.append(claim("P31", "instance of", instance_of))
    if subclass_of:
        claims.append(claim("P279", "subclass of", subclass_of))
    return Entity(qid=qid, label=label, claims=claims)


@pytest.fixture
def hierarchy_fetcher() -> Callable[..., StaticRelationFetcher]:
    """Factory: {id: (label, [P31...], [P279...])} -> StaticRelationFetcher."""

    def _build(layout: dict[str, tuple[str, Sequence[str], Sequence[str]]]) -> StaticRelationFetcher:
        return StaticRelationFetcher(
            {
                qid: make_hierarchy_entity(qid, label, instance_of, subclass_of)
                for qid, (label, instance_of, subclass_of) in layout.items()
            }
        )

    return _build


@pytest.fixture
def douglas_adams_fetcher(hierarchy_fetcher) -> StaticRelationFetcher:
    """Q42 -P31-> Q5 -P279-> Q729 (no further edges)."""
    return hierarchy_fetcher(
        {
            "Q42": ("Douglas Adams", ["Q5"], []),
            "Q5": ("human", [], ["Q729"]),
            "Q729": ("mammal", [], []),
        }
    )


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], WikidataClient]:
    """Factory: request handler -> WikidataClient using httpx.MockTransport."""
    clients: list[WikidataClient] = []

    def _build(handler: Callable[[httpx.Request], httpx.Response], config: WikidataConfig = TEST_CONFIG) -> WikidataClient:
        client = WikidataClient(config, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _build
    for client in clients:
        client.close()

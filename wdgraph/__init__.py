"""wdgraph - Wikidata command-line client.

Queries the public Wikidata services and renders the results as text or
JSON. The interesting parts are the instance-of / subclass-of hierarchy
builder (wdgraph.hierarchy) and the statement renderer (wdgraph.format):

    from wdgraph.client import WikidataClient
    from wdgraph.config import WikidataConfig
    from wdgraph.fetcher import TextifierRelationFetcher
    from wdgraph.hierarchy import get_instance_and_subclass_hierarchy

    with WikidataClient(WikidataConfig.from_env()) as client:
        result = get_instance_and_subclass_hierarchy(TextifierRelationFetcher(client), "Q42", 2)
"""

from wdgraph.errors import (
    ConfigError,
    DecodeError,
    FetchCancelledError,
    InputError,
    RemoteError,
    TransportError,
    WikidataError,
)
from wdgraph.format import stringify, triplet_values_to_string
from wdgraph.hierarchy import (
    RelationGraph,
    RelationGraphNode,
    build_hierarchy_graph,
    get_instance_and_subclass_hierarchy,
    render_hierarchy,
)
from wdgraph.models import Claim, ClaimValue, Entity, HierarchyResult, Qualifier, QualifierValue

__all__ = [
    "WikidataError",
    "InputError",
    "ConfigError",
    "TransportError",
    "FetchCancelledError",
    "RemoteError",
    "DecodeError",
    "stringify",
    "triplet_values_to_string",
    "RelationGraph",
    "RelationGraphNode",
    "build_hierarchy_graph",
    "render_hierarchy",
    "get_instance_and_subclass_hierarchy",
    "Entity",
    "Claim",
    "ClaimValue",
    "Qualifier",
    "QualifierValue",
    "HierarchyResult",
]

__version__ = "0.1.0"

"""Instance-of / subclass-of hierarchy extraction.

The hierarchy is built in two steps:

1. build_hierarchy_graph() walks P31 (instance of) and P279 (subclass of)
   edges breadth-first from a seed entity, one batched fetch per level, and
   records every visited entity in a RelationGraph. Edges are stored as ID
   lists; a target may never be visited if it lies beyond the depth limit.
2. render_hierarchy() turns the graph into a nested dict rooted at the seed.

Rendering re-expands a node every time it is reached, so an entity shared by
several paths (a diamond in the class hierarchy) appears once per path. The
output grows with the number of paths, not the number of nodes.
"""

import threading
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from wdgraph.config import first_non_empty
from wdgraph.errors import InputError
from wdgraph.fetcher import FetchOptions, RelationFetcherInterface
from wdgraph.logging import setup_logging
from wdgraph.models import Claim, HierarchyResult

logger = setup_logging()

INSTANCE_OF = "P31"
SUBCLASS_OF = "P279"
HIERARCHY_PROPERTIES = (INSTANCE_OF, SUBCLASS_OF)

INSTANCE_OF_KEY = "instance of (P31)"
SUBCLASS_OF_KEY = "subclass of (P279)"


class RelationGraphNode(BaseModel):
    """An entity visited during traversal and its outgoing hierarchy edges."""

    id: str = Field(description="Entity ID")
    label: str = Field(default="", description="Display label; resolved to the ID when unknown")
    instance_of: list[str] = Field(default_factory=list, description="P31 targets, deduplicated, first-seen order")
    subclass_of: list[str] = Field(default_factory=list, description="P279 targets, deduplicated, first-seen order")

    @property
    def display(self) -> str:
        return f"{first_non_empty(self.label, self.id)} ({self.id})"


class RelationGraph(BaseModel):
    """Visited entities keyed by ID.

    Edge lists reference other nodes by ID only. A referenced ID that is not
    a key was never visited.
    """

    nodes: dict[str, RelationGraphNode] = Field(default_factory=dict)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, entity_id: str) -> Optional[RelationGraphNode]:
        return self.nodes.get(entity_id)

    def put(self, node: RelationGraphNode) -> None:
        """Store ``node``, replacing any earlier entry with the same ID."""
        self.nodes[node.id] = node


def extract_entity_identifier(value: Any) -> tuple[str, str]:
    """Return (id, label) of an entity-reference value, or ("", "")."""
    if not isinstance(value, dict):
        return "", ""
    for key in ("QID", "PID"):
        entity_id = value.get(key)
        if isinstance(entity_id, str) and entity_id.strip():
            label = value.get("label")
            return entity_id.strip(), label.strip() if isinstance(label, str) else ""
    return "", ""


def extract_hierarchy_relations(
    claims: Sequence[Claim],
) -> tuple[list[str], list[str], dict[str, str]]:
    """Collect P31 and P279 targets from a list of claims.

    Returns:
        (instance_of_ids, subclass_of_ids, labels) where both ID lists are
        deduplicated in first-seen order and ``labels`` maps target IDs to the
        labels carried on the claim values.
    """
    targets: dict[str, list[str]] = {INSTANCE_OF: [], SUBCLASS_OF: []}
    seen: dict[str, set[str]] = {INSTANCE_OF: set(), SUBCLASS_OF: set()}
    labels: dict[str, str] = {}

    for claim in claims:
        if claim.pid not in targets:
            continue
        for claim_value in claim.values:
            entity_id, label = extract_entity_identifier(claim_value.value)
            if not entity_id:
                continue
            if label:
                labels[entity_id] = label
            if entity_id in seen[claim.pid]:
                continue
            seen[claim.pid].add(entity_id)
            targets[claim.pid].append(entity_id)

    return targets[INSTANCE_OF], targets[SUBCLASS_OF], labels


def build_hierarchy_graph(
    fetcher: RelationFetcherInterface,
    seed: str,
    max_depth: int,
    lang: str = "en",
    cancel: Optional[threading.Event] = None,
) -> Optional[RelationGraph]:
    """Walk P31/P279 edges breadth-first from ``seed``.

    Level 0 is the seed itself, so ``max_depth=0`` performs exactly one fetch.
    Each level is fetched in a single batched request. IDs already in the
    graph are never queued again, which also breaks cycles.

    Args:
        fetcher: Source of entity labels and claims.
        seed: Entity ID to start from.
        max_depth: Number of levels to expand beyond the seed (>= 0).
        lang: Label language.
        cancel: Optional event; once set, the next fetch raises
            FetchCancelledError and the build is abandoned.

    Returns:
        The graph with every node's label resolved, or None if the seed was
        not returned by the fetcher.

    Raises:
        Any fetcher error, unchanged. No partial graph is returned.
    """
    if max_depth < 0:
        raise InputError("max-depth must be zero or greater")

    options = FetchOptions(lang=lang)
    graph = RelationGraph()
    labels: dict[str, str] = {}
    frontier: list[str] = [seed]
    depth = 0

    while frontier and depth <= max_depth:
        logger.debug({"message": "expanding hierarchy level", "depth": depth, "frontier": frontier})
        response = fetcher.fetch(frontier, HIERARCHY_PROPERTIES, options, cancel)

        candidates: dict[str, None] = {}
        for entity_id in frontier:
            entity = response.get(entity_id)
            if entity is None:
                continue

            if entity.label.strip():
                labels[entity_id] = entity.label
            instance_of, subclass_of, discovered = extract_hierarchy_relations(entity.claims)
            labels.update(discovered)

            graph.put(RelationGraphNode(id=entity_id, instance_of=instance_of, subclass_of=subclass_of))
            for target in instance_of + subclass_of:
                candidates[target] = None

        frontier = [target for target in candidates if target not in graph]
        depth += 1

    if seed not in graph:
        return None

    for entity_id, node in graph.nodes.items():
        node.label = first_non_empty(labels.get(entity_id), entity_id)
    return graph


def render_hierarchy(graph: RelationGraph, root: str, depth: int) -> str | dict[str, Any]:
    """Render the hierarchy below ``root`` as nested dicts.

    Returns "<label> (<id>)" when ``depth`` is 0, otherwise
    ``{"<label> (<id>)": {"instance of (P31)": [...], "subclass of (P279)": [...]}}``.
    Targets that are not in the graph are left out. A root that is not in
    the graph renders as its bare ID.
    """
    node = graph.get(root)
    if node is None:
        return root
    if depth <= 0:
        return node.display

    return {
        node.display: {
            INSTANCE_OF_KEY: [render_hierarchy(graph, target, depth - 1) for target in node.instance_of if target in graph],
            SUBCLASS_OF_KEY: [render_hierarchy(graph, target, depth - 1) for target in node.subclass_of if target in graph],
        }
    }


def get_instance_and_subclass_hierarchy(
    fetcher: RelationFetcherInterface,
    entity_id: str,
    max_depth: int,
    lang: str = "en",
    cancel: Optional[threading.Event] = None,
) -> HierarchyResult:
    """Build and render the P31/P279 hierarchy of ``entity_id``.

    The tree is always a dict: a leaf-only result (``max_depth=0``) is wrapped
    as ``{"result": "<label> (<id>)"}``.
    """
    entity_id = entity_id.strip()
    if not entity_id:
        raise InputError("entity ID cannot be empty")
    if max_depth < 0:
        raise InputError("max-depth must be zero or greater")
    lang = lang.strip() or "en"

    graph = build_hierarchy_graph(fetcher, entity_id, max_depth, lang, cancel)
    if graph is None:
        return HierarchyResult(message=f"Entity {entity_id} not found")

    logger.debug({"message": "hierarchy graph built", "entity_id": entity_id, "nodes": len(graph)})
    rendered = render_hierarchy(graph, entity_id, max_depth)
    if isinstance(rendered, dict):
        return HierarchyResult(tree=rendered)
    return HierarchyResult(tree={"result": rendered})

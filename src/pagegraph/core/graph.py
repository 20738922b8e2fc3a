"""Reference graph assembly.

Builds a weighted directed graph of pages from a snapshot of pages and
block references. Pages are nodes; an edge ``A -> B`` counts the block
references from page ``A`` (or from blocks nested under ``A``) to page ``B``.
"""

import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import networkx as nx

from pagegraph.core.aliases import page_to_aliases, pages_to_alias_map, remove_aliases
from pagegraph.core.models import Block, EntityID, Page
from pagegraph.core.references import (
    GetBlockFn,
    ReferenceNormalizer,
    block_to_references,
    ref_to_page_ref,
)

logger = logging.getLogger(__name__)


class JournalSetting(Protocol):
    journal: bool


GetAllPagesFn = Callable[[], Awaitable[list[Page]]]
GetBlockReferencesFn = Callable[[], Awaitable[list[list[Block]]]]
GetSettingsFn = Callable[[], JournalSetting]
LayoutFn = Callable[[nx.DiGraph], None]


def assign_random_positions(graph: nx.DiGraph, seed: int | None = None) -> None:
    """Give every node uniform random ``x``/``y`` coordinates in [0, 1)."""
    rng = random.Random(seed)
    for _node, attrs in graph.nodes(data=True):
        attrs["x"] = rng.random()
        attrs["y"] = rng.random()


def admit_page(graph: nx.DiGraph, page: Page, journal: bool) -> bool:
    """Add ``page`` as a node unless it is hidden, present or an excluded journal.

    Returns:
        True if a node was added.
    """
    if page.properties is not None and page.properties.graph_hide:
        return False
    if graph.has_node(page.id):
        return False
    if not journal and page.journal:
        return False

    graph.add_node(
        page.id,
        label=page.name,
        aliases=page_to_aliases(page, True),
        raw_aliases=page_to_aliases(page, False),
    )
    return True


def add_reference(graph: nx.DiGraph, source: EntityID, target: EntityID) -> bool:
    """Count one reference from ``source`` to ``target`` if both are nodes."""
    if not (graph.has_node(source) and graph.has_node(target)):
        return False
    if graph.has_edge(source, target):
        graph[source][target]["weight"] += 1
    else:
        graph.add_edge(source, target, weight=1)
    return True


async def build_graph(
    get_all_pages: GetAllPagesFn,
    get_block_references: GetBlockReferencesFn,
    get_settings: GetSettingsFn,
    get_block: GetBlockFn,
    *,
    normalize: ReferenceNormalizer = block_to_references,
    layout: LayoutFn = assign_random_positions,
) -> nx.DiGraph:
    """Build the page reference graph from the host's collaborators.

    Errors raised by the collaborators are not handled here; a failed
    fetch fails the whole build.

    Args:
        get_all_pages: Returns every page in the snapshot.
        get_block_references: Returns batches of blocks that carry references.
        get_settings: Returns the current settings (``journal`` toggle).
        get_block: Looks up a block by id, for references that target blocks.
        normalize: Turns a block into ``(source, target)`` references.
        layout: Assigns ``x``/``y`` to every node once edges are in place.

    Returns:
        A frozen ``networkx.DiGraph`` whose nodes carry ``label``,
        ``aliases``, ``raw_aliases``, ``x`` and ``y``, and whose edges carry
        an integer ``weight``.
    """
    graph = nx.DiGraph()
    journal = get_settings().journal is True

    pages = await get_all_pages()
    aliases = pages_to_alias_map(pages)
    pages = remove_aliases(aliases, pages)
    journals = [p for p in pages if p.journal]
    page_ids = frozenset(p.id for p in pages)
    logger.debug("Resolved %d aliased pages", len(aliases))

    for page in pages:
        admit_page(graph, page, journal)

    batches = await get_block_references()

    dropped = 0
    for batch in batches:
        for block in batch:
            if not block.refs:
                continue
            for ref in normalize(journal, journals, block):
                target = await ref_to_page_ref(get_block, aliases, page_ids, ref.target)
                if target is None or not add_reference(graph, ref.source, target):
                    dropped += 1

    layout(graph)

    logger.info(
        "Graph built: %d nodes, %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    logger.debug("Dropped %d references with no admitted endpoint", dropped)
    return nx.freeze(graph)


def find_node(graph: nx.DiGraph, name: str | None) -> EntityID | None:
    """Find the node whose label or alias matches ``name``, ignoring case."""
    if not name:
        return None
    up = name.upper()
    for node, attrs in graph.nodes(data=True):
        if attrs["label"].upper() == up or up in attrs.get("aliases", ()):
            return node
    return None


def node_name_index(graph: nx.DiGraph) -> dict[str, EntityID]:
    """Map upper-cased labels and aliases to node ids.

    Later nodes overwrite earlier ones when names collide.
    """
    index: dict[str, EntityID] = {}
    for node, attrs in graph.nodes(data=True):
        index[attrs["label"].upper()] = node
        for alias in attrs.get("aliases", ()):
            index[alias.upper()] = node
    return index


def graph_to_dict(graph: nx.DiGraph) -> dict[str, list[dict[str, Any]]]:
    """Return the graph as JSON-serializable ``nodes`` and ``links`` lists.

    Node attributes use the wire names (``rawAliases``).
    """
    nodes = []
    for node, attrs in graph.nodes(data=True):
        data = {"id": node, **attrs}
        if "raw_aliases" in data:
            data["rawAliases"] = data.pop("raw_aliases")
        nodes.append(data)
    links = [
        {"source": source, "target": target, "weight": attrs["weight"]}
        for source, target, attrs in graph.edges(data=True)
    ]
    return {"nodes": nodes, "links": links}

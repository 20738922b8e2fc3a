"""PageGraph FastAPI application."""

import logging
from functools import partial

import networkx as nx
from fastapi import FastAPI, HTTPException

from pagegraph.config import settings
from pagegraph.core.graph import (
    assign_random_positions,
    build_graph,
    find_node,
    graph_to_dict,
    node_name_index,
)
from pagegraph.core.models import GraphSettings
from pagegraph.core.storage import SnapshotError, SnapshotSource

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_title,
    debug=settings.debug,
)


async def build_snapshot_graph(journal: bool | None = None) -> nx.DiGraph:
    """Build a fresh graph from the configured snapshot file.

    Args:
        journal: Overrides the configured journal setting when given.
    """
    graph_settings = GraphSettings(
        journal=settings.journal if journal is None else journal
    )
    source = SnapshotSource(settings.snapshot_path, graph_settings)
    try:
        return await build_graph(
            source.get_all_pages,
            source.get_block_references,
            source.get_settings,
            source.get_block,
            layout=partial(assign_random_positions, seed=settings.layout_seed),
        )
    except FileNotFoundError:
        logger.warning("Snapshot not found: %s", settings.snapshot_path)
        raise HTTPException(status_code=503, detail="Snapshot not found")
    except SnapshotError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=503, detail=str(e))


# ========== Graph API ==========


@app.get("/api/graph")
async def api_graph(journal: bool | None = None):
    """Return the full reference graph as JSON."""
    graph = await build_snapshot_graph(journal)
    return graph_to_dict(graph)


@app.get("/api/graph/index")
async def api_graph_index(journal: bool | None = None):
    """Return the name index: upper-cased labels and aliases to node ids."""
    graph = await build_snapshot_graph(journal)
    return node_name_index(graph)


@app.get("/api/graph/find")
async def api_graph_find(name: str = "", journal: bool | None = None):
    """Resolve a page name or alias to its node."""
    graph = await build_snapshot_graph(journal)
    node = find_node(graph, name)
    if node is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return {"id": node, "label": graph.nodes[node]["label"]}

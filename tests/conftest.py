"""Shared fixtures for jsonscape tests.

This module provides:
1. Sample JSON documents used across test modules
2. Settings shortcuts for the common layout variants
3. Small helpers for building graphs by hand
"""

import pytest

from jsonscape import Edge, Graph, Node, NodeMeta, Settings
from jsonscape.settings import Align, Direction, LinkStyle

# =============================================================================
# Sample documents
# =============================================================================

# A with children B and C; C has child D.
SAMPLE_DOC = {
    "name": "A",
    "children": [
        {"name": "B"},
        {"name": "C", "children": [{"name": "D"}]},
    ],
}

ROOT = "$"
B = "$.children[0]"
C = "$.children[1]"
D = "$.children[1].children[0]"


@pytest.fixture
def sample_doc():
    return {
        "name": "A",
        "children": [
            {"name": "B"},
            {"name": "C", "children": [{"name": "D"}]},
        ],
    }


@pytest.fixture
def catalog_doc():
    """Wrapped array of products with scalar-array tags and nested owners."""
    return {
        "data": {
            "products": [
                {
                    "sku": "p-1",
                    "title": "Lamp",
                    "tags": ["home", "light"],
                    "price": 12.0,
                    "owner": {"name": "Ana", "email": "ana@example.com"},
                },
                {
                    "sku": "p-2",
                    "title": "Desk",
                    "tags": [],
                    "variants": [{"color": "oak"}, {"color": "pine"}],
                },
            ]
        }
    }


# =============================================================================
# Settings
# =============================================================================


def make_settings(**layout) -> Settings:
    """Default settings with layout fields overridden (enum values as strings ok)."""
    return Settings().with_layout(**layout)


@pytest.fixture
def center_settings():
    return make_settings(align=Align.CENTER)


@pytest.fixture
def line_settings():
    return make_settings(link_style=LinkStyle.LINE)


@pytest.fixture
def downward_settings():
    return make_settings(direction=Direction.DOWNWARD)


# =============================================================================
# Hand-built graphs
# =============================================================================


def make_node(node_id: str, child_order=None, x=None, y=None, width=256, height=64) -> Node:
    return Node(
        id=node_id,
        label=node_id,
        json_path=node_id,
        meta=NodeMeta(title=node_id, child_order=child_order),
        x=x,
        y=y,
        width=width,
        height=height,
    )


def make_graph(node_ids, links, **meta) -> Graph:
    """Graph from ids and (source, target) pairs; child orders follow link order."""
    orders: dict[str, int] = {}
    counter: dict[str, int] = {}
    for source, target in links:
        orders[target] = counter.get(source, 0)
        counter[source] = orders[target] + 1
    nodes = [make_node(n, orders.get(n)) for n in node_ids]
    edges = [Edge.between(s, t) for s, t in links]
    return Graph(nodes=nodes, edges=edges, meta=meta)


def chain_graph(length: int) -> Graph:
    ids = [f"n{i}" for i in range(length)]
    return make_graph(ids, list(zip(ids, ids[1:])))

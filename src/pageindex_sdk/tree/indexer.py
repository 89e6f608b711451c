# src/pageindex_sdk/tree/indexer.py

import logging
from collections.abc import Iterator
from time import monotonic
from typing import Any

from pageindex_sdk.observability import names
from pageindex_sdk.observability.base import MetricsHook, NoOpMetricsHook

from .models import PageRangeEntry, TreeInput, TreeNode

logger = logging.getLogger(__name__)


def parse_tree(tree: TreeInput) -> list[TreeNode]:
    """Normalize a tree or forest to a list of root ``TreeNode``.

    Raw API JSON (a dict or list of dicts) is wrapped in ``TreeNode`` with
    field values kept as given; only ``nodes`` is normalized. ``TreeNode``
    instances are passed through untouched.
    """
    roots = tree if isinstance(tree, list) else [tree]
    return [
        root if isinstance(root, TreeNode) else TreeNode.model_validate(root)
        for root in roots
    ]


def iter_nodes(tree: TreeInput) -> Iterator[TreeNode]:
    """Walk a tree or forest in document order.

    Pre-order: a node comes before its children, children in listed order,
    roots of a forest one after the other. Nodes without ``node_id`` are
    included.
    """
    stack = list(reversed(parse_tree(tree)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.nodes))


def flatten_tree(tree: TreeInput) -> list[TreeNode]:
    return list(iter_nodes(tree))


def node_map(
    tree: TreeInput,
    *,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> dict[str, TreeNode]:
    """Index every node that has a ``node_id``.

    Duplicate ids are a caller error: the later node in document order
    replaces the earlier one and a warning is logged.
    """
    start = monotonic()
    all_nodes = flatten_tree(tree)

    mapping: dict[str, TreeNode] = {}
    for node in all_nodes:
        if not node.node_id:
            continue
        _warn_on_duplicate(mapping, node.node_id)
        mapping[node.node_id] = node

    _record(metrics_hook, start, len(all_nodes), len(mapping), "nodes")
    return mapping


def page_range_map(
    tree: TreeInput,
    max_page: int | None = None,
    *,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> dict[str, PageRangeEntry]:
    """Index nodes with the page span each one covers.

    A section ends where the next one in document order begins, so the
    whole forest is flattened before any entry is built. Nodes without
    ``node_id`` are not indexed but still count as "the next node". The
    last node ends at ``max_page``.

    Args:
        tree: A tree, a list of trees, or their raw JSON.
        max_page: End page of the last node. None leaves it unset.
        metrics_hook: Optional metrics hook for observability.

    Returns:
        Mapping of node id to PageRangeEntry, in document order.
    """
    start = monotonic()
    all_nodes = flatten_tree(tree)

    mapping: dict[str, PageRangeEntry] = {}
    for i, node in enumerate(all_nodes):
        if not node.node_id:
            continue

        if i + 1 < len(all_nodes):
            end_index = all_nodes[i + 1].page_index
        else:
            end_index = max_page

        _warn_on_duplicate(mapping, node.node_id)
        mapping[node.node_id] = PageRangeEntry(
            node=node,
            start_index=node.page_index,
            end_index=end_index,
        )

    _record(metrics_hook, start, len(all_nodes), len(mapping), "page_ranges")
    return mapping


def create_node_mapping(
    tree: TreeInput,
    include_page_ranges: bool = False,
    max_page: int | None = None,
    *,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> dict[str, TreeNode] | dict[str, PageRangeEntry]:
    """Build a node id index, with page ranges if ``include_page_ranges``."""
    if include_page_ranges:
        return page_range_map(tree, max_page, metrics_hook=metrics_hook)
    return node_map(tree, metrics_hook=metrics_hook)


def _warn_on_duplicate(mapping: dict[Any, Any], node_id: Any) -> None:
    if node_id in mapping:
        logger.warning("Duplicate node_id %r, keeping the later node", node_id)


def _record(
    metrics_hook: MetricsHook,
    start: float,
    visited: int,
    indexed: int,
    kind: str,
) -> None:
    elapsed_ms = 1000 * (monotonic() - start)
    labels = {"kind": kind}
    metrics_hook.record_latency(names.TREE_INDEX_DURATION, elapsed_ms, labels=labels)
    metrics_hook.record_gauge(names.TREE_NODES_VISITED, visited, labels=labels)
    metrics_hook.record_gauge(names.TREE_NODES_INDEXED, indexed, labels=labels)
    logger.debug(
        "Indexed %d of %d nodes (%s) in %.1fms", indexed, visited, kind, elapsed_ms
    )

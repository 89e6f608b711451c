"""Document tree model and indexing.

The API describes a document as a forest of sections, each carrying the
page it starts on. These helpers flatten that forest into id lookups and
derive where each section ends.

Example:
    >>> from pageindex_sdk.tree import page_range_map
    >>>
    >>> ranges = page_range_map(tree_json, max_page=42)
    >>> ranges["0003"].start_index, ranges["0003"].end_index
"""

from .filtering import remove_fields
from .indexer import (
    create_node_mapping,
    flatten_tree,
    iter_nodes,
    node_map,
    page_range_map,
    parse_tree,
)
from .models import PageRangeEntry, TreeInput, TreeNode
from .printing import format_tree, print_tree, print_wrapped, wrap_text

__all__ = [
    # Models
    "PageRangeEntry",
    "TreeInput",
    "TreeNode",
    # Indexing
    "create_node_mapping",
    "flatten_tree",
    "iter_nodes",
    "node_map",
    "page_range_map",
    "parse_tree",
    # Views
    "format_tree",
    "print_tree",
    "print_wrapped",
    "remove_fields",
    "wrap_text",
]

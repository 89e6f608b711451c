# src/pageindex_sdk/tree/models.py

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TreeNode(BaseModel):
    """One section of a parsed document.

    Only the fields the indexer relies on are declared, and they are typed
    ``Any``: values are kept exactly as given, never coerced or rejected.
    Anything else the API sends (``title``, ``summary``, ...) is kept as an
    extra field. ``model_dump(exclude_unset=True)`` gives back the keys that
    were supplied and nothing more.
    """

    model_config = ConfigDict(extra="allow")

    node_id: Any = None
    page_index: Any = None
    text: Any = None
    nodes: list["TreeNode"] = Field(default_factory=list)

    @field_validator("nodes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        # leaves may carry "nodes": null
        return [] if value is None else value


@dataclass(frozen=True)
class PageRangeEntry:
    """A node together with the page span inferred from its successor."""

    node: TreeNode
    start_index: Any
    end_index: Any


TreeInput = TreeNode | dict[str, Any] | list[TreeNode] | list[dict[str, Any]]

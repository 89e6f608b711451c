# src/pageindex_sdk/models.py

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pageindex_sdk.tree.indexer import parse_tree
from pageindex_sdk.tree.models import TreeNode


class Role(str, Enum):
    """Message role in a chat completion."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single chat message. Immutable."""

    role: Role | str
    content: str

    def to_dict(self) -> dict[str, str]:
        role = self.role.value if isinstance(self.role, Role) else self.role
        return {"role": role, "content": self.content}


class APIModel(BaseModel):
    """Base for API responses. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SubmitDocumentResponse(APIModel):
    doc_id: str


class OCRResponse(APIModel):
    status: str


class TreeResponse(APIModel):
    status: str | None = None
    retrieval_ready: bool = False
    result: Any = None

    def tree(self) -> list[TreeNode]:
        """Parse ``result`` into root nodes. Empty until processing completes."""
        if not self.result:
            return []
        return parse_tree(self.result)


class RetrievalSubmitResponse(APIModel):
    retrieval_id: str


class RetrievalResponse(APIModel):
    status: str


class DocumentMetadata(APIModel):
    id: str
    name: str = ""
    description: str = ""
    status: str = ""
    created_at: str = Field(default="", alias="createdAt")
    page_num: int | None = Field(default=None, alias="pageNum")


class ListDocumentsResponse(APIModel):
    documents: list[DocumentMetadata] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0

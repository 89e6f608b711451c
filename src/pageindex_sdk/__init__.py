# Client
from .client import PageIndexClient
from .config import PageIndexConfig
from .factory import create_client

# Exceptions
from .exceptions import LLMError, PageIndexAPIError, PageIndexError, StreamDecodeError

# LLM
from .llm import call_llm

# Models
from .models import (
    DocumentMetadata,
    ListDocumentsResponse,
    Message,
    OCRResponse,
    RetrievalResponse,
    RetrievalSubmitResponse,
    Role,
    SubmitDocumentResponse,
    TreeResponse,
)

# Observability
from .observability import MetricsHook, NoOpMetricsHook

# Streaming
from .streaming import StreamChunk, StreamDecoder, decode_stream

# Tree
from .tree import (
    PageRangeEntry,
    TreeNode,
    create_node_mapping,
    flatten_tree,
    node_map,
    page_range_map,
    print_tree,
    print_wrapped,
    remove_fields,
)

__all__ = [
    # Client
    "PageIndexClient",
    "PageIndexConfig",
    "create_client",
    # Exceptions
    "LLMError",
    "PageIndexAPIError",
    "PageIndexError",
    "StreamDecodeError",
    # LLM
    "call_llm",
    # Models
    "DocumentMetadata",
    "ListDocumentsResponse",
    "Message",
    "OCRResponse",
    "RetrievalResponse",
    "RetrievalSubmitResponse",
    "Role",
    "SubmitDocumentResponse",
    "TreeResponse",
    # Observability
    "MetricsHook",
    "NoOpMetricsHook",
    # Streaming
    "StreamChunk",
    "StreamDecoder",
    "decode_stream",
    # Tree
    "PageRangeEntry",
    "TreeNode",
    "create_node_mapping",
    "flatten_tree",
    "node_map",
    "page_range_map",
    "print_tree",
    "print_wrapped",
    "remove_fields",
]

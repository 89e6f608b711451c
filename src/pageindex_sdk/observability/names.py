# src/pageindex_sdk/observability/names.py

"""Standard metric names for pageindex-sdk observability.

Use these constants instead of hardcoded strings.

Note: All duration metrics are in milliseconds by convention.
"""

# ============================================================================
# API Client Metrics
# ============================================================================

# Duration
API_REQUEST_DURATION = "pageindex_api_request_duration"

# Counters (labelled by operation)
API_REQUESTS_TOTAL = "pageindex_api_requests_total"
API_ERRORS_TOTAL = "pageindex_api_errors_total"


# ============================================================================
# Stream Decoding Metrics
# ============================================================================

# Counters
STREAM_CHUNKS_TOTAL = "stream_chunks_total"
STREAM_FRAMES_SKIPPED = "stream_frames_skipped"
STREAM_ERRORS_TOTAL = "stream_errors_total"


# ============================================================================
# Tree Indexing Metrics
# ============================================================================

# Duration
TREE_INDEX_DURATION = "tree_index_duration"

# Gauges
TREE_NODES_VISITED = "tree_nodes_visited"
TREE_NODES_INDEXED = "tree_nodes_indexed"


# ============================================================================
# LLM Metrics
# ============================================================================

# Duration
LLM_COMPLETION_DURATION = "llm_completion_duration"

# Counters
LLM_REQUESTS_TOTAL = "llm_requests_total"
LLM_TOKENS_TOTAL = "llm_tokens_total"

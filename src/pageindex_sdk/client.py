# src/pageindex_sdk/client.py

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from time import monotonic
from typing import Any, Literal

import httpx

from pageindex_sdk.config import API_KEY_ENV_VAR, DEFAULT_BASE_URL
from pageindex_sdk.exceptions import PageIndexAPIError, PageIndexError
from pageindex_sdk.models import (
    DocumentMetadata,
    ListDocumentsResponse,
    Message,
    OCRResponse,
    RetrievalResponse,
    RetrievalSubmitResponse,
    SubmitDocumentResponse,
    TreeResponse,
)
from pageindex_sdk.observability import names
from pageindex_sdk.observability.base import MetricsHook, NoOpMetricsHook
from pageindex_sdk.streaming.decoder import StreamChunk, decode_stream

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class PageIndexClient:
    """Async client for the PageIndex API.

    Thin request/response wrapper: no retries, no rate limiting. Every
    non-2xx response or transport failure raises PageIndexAPIError.

    Example:
        >>> async with PageIndexClient(api_key="...") as client:
        ...     submitted = await client.submit_document("report.pdf")
        ...     tree = await client.get_tree(submitted.doc_id)
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        api_key = api_key or os.environ.get(API_KEY_ENV_VAR)
        if not api_key:
            raise PageIndexError(
                f"No API key given and {API_KEY_ENV_VAR} is not set"
            )

        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self.metrics_hook = metrics_hook
        self._open_streams: set[httpx.Response] = set()
        logger.info(
            "Initialized PageIndexClient with base_url=%s, timeout=%s",
            self._base_url,
            timeout,
        )

    async def __aenter__(self) -> "PageIndexClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close streams that were never fully read, then the HTTP client.

        The HTTP client is only closed if this instance created it.
        """
        while self._open_streams:
            await self._open_streams.pop().aclose()
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def submit_document(self, file_path: str | Path) -> SubmitDocumentResponse:
        """Upload a document from disk for processing."""
        path = Path(file_path)
        filename = path.name or "document.pdf"
        content = await asyncio.to_thread(path.read_bytes)
        return await self._submit(filename, content)

    async def submit_document_bytes(
        self, filename: str, data: bytes
    ) -> SubmitDocumentResponse:
        """Upload an in-memory PDF for processing.

        Raises:
            PageIndexAPIError: If ``filename`` does not end in ``.pdf``.
        """
        if not filename.endswith(".pdf"):
            raise PageIndexAPIError("Only PDF files are supported.")
        return await self._submit(filename, data)

    async def _submit(self, filename: str, content: bytes) -> SubmitDocumentResponse:
        logger.debug("Submitting document %s (%d bytes)", filename, len(content))
        response = await self._request(
            "POST",
            "/doc/",
            action="submit document",
            operation="submit_document",
            files={"file": (filename, content, "application/pdf")},
            data={"if_retrieval": "True"},
        )
        return SubmitDocumentResponse.model_validate(response.json())

    async def get_document(self, doc_id: str) -> DocumentMetadata:
        response = await self._request(
            "GET",
            f"/doc/{doc_id}/metadata/",
            action="get document metadata",
            operation="get_document",
        )
        return DocumentMetadata.model_validate(response.json())

    async def delete_document(self, doc_id: str) -> dict[str, Any]:
        response = await self._request(
            "DELETE",
            f"/doc/{doc_id}/",
            action="delete document",
            operation="delete_document",
        )
        return response.json()

    async def list_documents(
        self, limit: int = 50, offset: int = 0
    ) -> ListDocumentsResponse:
        """List uploaded documents, one page at a time.

        Raises:
            ValueError: If ``limit`` is outside 1..100 or ``offset`` is negative.
        """
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValueError("offset must be non-negative")

        response = await self._request(
            "GET",
            "/docs/",
            action="list documents",
            operation="list_documents",
            params={"limit": limit, "offset": offset},
        )
        return ListDocumentsResponse.model_validate(response.json())

    # ------------------------------------------------------------------
    # OCR and tree
    # ------------------------------------------------------------------

    async def get_ocr(
        self, doc_id: str, format: Literal["page", "node"] = "page"
    ) -> OCRResponse:
        response = await self._request(
            "GET",
            f"/doc/{doc_id}/",
            action="get OCR result",
            operation="get_ocr",
            params={"type": "ocr", "format": format},
        )
        return OCRResponse.model_validate(response.json())

    async def get_tree(self, doc_id: str, node_summary: bool = False) -> TreeResponse:
        response = await self._request(
            "GET",
            f"/doc/{doc_id}/",
            action="get tree result",
            operation="get_tree",
            params={"type": "tree", "summary": "true" if node_summary else "false"},
        )
        return TreeResponse.model_validate(response.json())

    async def is_retrieval_ready(self, doc_id: str) -> bool:
        """True once the document tree can be queried. API errors count as not ready."""
        try:
            result = await self.get_tree(doc_id)
        except PageIndexAPIError as exc:
            logger.warning("Treating %s as not ready: %s", doc_id, exc)
            return False
        return result.retrieval_ready

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def submit_query(
        self, doc_id: str, query: str, thinking: bool = False
    ) -> RetrievalSubmitResponse:
        response = await self._request(
            "POST",
            "/retrieval/",
            action="submit retrieval",
            operation="submit_query",
            json={"doc_id": doc_id, "query": query, "thinking": thinking},
        )
        return RetrievalSubmitResponse.model_validate(response.json())

    async def get_retrieval(self, retrieval_id: str) -> RetrievalResponse:
        response = await self._request(
            "GET",
            f"/retrieval/{retrieval_id}/",
            action="get retrieval result",
            operation="get_retrieval",
        )
        return RetrievalResponse.model_validate(response.json())

    # ------------------------------------------------------------------
    # Chat completions
    # ------------------------------------------------------------------

    async def chat_completions(
        self,
        messages: Sequence[Message | dict[str, str]],
        *,
        stream: bool = False,
        doc_id: str | list[str] | None = None,
        temperature: float | None = None,
        stream_metadata: bool = False,
    ) -> dict[str, Any] | AsyncIterator[StreamChunk]:
        """Chat over one or more documents.

        Args:
            messages: Full conversation. Message objects or role/content dicts.
            stream: Return an async iterator of chunks instead of one response.
            doc_id: Document id(s) to chat over. Falsy means every document
                in the account.
            temperature: Sampling temperature. Omitted from the request if None.
            stream_metadata: When streaming, yield the parsed JSON chunks
                instead of text fragments.

        Returns:
            The parsed JSON response, or (``stream=True``) an async iterator
            of text fragments or JSON chunks.

        Raises:
            PageIndexAPIError: If the request fails. For streams this is raised
                here, before any chunk is read.

        Note:
            A returned stream holds its HTTP response open until iteration
            ends. Streams that are abandoned without being exhausted are
            closed by ``aclose()`` (or leaving ``async with``).
        """
        if not doc_id:
            doc_id = await self._all_document_ids()

        payload: dict[str, Any] = {
            "messages": [
                m.to_dict() if isinstance(m, Message) else dict(m) for m in messages
            ],
            "stream": stream,
            "doc_id": doc_id,
        }
        if temperature is not None:
            payload["temperature"] = temperature

        if not stream:
            response = await self._request(
                "POST",
                "/chat/completions/",
                action="get chat completion",
                operation="chat_completions",
                json=payload,
            )
            return response.json()

        response = await self._open_stream("/chat/completions/", payload)
        return self._iter_stream(response, raw=stream_metadata)

    async def _all_document_ids(self) -> list[str]:
        ids: list[str] = []
        offset = 0
        while True:
            page = await self.list_documents(limit=MAX_PAGE_SIZE, offset=offset)
            ids.extend(doc.id for doc in page.documents)
            offset += len(page.documents)
            if not page.documents or offset >= page.total:
                break
        logger.debug("Chatting over all %d documents", len(ids))
        return ids

    async def _open_stream(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        operation = "chat_completions"
        start = monotonic()
        logger.debug("PageIndex stream request: POST %s", path)
        request = self._client.build_request(
            "POST", self._url(path), headers=self._headers(), json=payload
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as exc:
            self._record_error(operation)
            raise PageIndexAPIError(f"Failed to get chat completion: {exc}") from exc

        # duration covers time to response headers, not the body
        elapsed_ms = self._record_request(operation, start)

        if response.is_error:
            await response.aread()
            await response.aclose()
            self._record_error(operation)
            raise PageIndexAPIError(
                f"Failed to get chat completion: {response.text}",
                status_code=response.status_code,
            )

        logger.info(
            "PageIndex %s stream opened: status=%d, latency=%.0fms",
            operation,
            response.status_code,
            elapsed_ms,
        )
        self._open_streams.add(response)
        return response

    async def _iter_stream(
        self, response: httpx.Response, *, raw: bool
    ) -> AsyncIterator[StreamChunk]:
        try:
            async for chunk in decode_stream(
                response.aiter_bytes(), raw=raw, metrics_hook=self.metrics_hook
            ):
                yield chunk
        finally:
            self._open_streams.discard(response)
            await response.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _headers(self) -> dict[str, str]:
        return {"api_key": self._api_key}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        operation: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request. Non-2xx and transport errors become PageIndexAPIError."""
        start = monotonic()
        logger.debug("PageIndex request: %s %s", method, path)

        try:
            response = await self._client.request(
                method, self._url(path), headers=self._headers(), **kwargs
            )
        except httpx.RequestError as exc:
            self._record_error(operation)
            raise PageIndexAPIError(f"Failed to {action}: {exc}") from exc

        elapsed_ms = self._record_request(operation, start)

        if response.is_error:
            self._record_error(operation)
            raise PageIndexAPIError(
                f"Failed to {action}: {response.text}",
                status_code=response.status_code,
            )

        logger.info(
            "PageIndex %s: status=%d, latency=%.0fms",
            operation,
            response.status_code,
            elapsed_ms,
        )
        return response

    def _record_error(self, operation: str) -> None:
        self.metrics_hook.increment(
            names.API_ERRORS_TOTAL, labels={"operation": operation}
        )

    def _record_request(self, operation: str, start: float) -> float:
        elapsed_ms = 1000 * (monotonic() - start)
        labels = {"operation": operation}
        self.metrics_hook.record_latency(
            names.API_REQUEST_DURATION, elapsed_ms, labels=labels
        )
        self.metrics_hook.increment(names.API_REQUESTS_TOTAL, labels=labels)
        return elapsed_ms

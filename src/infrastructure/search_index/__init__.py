"""
Search Index Projection
=======================

Pushes ticket documents into an Elasticsearch-compatible index over HTTP.

The index is a read-side projection only: match and ranking decisions are
always made by the fuzzy matcher, never by the index.

Handles:
- Circuit breaker to prevent cascade failures
- Exponential backoff retry
- Timeout handling
"""

import asyncio
import time
from typing import Any, Dict, Optional

import httpx

from src.config import settings
from src.core import SearchIndexException
from src.tickets.application.interfaces import ISearchIndex
from src.tickets.domain import Ticket
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState:
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Circuit breaker for preventing cascade failures.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: After N failures, reject all requests for M seconds
    - HALF_OPEN: After timeout, allow one test request
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._last_failure_time is not None:
            if time.monotonic() - self._last_failure_time >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        return self.state in (CircuitState.CLOSED, CircuitState.HALF_OPEN)

    def record_success(self) -> None:
        self._failure_count = 0
        self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = time.monotonic()

        if self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "recovery_timeout": self.recovery_timeout
                }
            )


def ticket_document(ticket: Ticket) -> Dict[str, Any]:
    """Flatten a ticket into the indexed document shape."""
    return {
        "id": ticket.id,
        "title": ticket.title,
        "description": ticket.description,
        "status": ticket.status.value,
        "priority": ticket.priority.value if ticket.priority else None,
        "assigned_agent_id": ticket.assigned_agent_id,
        "assigned_agent_name": ticket.assigned_agent_name,
        "customer_email": ticket.customer_email,
        "customer_name": ticket.customer_name,
        "created_at": ticket.created_at.isoformat(),
        "updated_at": ticket.updated_at.isoformat(),
        "closed_at": ticket.closed_at.isoformat() if ticket.closed_at else None,
        "auto_assigned": ticket.auto_assigned,
    }


class HttpSearchIndex(ISearchIndex):
    """
    Search index client with circuit breaker and retry logic.

    Documents are written with `PUT {base_url}/{index}/_doc/{id}`. Every
    failure surfaces as SearchIndexException so callers can log and move on.
    """

    def __init__(
        self,
        base_url: str,
        index_name: str = "tickets",
        timeout_seconds: float = 5.0,
        max_retries: int = 2,
        backoff_base: float = 0.2,
        client: Optional[httpx.AsyncClient] = None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._index_name = index_name
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._http_client = client
        self._circuit_breaker = circuit_breaker or CircuitBreaker()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    def _doc_url(self, ticket_id: str) -> str:
        return f"{self._base_url}/{self._index_name}/_doc/{ticket_id}"

    async def _send(self, method: str, ticket_id: str, payload: Optional[dict] = None) -> None:
        if not self._circuit_breaker.allow_request():
            raise SearchIndexException(
                "Circuit breaker open, skipping index request",
                {"ticket_id": ticket_id}
            )

        last_error = None
        for attempt in range(self._max_retries):
            try:
                client = await self._get_client()
                response = await client.request(method, self._doc_url(ticket_id), json=payload)

                if response.is_success:
                    self._circuit_breaker.record_success()
                    return

                last_error = f"HTTP {response.status_code}"
                logger.warning(
                    "Search index returned error status",
                    extra={
                        "status_code": response.status_code,
                        "attempt": attempt + 1,
                        "ticket_id": ticket_id
                    }
                )
            except httpx.HTTPError as e:
                last_error = str(e)
                logger.error(
                    "Search index request failed",
                    extra={
                        "error": str(e),
                        "attempt": attempt + 1,
                        "ticket_id": ticket_id
                    }
                )
            except Exception as e:
                # Bad URL or payload, not retried
                self._circuit_breaker.record_failure()
                logger.error(
                    "Search index request could not be sent",
                    extra={"error": str(e), "ticket_id": ticket_id}
                )
                raise SearchIndexException(
                    f"{method} could not be sent: {e}",
                    {"ticket_id": ticket_id}
                ) from e

            if attempt < self._max_retries - 1:
                await asyncio.sleep(self._backoff_base * (2 ** attempt))

        self._circuit_breaker.record_failure()
        raise SearchIndexException(
            f"{method} failed after {self._max_retries} attempts: {last_error}",
            {"ticket_id": ticket_id}
        )

    async def index_ticket(self, ticket: Ticket) -> None:
        await self._send("PUT", ticket.id, ticket_document(ticket))

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None


class NullSearchIndex(ISearchIndex):
    """No-op index used when no search index URL is configured."""

    async def index_ticket(self, ticket: Ticket) -> None:
        return None

    async def close(self) -> None:
        return None


_search_index: Optional[ISearchIndex] = None


def get_search_index() -> ISearchIndex:
    """Process-wide index client, built from settings on first use."""
    global _search_index
    if _search_index is None:
        if settings.search_index_url:
            _search_index = HttpSearchIndex(
                settings.search_index_url,
                index_name=settings.search_index_name,
                timeout_seconds=settings.search_index_timeout_seconds,
                max_retries=settings.search_index_max_retries,
            )
        else:
            _search_index = NullSearchIndex()
    return _search_index


async def close_search_index() -> None:
    global _search_index
    if _search_index is not None:
        await _search_index.close()
        _search_index = None

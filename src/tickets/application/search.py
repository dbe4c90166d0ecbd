"""
Ticket Search Service
=====================

Composes exact and fuzzy matching over a ticket corpus.

Passes, in order:
1. exact id lookup
2. partial id containment when the query looks like a hex id fragment
3. case-insensitive literal substring on title or description
4. fuzzy match on title or description over everything not yet matched

Passes 1-3 are exact matches and rank ahead of every fuzzy match. Exact
matches are ordered newest first; fuzzy matches by relevance score.
Results are deduplicated by ticket id across passes.
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from src.config import settings
from src.core import ValidationException
from src.tickets.application.interfaces import ITicketRepository
from src.tickets.domain import Ticket, fuzzy
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

_ID_FRAGMENT = re.compile(r"^[a-fA-F0-9]+$")
MIN_ID_FRAGMENT_LENGTH = 3


def is_id_fragment(query: str) -> bool:
    """True when the query could be part of a ticket id (3+ hex characters)."""
    return len(query) >= MIN_ID_FRAGMENT_LENGTH and bool(_ID_FRAGMENT.match(query))


@dataclass
class SearchPage:
    """One page of search results."""

    tickets: List[Ticket] = field(default_factory=list)
    total_count: int = 0
    page: int = 0
    size: int = 10
    total_pages: int = 0


class SearchService:
    """
    Exact + fuzzy ticket search with stable ordering.

    When `agent_id` is given, the corpus is restricted to that agent's
    tickets; otherwise every ticket is searched.
    """

    def __init__(self, ticket_repository: ITicketRepository, threshold: Optional[float] = None):
        self._tickets = ticket_repository
        self._threshold = threshold if threshold is not None else settings.fuzzy_threshold

    async def search(
        self,
        query: str,
        page: int = 0,
        size: int = 10,
        agent_id: Optional[str] = None
    ) -> SearchPage:
        """Full search, paginated. `page` is zero-based."""
        query = self._clean(query)
        if page < 0 or size < 1:
            raise ValidationException(
                "page must be >= 0 and size must be >= 1",
                {"page": page, "size": size}
            )

        exact, fuzzy_hits = await self._collect(query, agent_id)
        # Stable sort keeps pass order among equal timestamps
        exact.sort(key=lambda t: t.created_at, reverse=True)
        results = exact + fuzzy_hits

        total = len(results)
        start = page * size
        logger.info(
            "Ticket search completed",
            extra={
                "query": query,
                "agent_id": agent_id,
                "exact_count": len(exact),
                "fuzzy_count": len(fuzzy_hits),
            }
        )
        return SearchPage(
            tickets=results[start:start + size],
            total_count=total,
            page=page,
            size=size,
            total_pages=math.ceil(total / size),
        )

    async def autocomplete(
        self,
        query: str,
        limit: int = 5,
        agent_id: Optional[str] = None
    ) -> List[Ticket]:
        """
        Up to `limit` suggestions.

        Exact passes stop as soon as `limit` matches exist; the fuzzy pass
        only runs when they fall short.
        """
        query = self._clean(query)
        if limit < 1:
            raise ValidationException("limit must be >= 1", {"limit": limit})

        exact, fuzzy_hits = await self._collect(query, agent_id, limit=limit)
        return (exact + fuzzy_hits)[:limit]

    async def count(self, query: str, agent_id: Optional[str] = None) -> int:
        """Size of the deduplicated union of every pass."""
        query = self._clean(query)
        exact, fuzzy_hits = await self._collect(query, agent_id)
        return len(exact) + len(fuzzy_hits)

    # ========== Internals ==========

    @staticmethod
    def _clean(query: Optional[str]) -> str:
        if query is None or not query.strip():
            raise ValidationException("Search query must not be blank")
        return query.strip()

    async def _corpus(self, agent_id: Optional[str]) -> List[Ticket]:
        if agent_id is None:
            return await self._tickets.list_all()
        return await self._tickets.list_by_assigned_agent(agent_id)

    async def _collect(
        self,
        query: str,
        agent_id: Optional[str],
        limit: Optional[int] = None
    ) -> Tuple[List[Ticket], List[Ticket]]:
        seen: Set[str] = set()
        exact: List[Ticket] = []

        def full() -> bool:
            return limit is not None and len(exact) >= limit

        def take(ticket: Ticket) -> None:
            seen.add(ticket.id)
            exact.append(ticket)

        by_id = await self._tickets.get_by_id(query)
        if by_id is not None and (agent_id is None or by_id.assigned_agent_id == agent_id):
            take(by_id)

        corpus: Optional[List[Ticket]] = None

        if is_id_fragment(query) and not full():
            corpus = await self._corpus(agent_id)
            fragment = query.lower()
            for ticket in corpus:
                if full():
                    break
                if ticket.id not in seen and fragment in ticket.id.lower():
                    take(ticket)

        if not full():
            for ticket in await self._tickets.search_text(query, agent_id):
                if full():
                    break
                if ticket.id not in seen:
                    take(ticket)

        fuzzy_hits: List[Ticket] = []
        if full():
            return exact, fuzzy_hits

        if corpus is None:
            corpus = await self._corpus(agent_id)
        for ticket in corpus:
            if ticket.id in seen:
                continue
            if (fuzzy.fuzzy_matches(query, ticket.title, self._threshold)
                    or fuzzy.fuzzy_matches(query, ticket.description, self._threshold)):
                seen.add(ticket.id)
                fuzzy_hits.append(ticket)

        fuzzy_hits.sort(
            key=lambda t: fuzzy.calculate_relevance_score(query, t.title, t.description, self._threshold),
            reverse=True,
        )
        return exact, fuzzy_hits

import asyncio

import httpx
import pytest

from src.core import SearchIndexException
from src.infrastructure.search_index import CircuitBreaker, CircuitState, HttpSearchIndex, ticket_document
from src.tickets.application.services import project_to_index
from tests.conftest import make_ticket


def _index(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSearchIndex("http://search:9200/", client=client, backoff_base=0, **kwargs)


def _ticket():
    ticket = make_ticket(title="VPN drops")
    ticket.id = "a" * 32
    return ticket


def test_document_shape():
    doc = ticket_document(_ticket())
    assert doc["id"] == "a" * 32
    assert doc["title"] == "VPN drops"
    assert doc["status"] == "NOT_STARTED"
    assert doc["priority"] is None


def test_index_puts_document():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"result": "created"})

    asyncio.run(_index(handler).index_ticket(_ticket()))

    assert len(requests) == 1
    assert requests[0].method == "PUT"
    assert str(requests[0].url) == "http://search:9200/tickets/_doc/" + "a" * 32


def test_retries_then_succeeds():
    statuses = iter([503, 502, 200])

    def handler(request):
        return httpx.Response(next(statuses))

    asyncio.run(_index(handler, max_retries=3).index_ticket(_ticket()))


def test_exhausted_retries_raise():
    calls = []

    def handler(request):
        calls.append(1)
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SearchIndexException):
        asyncio.run(_index(handler, max_retries=2).index_ticket(_ticket()))
    assert len(calls) == 2


def test_open_circuit_short_circuits():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(500)

    breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
    index = _index(handler, max_retries=1, circuit_breaker=breaker)

    async def scenario():
        with pytest.raises(SearchIndexException):
            await index.index_ticket(_ticket())
        assert breaker.state == CircuitState.OPEN
        with pytest.raises(SearchIndexException):
            await index.index_ticket(_ticket())

    asyncio.run(scenario())
    assert len(calls) == 1


def test_request_that_cannot_be_built_raises_index_error():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(201)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
    index = HttpSearchIndex("http://[::1", client=client, circuit_breaker=breaker)

    with pytest.raises(SearchIndexException):
        asyncio.run(index.index_ticket(_ticket()))
    assert calls == []
    assert breaker.state == CircuitState.OPEN


def test_unexpected_client_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(1)
        raise ValueError("unsupported payload")

    with pytest.raises(SearchIndexException) as exc:
        asyncio.run(_index(handler, max_retries=3).index_ticket(_ticket()))
    assert len(calls) == 1
    assert isinstance(exc.value.__cause__, ValueError)


def test_project_to_index_swallows_unexpected_client_errors():
    def handler(request):
        raise ValueError("unsupported payload")

    # completes without raising
    asyncio.run(project_to_index(_index(handler), _ticket()))

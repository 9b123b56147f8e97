"""Tests for the async Book Store client using httpx's mock transport."""
import asyncio
import json

import httpx

from bookshelf.async_client import AsyncBookStoreClient

BOOKS_PAYLOAD = {
    "success": True,
    "data": [
        {"id": 1, "title": "Dune", "author": "Frank Herbert", "pages": 400, "pagesRead": 50},
    ],
    "timestamp": "2024-05-01T10:00:00Z",
}


def run_with(handler, action):
    """Run ``action(client)`` against a client wired to ``handler``."""
    async def scenario():
        async with AsyncBookStoreClient(
            "http://books.test/",
            transport=httpx.MockTransport(handler)
        ) as client:
            return await action(client)
    return asyncio.run(scenario())


def test_list_books():
    seen = []

    def handler(request):
        seen.append((request.method, str(request.url)))
        return httpx.Response(200, json=BOOKS_PAYLOAD)

    books = run_with(handler, lambda client: client.list_books())

    assert seen == [("GET", "http://books.test/api/books")]
    assert books[0].title == "Dune"
    assert books[0].pages_read == 50


def test_list_books_success_false():
    def handler(request):
        return httpx.Response(200, json={"success": False, "data": []})

    assert run_with(handler, lambda client: client.list_books()) is None


def test_list_books_server_error():
    def handler(request):
        return httpx.Response(500)

    assert run_with(handler, lambda client: client.list_books()) is None


def test_list_books_malformed_json():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    assert run_with(handler, lambda client: client.list_books()) is None


def test_list_books_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert run_with(handler, lambda client: client.list_books()) is None


def test_update_pages_read():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(204)

    result = run_with(handler, lambda client: client.update_pages_read(7, 120))

    assert result.ok
    assert seen == [("PUT", "/api/books/7/pages-read", {"pagesRead": 120})]


def test_add_review():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(201, json={"success": True})

    result = run_with(handler, lambda client: client.add_review(7, 4))

    assert result.ok
    assert result.status_code == 201
    assert seen == [("POST", "/api/books/7/review", {"rating": 4, "comment": ""})]


def test_write_failure_is_reported():
    def handler(request):
        return httpx.Response(404)

    result = run_with(handler, lambda client: client.add_review(7, 4))

    assert not result.ok
    assert result.status_code == 404
    assert result.error == "HTTP 404"


def test_write_transport_error_is_reported():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = run_with(handler, lambda client: client.update_pages_read(7, 1))

    assert not result.ok
    assert result.status_code is None
    assert "timed out" in result.error

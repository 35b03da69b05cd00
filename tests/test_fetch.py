"""Tests for the GitHub fetcher, driven through httpx.MockTransport."""

import httpx
import pytest

from skillfinder.config import HTTP_MAX_BYTES
from skillfinder.fetch import GitHubFetcher, build_client, raw_url

RAW = "https://raw.githubusercontent.com"
API = "https://api.github.com"


def _fetcher(handler, token=""):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, GitHubFetcher(client, token=token, timeout=5)


def test_raw_url():
    assert raw_url("a/b", "main", "x/SKILL.md") == f"{RAW}/a/b/main/x/SKILL.md"


def test_build_client_ignores_environment():
    client = build_client(3)
    assert client.trust_env is False
    assert client.timeout.read == 3
    assert client.headers["User-Agent"].startswith("skillfinder/")


class TestFetchReadme:
    @pytest.mark.asyncio
    async def test_main_branch(self):
        def handler(request):
            if request.url.path == "/a/b/main/README.md":
                return httpx.Response(200, text="# Hi")
            return httpx.Response(404)

        client, f = _fetcher(handler)
        async with client:
            assert await f.fetch_readme("a/b") == ("# Hi", "main")

    @pytest.mark.asyncio
    async def test_falls_back_to_master(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path == "/a/b/master/README.md":
                return httpx.Response(200, text="# Legacy")
            return httpx.Response(404)

        client, f = _fetcher(handler)
        async with client:
            assert await f.fetch_readme("a/b") == ("# Legacy", "master")
        assert seen == ["/a/b/main/README.md", "/a/b/master/README.md"]

    @pytest.mark.asyncio
    async def test_missing_everywhere(self):
        client, f = _fetcher(lambda request: httpx.Response(404))
        async with client:
            assert await f.fetch_readme("a/b") is None


class TestFetchText:
    @pytest.mark.asyncio
    async def test_timeout_is_absence(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client, f = _fetcher(handler)
        async with client:
            assert await f.fetch_text(f"{RAW}/a/b/main/README.md") is None

    @pytest.mark.asyncio
    async def test_transport_error_is_absence(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client, f = _fetcher(handler)
        async with client:
            assert await f.fetch_text(f"{RAW}/a/b/main/README.md") is None

    @pytest.mark.asyncio
    async def test_oversized_body_rejected(self):
        body = b"x" * (HTTP_MAX_BYTES + 1)
        client, f = _fetcher(lambda request: httpx.Response(200, content=body))
        async with client:
            assert await f.fetch_text(f"{RAW}/a/b/main/README.md") is None

    @pytest.mark.asyncio
    async def test_empty_body_is_absence(self):
        client, f = _fetcher(lambda request: httpx.Response(200, text=""))
        async with client:
            assert await f.fetch_text(f"{RAW}/a/b/main/README.md") is None


class TestApi:
    @pytest.mark.asyncio
    async def test_default_branch(self):
        def handler(request):
            assert request.url.path == "/repos/a/b"
            return httpx.Response(200, json={"default_branch": "trunk"})

        client, f = _fetcher(handler)
        async with client:
            assert await f.default_branch("a/b") == "trunk"

    @pytest.mark.asyncio
    async def test_default_branch_on_rate_limit(self):
        client, f = _fetcher(lambda request: httpx.Response(403))
        async with client:
            assert await f.default_branch("a/b") == "main"

    @pytest.mark.asyncio
    async def test_default_branch_on_bad_json(self):
        client, f = _fetcher(lambda request: httpx.Response(200, text="not json"))
        async with client:
            assert await f.default_branch("a/b") == "main"

    @pytest.mark.asyncio
    async def test_token_sent_to_api(self):
        headers = {}

        def handler(request):
            headers.update(request.headers)
            return httpx.Response(200, json={"default_branch": "main"})

        client, f = _fetcher(handler, token="sekrit")
        async with client:
            await f.default_branch("a/b")
        assert headers["authorization"] == "Bearer sekrit"
        assert headers["accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        headers = {}

        def handler(request):
            headers.update(request.headers)
            return httpx.Response(200, json={})

        client, f = _fetcher(handler)
        async with client:
            assert await f.default_branch("a/b") == "main"
        assert "authorization" not in headers

    @pytest.mark.asyncio
    async def test_tree_listing(self):
        def handler(request):
            assert request.url.path == "/repos/a/b/git/trees/main"
            assert request.url.params["recursive"] == "1"
            return httpx.Response(
                200,
                json={
                    "tree": [
                        {"path": "pdf", "type": "tree"},
                        {"path": "pdf/SKILL.md", "type": "blob"},
                        {"type": "blob"},
                    ],
                    "truncated": True,
                },
            )

        client, f = _fetcher(handler)
        async with client:
            listing = await f.fetch_tree("a/b", "main")
        assert [(i.path, i.type) for i in listing.items] == [("pdf", "tree"), ("pdf/SKILL.md", "blob")]
        assert listing.truncated is True

    @pytest.mark.asyncio
    async def test_tree_failure_is_empty(self):
        client, f = _fetcher(lambda request: httpx.Response(500))
        async with client:
            listing = await f.fetch_tree("a/b", "main")
        assert listing.items == []
        assert listing.truncated is False

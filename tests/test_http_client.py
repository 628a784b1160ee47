# ruff: noqa: S101
import httpx
import pytest

from reqatlas.http_client import RelayClient, RelayReply, _validate_url


@pytest.mark.asyncio
async def test_forward_uses_requester_and_sets_target_header():
    seen = {}

    async def requester(method, target_url, headers, body):
        seen.update(method=method, target=target_url, headers=headers, body=body)
        return RelayReply(status=204, status_text="No Content")

    client = RelayClient("http://127.0.0.1:3001/proxy", requester=requester)
    reply = await client.forward("DELETE", "https://api.example.com/items/1", {"A": "b"})

    assert reply.status == 204
    assert seen["method"] == "DELETE"
    assert seen["headers"] == {"A": "b", "x-target-url": "https://api.example.com/items/1"}
    assert seen["body"] is None


@pytest.mark.asyncio
async def test_forward_through_relay_returns_origin_reply(relay_client, origin):
    origin.response = httpx.Response(201, text="created", headers={"Content-Type": "text/plain"})

    reply = await relay_client.forward("PUT", "https://api.example.com/items", {}, b"data")

    assert reply.status == 201
    assert reply.status_text == "Created"
    assert reply.content == b"created"
    assert reply.headers["content-type"].startswith("text/plain")
    assert origin.bodies[0] == b"data"


@pytest.mark.asyncio
async def test_unreachable_relay_raises():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = RelayClient("http://127.0.0.1:3001/proxy", transport=httpx.MockTransport(refuse))
    with pytest.raises(httpx.ConnectError):
        await client.forward("GET", "https://api.example.com", {})


def test_validate_url_rejects_invalid_scheme():
    with pytest.raises(ValueError, match="Unsupported URL scheme"):
        _validate_url("ftp://example.com")

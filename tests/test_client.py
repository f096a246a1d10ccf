#!/usr/bin/env python3
"""Unit tests for PrintClient and IdentityManager.

Tests cover:
    - Context manager requirement
    - Status code to exception mapping (any 2xx body counts as success)
    - Network failure translation
    - Identity endpoint and payload construction
"""

import json
import time
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from src.cardsync.api.auth import CachedToken, Session
from src.cardsync.api.client import PrintClient
from src.cardsync.api.exceptions import (
    APIError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TokenExpiredError,
    ValidationError,
)
from src.cardsync.api.identities import DEFAULT_IDENTITY_TYPE, IdentityManager
from src.cardsync.identities.adapters.identity_assigner import ApiIdentityAssigner

TENANT = "https://acme.printcloud.example"


@pytest.fixture
def session():
    return Session(
        tenant_url=TENANT,
        token=CachedToken(access_token="tok", expires_at=time.time() + 3600),
    )


def make_response(status=200, text="", json_data=None):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    response.json = AsyncMock(return_value=json_data)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def client_with(response=None, side_effect=None):
    """Build a PrintClient whose aiohttp session returns ``response``."""
    client = PrintClient()
    mock_http = MagicMock()
    if side_effect is not None:
        mock_http.request = MagicMock(side_effect=side_effect)
    else:
        mock_http.request = MagicMock(return_value=response)
    client._session = mock_http
    return client


# ============================================
# PrintClient Tests
# ============================================

class TestPrintClient:
    """Test the HTTP client."""

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, session):
        client = PrintClient()
        with pytest.raises(RuntimeError, match="async context manager"):
            await client.post(session, "/x", {})

    @pytest.mark.asyncio
    async def test_post_sends_json_and_headers(self, session):
        client = client_with(make_response(201, text='{"id": "1"}', json_data={"id": "1"}))

        data = await client.post(session, "/api/v1/things", {"a": 1})

        assert data == {"id": "1"}
        kwargs = client._session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == f"{TENANT}/api/v1/things"
        assert kwargs["json"] == {"a": 1}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self, session):
        client = client_with(make_response(200, text=""))
        assert await client.post(session, "/x", {}) == {}

    @pytest.mark.asyncio
    async def test_no_content(self, session):
        client = client_with(make_response(204))
        assert await client.post(session, "/x", {}) == {}

    @pytest.mark.asyncio
    async def test_created_with_plain_text_body(self, session):
        """A 2xx reply is a success even when its body is not JSON."""
        response = make_response(201, text="Created")
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "Created", 0))
        client = client_with(response)

        assert await client.post(session, "/x", {}) == {}

    @pytest.mark.asyncio
    async def test_json_list_body_returns_empty_dict(self, session):
        client = client_with(make_response(200, text="[1]", json_data=[1]))
        assert await client.post(session, "/x", {}) == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_cls",
        [
            (401, TokenExpiredError),
            (404, NotFoundError),
            (429, RateLimitError),
            (400, ValidationError),
            (409, ValidationError),
            (422, ValidationError),
            (500, ServerError),
            (503, ServerError),
            (418, APIError),
        ],
    )
    async def test_status_mapping(self, session, status, error_cls):
        client = client_with(make_response(status, text="nope"))

        with pytest.raises(error_cls):
            await client.post(session, "/x", {})

    @pytest.mark.asyncio
    async def test_error_keeps_status_and_body(self, session):
        client = client_with(make_response(422, text="card already assigned"))

        with pytest.raises(ValidationError) as exc:
            await client.post(session, "/x", {})

        assert exc.value.status_code == 422
        assert exc.value.response_body == "card already assigned"
        assert exc.value.method == "POST"

    @pytest.mark.asyncio
    async def test_connection_error(self, session):
        client = client_with(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(ConnectionError) as exc:
            await client.post(session, "/x", {})

        assert exc.value.recoverable is True

    @pytest.mark.asyncio
    async def test_generic_client_error(self, session):
        client = client_with(side_effect=aiohttp.ClientPayloadError("truncated"))

        with pytest.raises(NetworkError):
            await client.post(session, "/x", {})

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with PrintClient(request_timeout=5) as client:
            assert client._session is not None
        assert client._session is None


# ============================================
# IdentityManager Tests
# ============================================

class TestIdentityManager:
    """Test the identity assignment call."""

    @pytest.fixture
    def client(self):
        client = MagicMock(spec=PrintClient)
        client.post = AsyncMock(return_value={})
        return client

    @pytest.mark.asyncio
    async def test_assign_identity_request(self, client, session):
        manager = IdentityManager(client)

        await manager.assign_identity(session, "jdoe1@acme.com", "CardNumber", "1a2b3c4d")

        client.post.assert_awaited_once_with(
            session,
            "/api/v1/users/jdoe1@acme.com/identities",
            json_body={"type": "CardNumber", "value": "1a2b3c4d"},
        )

    @pytest.mark.asyncio
    async def test_email_is_path_quoted(self, client, session):
        manager = IdentityManager(client)

        await manager.assign_identity(session, "j doe1@acme.com", "CardNumber", "1a2b3c4d")

        assert client.post.await_args.args[1] == "/api/v1/users/j%20doe1@acme.com/identities"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,identity_type,value",
        [
            ("", "CardNumber", "1a2b3c4d"),
            ("jdoe1@acme.com", "", "1a2b3c4d"),
            ("jdoe1@acme.com", "CardNumber", ""),
        ],
    )
    async def test_empty_arguments(self, client, session, email, identity_type, value):
        manager = IdentityManager(client)

        with pytest.raises(ValidationError):
            await manager.assign_identity(session, email, identity_type, value)

        client.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_errors_propagate(self, client, session):
        client.post = AsyncMock(side_effect=NotFoundError("User", "ghost1@acme.com"))
        manager = IdentityManager(client)

        with pytest.raises(NotFoundError):
            await manager.assign_identity(session, "ghost1@acme.com", "CardNumber", "1a2b3c4d")

    def test_default_identity_type(self):
        assert DEFAULT_IDENTITY_TYPE == "CardNumber"

    @pytest.mark.asyncio
    async def test_plain_text_created_is_a_successful_assignment(self, session):
        """A 201 with a non-JSON body must not turn into a failed row."""
        response = make_response(201, text="Created")
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "Created", 0))
        assigner = ApiIdentityAssigner(IdentityManager(client_with(response)))

        result = await assigner.assign_identity(session, "jdoe1@acme.com", "CardNumber", "1a2b3c4d")

        assert result.success is True
        assert result.error is None


# ============================================
# Exception Tests
# ============================================

class TestRateLimitError:
    """Test the 429 error defaults."""

    def test_defaults(self):
        error = RateLimitError()
        assert error.status_code == 429
        assert error.code == "RATE_LIMIT_EXCEEDED"
        assert error.recoverable is True
        assert not hasattr(error, "retry_after")

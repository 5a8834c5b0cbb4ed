"""Tests for the XApp token lifecycle"""

import asyncio
import logging
import threading
from unittest.mock import Mock

import httpx
import pytest

from emergence_api.auth import AuthManager, TokenState
from emergence_api.config import Config
from emergence_api.consts import XAPP_TOKEN_HEADER, XAPP_TOKEN_PATH
from emergence_api.exceptions import AuthenticationFailed, ConfigError
from emergence_api.models import Response
from emergence_api.token_store import AccessToken, TokenStore
from tests.conftest import (
    RecordingTransport,
    copy_response,
    in_future,
    in_past,
    write_token_file,
    xapp_body,
)


def make_manager(config, transport) -> AuthManager:
    return AuthManager(config, httpx.AsyncClient(transport=transport))


class GatedTransport(httpx.MockTransport):
    """Holds every credential exchange until ``gate`` is set."""

    def __init__(self, response=None):
        self.calls = 0
        self.started = asyncio.Event()
        self.gate = asyncio.Event()
        self.response = response or httpx.Response(200, json=xapp_body("shared"))
        super().__init__(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        self.started.set()
        await self.gate.wait()
        return copy_response(self.response)


class TestInitialState:
    def test_no_persisted_token_is_invalid(self, config):
        manager = make_manager(config, RecordingTransport())

        assert manager.state == TokenState.INVALID

    def test_persisted_valid_token_is_valid(self, config, token_file):
        write_token_file(token_file, "stored", in_future())

        manager = make_manager(config, RecordingTransport())

        assert manager.state == TokenState.VALID
        assert manager.token.token == "stored"

    def test_persisted_expired_token_is_invalid(self, config, token_file):
        write_token_file(token_file, "stored", in_past())

        manager = make_manager(config, RecordingTransport())

        assert manager.state == TokenState.INVALID


class TestEnsureValid:
    @pytest.mark.asyncio
    async def test_valid_token_returned_without_io(self, config, token_file):
        write_token_file(token_file, "stored", in_future())
        transport = RecordingTransport()
        manager = make_manager(config, transport)

        token = await manager.ensure_valid()

        assert token.token == "stored"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_expired_token_refreshed_once(self, config, token_file):
        """Store loaded with a past expiry: one exchange, then a valid token"""
        write_token_file(token_file, "stale", in_past())
        transport = RecordingTransport()
        manager = make_manager(config, transport)
        assert manager.state == TokenState.INVALID

        token = await manager.ensure_valid()

        assert token.token == "fresh-token"
        assert token.is_valid
        assert len(transport.xapp_requests) == 1
        assert manager.state == TokenState.VALID

        # Cached afterwards
        await manager.ensure_valid()
        assert len(transport.xapp_requests) == 1

    @pytest.mark.asyncio
    async def test_refreshed_token_is_persisted(self, config, token_file):
        manager = make_manager(config, RecordingTransport())

        token = await manager.ensure_valid()

        assert TokenStore(token_file).load() == token

    @pytest.mark.asyncio
    async def test_token_saved_off_event_loop_thread(self, config):
        saved_on = []
        store = Mock()
        store.load.return_value = AccessToken()
        store.save.side_effect = lambda token: saved_on.append(
            threading.current_thread()
        )
        manager = AuthManager(
            config, httpx.AsyncClient(transport=RecordingTransport()), store=store
        )

        token = await manager.ensure_valid()

        store.save.assert_called_once_with(token)
        assert saved_on[0] is not threading.current_thread()

    @pytest.mark.asyncio
    async def test_exchange_request_shape(self, config):
        transport = RecordingTransport()
        manager = make_manager(config, transport)

        await manager.ensure_valid()

        request = transport.xapp_requests[0]
        assert request.method == "GET"
        assert request.url.host == "api.artsy.net"
        assert request.url.path == XAPP_TOKEN_PATH
        assert request.url.params["grant_type"] == "credentials"
        assert request.url.params["client_id"] == "client-id"
        assert request.url.params["client_secret"] == "client-secret"
        assert XAPP_TOKEN_HEADER not in request.headers

    @pytest.mark.asyncio
    async def test_exchange_uses_staging_host(self, config):
        config.use_staging = True
        transport = RecordingTransport()
        manager = make_manager(config, transport)

        await manager.ensure_valid()

        assert transport.xapp_requests[0].url.host == "stagingapi.artsy.net"

    @pytest.mark.asyncio
    async def test_accepts_service_field_names(self, config):
        """The live service answers with xapp_token/expires_in"""
        expiration = in_future()
        transport = RecordingTransport(
            xapp_response=httpx.Response(
                200,
                json={
                    "type": "xapp_token",
                    "xapp_token": "live-token",
                    "expires_in": expiration.isoformat(),
                },
            )
        )
        manager = make_manager(config, transport)

        token = await manager.ensure_valid()

        assert token.token == "live-token"
        assert token.expiration == expiration

    @pytest.mark.asyncio
    async def test_get_valid_token_returns_string(self, config):
        manager = make_manager(config, RecordingTransport())

        assert await manager.get_valid_token() == "fresh-token"

    @pytest.mark.asyncio
    async def test_token_aging_triggers_new_refresh(self, config):
        """Validity is re-evaluated per call, no event needed"""
        transport = RecordingTransport()
        manager = make_manager(config, transport)
        await manager.ensure_valid()

        manager._token = AccessToken(token="fresh-token", expiration=in_past(0))
        assert manager.state == TokenState.INVALID

        await manager.ensure_valid()
        assert len(transport.xapp_requests) == 2


class TestRefreshFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "xapp_response",
        [
            httpx.Response(401, json={"error": "Unauthorized"}),
            httpx.Response(500, text="boom"),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"token": "", "expiration": "2030-01-01"}),
            httpx.Response(200, json={"token": "abc"}),
            httpx.Response(200, json=xapp_body("late", in_past())),
        ],
        ids=[
            "unauthorized",
            "server_error",
            "invalid_json",
            "empty_token",
            "missing_expiration",
            "already_expired",
        ],
    )
    async def test_failure_raises_and_stays_invalid(
        self, config, token_file, xapp_response
    ):
        manager = make_manager(config, RecordingTransport(xapp_response=xapp_response))

        with pytest.raises(AuthenticationFailed):
            await manager.ensure_valid()

        assert manager.state == TokenState.INVALID
        assert not token_file.exists()

    @pytest.mark.asyncio
    async def test_unreachable(self, config):
        transport = RecordingTransport(
            routes={XAPP_TOKEN_PATH: httpx.ConnectError("Connection refused")}
        )
        manager = make_manager(config, transport)

        with pytest.raises(AuthenticationFailed) as exc_info:
            await manager.ensure_valid()

        assert "unreachable" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_rejection_carries_status_code(self, config):
        transport = RecordingTransport(xapp_response=httpx.Response(401))
        manager = make_manager(config, transport)

        with pytest.raises(AuthenticationFailed) as exc_info:
            await manager.ensure_valid()

        assert exc_info.value.context["status_code"] == 401

    @pytest.mark.parametrize(
        "routes,xapp_response",
        [
            ({}, httpx.Response(401, json={"error": "Unauthorized"})),
            ({}, httpx.Response(500, text="boom")),
            ({XAPP_TOKEN_PATH: httpx.ConnectError("Connection refused")}, None),
        ],
        ids=["unauthorized", "server_error", "unreachable"],
    )
    @pytest.mark.asyncio
    async def test_failure_never_exposes_client_secret(
        self, config, caplog, routes, xapp_response
    ):
        caplog.set_level(logging.DEBUG, logger="emergence-api")
        transport = RecordingTransport(routes=routes, xapp_response=xapp_response)
        manager = make_manager(config, transport)

        with pytest.raises(AuthenticationFailed) as exc_info:
            await manager.ensure_valid()

        error = exc_info.value
        assert error.errors
        assert all(config.client_secret not in e for e in error.errors)
        assert config.client_secret not in str(error.context)
        assert config.client_secret not in Response.from_error(error).model_dump_json()
        assert config.client_secret not in caplog.text

    @pytest.mark.asyncio
    async def test_rejection_reports_status_and_reason(self, config):
        transport = RecordingTransport(xapp_response=httpx.Response(401))
        manager = make_manager(config, transport)

        with pytest.raises(AuthenticationFailed) as exc_info:
            await manager.ensure_valid()

        assert exc_info.value.errors == [
            "401 Unauthorized from https://api.artsy.net/api/v1/xapp_token"
        ]

    @pytest.mark.asyncio
    async def test_no_automatic_retry(self, config):
        """One failed call performs one exchange; the next call tries again"""
        transport = RecordingTransport(xapp_response=httpx.Response(401))
        manager = make_manager(config, transport)

        with pytest.raises(AuthenticationFailed):
            await manager.ensure_valid()
        assert len(transport.xapp_requests) == 1

        transport.xapp_response = httpx.Response(200, json=xapp_body())
        token = await manager.ensure_valid()

        assert token.is_valid
        assert len(transport.xapp_requests) == 2

    @pytest.mark.asyncio
    async def test_missing_credentials(self, token_file):
        config = Config(client_id="", client_secret="", token_file=str(token_file))
        transport = RecordingTransport()
        manager = make_manager(config, transport)

        with pytest.raises(ConfigError):
            await manager.ensure_valid()

        assert transport.requests == []


class TestConcurrentRefresh:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_exchange(self, config):
        transport = GatedTransport()
        manager = make_manager(config, transport)

        waiters = [asyncio.create_task(manager.ensure_valid()) for _ in range(10)]
        await transport.started.wait()
        assert manager.state == TokenState.REFRESHING

        transport.gate.set()
        tokens = await asyncio.gather(*waiters)

        assert transport.calls == 1
        assert {t.token for t in tokens} == {"shared"}
        assert all(t is tokens[0] for t in tokens)
        assert manager.state == TokenState.VALID

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_failure(self, config):
        transport = GatedTransport(response=httpx.Response(403))
        manager = make_manager(config, transport)

        waiters = [asyncio.create_task(manager.ensure_valid()) for _ in range(5)]
        await transport.started.wait()
        transport.gate.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert transport.calls == 1
        assert all(isinstance(r, AuthenticationFailed) for r in results)
        assert len({id(r) for r in results}) == 1
        assert manager.state == TokenState.INVALID

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_refresh(self, config, token_file):
        transport = GatedTransport()
        manager = make_manager(config, transport)

        first = asyncio.create_task(manager.ensure_valid())
        second = asyncio.create_task(manager.ensure_valid())
        await transport.started.wait()

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        transport.gate.set()
        token = await second

        assert token.token == "shared"
        assert transport.calls == 1
        assert TokenStore(token_file).load() == token

    @pytest.mark.asyncio
    async def test_refresh_completes_when_every_waiter_cancelled(self, config):
        transport = GatedTransport()
        manager = make_manager(config, transport)

        waiter = asyncio.create_task(manager.ensure_valid())
        await transport.started.wait()
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        refresh = manager._refresh_task
        transport.gate.set()
        await refresh

        assert manager.state == TokenState.VALID
        assert manager.token.token == "shared"

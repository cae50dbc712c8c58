import asyncio
import gzip
import json

import httpx
import pytest

from ecloud.core.exceptions import EmptyTokenError, NotAuthenticatedError
from ecloud.core.http.exceptions import HTTPStatusError, ResponseDecodeError
from ecloud.providers.auth.token_auth_provider import LOGIN_PATH, TokenAuthProvider
from tests.helpers.fake_http import BASE_URL, make_http_client


def _provider(handler, config):
    http = make_http_client(handler)
    auth = TokenAuthProvider(http, config)
    http.auth_provider = auth
    return auth


def _login_ok(token="t1"):
    return httpx.Response(
        200,
        json={"token": token, "user": {"id": 1, "eclinic_id": "test-id", "active": True}},
    )


class TestLogin:

    @pytest.mark.asyncio
    async def test_successful_login_installs_credential(self, config):
        auth = _provider(lambda request: _login_ok(), config)

        response = await auth.login()

        assert response.token == "t1"
        assert auth.is_authenticated()
        assert auth.get_token() == "t1"
        assert auth.get_user().id == 1
        assert auth.credential.issued_at is not None

    @pytest.mark.asyncio
    async def test_login_request_is_gzipped_and_unauthenticated(self, config):
        seen = []

        def handler(request):
            seen.append(request)
            return _login_ok()

        auth = _provider(handler, config)
        await auth.login()

        request = seen[0]
        assert str(request.url) == f"{BASE_URL}{LOGIN_PATH}"
        assert request.method == "POST"
        assert "Authorization" not in request.headers
        assert request.headers["Content-Encoding"] == "gzip"
        assert json.loads(gzip.decompress(request.content)) == {
            "eclinic_id": "test-id",
            "password": "test-password",
        }

    @pytest.mark.asyncio
    async def test_rejected_login_raises_status_error(self, config):
        def handler(request):
            return httpx.Response(401, json={"error": "invalid credentials"})

        auth = _provider(handler, config)

        with pytest.raises(HTTPStatusError) as exc_info:
            await auth.login()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "invalid credentials"
        assert not auth.is_authenticated()

    @pytest.mark.asyncio
    async def test_empty_token_is_a_protocol_error(self, config):
        auth = _provider(lambda request: httpx.Response(200, json={"token": "", "user": {"id": 1}}), config)

        with pytest.raises(EmptyTokenError, match="empty token received"):
            await auth.login()

        assert not auth.is_authenticated()

    @pytest.mark.asyncio
    async def test_undecodable_login_response(self, config):
        auth = _provider(lambda request: httpx.Response(200, content=b"<html>oops</html>"), config)

        with pytest.raises(ResponseDecodeError):
            await auth.login()

        assert not auth.is_authenticated()

    def test_user_requires_login(self, config):
        auth = _provider(lambda request: _login_ok(), config)

        with pytest.raises(NotAuthenticatedError, match="client not authenticated"):
            auth.get_user()
        assert auth.get_token() == ""
        assert not auth.is_authenticated()


class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_replaces_token(self, config):
        tokens = iter(["t1", "t2"])
        auth = _provider(lambda request: _login_ok(next(tokens)), config)

        await auth.login()
        first = auth.credential
        await auth.refresh(stale_token="t1")

        assert auth.get_token() == "t2"
        assert first.token == "t1"

    @pytest.mark.asyncio
    async def test_refresh_skipped_when_token_already_replaced(self, config):
        calls = []

        def handler(request):
            calls.append(request)
            return _login_ok(f"t{len(calls)}")

        auth = _provider(handler, config)
        await auth.login()
        await auth.refresh(stale_token="t1")
        await auth.refresh(stale_token="t1")

        assert len(calls) == 2
        assert auth.get_token() == "t2"

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_collapse_into_one_login(self, config):
        calls = []

        def handler(request):
            calls.append(request)
            return _login_ok(f"t{len(calls)}")

        auth = _provider(handler, config)
        await auth.login()

        await asyncio.gather(*(auth.refresh(stale_token="t1") for _ in range(5)))

        assert len(calls) == 2
        assert auth.get_token() == "t2"

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_credential(self, config):
        responses = iter([_login_ok("t1"), httpx.Response(500, json={"error": "down"})])
        auth = _provider(lambda request: next(responses), config)

        await auth.login()
        with pytest.raises(HTTPStatusError):
            await auth.refresh(stale_token="t1")

        assert auth.get_token() == "t1"
        assert auth.is_authenticated()

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed_transparently(self, config):
        logins = []
        seen = []

        def handler(request):
            if request.url.path == LOGIN_PATH:
                logins.append(request)
                return _login_ok(f"t{len(logins)}")
            seen.append(request.headers["Authorization"])
            if request.headers["Authorization"] == "Bearer t1":
                return httpx.Response(401, json={"error": "token expired"})
            return httpx.Response(200, json={})

        auth = _provider(handler, config)
        await auth.login()
        response = await auth.http_client.get(f"{BASE_URL}/api/billing/get_bill")

        assert response.status_code == 200
        assert seen == ["Bearer t1", "Bearer t2"]
        assert len(logins) == 2

    @pytest.mark.asyncio
    async def test_undecodable_refresh_login_returns_the_401(self, config):
        logins = []

        def handler(request):
            if request.url.path == LOGIN_PATH:
                logins.append(request)
                if len(logins) == 1:
                    return _login_ok("t1")
                return httpx.Response(
                    200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip")
                )
            return httpx.Response(401, json={"error": "token expired"})

        auth = _provider(handler, config)
        await auth.login()
        response = await auth.http_client.get(f"{BASE_URL}/api/billing/get_bill")

        assert response.status_code == 401
        assert response.json() == {"error": "token expired"}
        assert len(logins) == 2
        assert auth.get_token() == "t1"

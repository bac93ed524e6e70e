"""Tests for bearer token sources."""

import pytest

from recognize_stream.transcription.client.auth import CallableTokenSource, StaticTokenSource
from recognize_stream.transcription.client.exceptions import AuthError


class TestStaticTokenSource:
    @pytest.mark.asyncio
    async def test_returns_token(self):
        assert await StaticTokenSource("abc").get_bearer_token() == "abc"

    @pytest.mark.asyncio
    async def test_empty_token(self):
        with pytest.raises(AuthError):
            await StaticTokenSource("").get_bearer_token()


class TestCallableTokenSource:
    @pytest.mark.asyncio
    async def test_sync_callable(self):
        tokens = iter(["one", "two"])
        source = CallableTokenSource(lambda: next(tokens))

        assert await source.get_bearer_token() == "one"
        assert await source.get_bearer_token() == "two"

    @pytest.mark.asyncio
    async def test_async_callable(self):
        async def fetch():
            return "fresh"

        assert await CallableTokenSource(fetch).get_bearer_token() == "fresh"

    @pytest.mark.asyncio
    async def test_failure_becomes_auth_error(self):
        def fetch():
            raise RuntimeError("token endpoint unreachable")

        with pytest.raises(AuthError, match="token endpoint unreachable"):
            await CallableTokenSource(fetch).get_bearer_token()
